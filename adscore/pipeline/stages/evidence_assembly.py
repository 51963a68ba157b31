"""
Stage 3: Evidence Assembly

Builds the system prompt and ordered content blocks for the reasoning call.
"""

from __future__ import annotations

import logging

from ...errors import UnexpectedFailure
from ...evidence import assemble_image_evidence, assemble_video_evidence
from ..base import Stage
from ..context import AnalysisContext

logger = logging.getLogger("adscore.pipeline.evidence_assembly")


class EvidenceAssemblyStage(Stage):
    """
    Stage 3: Assemble the AnalysisPrompt.

    Images go through unchanged as a single image block; videos contribute
    their sampled frames plus the audio summary. Sets ctx.prompt.
    """

    name = "EvidenceAssemblyStage"

    def should_run(self, ctx: AnalysisContext) -> bool:
        return ctx.asset is not None and ctx.prompt is None

    def execute(self, ctx: AnalysisContext) -> AnalysisContext:
        if ctx.asset.is_video:
            if ctx.evidence is None:
                raise UnexpectedFailure("Video evidence is required before assembly", self.name)
            ctx.prompt = assemble_video_evidence(ctx.evidence.frames, ctx.evidence.audio, ctx.ad_copy)
        else:
            ctx.prompt = assemble_image_evidence(ctx.asset, ctx.ad_copy)
        logger.debug(
            "[%s] Prompt assembled: %d blocks, %d images, %d system chars",
            ctx.label, len(ctx.prompt.blocks), ctx.prompt.image_count, len(ctx.prompt.system),
        )
        return ctx
