"""
Stage 1: Media Classification

Accepts or rejects the uploaded creative before any expensive work.
"""

from __future__ import annotations

import logging

from ...media import classify_media
from ..base import Stage
from ..context import AnalysisContext

logger = logging.getLogger("adscore.pipeline.media_classification")


class MediaClassificationStage(Stage):
    """
    Stage 1: Classify the creative as image or video.

    Responsibilities:
    - Reject content types off the allow-list
    - Enforce the per-kind size limits (declared and actual)
    - Set ctx.asset

    Raises:
        UnsupportedMediaType: content type is not allow-listed
        PayloadTooLarge: size exceeds the limit for the media kind
    """

    name = "MediaClassificationStage"

    def should_run(self, ctx: AnalysisContext) -> bool:
        return ctx.asset is None

    def execute(self, ctx: AnalysisContext) -> AnalysisContext:
        ctx.asset = classify_media(ctx.media_bytes, ctx.content_type, ctx.declared_length)
        logger.debug(
            "[%s] Classified %s (%d bytes)",
            ctx.label, ctx.asset.content_type, ctx.asset.size,
        )
        return ctx
