"""
Stage 2: Video Evidence

Samples frames and analyses the audio hook for video creatives.
"""

from __future__ import annotations

import logging
from typing import Optional

from ...asr import Transcriber
from ...extraction import gather_video_evidence
from ...transcoder import Transcoder
from ..base import Stage
from ..context import AnalysisContext

logger = logging.getLogger("adscore.pipeline.video_evidence")


class VideoEvidenceStage(Stage):
    """
    Stage 2: Gather frames and audio heuristics for a video.

    Responsibilities:
    - Stage the video in a request-scoped workspace
    - Run frame extraction and audio analysis concurrently
    - Set ctx.evidence

    Audio is optional: a missing transcriber or any audio failure only
    downgrades ctx.evidence.audio_status.

    Raises:
        TranscoderUnavailable: ffmpeg/ffprobe missing
        FrameExtractionFailed: no frames could be extracted
        DeadlineExceeded: request deadline passed
    """

    name = "VideoEvidenceStage"

    def __init__(self, transcoder: Transcoder, transcriber: Optional[Transcriber] = None):
        self.transcoder = transcoder
        self.transcriber = transcriber

    def should_run(self, ctx: AnalysisContext) -> bool:
        """Only videos need local evidence extraction."""
        return ctx.asset is not None and ctx.asset.is_video and ctx.evidence is None

    def execute(self, ctx: AnalysisContext) -> AnalysisContext:
        ctx.evidence = gather_video_evidence(ctx.asset, self.transcoder, self.transcriber, ctx.deadline)
        if ctx.evidence.audio_status != "analysed":
            ctx.add_processing_note("audio", {"status": ctx.evidence.audio_status})
        logger.debug(
            "[%s] Video evidence: frames at %s, audio=%s",
            ctx.label, ctx.evidence.timestamps, ctx.evidence.audio_status,
        )
        return ctx
