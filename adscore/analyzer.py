"""
Entry point for analysing a single ad creative.

    from adscore import analyze_media
    result = analyze_media(png_bytes, "image/png", AdCopy(headline="50% off today"))
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .asr import Transcriber, get_transcriber
from .config import get_pipeline_config, get_reasoning_config
from .media import AdCopy
from .oracle import ReasoningOracle, get_reasoning_oracle
from .pipeline import CreativeAnalysisPipeline
from .pipeline.stages import (
    EvidenceAssemblyStage,
    MediaClassificationStage,
    OracleStage,
    ScorecardStage,
    VideoEvidenceStage,
)
from .transcoder import FFmpegTranscoder, Transcoder
from .types import AnalysisResult

logger = logging.getLogger(__name__)

# Distinguishes "use the configured default" from an explicit None
_DEFAULT: Any = object()


def create_pipeline(
    oracle: Optional[ReasoningOracle] = _DEFAULT,
    transcoder: Optional[Transcoder] = None,
    transcriber: Optional[Transcriber] = _DEFAULT,
    deadline_seconds: Optional[float] = _DEFAULT,
    oracle_timeout_seconds: Optional[float] = None,
) -> CreativeAnalysisPipeline:
    """
    Build the standard five-stage pipeline.

    Omitted collaborators come from the environment; pass ``None`` for
    ``oracle`` or ``transcriber`` to model an unconfigured service.
    """
    if oracle is _DEFAULT:
        oracle = get_reasoning_oracle()
    if transcriber is _DEFAULT:
        transcriber = get_transcriber()
    if deadline_seconds is _DEFAULT:
        deadline_seconds = get_pipeline_config().deadline_seconds
    if oracle_timeout_seconds is None:
        oracle_timeout_seconds = oracle.config.timeout_seconds if oracle else get_reasoning_config().timeout_seconds

    return CreativeAnalysisPipeline(
        stages=[
            MediaClassificationStage(),
            VideoEvidenceStage(transcoder or FFmpegTranscoder(), transcriber),
            EvidenceAssemblyStage(),
            OracleStage(oracle, timeout_seconds=oracle_timeout_seconds),
            ScorecardStage(),
        ],
        deadline_seconds=deadline_seconds,
    )


def analyze_media(
    media_bytes: bytes,
    content_type: Optional[str],
    ad_copy: Optional[AdCopy] = None,
    *,
    declared_length: Union[int, str, None] = None,
    pipeline: Optional[CreativeAnalysisPipeline] = None,
) -> AnalysisResult:
    """
    Score one creative and return the validated AnalysisResult.

    Raises:
        AnalysisError: a typed subclass for every failure
    """
    pipeline = pipeline or create_pipeline()
    return pipeline.run(media_bytes, content_type, ad_copy, declared_length)


__all__ = ["create_pipeline", "analyze_media"]
