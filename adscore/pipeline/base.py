"""
Base classes for pipeline architecture.

Provides the Stage base class and CreativeAnalysisPipeline orchestrator.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Union

import sentry_sdk

from ..deadline import Deadline
from ..errors import AnalysisError, UnexpectedFailure
from ..media import AdCopy
from ..types import AnalysisResult
from .context import AnalysisContext

logger = logging.getLogger("adscore.pipeline")


class Stage(ABC):
    """
    Base class for pipeline stages.

    Subclasses must implement:
    - name: Unique identifier for the stage
    - should_run(): Determine if stage should execute
    - execute(): Perform stage logic

    Optionally override:
    - preflight(): Check configuration before any stage runs
    - on_error(): Handle stage-specific errors
    """

    name: str = "BaseStage"

    def preflight(self, ctx: AnalysisContext) -> None:
        """
        Fail fast on missing configuration.

        Every stage's preflight runs before the first stage executes, so a
        missing credential is reported before any media work starts.
        """

    @abstractmethod
    def should_run(self, ctx: AnalysisContext) -> bool:
        """Return True if the stage applies to this context."""

    @abstractmethod
    def execute(self, ctx: AnalysisContext) -> AnalysisContext:
        """
        Execute the stage logic.

        Raises:
            AnalysisError: typed failure for this stage
        """

    def on_error(self, ctx: AnalysisContext, error: Exception) -> None:
        """Record a processing note for the failure."""
        ctx.add_processing_note(
            f"{self.name}_error",
            {
                "type": type(error).__name__,
                "kind": getattr(error, "kind", None),
                "message": str(error)[:500],
                "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            },
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class CreativeAnalysisPipeline:
    """
    Runs one creative through classification, evidence, reasoning and
    validation.

    Stages run in order with no retries; the first typed failure ends the
    request. Untyped exceptions are wrapped in UnexpectedFailure (original
    chained) and reported to Sentry.

    Usage:
        pipeline = CreativeAnalysisPipeline(
            stages=[MediaClassificationStage(), VideoEvidenceStage(...), ...],
            deadline_seconds=120,
        )
        result = pipeline.run(media_bytes, "image/png")
    """

    def __init__(self, stages: List[Stage], deadline_seconds: Optional[float] = None):
        self.stages = stages
        self.deadline_seconds = deadline_seconds

        names = [s.name for s in stages]
        if len(names) != len(set(names)):
            raise ValueError("Stage names must be unique")

    def run(
        self,
        media_bytes: bytes,
        content_type: Optional[str],
        ad_copy: Optional[AdCopy] = None,
        declared_length: Union[int, str, None] = None,
    ) -> AnalysisResult:
        """
        Analyse one creative.

        Raises:
            AnalysisError: any typed failure (never a bare exception)
        """
        ctx = AnalysisContext(
            media_bytes=media_bytes,
            content_type=content_type,
            ad_copy=ad_copy,
            declared_length=declared_length,
            deadline=Deadline(self.deadline_seconds),
        )

        try:
            for stage in self.stages:
                stage.preflight(ctx)
            for stage in self.stages:
                ctx = self._run_stage(stage, ctx)

        except AnalysisError as e:
            logger.error(
                "[%s] Analysis failed at %s (%s): %s",
                ctx.label, e.stage_name or "preflight", e.kind, e,
            )
            if isinstance(e, UnexpectedFailure):
                sentry_sdk.set_tag("analysis.stage", e.stage_name or "unknown")
                sentry_sdk.capture_exception(e.cause or e)
            raise

        except Exception as e:
            logger.exception("[%s] Unexpected error during preflight: %s", ctx.label, str(e)[:200])
            sentry_sdk.capture_exception(e)
            raise UnexpectedFailure(str(e), "preflight", cause=e) from e

        if ctx.result is None:
            raise UnexpectedFailure("Pipeline finished without producing a result")

        logger.info(
            "[%s] Analysed in %.1fs - score=%s, stages=%d",
            ctx.label, ctx.elapsed_time(), ctx.result.get("overallScore"), len(ctx.completed_stages),
        )
        return ctx.result

    def _run_stage(self, stage: Stage, ctx: AnalysisContext) -> AnalysisContext:
        if not stage.should_run(ctx):
            ctx.mark_stage_skipped(stage.name)
            logger.debug("[%s] Skipping stage: %s", ctx.label, stage.name)
            return ctx

        ctx.deadline.check(stage.name)
        started = time.monotonic()
        try:
            logger.debug("[%s] Running stage: %s", ctx.label, stage.name)
            ctx = stage.execute(ctx)
        except AnalysisError as e:
            stage.on_error(ctx, e)
            ctx.mark_stage_failed(stage.name)
            if e.stage_name is None:
                e.stage_name = stage.name
            raise
        except Exception as e:
            stage.on_error(ctx, e)
            ctx.mark_stage_failed(stage.name)
            logger.exception("[%s] Unexpected error in %s: %s", ctx.label, stage.name, str(e)[:200])
            raise UnexpectedFailure(str(e), stage.name, cause=e) from e

        ctx.mark_stage_complete(stage.name)
        logger.debug("[%s] %s completed in %.2fs", ctx.label, stage.name, time.monotonic() - started)
        return ctx
