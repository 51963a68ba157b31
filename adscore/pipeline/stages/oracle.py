"""
Stage 4: Oracle

Submits the assembled prompt to the reasoning service.
"""

from __future__ import annotations

import logging
from typing import Optional

from ...errors import OracleNotConfigured
from ...oracle import ReasoningOracle
from ..base import Stage
from ..context import AnalysisContext

logger = logging.getLogger("adscore.pipeline.oracle")

DEFAULT_ORACLE_TIMEOUT_SECONDS = 90.0


class OracleStage(Stage):
    """
    Stage 4: Call the reasoning oracle exactly once.

    Raises:
        OracleNotConfigured: no oracle available (raised at preflight)
        OracleAuthFailed / OracleRateLimited: service rejected the call
        DeadlineExceeded: call outlived the request deadline
        OracleResponseUnparseable: empty reply
    """

    name = "OracleStage"

    def __init__(self, oracle: Optional[ReasoningOracle], timeout_seconds: float = DEFAULT_ORACLE_TIMEOUT_SECONDS):
        self.oracle = oracle
        self.timeout_seconds = timeout_seconds

    def preflight(self, ctx: AnalysisContext) -> None:
        if self.oracle is None:
            raise OracleNotConfigured(
                "No reasoning service credential configured", stage_name=self.name
            )

    def should_run(self, ctx: AnalysisContext) -> bool:
        return ctx.prompt is not None and ctx.raw_response is None

    def execute(self, ctx: AnalysisContext) -> AnalysisContext:
        timeout = ctx.deadline.clamp(self.timeout_seconds, "reasoning call")
        logger.debug(
            "[%s] Calling %s/%s (timeout=%.1fs)",
            ctx.label, self.oracle.provider, self.oracle.model_name, timeout,
        )
        ctx.raw_response = self.oracle.complete(ctx.prompt, timeout)
        return ctx
