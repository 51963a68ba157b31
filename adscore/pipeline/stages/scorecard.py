"""
Stage 5: Scorecard

Validates the reasoning reply and merges local evidence into the result.
"""

from __future__ import annotations

import logging

from ...scorecard import finalize_result, parse_scorecard, validate_scorecard
from ..base import Stage
from ..context import AnalysisContext

logger = logging.getLogger("adscore.pipeline.scorecard")


class ScorecardStage(Stage):
    """
    Stage 5: Parse, validate and finalise the scorecard.

    Raises:
        OracleResponseUnparseable: reply is not JSON or violates the schema
    """

    name = "ScorecardStage"

    def should_run(self, ctx: AnalysisContext) -> bool:
        return ctx.raw_response is not None and ctx.result is None

    def execute(self, ctx: AnalysisContext) -> AnalysisContext:
        expect_copy = bool(ctx.ad_copy and ctx.ad_copy.has_copy)
        data = parse_scorecard(ctx.raw_response)
        scorecard = validate_scorecard(data, ctx.asset.kind, expect_copy=expect_copy)
        ctx.result = finalize_result(
            scorecard,
            asset=ctx.asset,
            evidence=ctx.evidence,
            ad_copy=ctx.ad_copy,
        )
        logger.debug(
            "[%s] Scorecard valid: overall=%s, fixes=%d, policy flags=%d",
            ctx.label, ctx.result["overallScore"], len(ctx.result["topFixes"]), len(ctx.result["policyFlags"]),
        )
        return ctx
