"""
Pipeline module for creative analysis.

Provides a composable, stage-based architecture for scoring ad creatives.
Each stage is independently testable.
"""

from .base import Stage, CreativeAnalysisPipeline
from .context import AnalysisContext

__all__ = [
    "Stage",
    "CreativeAnalysisPipeline",
    "AnalysisContext",
]
