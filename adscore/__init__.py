"""
AdScore: pre-launch readiness scoring for ad creatives.
"""

from .analyzer import analyze_media, create_pipeline
from .errors import AnalysisError
from .media import AdCopy

__all__ = ["analyze_media", "create_pipeline", "AnalysisError", "AdCopy"]
