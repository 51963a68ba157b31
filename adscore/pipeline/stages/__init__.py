"""
Pipeline stages for creative analysis.

Stages are executed in order, each reading from and writing to the shared
AnalysisContext.
"""

from .media_classification import MediaClassificationStage
from .video_evidence import VideoEvidenceStage
from .evidence_assembly import EvidenceAssemblyStage
from .oracle import OracleStage
from .scorecard import ScorecardStage

__all__ = [
    "MediaClassificationStage",
    "VideoEvidenceStage",
    "EvidenceAssemblyStage",
    "OracleStage",
    "ScorecardStage",
]
