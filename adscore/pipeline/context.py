"""
Analysis context for pipeline stages.

The AnalysisContext is the shared state passed through all pipeline stages.
Each stage reads from and writes to this context, making data flow explicit.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..deadline import Deadline
from ..evidence import AnalysisPrompt
from ..extraction import VideoEvidence
from ..media import AdCopy, MediaAsset
from ..types import AnalysisResult


@dataclass
class AnalysisContext:
    """
    Shared state passed through pipeline stages.

    Attributes:
        media_bytes: Raw creative as received
        content_type: Declared content type of the creative
        ad_copy: Optional caller-supplied ad text
        declared_length: Optional declared payload size (e.g. Content-Length)
        deadline: Request deadline shared by every blocking call

        asset: Classified media (set by MediaClassificationStage)
        evidence: Frames + audio for videos (set by VideoEvidenceStage)
        prompt: Assembled reasoning prompt (set by EvidenceAssemblyStage)
        raw_response: Reasoning service reply text (set by OracleStage)
        result: Validated, merged AnalysisResult (set by ScorecardStage)

        processing_notes: Notes about processing issues
        start_time: Pipeline start timestamp
    """

    # Required inputs
    media_bytes: bytes
    content_type: Optional[str]
    deadline: Deadline

    # Optional inputs
    ad_copy: Optional[AdCopy] = None
    declared_length: Union[int, str, None] = None

    # Stage outputs
    asset: Optional[MediaAsset] = None
    evidence: Optional[VideoEvidence] = None
    prompt: Optional[AnalysisPrompt] = None
    raw_response: Optional[str] = None
    result: Optional[AnalysisResult] = None

    # Processing metadata
    processing_notes: Dict[str, Any] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)

    # Stage tracking
    completed_stages: List[str] = field(default_factory=list)
    skipped_stages: List[str] = field(default_factory=list)
    failed_stages: List[str] = field(default_factory=list)

    def add_processing_note(self, key: str, note: Dict[str, Any]) -> None:
        """Add a processing note (e.g., error, warning)."""
        self.processing_notes[key] = note

    def mark_stage_complete(self, stage_name: str) -> None:
        if stage_name not in self.completed_stages:
            self.completed_stages.append(stage_name)

    def mark_stage_skipped(self, stage_name: str) -> None:
        if stage_name not in self.skipped_stages:
            self.skipped_stages.append(stage_name)

    def mark_stage_failed(self, stage_name: str) -> None:
        if stage_name not in self.failed_stages:
            self.failed_stages.append(stage_name)

    def elapsed_time(self) -> float:
        """Get elapsed time since processing started."""
        return time.time() - self.start_time

    @property
    def media_kind(self) -> Optional[str]:
        return self.asset.kind if self.asset else None

    @property
    def label(self) -> str:
        """Short identifier used as the log prefix."""
        kind = self.media_kind or "unclassified"
        return f"{kind}:{len(self.media_bytes)}b"
