"""
Type definitions for the creative analysis pipeline.

Provides TypedDict definitions for the transcript and scorecard payloads that
move through the pipeline. Keys are camelCase where they mirror the JSON
schema requested from the reasoning service.
"""

from __future__ import annotations

from typing import List, Optional, TypedDict


# ---------------------------------------------------------------------------
# Transcript Types
# ---------------------------------------------------------------------------

class TimestampedWord(TypedDict):
    """A single transcribed word with timing."""
    word: str
    start: float
    end: float


class TranscriptResult(TypedDict):
    """Result from the transcription service."""
    text: str
    words: List[TimestampedWord]


# ---------------------------------------------------------------------------
# Scorecard Types
# ---------------------------------------------------------------------------

class QuickAudit(TypedDict, total=False):
    offerMentioned: bool
    urgencyPresent: bool
    endCardPresent: bool  # video only


class CategoryScore(TypedDict):
    name: str
    score: int
    reason: str


class HookAnalysis(TypedDict):
    firstFrameScore: int
    firstFrameAnalysis: str
    threeSecondScore: int
    threeSecondAnalysis: str
    hookRecommendation: str


class CopyAnalysis(TypedDict, total=False):
    primaryTextScore: int
    primaryTextAnalysis: str
    headlineScore: int
    headlineAnalysis: str
    copyCreativeAlignment: int
    copyCreativeAlignmentReason: str
    copyFixes: List[str]
    # Echoed from the caller's AdCopy after parsing
    primaryTextProvided: str
    headlineProvided: str
    descriptionProvided: str


class VideoNotes(TypedDict):
    pacing: str
    textTiming: str
    ctaTiming: str
    textOverlayVerdict: str
    endCardAnalysis: str


class ExecutiveSummary(TypedDict):
    biggestStrength: str
    biggestRisk: str
    quickWin: str


class ScoreExplanation(TypedDict):
    scoreDriver: str
    scoreDrag: str


class ExtractedFrameDict(TypedDict):
    timestamp: float
    base64: str


class AudioSummary(TypedDict, total=False):
    hasVoiceover: bool
    voiceoverStartsEarly: bool
    openingLine: Optional[str]
    transcript: Optional[str]
    audioHookScore: int
    audioHookAssessment: str
    isMusicOnly: bool
    available: bool


class AnalysisResult(TypedDict, total=False):
    """Canonical analysis output."""
    overallScore: int
    mediaType: str
    quickAudit: QuickAudit
    categories: List[CategoryScore]
    hookAnalysis: HookAnalysis
    copyAnalysis: CopyAnalysis
    videoNotes: VideoNotes
    policyFlags: List[str]
    topFixes: List[str]
    verdictReason: str
    whatsWorking: str
    executiveSummary: ExecutiveSummary
    scoreExplanation: ScoreExplanation
    # Merged after parsing; never produced by the reasoning service
    extractedFrames: List[ExtractedFrameDict]
    audioAnalysis: AudioSummary
    thumbnail: str
    analyzedAt: str
