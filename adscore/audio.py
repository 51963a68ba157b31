"""
Audio hook analysis for video creatives.

Turns the first seconds of a video's audio into a small, explainable signal
(voiceover timing, opening line, a 1-10 hook score) so the reasoning service
never has to process raw audio.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .asr import Transcriber
from .deadline import Deadline
from .transcoder import Transcoder
from .types import AudioSummary, TimestampedWord, TranscriptResult
from .workspace import Workspace

logger = logging.getLogger(__name__)

AUDIO_WINDOW_SECONDS = 15.0
MIN_AUDIO_BYTES = 1000
EARLY_VOICEOVER_SECONDS = 2.0
OPENING_LINE_SECONDS = 5.0
TRANSCRIPT_SECONDS = 10.0
MIN_SPOKEN_WORDS = 5
END_CARD_MAX_WORDS = 15

HOOK_BASE_SCORE = 5
MUSIC_ONLY_SCORE = 6
NO_AUDIO_SCORE = 1
MIN_HOOK_SCORE = 1
MAX_HOOK_SCORE = 10

END_CARD_PHRASES = (
    "thanks for watching",
    "thank you for watching",
    "subscribe",
    "like and subscribe",
    "follow",
    "link in bio",
    "check out",
    "visit our",
    "shop now",
    "order now",
    "get yours",
)
HOOK_CUES = ("you", "your", "want", "need", "tired", "stop", "imagine", "finally", "?")
GREETINGS = ("hi", "hello", "hey", "welcome")

MUSIC_ONLY_ASSESSMENT = "Music-only format - message delivery relies entirely on visual text overlays."
END_CARD_NOTE = "End-card voiceover detected but no spoken hook."


class AudioAnalysisCancelled(Exception):
    """The request no longer needs audio (frames failed or the deadline passed)."""


@dataclass(frozen=True)
class AudioAnalysis:
    has_voiceover: bool
    voiceover_starts_early: bool
    opening_line: Optional[str]
    transcript: Optional[str]
    audio_hook_score: int
    audio_hook_assessment: str
    is_music_only: bool = False

    @classmethod
    def no_audio_track(cls) -> "AudioAnalysis":
        return cls(
            has_voiceover=False,
            voiceover_starts_early=False,
            opening_line=None,
            transcript=None,
            audio_hook_score=NO_AUDIO_SCORE,
            audio_hook_assessment="No audio track detected in video.",
        )

    @classmethod
    def music_only(cls, transcript: Optional[str] = None, end_card_only: bool = False) -> "AudioAnalysis":
        assessment = MUSIC_ONLY_ASSESSMENT
        if end_card_only:
            assessment = f"{assessment} {END_CARD_NOTE}"
        return cls(
            has_voiceover=False,
            voiceover_starts_early=False,
            opening_line=None,
            transcript=transcript,
            audio_hook_score=MUSIC_ONLY_SCORE,
            audio_hook_assessment=assessment,
            is_music_only=True,
        )

    def to_dict(self) -> AudioSummary:
        return {
            "hasVoiceover": self.has_voiceover,
            "voiceoverStartsEarly": self.voiceover_starts_early,
            "openingLine": self.opening_line,
            "transcript": self.transcript,
            "audioHookScore": self.audio_hook_score,
            "audioHookAssessment": self.audio_hook_assessment,
            "isMusicOnly": self.is_music_only,
        }


def _has_hook_cue(opening_line_lower: str) -> bool:
    return any(cue in opening_line_lower for cue in HOOK_CUES)


def _opens_with_greeting(opening_line_lower: str) -> bool:
    tokens = re.findall(r"[a-z']+", opening_line_lower)
    return bool(tokens) and tokens[0] in GREETINGS


def score_audio_hook(first_word_start: float, opening_line_lower: str) -> int:
    """
    Additive hook score, clamped to 1..10.

    Base 5; +2 if the voiceover starts within 2s (else -2); +2 if the opening
    line carries a benefit/curiosity/direct-address cue, otherwise -1 if it
    opens with a greeting.
    """
    score = HOOK_BASE_SCORE
    score += 2 if first_word_start <= EARLY_VOICEOVER_SECONDS else -2
    if _has_hook_cue(opening_line_lower):
        score += 2
    elif _opens_with_greeting(opening_line_lower):
        score -= 1
    return max(MIN_HOOK_SCORE, min(MAX_HOOK_SCORE, score))


def _describe_hook(first_word_start: float, opening_line_lower: str) -> str:
    parts = []
    if first_word_start <= EARLY_VOICEOVER_SECONDS:
        parts.append(f"Strong audio hook - voiceover starts at {first_word_start:.1f}s.")
    else:
        parts.append(
            f"Slow audio start - voiceover begins at {first_word_start:.1f}s (should be under 2s)."
        )
    if _has_hook_cue(opening_line_lower):
        parts.append("Opening line is benefit/problem-focused.")
    elif _opens_with_greeting(opening_line_lower):
        parts.append("Opening with greeting - consider leading with benefit instead.")
    return " ".join(parts)


def _join_words(words: Sequence[TimestampedWord], cutoff: float) -> Optional[str]:
    line = " ".join(w["word"] for w in words if w["start"] <= cutoff).strip()
    return line or None


def _is_end_card_only(text_lower: str, word_count: int) -> bool:
    return word_count < END_CARD_MAX_WORDS and any(p in text_lower for p in END_CARD_PHRASES)


def classify_transcript(transcript: TranscriptResult) -> AudioAnalysis:
    """Classify a word-timed transcript into an AudioAnalysis (pure)."""
    text = (transcript.get("text") or "").strip()
    words = sorted(transcript.get("words") or [], key=lambda w: w["start"])

    if not text:
        return AudioAnalysis.music_only()

    word_count = len(words)
    end_card_only = _is_end_card_only(text.lower(), word_count)
    if word_count < MIN_SPOKEN_WORDS or end_card_only:
        return AudioAnalysis.music_only(
            transcript=text if word_count > 0 else None,
            end_card_only=end_card_only,
        )

    first_word_start = words[0]["start"]
    opening_line = _join_words(words, OPENING_LINE_SECONDS)
    opening_lower = (opening_line or "").lower()

    return AudioAnalysis(
        has_voiceover=True,
        voiceover_starts_early=first_word_start <= EARLY_VOICEOVER_SECONDS,
        opening_line=opening_line,
        transcript=_join_words(words, TRANSCRIPT_SECONDS),
        audio_hook_score=score_audio_hook(first_word_start, opening_lower),
        audio_hook_assessment=_describe_hook(first_word_start, opening_lower),
        is_music_only=False,
    )


def analyse_audio(
    transcoder: Transcoder,
    transcriber: Transcriber,
    video_path: Path,
    workspace: Workspace,
    deadline: Deadline,
    cancel: Optional[threading.Event] = None,
) -> AudioAnalysis:
    """
    Extract the opening audio, transcribe it and classify the hook.

    Tiny audio artefacts short-circuit to "no audio track" without calling
    the transcription service. Errors propagate; callers decide whether to
    degrade.

    Raises:
        AudioAnalysisCancelled: ``cancel`` was set before transcription started
    """
    audio_path = workspace.path("audio.mp3")
    try:
        audio = transcoder.extract_audio(
            video_path,
            AUDIO_WINDOW_SECONDS,
            audio_path,
            deadline.clamp(transcoder.timeout_seconds, "audio extraction"),
        )
        if len(audio) < MIN_AUDIO_BYTES:
            logger.debug("Audio artefact is %d bytes - treating as no audio track", len(audio))
            return AudioAnalysis.no_audio_track()
        if cancel is not None and cancel.is_set():
            raise AudioAnalysisCancelled("Audio analysis cancelled before transcription")

        transcript = transcriber.transcribe(
            audio_path, deadline.clamp(transcriber.timeout_seconds, "transcription")
        )
    finally:
        workspace.discard(audio_path)

    analysis = classify_transcript(transcript)
    logger.debug(
        "Audio analysis: voiceover=%s music_only=%s score=%d",
        analysis.has_voiceover, analysis.is_music_only, analysis.audio_hook_score,
    )
    return analysis


__all__ = [
    "AudioAnalysis",
    "AudioAnalysisCancelled",
    "score_audio_hook",
    "classify_transcript",
    "analyse_audio",
    "AUDIO_WINDOW_SECONDS",
    "MIN_AUDIO_BYTES",
]
