"""
ASR wrapper for extracting word-timestamped transcripts.

Uses the OpenAI transcription API (Whisper). The service is optional: when no
API key is configured ``get_transcriber()`` returns None and video analysis
proceeds on frames alone.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional

from openai import OpenAI

from .config import TranscriptionConfig, get_transcription_config, is_transcription_enabled
from .types import TimestampedWord, TranscriptResult

logger = logging.getLogger(__name__)


class Transcriber(ABC):
    """Speech-to-text oracle returning text plus word-level timings."""

    timeout_seconds: float = 60.0

    @abstractmethod
    def transcribe(self, audio_path: Path, timeout: float) -> TranscriptResult:
        """Transcribe an audio file into ``{"text", "words"}``."""


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _normalise_words(raw_words: Optional[List[Any]]) -> List[TimestampedWord]:
    words: List[TimestampedWord] = []
    for item in raw_words or []:
        word = (_field(item, "word") or "").strip()
        if not word:
            continue
        try:
            start = float(_field(item, "start", 0.0))
            end = float(_field(item, "end", start))
        except (TypeError, ValueError):
            logger.debug("Skipping word with invalid timing: %r", item)
            continue
        words.append({"word": word, "start": start, "end": end})
    words.sort(key=lambda w: w["start"])
    return words


class WhisperTranscriber(Transcriber):
    """OpenAI Whisper transcription with word timestamp granularity."""

    def __init__(self, config: Optional[TranscriptionConfig] = None, client: Optional[OpenAI] = None):
        self.config = config or get_transcription_config()
        self.timeout_seconds = self.config.timeout_seconds
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self.config.api_key, base_url=self.config.api_base)
        return self._client

    def transcribe(self, audio_path: Path, timeout: float) -> TranscriptResult:
        logger.debug("Transcribing %s with %s", audio_path, self.config.model_name)
        with open(audio_path, "rb") as audio_file:
            response = self.client.audio.transcriptions.create(
                model=self.config.model_name,
                file=audio_file,
                response_format="verbose_json",
                timestamp_granularities=["word"],
                temperature=0,
                timeout=timeout,
            )

        text = _field(response, "text") or ""
        words = _normalise_words(_field(response, "words"))
        logger.debug("Transcription complete: %d chars, %d words", len(text), len(words))
        return {"text": text, "words": words}


def get_transcriber(config: Optional[TranscriptionConfig] = None) -> Optional[Transcriber]:
    """Return a configured transcriber, or None when no API key is set."""
    cfg = config or get_transcription_config()
    if not is_transcription_enabled(cfg):
        logger.info("No OpenAI API key - audio analysis disabled")
        return None
    return WhisperTranscriber(cfg)


__all__ = ["Transcriber", "WhisperTranscriber", "get_transcriber"]
