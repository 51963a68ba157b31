"""
Configuration helpers for the creative analysis pipeline.

Centralises environment variable loading/validation so the rest of the codebase
can depend on typed config objects instead of sprinkling os.getenv calls.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

REASONING_PROVIDER_CHOICES = {"anthropic", "google"}
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_ASR_MODEL = "whisper-1"


@dataclass(frozen=True)
class ReasoningConfig:
    """Multimodal reasoning service used to score the creative."""

    provider: str
    api_key: Optional[str]
    model_name: str
    max_tokens: int
    timeout_seconds: float


@dataclass(frozen=True)
class TranscriptionConfig:
    """Optional speech-to-text service (OpenAI-compatible)."""

    api_key: Optional[str]
    api_base: str
    model_name: str
    timeout_seconds: float


@dataclass(frozen=True)
class MediaConfig:
    """External transcoder binaries and their per-call timeout."""

    ffmpeg_path: str
    ffprobe_path: str
    timeout_seconds: float


@dataclass(frozen=True)
class PipelineConfig:
    """Misc pipeline knobs."""

    log_level: str
    deadline_seconds: float
    sentry_dsn: Optional[str]


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Wrapper around os.getenv that trims whitespace."""
    value = os.getenv(name, default)
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or default


def _get_float_env(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a float, got '{raw}'.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}.")
    return value


def _get_int_env(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw}'.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}.")
    return value


@lru_cache(maxsize=1)
def get_reasoning_config() -> ReasoningConfig:
    """Return the reasoning provider, credential and model."""
    provider = (_get_env("REASONING_PROVIDER") or "anthropic").lower()
    if provider not in REASONING_PROVIDER_CHOICES:
        raise ValueError(
            f"REASONING_PROVIDER must be one of {sorted(REASONING_PROVIDER_CHOICES)}, got '{provider}'."
        )
    if provider == "google":
        api_key = _get_env("GOOGLE_API_KEY")
        default_model = DEFAULT_GEMINI_MODEL
    else:
        api_key = _get_env("ANTHROPIC_API_KEY")
        default_model = DEFAULT_ANTHROPIC_MODEL
    return ReasoningConfig(
        provider=provider,
        api_key=api_key,
        model_name=_get_env("REASONING_MODEL") or default_model,
        max_tokens=_get_int_env("REASONING_MAX_TOKENS", 4096),
        timeout_seconds=_get_float_env("REASONING_TIMEOUT_SECONDS", 90.0),
    )


@lru_cache(maxsize=1)
def get_transcription_config() -> TranscriptionConfig:
    """Return OpenAI-compatible transcription settings (key may be absent)."""
    return TranscriptionConfig(
        api_key=_get_env("OPENAI_API_KEY"),
        api_base=_get_env("OPENAI_API_BASE") or "https://api.openai.com/v1",
        model_name=_get_env("ASR_MODEL_NAME") or DEFAULT_ASR_MODEL,
        timeout_seconds=_get_float_env("TRANSCRIPTION_TIMEOUT_SECONDS", 60.0),
    )


@lru_cache(maxsize=1)
def get_media_config() -> MediaConfig:
    """Return ffmpeg/ffprobe locations."""
    return MediaConfig(
        ffmpeg_path=_get_env("FFMPEG_PATH") or "ffmpeg",
        ffprobe_path=_get_env("FFPROBE_PATH") or "ffprobe",
        timeout_seconds=_get_float_env("FFMPEG_TIMEOUT_SECONDS", 30.0),
    )


@lru_cache(maxsize=1)
def get_pipeline_config() -> PipelineConfig:
    """Return misc pipeline toggles."""
    return PipelineConfig(
        log_level=_get_env("LOG_LEVEL") or "INFO",
        deadline_seconds=_get_float_env("ANALYSIS_DEADLINE_SECONDS", 120.0),
        sentry_dsn=_get_env("SENTRY_DSN"),
    )


def is_transcription_enabled(config: Optional[TranscriptionConfig] = None) -> bool:
    """Convenience helper for gating audio analysis."""
    cfg = config or get_transcription_config()
    return bool(cfg.api_key)


def describe_active_models() -> dict:
    """Return a summary of the currently selected providers/models."""
    reasoning = get_reasoning_config()
    transcription = get_transcription_config()
    return {
        "reasoning_provider": reasoning.provider,
        "reasoning_model": reasoning.model_name,
        "reasoning_configured": bool(reasoning.api_key),
        "transcription_model": transcription.model_name if transcription.api_key else None,
    }


__all__ = [
    "ReasoningConfig",
    "TranscriptionConfig",
    "MediaConfig",
    "PipelineConfig",
    "get_reasoning_config",
    "get_transcription_config",
    "get_media_config",
    "get_pipeline_config",
    "is_transcription_enabled",
    "describe_active_models",
]
