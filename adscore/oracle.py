"""
Reasoning oracle clients.

Submits an AnalysisPrompt to a multimodal reasoning service and returns the
raw text reply. Anthropic's Messages API is the default; Google Gemini is
available via REASONING_PROVIDER=google. No client retries: a failure is
classified once and surfaced as a typed AnalysisError.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import anthropic
import httpx

from .config import ReasoningConfig, get_reasoning_config
from .errors import (
    AnalysisError,
    DeadlineExceeded,
    OracleAuthFailed,
    OracleRateLimited,
    OracleResponseUnparseable,
    UnexpectedFailure,
)
from .evidence import AnalysisPrompt, ImageBlock, TextBlock

try:
    from google import genai
    from google.genai import errors as genai_errors
    from google.genai import types
except ImportError:  # pragma: no cover - optional
    genai = None  # type: ignore
    genai_errors = None  # type: ignore
    types = None  # type: ignore

logger = logging.getLogger(__name__)


def error_for_status(status: Optional[int], message: str, cause: Optional[BaseException] = None) -> AnalysisError:
    """Map an HTTP status from the reasoning service onto the error taxonomy."""
    if status in (401, 403):
        return OracleAuthFailed(message, cause=cause)
    if status == 429:
        return OracleRateLimited(message, cause=cause)
    return UnexpectedFailure(message, cause=cause)


class ReasoningOracle(ABC):
    """Multimodal reasoning service that answers one prompt with text."""

    provider: str = "unknown"

    def __init__(self, config: ReasoningConfig):
        self.config = config

    @property
    def model_name(self) -> str:
        return self.config.model_name

    @abstractmethod
    def complete(self, prompt: AnalysisPrompt, timeout: float) -> str:
        """
        Send the prompt and return the reply text.

        Raises:
            OracleAuthFailed / OracleRateLimited: rejected by the service
            DeadlineExceeded: the call timed out
            OracleResponseUnparseable: the reply carried no text
            UnexpectedFailure: anything else
        """


class AnthropicOracle(ReasoningOracle):
    """Claude via the Anthropic Messages API."""

    provider = "anthropic"

    def __init__(self, config: ReasoningConfig, client: Optional[anthropic.Anthropic] = None):
        super().__init__(config)
        self._client = client

    @property
    def client(self) -> anthropic.Anthropic:
        if self._client is None:
            self._client = anthropic.Anthropic(api_key=self.config.api_key, max_retries=0)
        return self._client

    @staticmethod
    def _content(prompt: AnalysisPrompt) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        for block in prompt.blocks:
            if isinstance(block, ImageBlock):
                content.append({
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": block.media_type,
                        "data": block.base64,
                    },
                })
            elif isinstance(block, TextBlock):
                content.append({"type": "text", "text": block.text})
        return content

    def complete(self, prompt: AnalysisPrompt, timeout: float) -> str:
        logger.debug(
            "Calling %s with %d images (timeout=%.1fs)",
            self.model_name, prompt.image_count, timeout,
        )
        try:
            message = self.client.messages.create(
                model=self.model_name,
                max_tokens=self.config.max_tokens,
                system=prompt.system,
                messages=[{"role": "user", "content": self._content(prompt)}],
                timeout=timeout,
            )
        except anthropic.APITimeoutError as e:
            raise DeadlineExceeded(f"Reasoning call timed out after {timeout:.1f}s", cause=e) from e
        except anthropic.APIStatusError as e:
            raise error_for_status(e.status_code, f"Anthropic API error {e.status_code}: {e}", e) from e
        except anthropic.APIError as e:
            raise UnexpectedFailure(f"Anthropic API error: {e}", cause=e) from e

        text = "".join(
            getattr(block, "text", "")
            for block in (message.content or [])
            if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise OracleResponseUnparseable("Reasoning service returned no text content")
        logger.debug("Reasoning reply: %d chars, stop_reason=%s", len(text), getattr(message, "stop_reason", None))
        return text


class GeminiOracle(ReasoningOracle):
    """Gemini via the google-genai SDK."""

    provider = "google"

    def __init__(self, config: ReasoningConfig, client: Optional[Any] = None):
        super().__init__(config)
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if genai is None:
                raise RuntimeError("google-genai package is required for REASONING_PROVIDER=google but is not installed.")
            self._client = genai.Client(api_key=self.config.api_key)
        return self._client

    @staticmethod
    def _parts(prompt: AnalysisPrompt) -> list:
        parts = []
        for block in prompt.blocks:
            if isinstance(block, ImageBlock):
                parts.append(types.Part.from_bytes(data=block.data, mime_type=block.media_type))
            elif isinstance(block, TextBlock):
                parts.append(types.Part.from_text(text=block.text))
        return parts

    def complete(self, prompt: AnalysisPrompt, timeout: float) -> str:
        if types is None:
            raise RuntimeError("google-genai package is required for REASONING_PROVIDER=google but is not installed.")
        logger.debug(
            "Calling %s with %d images (timeout=%.1fs)",
            self.model_name, prompt.image_count, timeout,
        )
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=self._parts(prompt),
                config=types.GenerateContentConfig(
                    system_instruction=prompt.system,
                    max_output_tokens=self.config.max_tokens,
                    http_options=types.HttpOptions(timeout=int(timeout * 1000)),
                ),
            )
        except httpx.TimeoutException as e:
            raise DeadlineExceeded(f"Reasoning call timed out after {timeout:.1f}s", cause=e) from e
        except genai_errors.APIError as e:
            raise error_for_status(e.code, f"Gemini API error {e.code}: {e}", e) from e

        raw = getattr(response, "text", None) or ""
        if not raw.strip():
            raise OracleResponseUnparseable("Reasoning service returned an empty response")
        return raw


def get_reasoning_oracle(config: Optional[ReasoningConfig] = None) -> Optional[ReasoningOracle]:
    """Return the configured oracle, or None when no credential is set."""
    cfg = config or get_reasoning_config()
    if not cfg.api_key:
        logger.warning("No API key configured for reasoning provider %s", cfg.provider)
        return None
    if cfg.provider == "google":
        return GeminiOracle(cfg)
    return AnthropicOracle(cfg)


__all__ = [
    "ReasoningOracle",
    "AnthropicOracle",
    "GeminiOracle",
    "error_for_status",
    "get_reasoning_oracle",
]
