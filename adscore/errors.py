"""
Analysis exceptions.

Every fatal failure carries a stable machine-readable ``kind`` plus a
human-readable ``user_message`` so callers can render a specific message
(e.g. "rate limited, retry later" vs "invalid file") and telemetry can keep
the kind even when the message is generic.

- AnalysisError: Base exception for all analysis failures
- UnsupportedMediaType / PayloadTooLarge: Rejected input
- TranscoderUnavailable / FrameExtractionFailed: Video evidence failures
- OracleNotConfigured / OracleAuthFailed / OracleRateLimited: Reasoning service
- OracleResponseUnparseable: Scorecard could not be trusted
- DeadlineExceeded: Request ran out of time
- UnexpectedFailure: Anything else
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AnalysisError(Exception):
    """Base exception for all analysis failures."""

    kind: str = "unexpected_failure"
    user_message: str = "Analysis failed unexpectedly. Please try again."

    def __init__(
        self,
        message: Optional[str] = None,
        stage_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.stage_name = stage_name
        self.cause = cause
        super().__init__(message or self.user_message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialisable error payload for API/CLI layers."""
        payload: Dict[str, Any] = {
            "kind": self.kind,
            "message": self.user_message,
            "detail": str(self),
        }
        if self.stage_name:
            payload["stage"] = self.stage_name
        return payload


class UnsupportedMediaType(AnalysisError):
    kind = "unsupported_media_type"
    user_message = (
        "Unsupported file type. Upload an image (JPG, PNG, WebP, GIF) "
        "or a video (MP4, MOV, WebM)."
    )

    def __init__(self, content_type: Optional[str], stage_name: Optional[str] = None):
        self.content_type = content_type
        super().__init__(f"Unsupported media type: {content_type!r}", stage_name)


class PayloadTooLarge(AnalysisError):
    kind = "payload_too_large"
    user_message = "Media too large. Maximum size is 20MB for images and 50MB for videos."

    def __init__(
        self,
        size: int,
        limit: int,
        media_kind: str,
        stage_name: Optional[str] = None,
    ):
        self.size = size
        self.limit = limit
        self.media_kind = media_kind
        super().__init__(
            f"{media_kind} payload of {size} bytes exceeds the {limit} byte limit",
            stage_name,
        )


class TranscoderUnavailable(AnalysisError):
    kind = "transcoder_unavailable"
    user_message = (
        "Video processing is temporarily unavailable. "
        "Please upload an image of your ad instead."
    )


class FrameExtractionFailed(AnalysisError):
    kind = "frame_extraction_failed"
    user_message = (
        "We couldn't read any frames from this video. "
        "The file may be corrupt or use an unsupported codec."
    )


class OracleNotConfigured(AnalysisError):
    kind = "oracle_not_configured"
    user_message = "Analysis service is not configured."


class OracleAuthFailed(AnalysisError):
    kind = "oracle_auth_failed"
    user_message = "Analysis service rejected our credentials. Please contact support."


class OracleRateLimited(AnalysisError):
    kind = "oracle_rate_limited"
    user_message = "Analysis service is busy. Please retry in a minute."


class OracleResponseUnparseable(AnalysisError):
    kind = "oracle_response_unparseable"
    user_message = "The analysis came back malformed. Please try again."

    def __init__(
        self,
        message: str,
        raw_response: Optional[str] = None,
        stage_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.raw_response = raw_response
        super().__init__(message, stage_name, cause)


class DeadlineExceeded(AnalysisError):
    kind = "deadline_exceeded"
    user_message = "Analysis took too long. Try a shorter video or retry later."


class UnexpectedFailure(AnalysisError):
    kind = "unexpected_failure"


__all__ = [
    "AnalysisError",
    "UnsupportedMediaType",
    "PayloadTooLarge",
    "TranscoderUnavailable",
    "FrameExtractionFailed",
    "OracleNotConfigured",
    "OracleAuthFailed",
    "OracleRateLimited",
    "OracleResponseUnparseable",
    "DeadlineExceeded",
    "UnexpectedFailure",
]
