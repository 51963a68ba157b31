"""
Media classification for uploaded ad creatives.

Decides whether a buffer is an allow-listed image or video and enforces the
per-kind size ceilings before any expensive work starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlparse

from .errors import PayloadTooLarge, UnsupportedMediaType

logger = logging.getLogger(__name__)

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})
VIDEO_TYPES = frozenset({"video/mp4", "video/quicktime", "video/webm"})

MAX_IMAGE_BYTES = 20 * 1024 * 1024
MAX_VIDEO_BYTES = 50 * 1024 * 1024

EXTENSION_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
}

VIDEO_EXTENSIONS = {
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
}


@dataclass(frozen=True)
class AdCopy:
    """Caller-supplied ad text, passed through to the prompt and echoed back."""

    primary_text: Optional[str] = None
    headline: Optional[str] = None
    description: Optional[str] = None

    @property
    def has_copy(self) -> bool:
        """Copy analysis only runs when there is primary text or a headline."""
        return bool(self.primary_text or self.headline)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["AdCopy"]:
        """Build from API-style dicts (snake_case or camelCase keys)."""
        if not data:
            return None

        def pick(*keys: str) -> Optional[str]:
            for key in keys:
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value
            return None

        copy = cls(
            primary_text=pick("primary_text", "primaryText"),
            headline=pick("headline"),
            description=pick("description"),
        )
        if not (copy.primary_text or copy.headline or copy.description):
            return None
        return copy


@dataclass(frozen=True)
class MediaAsset:
    """A classified creative. ``kind`` is only ever "image" or "video"."""

    data: bytes
    content_type: str
    kind: str

    @property
    def is_video(self) -> bool:
        return self.kind == "video"

    @property
    def size(self) -> int:
        return len(self.data)


def normalize_content_type(value: Optional[str]) -> str:
    """Lower-case a Content-Type header and drop parameters like charset."""
    if not value:
        return ""
    return value.split(";", 1)[0].strip().lower()


def media_kind(content_type: Optional[str]) -> Optional[str]:
    """Return "image", "video", or None for anything off the allow-list."""
    normalized = normalize_content_type(content_type)
    if normalized in IMAGE_TYPES:
        return "image"
    if normalized in VIDEO_TYPES:
        return "video"
    return None


def size_limit(kind: str) -> int:
    return MAX_VIDEO_BYTES if kind == "video" else MAX_IMAGE_BYTES


def check_declared_size(kind: str, declared_length: Union[int, str, None]) -> None:
    """
    Fast-reject using a declared Content-Length before the body is read.

    Unparseable or missing values are ignored; the decoded buffer length is
    checked again later and is authoritative.
    """
    if declared_length is None or declared_length == "":
        return
    try:
        size = int(declared_length)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable declared length: %r", declared_length)
        return
    limit = size_limit(kind)
    if size > limit:
        raise PayloadTooLarge(size, limit, kind)


def classify_media(
    data: bytes,
    content_type: Optional[str],
    declared_length: Union[int, str, None] = None,
) -> MediaAsset:
    """
    Classify a buffer as an image or video asset.

    Raises:
        UnsupportedMediaType: content type is not allow-listed
        PayloadTooLarge: declared or actual size exceeds the per-kind limit
    """
    normalized = normalize_content_type(content_type)
    kind = media_kind(normalized)
    if kind is None:
        raise UnsupportedMediaType(content_type)

    check_declared_size(kind, declared_length)

    limit = size_limit(kind)
    if len(data) > limit:
        raise PayloadTooLarge(len(data), limit, kind)

    logger.debug("Classified %s as %s (%d bytes)", normalized, kind, len(data))
    return MediaAsset(data=data, content_type=normalized, kind=kind)


def detect_content_type(content_type: Optional[str], name: Optional[str] = None) -> Optional[str]:
    """
    Resolve an allow-listed content type from a header, falling back to the
    file name or URL extension.
    """
    normalized = normalize_content_type(content_type)
    if media_kind(normalized):
        return normalized
    if not name:
        return None
    path = urlparse(name).path if "://" in name else name
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    return EXTENSION_TYPES.get(suffix)


def extension_for(content_type: str) -> str:
    """File suffix used when staging a video for the transcoder."""
    return VIDEO_EXTENSIONS.get(normalize_content_type(content_type), ".mp4")


__all__ = [
    "AdCopy",
    "MediaAsset",
    "IMAGE_TYPES",
    "VIDEO_TYPES",
    "MAX_IMAGE_BYTES",
    "MAX_VIDEO_BYTES",
    "normalize_content_type",
    "media_kind",
    "check_declared_size",
    "classify_media",
    "detect_content_type",
    "extension_for",
]
