"""
Duration-aware frame sampling for video creatives.

Samples are biased toward the opening seconds (scroll-stop evidence) and the
closing seconds (call-to-action / end card evidence), with a few middle
frames for pacing when the video is long enough.
"""

from __future__ import annotations

import base64
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .deadline import Deadline
from .errors import FrameExtractionFailed
from .transcoder import Transcoder, TranscoderError
from .workspace import Workspace

logger = logging.getLogger(__name__)

MAX_FRAMES = 10
DEFAULT_DURATION = 30.0
OPENING_BAND = (0.0, 1.0, 2.0, 3.0)
MIDDLE_BAND = (5.0, 8.0, 12.0)
END_BAND_OFFSETS = (3.0, 1.0, 0.5)
# Middle frames must sit this far before the end so they never overlap the end band
MIDDLE_END_MARGIN = 4.0


@dataclass(frozen=True)
class ExtractedFrame:
    timestamp: float
    image: bytes
    media_type: str = "image/jpeg"

    @property
    def base64(self) -> str:
        return base64.b64encode(self.image).decode("ascii")

    def to_dict(self) -> Dict[str, object]:
        return {"timestamp": self.timestamp, "base64": self.base64}


def _round(ts: float) -> float:
    return round(ts * 10) / 10


def build_frame_timestamps(duration: float, max_frames: int = MAX_FRAMES) -> List[float]:
    """
    Return the ascending, de-duplicated sample timestamps for a video.

    The opening band is always kept. If the three bands together exceed
    ``max_frames``, middle-band slots are dropped (latest first) before any
    end-band slot, so CTA evidence survives truncation.
    """
    opening = [_round(t) for t in OPENING_BAND]
    middle = [_round(t) for t in MIDDLE_BAND if t < duration - MIDDLE_END_MARGIN]
    end = [
        _round(t)
        for t in (max(0.0, duration - offset) for offset in END_BAND_OFFSETS)
        if t > 0
    ]

    protected = sorted(set(opening) | set(end))
    optional = [t for t in sorted(set(middle)) if t not in protected]

    room = max(0, max_frames - len(protected))
    kept = protected + optional[:room]
    timestamps = sorted(set(kept))

    if len(timestamps) > max_frames:
        # Only reachable with a custom cap smaller than the protected bands
        timestamps = timestamps[:max_frames]

    logger.debug(
        "Frame timestamps for %.1fs video: %s",
        duration, [f"{t:.1f}s" for t in timestamps],
    )
    return timestamps


def resolve_duration(transcoder: Transcoder, video_path: Path, deadline: Deadline) -> float:
    """Probe the video duration, defaulting to 30s when probing fails."""
    try:
        duration = transcoder.probe(video_path, deadline.clamp(transcoder.timeout_seconds, "probe"))
    except TranscoderError as e:
        logger.warning("Could not determine video duration, assuming %.0fs: %s", DEFAULT_DURATION, e)
        return DEFAULT_DURATION
    if duration <= 0:
        logger.warning("Probe returned non-positive duration %.2f, assuming %.0fs", duration, DEFAULT_DURATION)
        return DEFAULT_DURATION
    return duration


def extract_frames(
    transcoder: Transcoder,
    video_path: Path,
    workspace: Workspace,
    deadline: Deadline,
    cancel: Optional[threading.Event] = None,
) -> List[ExtractedFrame]:
    """
    Materialise one still per sample timestamp, in chronological order.

    A failed seek is logged and skipped; only a video with no frames at all
    is fatal.

    Raises:
        FrameExtractionFailed: if no frame could be extracted
        DeadlineExceeded: if the request deadline passes mid-extraction
    """
    duration = resolve_duration(transcoder, video_path, deadline)
    timestamps = build_frame_timestamps(duration)

    frames: List[ExtractedFrame] = []
    for idx, ts in enumerate(timestamps):
        if cancel is not None and cancel.is_set():
            logger.debug("Frame extraction cancelled after %d frames", len(frames))
            break
        frame_path = workspace.path(f"frame_{idx:02d}.jpg")
        try:
            image = transcoder.extract_frame(
                video_path, ts, frame_path, deadline.clamp(transcoder.timeout_seconds, "frame extraction")
            )
        except TranscoderError as e:
            logger.warning("Failed to extract frame at %.1fs: %s", ts, e)
            continue
        finally:
            workspace.discard(frame_path)
        frames.append(ExtractedFrame(timestamp=ts, image=image))

    if not frames:
        raise FrameExtractionFailed(
            f"Failed to extract any of {len(timestamps)} frames from video"
        )

    logger.debug(
        "Extracted %d/%d frames (first=%.1fs, last=%.1fs)",
        len(frames), len(timestamps), frames[0].timestamp, frames[-1].timestamp,
    )
    return frames


__all__ = [
    "ExtractedFrame",
    "MAX_FRAMES",
    "DEFAULT_DURATION",
    "build_frame_timestamps",
    "resolve_duration",
    "extract_frames",
]
