"""
Transcoder capability used for probing, frame grabs and audio extraction.

The pipeline only talks to the narrow ``Transcoder`` interface; the default
implementation shells out to ffmpeg/ffprobe.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from .config import MediaConfig, get_media_config

logger = logging.getLogger(__name__)


class TranscoderError(Exception):
    """A single transcoder invocation failed or produced no output."""


class Transcoder(ABC):
    """Probe, frame-grab and audio-extract operations on a local media file."""

    # Upper bound for a single invocation; callers clamp it to the request deadline
    timeout_seconds: float = 30.0

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tooling can be used at all."""

    @abstractmethod
    def probe(self, path: Path, timeout: float) -> float:
        """Return the media duration in seconds."""

    @abstractmethod
    def extract_frame(self, path: Path, timestamp: float, dest: Path, timeout: float) -> bytes:
        """Write one JPEG frame at ``timestamp`` to ``dest`` and return its bytes."""

    @abstractmethod
    def extract_audio(self, path: Path, max_seconds: float, dest: Path, timeout: float) -> bytes:
        """Write the first ``max_seconds`` of audio as mono MP3 to ``dest`` and return its bytes."""


class FFmpegTranscoder(Transcoder):
    """Transcoder backed by the ffmpeg/ffprobe command line tools."""

    def __init__(self, config: Optional[MediaConfig] = None):
        cfg = config or get_media_config()
        self.ffmpeg_path = cfg.ffmpeg_path
        self.ffprobe_path = cfg.ffprobe_path
        self.timeout_seconds = cfg.timeout_seconds
        self._available: Optional[bool] = None

    def is_available(self) -> bool:
        """Resolve both binaries once and cache the answer on this instance."""
        if self._available is None:
            missing = [
                binary
                for binary in (self.ffmpeg_path, self.ffprobe_path)
                if shutil.which(binary) is None
            ]
            if missing:
                logger.warning("Transcoder unavailable - not found on PATH: %s", ", ".join(missing))
            self._available = not missing
        return self._available

    def _run(self, cmd: List[str], timeout: float) -> subprocess.CompletedProcess:
        logger.debug("Running %s (timeout=%.1fs)", " ".join(cmd), timeout)
        try:
            return subprocess.run(  # noqa: S603
                cmd, capture_output=True, check=True, timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            raise TranscoderError(f"{cmd[0]} timed out after {timeout:.1f}s") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise TranscoderError(
                f"{cmd[0]} exited with {e.returncode}: {stderr[-300:]}"
            ) from e
        except OSError as e:
            raise TranscoderError(f"Could not run {cmd[0]}: {e}") from e

    def probe(self, path: Path, timeout: float) -> float:
        cmd = [
            self.ffprobe_path,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(path),
        ]
        result = self._run(cmd, timeout)
        raw = result.stdout.decode("utf-8", errors="replace").strip()
        try:
            return float(raw)
        except ValueError as e:
            raise TranscoderError(f"ffprobe returned a non-numeric duration: {raw!r}") from e

    def extract_frame(self, path: Path, timestamp: float, dest: Path, timeout: float) -> bytes:
        cmd = [
            self.ffmpeg_path,
            "-hide_banner",
            "-loglevel", "error",
            "-y",
            "-ss", f"{timestamp:.3f}",  # Seek before input for fast keyframe seek
            "-i", str(path),
            "-frames:v", "1",
            "-q:v", "2",
            str(dest),
        ]
        self._run(cmd, timeout)
        return _read_output(dest, "frame")

    def extract_audio(self, path: Path, max_seconds: float, dest: Path, timeout: float) -> bytes:
        cmd = [
            self.ffmpeg_path,
            "-hide_banner",
            "-loglevel", "error",
            "-y",
            "-i", str(path),
            "-t", f"{max_seconds:g}",
            "-vn",
            "-ac", "1",
            "-acodec", "libmp3lame",
            "-q:a", "4",
            str(dest),
        ]
        self._run(cmd, timeout)
        return _read_output(dest, "audio")


def _read_output(dest: Path, label: str) -> bytes:
    if not dest.exists():
        raise TranscoderError(f"ffmpeg produced no {label} output at {dest}")
    data = dest.read_bytes()
    if label == "frame" and not data:
        raise TranscoderError(f"ffmpeg wrote an empty frame at {dest}")
    return data


__all__ = ["Transcoder", "TranscoderError", "FFmpegTranscoder"]
