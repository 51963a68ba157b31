"""
Concurrent evidence extraction for video creatives.

Frame sampling and audio analysis are independent, so they run side by side
on a small thread pool inside one request-scoped Workspace. Frames are
required; audio is optional and every audio failure degrades to "no audio
analysis".
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .asr import Transcriber
from .audio import AudioAnalysis, AudioAnalysisCancelled, analyse_audio
from .deadline import Deadline
from .errors import DeadlineExceeded, TranscoderUnavailable
from .frames import ExtractedFrame, extract_frames
from .media import MediaAsset, extension_for
from .transcoder import Transcoder
from .workspace import Workspace

logger = logging.getLogger(__name__)

AUDIO_ANALYSED = "analysed"
AUDIO_NOT_CONFIGURED = "not_configured"
AUDIO_FAILED = "failed"


@dataclass(frozen=True)
class VideoEvidence:
    frames: List[ExtractedFrame] = field(default_factory=list)
    audio: Optional[AudioAnalysis] = None
    audio_status: str = AUDIO_NOT_CONFIGURED

    @property
    def timestamps(self) -> List[float]:
        return [f.timestamp for f in self.frames]


def _analyse_audio_safely(
    transcoder: Transcoder,
    transcriber: Transcriber,
    video_path: Path,
    workspace: Workspace,
    deadline: Deadline,
    cancel: threading.Event,
) -> Tuple[Optional[AudioAnalysis], str]:
    if cancel.is_set():
        return None, AUDIO_FAILED
    try:
        return analyse_audio(transcoder, transcriber, video_path, workspace, deadline, cancel), AUDIO_ANALYSED
    except AudioAnalysisCancelled:
        logger.debug("Audio analysis cancelled")
        return None, AUDIO_FAILED
    except Exception as e:
        logger.warning("Audio analysis failed, continuing without audio: %s", e)
        return None, AUDIO_FAILED


def _await(future: Future, deadline: Deadline, label: str):
    try:
        return future.result(timeout=deadline.remaining())
    except FuturesTimeoutError as e:
        raise DeadlineExceeded(
            f"Deadline of {deadline.seconds}s exceeded during {label}"
        ) from e


def gather_video_evidence(
    asset: MediaAsset,
    transcoder: Transcoder,
    transcriber: Optional[Transcriber],
    deadline: Deadline,
) -> VideoEvidence:
    """
    Stage the video and run frame + audio extraction concurrently.

    The workspace outlives the executor: workers are always joined before the
    temp directory is removed.

    Raises:
        TranscoderUnavailable: ffmpeg/ffprobe cannot be used
        FrameExtractionFailed: no frame could be extracted
        DeadlineExceeded: the request deadline passed while waiting
    """
    if not transcoder.is_available():
        raise TranscoderUnavailable("Video transcoder (ffmpeg/ffprobe) is not available")

    deadline.check("video staging")

    with Workspace() as workspace:
        video_path = workspace.write(f"source{extension_for(asset.content_type)}", asset.data)
        cancel = threading.Event()
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="evidence")
        try:
            frames_future = executor.submit(
                extract_frames, transcoder, video_path, workspace, deadline, cancel
            )
            audio_future: Optional[Future] = None
            if transcriber is not None:
                audio_future = executor.submit(
                    _analyse_audio_safely,
                    transcoder, transcriber, video_path, workspace, deadline, cancel,
                )
            else:
                logger.info("Transcription not configured - skipping audio analysis")

            frames = _await(frames_future, deadline, "frame extraction")

            audio: Optional[AudioAnalysis] = None
            audio_status = AUDIO_NOT_CONFIGURED
            if audio_future is not None:
                audio, audio_status = _await(audio_future, deadline, "audio analysis")
        except BaseException:
            cancel.set()
            raise
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    logger.info(
        "Video evidence ready: %d frames, audio=%s", len(frames), audio_status
    )
    return VideoEvidence(frames=frames, audio=audio, audio_status=audio_status)


__all__ = [
    "VideoEvidence",
    "gather_video_evidence",
    "AUDIO_ANALYSED",
    "AUDIO_NOT_CONFIGURED",
    "AUDIO_FAILED",
]
