"""
Shared fakes for the analysis pipeline tests.

The fakes implement the same narrow interfaces as the real ffmpeg, Whisper
and reasoning clients so the pipeline can run end-to-end in-process.
"""

import copy
import json
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest

from adscore import config
from adscore.asr import Transcriber
from adscore.config import ReasoningConfig
from adscore.oracle import ReasoningOracle
from adscore.prompts.scorecard import CATEGORY_NAMES
from adscore.transcoder import Transcoder, TranscoderError


class FakeTranscoder(Transcoder):
    """Writes deterministic bytes instead of shelling out to ffmpeg."""

    def __init__(
        self,
        duration: Union[float, Exception] = 30.0,
        failing_timestamps: Optional[set] = None,
        fail_all_frames: bool = False,
        audio: Union[bytes, Exception] = b"\x00" * 4000,
        available: bool = True,
        timeout_seconds: float = 30.0,
        audio_delay: float = 0.0,
    ):
        self.timeout_seconds = timeout_seconds
        self.audio_delay = audio_delay
        self.duration = duration
        self.failing_timestamps = failing_timestamps or set()
        self.fail_all_frames = fail_all_frames
        self.audio = audio
        self.available = available
        self.frame_calls: List[float] = []
        self.audio_calls = 0
        self.video_paths: List[Path] = []
        self.timeouts: List[float] = []

    def is_available(self) -> bool:
        return self.available

    def probe(self, path: Path, timeout: float) -> float:
        self.video_paths.append(path)
        self.timeouts.append(timeout)
        if isinstance(self.duration, Exception):
            raise self.duration
        return self.duration

    def extract_frame(self, path: Path, timestamp: float, dest: Path, timeout: float) -> bytes:
        self.frame_calls.append(timestamp)
        self.timeouts.append(timeout)
        if self.fail_all_frames or timestamp in self.failing_timestamps:
            raise TranscoderError(f"seek failed at {timestamp}")
        data = f"jpeg@{timestamp:.1f}".encode()
        dest.write_bytes(data)
        return data

    def extract_audio(self, path: Path, max_seconds: float, dest: Path, timeout: float) -> bytes:
        self.audio_calls += 1
        self.timeouts.append(timeout)
        if self.audio_delay:
            time.sleep(self.audio_delay)
        if isinstance(self.audio, Exception):
            raise self.audio
        dest.write_bytes(self.audio)
        return self.audio


class FakeTranscriber(Transcriber):
    def __init__(
        self,
        text: str = "",
        words: Optional[List[Dict]] = None,
        error: Optional[Exception] = None,
        timeout_seconds: float = 60.0,
        delay: float = 0.0,
    ):
        self.text = text
        self.words = words or []
        self.error = error
        self.timeout_seconds = timeout_seconds
        self.delay = delay
        self.calls: List[Path] = []
        self.timeouts: List[float] = []

    def transcribe(self, audio_path: Path, timeout: float):
        self.calls.append(audio_path)
        self.timeouts.append(timeout)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return {"text": self.text, "words": list(self.words)}


class FakeOracle(ReasoningOracle):
    provider = "fake"

    def __init__(self, reply: Union[str, Callable, Exception] = "{}"):
        super().__init__(
            ReasoningConfig(
                provider="fake",
                api_key="test-key",
                model_name="fake-model",
                max_tokens=1024,
                timeout_seconds=30.0,
            )
        )
        self.reply = reply
        self.prompts = []

    def complete(self, prompt, timeout: float) -> str:
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply


def words_from(text: str, start: float = 0.5, step: float = 0.4) -> List[Dict]:
    """Evenly spaced word timings for a sentence."""
    out = []
    for idx, word in enumerate(text.split()):
        t = start + idx * step
        out.append({"word": word, "start": round(t, 2), "end": round(t + step * 0.8, 2)})
    return out


def build_scorecard(media_kind: str = "image", with_copy: bool = False) -> Dict:
    """A scorecard that satisfies the schema for the given variant."""
    card = {
        "overallScore": 72,
        "mediaType": media_kind,
        "quickAudit": {"offerMentioned": True, "urgencyPresent": False},
        "categories": [
            {"name": name, "score": 7, "reason": f"{name} is solid."}
            for name in CATEGORY_NAMES
        ],
        "policyFlags": [],
        "topFixes": ["Bigger headline", "Add social proof", "Stronger CTA"],
        "verdictReason": "Solid creative with a clear offer.",
        "whatsWorking": "Clear product shot and bold colours.",
        "executiveSummary": {
            "biggestStrength": "Clear product and offer",
            "biggestRisk": "No social proof visible",
            "quickWin": "Add a star rating badge",
        },
        "scoreExplanation": {
            "scoreDriver": "strong product visibility",
            "scoreDrag": "missing social proof",
        },
    }
    if media_kind == "video":
        card["quickAudit"]["endCardPresent"] = True
        card["hookAnalysis"] = {
            "firstFrameScore": 8,
            "firstFrameAnalysis": "Face close-up stops the scroll.",
            "threeSecondScore": 7,
            "threeSecondAnalysis": "Benefit is clear by 2s.",
            "hookRecommendation": "Show the product at 0.5s.",
        }
        card["videoNotes"] = {
            "pacing": "Cuts every 2s.",
            "textTiming": "Captions from 0s.",
            "ctaTiming": "CTA at the end card.",
            "textOverlayVerdict": "Text overlays are clear and readable throughout",
            "endCardAnalysis": "Shop Now with 20% off.",
        }
    if with_copy:
        card["copyAnalysis"] = {
            "primaryTextScore": 6,
            "primaryTextAnalysis": "Hook is buried.",
            "headlineScore": 8,
            "headlineAnalysis": "Urgent and short.",
            "copyCreativeAlignment": 7,
            "copyCreativeAlignmentReason": "Matches the visual.",
            "copyFixes": ["Lead with the benefit", "Cut to 100 chars", "Add urgency"],
        }
    return card


@pytest.fixture(autouse=True)
def _reset_config_caches():
    config.get_reasoning_config.cache_clear()
    config.get_transcription_config.cache_clear()
    config.get_media_config.cache_clear()
    config.get_pipeline_config.cache_clear()
    yield
    config.get_reasoning_config.cache_clear()
    config.get_transcription_config.cache_clear()
    config.get_media_config.cache_clear()
    config.get_pipeline_config.cache_clear()


@pytest.fixture
def fake_transcoder():
    return FakeTranscoder()


@pytest.fixture
def scorecard_factory():
    def _make(media_kind: str = "image", with_copy: bool = False) -> Dict:
        return copy.deepcopy(build_scorecard(media_kind, with_copy))
    return _make


@pytest.fixture
def oracle_factory():
    def _make(reply: Union[str, Dict, Callable, Exception] = None) -> FakeOracle:
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return FakeOracle(reply if reply is not None else json.dumps(build_scorecard()))
    return _make
