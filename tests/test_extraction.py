import time

import pytest

from adscore import extraction
from adscore.deadline import Deadline
from adscore.errors import DeadlineExceeded, FrameExtractionFailed, TranscoderUnavailable
from adscore.media import classify_media

from conftest import FakeTranscoder, FakeTranscriber, words_from

VOICEOVER = "Finally a blender that you can actually clean"


@pytest.fixture
def video_asset():
    return classify_media(b"fake-mp4-bytes", "video/quicktime")


class TestGatherVideoEvidence:
    def test_frames_and_audio_are_gathered(self, video_asset):
        transcoder = FakeTranscoder(duration=20.0)
        transcriber = FakeTranscriber(text=VOICEOVER, words=words_from(VOICEOVER))

        evidence = extraction.gather_video_evidence(video_asset, transcoder, transcriber, Deadline(60))

        assert evidence.audio_status == extraction.AUDIO_ANALYSED
        assert evidence.audio.has_voiceover
        assert evidence.timestamps == sorted(evidence.timestamps)
        assert evidence.timestamps[:4] == [0.0, 1.0, 2.0, 3.0]

    def test_video_is_staged_with_matching_extension_and_removed(self, video_asset):
        transcoder = FakeTranscoder()
        extraction.gather_video_evidence(video_asset, transcoder, None, Deadline(60))

        staged = transcoder.video_paths[0]
        assert staged.suffix == ".mov"
        assert not staged.exists()
        assert not staged.parent.exists()

    def test_missing_transcriber_is_not_configured(self, video_asset):
        transcoder = FakeTranscoder()
        evidence = extraction.gather_video_evidence(video_asset, transcoder, None, Deadline(60))
        assert evidence.audio is None
        assert evidence.audio_status == extraction.AUDIO_NOT_CONFIGURED
        assert transcoder.audio_calls == 0

    def test_audio_failure_degrades(self, video_asset):
        transcoder = FakeTranscoder()
        transcriber = FakeTranscriber(error=RuntimeError("503 from transcription service"))
        evidence = extraction.gather_video_evidence(video_asset, transcoder, transcriber, Deadline(60))
        assert evidence.audio is None
        assert evidence.audio_status == extraction.AUDIO_FAILED
        assert len(evidence.frames) == 10

    def test_unavailable_transcoder(self, video_asset):
        with pytest.raises(TranscoderUnavailable) as exc_info:
            extraction.gather_video_evidence(video_asset, FakeTranscoder(available=False), None, Deadline(60))
        assert "image" in exc_info.value.user_message

    def test_zero_frames_fails_and_cleans_up(self, video_asset):
        transcoder = FakeTranscoder(fail_all_frames=True)
        with pytest.raises(FrameExtractionFailed):
            extraction.gather_video_evidence(video_asset, transcoder, FakeTranscriber(), Deadline(60))
        assert not transcoder.video_paths[0].parent.exists()

    def test_frame_failure_stops_audio_before_transcription(self, video_asset):
        transcoder = FakeTranscoder(fail_all_frames=True, audio_delay=0.3)
        transcriber = FakeTranscriber(text=VOICEOVER, words=words_from(VOICEOVER), delay=2.0)

        started = time.monotonic()
        with pytest.raises(FrameExtractionFailed):
            extraction.gather_video_evidence(video_asset, transcoder, transcriber, Deadline(60))

        assert transcriber.calls == []
        assert time.monotonic() - started < 1.5

    def test_deadline_during_audio_raises_and_cleans_up(self, video_asset):
        transcoder = FakeTranscoder()
        transcriber = FakeTranscriber(text=VOICEOVER, words=words_from(VOICEOVER), delay=1.0)

        with pytest.raises(DeadlineExceeded):
            extraction.gather_video_evidence(video_asset, transcoder, transcriber, Deadline(0.5))

        assert len(transcriber.calls) == 1
        assert not transcoder.video_paths[0].parent.exists()
