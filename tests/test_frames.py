import threading

import pytest

from adscore import frames
from adscore.deadline import Deadline
from adscore.errors import FrameExtractionFailed
from adscore.transcoder import TranscoderError
from adscore.workspace import Workspace

from conftest import FakeTranscoder


class TestBuildFrameTimestamps:
    def test_thirty_second_video(self):
        assert frames.build_frame_timestamps(30.0) == [0.0, 1.0, 2.0, 3.0, 5.0, 8.0, 12.0, 27.0, 29.0, 29.5]

    def test_ten_second_video_keeps_only_early_middle_frames(self):
        assert frames.build_frame_timestamps(10.0) == [0.0, 1.0, 2.0, 3.0, 5.0, 7.0, 9.0, 9.5]

    def test_very_short_video_deduplicates_and_drops_zero_end_slot(self):
        assert frames.build_frame_timestamps(3.0) == [0.0, 1.0, 2.0, 2.5, 3.0]

    def test_end_band_is_rounded_to_one_decimal(self):
        result = frames.build_frame_timestamps(15.27)
        assert 12.3 in result
        assert 14.3 in result
        assert 14.8 in result

    @pytest.mark.parametrize("duration", [0.4, 1.0, 2.5, 4.0, 6.5, 9.0, 16.0, 30.0, 61.3, 600.0])
    def test_invariants_hold_across_durations(self, duration):
        result = frames.build_frame_timestamps(duration)
        assert 0 < len(result) <= frames.MAX_FRAMES
        assert all(t >= 0 for t in result)
        assert all(a < b for a, b in zip(result, result[1:]))
        if duration >= 4:
            assert {0.0, 1.0, 2.0, 3.0} <= set(result)

    def test_truncation_drops_middle_slots_before_end_band(self):
        result = frames.build_frame_timestamps(30.0, max_frames=8)
        assert result == [0.0, 1.0, 2.0, 3.0, 5.0, 27.0, 29.0, 29.5]


class TestResolveDuration:
    def test_probe_failure_falls_back_to_default(self):
        transcoder = FakeTranscoder(duration=TranscoderError("ffprobe exploded"))
        assert frames.resolve_duration(transcoder, "clip.mp4", Deadline(None)) == frames.DEFAULT_DURATION

    def test_non_positive_duration_falls_back_to_default(self):
        transcoder = FakeTranscoder(duration=0.0)
        assert frames.resolve_duration(transcoder, "clip.mp4", Deadline(None)) == frames.DEFAULT_DURATION


class TestExtractFrames:
    def test_frames_are_chronological_and_files_removed(self, tmp_path):
        transcoder = FakeTranscoder(duration=30.0)
        with Workspace(base_dir=str(tmp_path)) as ws:
            result = frames.extract_frames(transcoder, ws.root / "source.mp4", ws, Deadline(60))
            assert list(ws.root.iterdir()) == []

        timestamps = [f.timestamp for f in result]
        assert timestamps == sorted(timestamps)
        assert transcoder.frame_calls == timestamps
        assert result[0].image == b"jpeg@0.0"
        assert result[0].to_dict()["base64"] == result[0].base64

    def test_failed_seek_is_skipped(self, tmp_path):
        transcoder = FakeTranscoder(duration=30.0, failing_timestamps={8.0, 29.5})
        with Workspace(base_dir=str(tmp_path)) as ws:
            result = frames.extract_frames(transcoder, ws.root / "source.mp4", ws, Deadline(60))

        timestamps = [f.timestamp for f in result]
        assert 8.0 not in timestamps
        assert 29.5 not in timestamps
        assert len(timestamps) == 8

    def test_zero_frames_is_fatal(self, tmp_path):
        transcoder = FakeTranscoder(fail_all_frames=True)
        with Workspace(base_dir=str(tmp_path)) as ws:
            with pytest.raises(FrameExtractionFailed):
                frames.extract_frames(transcoder, ws.root / "source.mp4", ws, Deadline(60))

    def test_timeouts_never_exceed_remaining_deadline(self, tmp_path):
        transcoder = FakeTranscoder()
        with Workspace(base_dir=str(tmp_path)) as ws:
            frames.extract_frames(transcoder, ws.root / "source.mp4", ws, Deadline(5))
        assert all(t <= 5 for t in transcoder.timeouts)

    def test_cancel_stops_further_seeks(self, tmp_path):
        cancel = threading.Event()
        transcoder = FakeTranscoder()
        original = transcoder.extract_frame

        def extract_then_cancel(*args, **kwargs):
            data = original(*args, **kwargs)
            cancel.set()
            return data

        transcoder.extract_frame = extract_then_cancel
        with Workspace(base_dir=str(tmp_path)) as ws:
            result = frames.extract_frames(transcoder, ws.root / "source.mp4", ws, Deadline(60), cancel)
        assert len(result) == 1

    def test_configured_transcoder_timeout_is_used(self, tmp_path):
        transcoder = FakeTranscoder(timeout_seconds=3.0)
        with Workspace(base_dir=str(tmp_path)) as ws:
            frames.extract_frames(transcoder, ws.root / "source.mp4", ws, Deadline(60))
        assert len(transcoder.timeouts) == 11
        assert set(transcoder.timeouts) == {3.0}
