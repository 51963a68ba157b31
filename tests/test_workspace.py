import pytest

from adscore.deadline import Deadline
from adscore.errors import DeadlineExceeded
from adscore.workspace import Workspace


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


class TestWorkspace:
    def test_files_removed_on_close(self, tmp_path):
        with Workspace(base_dir=str(tmp_path)) as ws:
            target = ws.write("source.mp4", b"video")
            assert target.read_bytes() == b"video"
            root = ws.root
        assert ws.closed
        assert not root.exists()

    def test_files_removed_when_body_raises(self, tmp_path):
        with pytest.raises(RuntimeError, match="boom"):
            with Workspace(base_dir=str(tmp_path)) as ws:
                ws.write("audio.mp3", b"mp3")
                raise RuntimeError("boom")
        assert not ws.root.exists()
        assert list(tmp_path.iterdir()) == []

    def test_rejects_nested_names(self, tmp_path):
        with Workspace(base_dir=str(tmp_path)) as ws:
            with pytest.raises(ValueError):
                ws.path("../escape.txt")
            with pytest.raises(ValueError):
                ws.path("sub/dir.txt")

    def test_path_after_close(self, tmp_path):
        ws = Workspace(base_dir=str(tmp_path))
        ws.close()
        ws.close()
        with pytest.raises(RuntimeError):
            ws.path("frame.jpg")

    def test_discard(self, tmp_path):
        with Workspace(base_dir=str(tmp_path)) as ws:
            audio = ws.write("audio.mp3", b"mp3")
            ws.discard(audio)
            assert not audio.exists()
            ws.discard(audio)


class TestDeadline:
    def test_clamp_uses_smaller_value(self):
        clock = FakeClock()
        deadline = Deadline(20, clock=clock)
        assert deadline.clamp(30) == 20
        clock.now += 15
        assert deadline.clamp(30) == 5
        assert deadline.clamp(2) == 2

    def test_expired_deadline_raises(self):
        clock = FakeClock()
        deadline = Deadline(10, clock=clock)
        clock.now += 10
        assert deadline.expired
        assert deadline.remaining() == 0
        with pytest.raises(DeadlineExceeded):
            deadline.check("oracle")
        with pytest.raises(DeadlineExceeded):
            deadline.clamp(5, "frame extraction")

    def test_unbounded_deadline(self):
        deadline = Deadline(None)
        assert deadline.remaining() is None
        assert not deadline.expired
        assert deadline.clamp(42) == 42
