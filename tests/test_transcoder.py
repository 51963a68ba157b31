import subprocess
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from adscore import transcoder
from adscore.asr import WhisperTranscriber, get_transcriber
from adscore.config import MediaConfig, TranscriptionConfig
from adscore.transcoder import FFmpegTranscoder, TranscoderError


def _transcoder():
    return FFmpegTranscoder(MediaConfig(ffmpeg_path="ffmpeg", ffprobe_path="ffprobe", timeout_seconds=30.0))


class TestFFmpegTranscoder:
    def test_timeout_comes_from_media_config(self):
        config = MediaConfig(ffmpeg_path="ffmpeg", ffprobe_path="ffprobe", timeout_seconds=3.0)
        assert FFmpegTranscoder(config).timeout_seconds == 3.0

    def test_missing_binaries_are_unavailable(self, monkeypatch):
        monkeypatch.setattr(transcoder.shutil, "which", lambda name: None)
        assert _transcoder().is_available() is False

    def test_probe_parses_duration(self, monkeypatch, tmp_path):
        captured = {}

        def fake_run(cmd, **kwargs):
            captured["cmd"] = cmd
            captured["timeout"] = kwargs["timeout"]
            return SimpleNamespace(stdout=b"12.480000\n", stderr=b"")

        monkeypatch.setattr(transcoder.subprocess, "run", fake_run)
        assert _transcoder().probe(tmp_path / "source.mp4", timeout=7) == pytest.approx(12.48)
        assert captured["cmd"][0] == "ffprobe"
        assert captured["timeout"] == 7

    def test_probe_rejects_garbage(self, monkeypatch, tmp_path):
        monkeypatch.setattr(transcoder.subprocess, "run", lambda cmd, **kw: SimpleNamespace(stdout=b"N/A", stderr=b""))
        with pytest.raises(TranscoderError):
            _transcoder().probe(tmp_path / "source.mp4", timeout=5)

    def test_timeout_is_wrapped(self, monkeypatch, tmp_path):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(transcoder.subprocess, "run", fake_run)
        with pytest.raises(TranscoderError, match="timed out"):
            _transcoder().extract_frame(tmp_path / "source.mp4", 1.0, tmp_path / "frame.jpg", timeout=3)

    def test_frame_written_to_destination(self, monkeypatch, tmp_path):
        dest = tmp_path / "frame_0001.jpg"

        def fake_run(cmd, **kwargs):
            assert "-ss" in cmd and cmd[cmd.index("-ss") + 1] == "2.500"
            dest.write_bytes(b"\xff\xd8jpeg")
            return SimpleNamespace(stdout=b"", stderr=b"")

        monkeypatch.setattr(transcoder.subprocess, "run", fake_run)
        assert _transcoder().extract_frame(tmp_path / "source.mp4", 2.5, dest, timeout=3) == b"\xff\xd8jpeg"

    def test_missing_frame_output_fails(self, monkeypatch, tmp_path):
        monkeypatch.setattr(transcoder.subprocess, "run", lambda cmd, **kw: SimpleNamespace(stdout=b"", stderr=b""))
        with pytest.raises(TranscoderError):
            _transcoder().extract_frame(tmp_path / "source.mp4", 0.0, tmp_path / "frame.jpg", timeout=3)


class TestWhisperTranscriber:
    CONFIG = TranscriptionConfig(
        api_key="sk-test", api_base="https://api.openai.com/v1", model_name="whisper-1", timeout_seconds=60.0
    )

    def test_words_are_normalised_and_sorted(self, tmp_path):
        audio = tmp_path / "audio.mp3"
        audio.write_bytes(b"mp3")
        client = MagicMock()
        client.audio.transcriptions.create.return_value = SimpleNamespace(
            text="Hello there friend",
            words=[
                SimpleNamespace(word=" there", start=0.6, end=0.9),
                {"word": "Hello", "start": 0.1, "end": 0.5},
                SimpleNamespace(word="  ", start=1.0, end=1.1),
                SimpleNamespace(word="friend", start=1.2, end=1.6),
            ],
        )

        result = WhisperTranscriber(self.CONFIG, client=client).transcribe(audio, timeout=12)

        assert result["text"] == "Hello there friend"
        assert [w["word"] for w in result["words"]] == ["Hello", "there", "friend"]
        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert kwargs["timestamp_granularities"] == ["word"]
        assert kwargs["timeout"] == 12

    def test_no_key_means_no_transcriber(self):
        config = TranscriptionConfig(
            api_key=None, api_base="https://api.openai.com/v1", model_name="whisper-1", timeout_seconds=60.0
        )
        assert get_transcriber(config) is None
        assert isinstance(get_transcriber(self.CONFIG), WhisperTranscriber)

    def test_timeout_comes_from_transcription_config(self):
        config = TranscriptionConfig(
            api_key="sk-test", api_base="https://api.openai.com/v1", model_name="whisper-1", timeout_seconds=4.0
        )
        assert WhisperTranscriber(config, client=MagicMock()).timeout_seconds == 4.0
