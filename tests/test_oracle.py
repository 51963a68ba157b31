from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from adscore import oracle
from adscore.config import ReasoningConfig
from adscore.errors import (
    DeadlineExceeded,
    OracleAuthFailed,
    OracleRateLimited,
    OracleResponseUnparseable,
    UnexpectedFailure,
)
from adscore.evidence import AnalysisPrompt, ImageBlock, TextBlock

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


def _config(provider="anthropic", api_key="sk-ant-test"):
    return ReasoningConfig(
        provider=provider,
        api_key=api_key,
        model_name="claude-test",
        max_tokens=2048,
        timeout_seconds=90.0,
    )


def _prompt():
    return AnalysisPrompt(
        system="You are AdScore.",
        blocks=(ImageBlock(data=b"jpeg", media_type="image/jpeg"), TextBlock("Score this.")),
        media_kind="image",
    )


def _status_error(cls, status):
    request = httpx.Request("POST", ANTHROPIC_URL)
    response = httpx.Response(status, request=request)
    return cls(f"status {status}", response=response, body=None)


class TestErrorForStatus:
    @pytest.mark.parametrize(
        "status, expected",
        [(401, OracleAuthFailed), (403, OracleAuthFailed), (429, OracleRateLimited), (500, UnexpectedFailure), (None, UnexpectedFailure)],
    )
    def test_status_mapping(self, status, expected):
        assert isinstance(oracle.error_for_status(status, "boom"), expected)


class TestAnthropicOracle:
    def test_sends_system_and_ordered_blocks(self):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(type="text", text='{"overallScore": 50}')],
            stop_reason="end_turn",
        )
        reply = oracle.AnthropicOracle(_config(), client=client).complete(_prompt(), timeout=12.5)

        assert reply == '{"overallScore": 50}'
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 2048
        assert kwargs["system"] == "You are AdScore."
        assert kwargs["timeout"] == 12.5
        content = kwargs["messages"][0]["content"]
        assert content[0]["type"] == "image"
        assert content[0]["source"] == {"type": "base64", "media_type": "image/jpeg", "data": "anBlZw=="}
        assert content[1] == {"type": "text", "text": "Score this."}

    def test_client_is_created_without_retries(self, monkeypatch):
        created = {}

        def fake_client(**kwargs):
            created.update(kwargs)
            return MagicMock()

        monkeypatch.setattr(oracle.anthropic, "Anthropic", fake_client)
        _ = oracle.AnthropicOracle(_config()).client
        assert created == {"api_key": "sk-ant-test", "max_retries": 0}

    @pytest.mark.parametrize(
        "error_cls, status, expected",
        [
            (anthropic.AuthenticationError, 401, OracleAuthFailed),
            (anthropic.PermissionDeniedError, 403, OracleAuthFailed),
            (anthropic.RateLimitError, 429, OracleRateLimited),
            (anthropic.InternalServerError, 500, UnexpectedFailure),
        ],
    )
    def test_status_errors_are_typed(self, error_cls, status, expected):
        client = MagicMock()
        client.messages.create.side_effect = _status_error(error_cls, status)
        with pytest.raises(expected) as exc_info:
            oracle.AnthropicOracle(_config(), client=client).complete(_prompt(), timeout=10)
        assert isinstance(exc_info.value.cause, error_cls)

    def test_timeout_becomes_deadline_exceeded(self):
        client = MagicMock()
        client.messages.create.side_effect = anthropic.APITimeoutError(request=httpx.Request("POST", ANTHROPIC_URL))
        with pytest.raises(DeadlineExceeded):
            oracle.AnthropicOracle(_config(), client=client).complete(_prompt(), timeout=10)

    def test_empty_reply_is_unparseable(self):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(content=[], stop_reason="end_turn")
        with pytest.raises(OracleResponseUnparseable):
            oracle.AnthropicOracle(_config(), client=client).complete(_prompt(), timeout=10)


class TestGetReasoningOracle:
    def test_missing_key_returns_none(self):
        assert oracle.get_reasoning_oracle(_config(api_key=None)) is None

    def test_provider_selects_client(self):
        assert isinstance(oracle.get_reasoning_oracle(_config()), oracle.AnthropicOracle)
        assert isinstance(oracle.get_reasoning_oracle(_config(provider="google")), oracle.GeminiOracle)


class TestGeminiOracle:
    def test_returns_response_text(self):
        client = MagicMock()
        client.models.generate_content.return_value = SimpleNamespace(text='{"overallScore": 61}')
        reply = oracle.GeminiOracle(_config(provider="google"), client=client).complete(_prompt(), timeout=20)

        assert reply == '{"overallScore": 61}'
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert len(kwargs["contents"]) == 2
        assert kwargs["config"].system_instruction == "You are AdScore."

    def test_empty_reply_is_unparseable(self):
        client = MagicMock()
        client.models.generate_content.return_value = SimpleNamespace(text=None)
        with pytest.raises(OracleResponseUnparseable):
            oracle.GeminiOracle(_config(provider="google"), client=client).complete(_prompt(), timeout=20)
