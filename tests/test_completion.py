from types import SimpleNamespace

import anthropic
import httpx
import pytest

from quizforge.content.completion import CompletionClient, CompletionError

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class FakeMessages:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _response(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


def _status_error(cls, status):
    return cls("failed", response=httpx.Response(status, request=REQUEST), body=None)


def _client(*outcomes, max_retries=3):
    messages = FakeMessages(outcomes)
    client = CompletionClient(
        client=SimpleNamespace(messages=messages),
        model="test-model",
        max_tokens=123,
        max_retries=max_retries,
        retry_delay=0,
    )
    return client, messages


def test_complete_joins_text_blocks():
    client, messages = _client(_response("Question: ", "What is 2 + 2?"))
    assert client.complete("prompt") == "Question: What is 2 + 2?"
    [call] = messages.calls
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 123
    assert call["messages"] == [{"role": "user", "content": "prompt"}]


def test_transient_errors_are_retried():
    client, messages = _client(
        anthropic.APIConnectionError(request=REQUEST),
        _status_error(anthropic.InternalServerError, 500),
        _response("ok"),
    )
    assert client.complete("prompt") == "ok"
    assert len(messages.calls) == 3


def test_timeouts_exhaust_into_completion_error():
    client, messages = _client(*[anthropic.APITimeoutError(request=REQUEST)] * 2, max_retries=2)
    with pytest.raises(CompletionError):
        client.complete("prompt")
    assert len(messages.calls) == 2


def test_client_errors_are_not_retried():
    client, messages = _client(_status_error(anthropic.BadRequestError, 400), _response("unused"))
    with pytest.raises(CompletionError):
        client.complete("prompt")
    assert len(messages.calls) == 1


def test_rate_limits_back_off_and_retry():
    client, messages = _client(_status_error(anthropic.RateLimitError, 429), _response("ok"))
    assert client.complete("prompt") == "ok"
    assert len(messages.calls) == 2
