from unittest.mock import Mock

import pytest
import requests

from asobot.errors import DependencyError
from asobot.line import messages
from asobot.line.client import LineAPIError, LineMessagingClient, LineRateLimitError, LineTimeoutError


def _client(status_code=200, side_effect=None, token="token-123"):
    session = Mock()
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = Mock(status_code=status_code, text="error body")
    return LineMessagingClient(token, api_url="https://line.test/push", timeout=3, session=session), session


def test_push_text_sends_bearer_request():
    client, session = _client()
    client.push_text("C123", "hello")

    session.post.assert_called_once_with(
        "https://line.test/push",
        json={'to': "C123", 'messages': [{'type': 'text', 'text': "hello"}]},
        headers={'Content-Type': 'application/json', 'Authorization': 'Bearer token-123'},
        timeout=3,
    )


def test_missing_token():
    client, session = _client(token="")
    with pytest.raises(LineAPIError):
        client.push_text("C123", "hello")
    session.post.assert_not_called()


def test_timeout():
    client, _ = _client(side_effect=requests.Timeout())
    with pytest.raises(LineTimeoutError):
        client.push_text("C123", "hello")


def test_connection_error():
    client, _ = _client(side_effect=requests.ConnectionError("refused"))
    with pytest.raises(LineAPIError, match="refused"):
        client.push_text("C123", "hello")


def test_rate_limited():
    client, _ = _client(status_code=429)
    with pytest.raises(LineRateLimitError) as excinfo:
        client.push_text("C123", "hello")
    assert excinfo.value.api_status_code == 429


def test_api_error_is_a_dependency_error():
    client, _ = _client(status_code=400)
    with pytest.raises(DependencyError) as excinfo:
        client.push_text("C123", "hello")
    assert excinfo.value.api_status_code == 400
    assert excinfo.value.status_code == 502


class TestMessages:
    def test_reminder_wording(self):
        assert "closes tomorrow" in messages.reminder("Ski", 1, 'schedule', "u")
        text = messages.reminder("Ski", 3, 'confirm', "u")
        assert "attendance check" in text and "closes in 3 days" in text

    def test_suggestion_lists_every_wish(self):
        text = messages.suggestion([("Beach", 4), ("Zoo", 2)], "https://liff.line.me/x/wishes")
        assert '・"Beach" 4 interested' in text
        assert '・"Zoo" 2 interested' in text
        assert text.startswith(messages.HEADER)
        assert text.endswith("https://liff.line.me/x/wishes")
