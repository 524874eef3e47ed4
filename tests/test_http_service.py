from unittest.mock import Mock

import pytest
import requests

from sitecrawl.exceptions import HttpFetchError
from sitecrawl.services.fetcher import HttpServiceFetcher
from sitecrawl.services.http_service import HttpService


def _response(status=200, text="<html></html>", url="https://example.com/final"):
    resp = Mock()
    resp.status_code = status
    resp.text = text
    resp.headers = {"Content-Type": "text/html; charset=utf-8"}
    resp.url = url
    return resp


def test_fetch_returns_status_text_content_type_and_final_url():
    client = Mock(return_value=_response())
    svc = HttpService("TestBot/1.0", http_client=client, timeout=5, accept_language="en")

    resp = svc.fetch("https://example.com")

    assert resp.status_code == 200
    assert resp.text == "<html></html>"
    assert resp.content_type == "text/html; charset=utf-8"
    assert resp.url == "https://example.com/final"
    _, kwargs = client.call_args
    assert kwargs["timeout"] == 5
    assert kwargs["headers"]["User-Agent"] == "TestBot/1.0"
    assert kwargs["headers"]["Accept-Language"] == "en"


def test_fetch_uses_per_call_user_agent():
    client = Mock(return_value=_response())
    svc = HttpService("Default", http_client=client)
    svc.fetch("https://example.com", user_agent="Rotated")
    assert client.call_args.kwargs["headers"]["User-Agent"] == "Rotated"


def test_error_status_is_returned_not_raised():
    client = Mock(return_value=_response(status=503))
    svc = HttpService("TestBot/1.0", http_client=client)
    assert svc.fetch("https://example.com").status_code == 503


def test_transport_error_wrapped():
    client = Mock(side_effect=requests.exceptions.ConnectionError("refused"))
    svc = HttpService("TestBot/1.0", http_client=client)
    with pytest.raises(HttpFetchError) as exc:
        svc.fetch("https://example.com")
    assert exc.value.url == "https://example.com"


def test_missing_final_url_falls_back_to_request_url():
    resp = _response()
    resp.url = None
    svc = HttpService("TestBot/1.0", http_client=Mock(return_value=resp))
    assert svc.fetch("https://example.com/x").url == "https://example.com/x"


def test_session_fetcher_lifecycle():
    session = Mock()
    session.get.return_value = _response()
    fetcher = HttpServiceFetcher(user_agent="ua", session_factory=lambda: session)

    with pytest.raises(RuntimeError, match="not open"):
        fetcher.fetch("https://example.com")

    with fetcher:
        assert fetcher.is_open
        assert fetcher.fetch("https://example.com", user_agent="other").status_code == 200
        assert session.get.call_args.kwargs["headers"]["User-Agent"] == "other"

    session.close.assert_called_once_with()
    assert not fetcher.is_open
