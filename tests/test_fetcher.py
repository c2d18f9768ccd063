"""
Tests for the HTTP fetch layer
"""
import pytest
import requests
from unittest.mock import Mock, patch

from fetcher import PageFetcher, FetchError, lowercase_headers


def make_response(status_code=200, url="https://example.com/", headers=None, text="<html></html>"):
    response = Mock()
    response.status_code = status_code
    response.url = url
    response.headers = headers or {"Content-Type": "text/html", "Content-Encoding": "gzip"}
    response.text = text
    return response


class TestPageFetcher:
    """Tests for PageFetcher"""

    def test_fetcher_initialization(self):
        fetcher = PageFetcher(timeout=7)
        assert fetcher.timeout == 7
        assert fetcher.session is not None
        assert len(fetcher.user_agents) > 0

    @patch('requests.Session.get')
    def test_fetch_success(self, mock_get):
        mock_get.return_value = make_response(url="https://example.com/final")

        result = PageFetcher().fetch("http://example.com/")

        assert result.html == "<html></html>"
        assert result.meta.url == "http://example.com/"
        assert result.meta.final_url == "https://example.com/final"
        assert result.meta.status == 200
        assert result.meta.headers == {"content-type": "text/html", "content-encoding": "gzip"}
        assert result.meta.ttfb_millis >= 0
        assert mock_get.call_args.kwargs["allow_redirects"] is True

    @patch('requests.Session.get')
    def test_fetch_non_200_is_returned(self, mock_get):
        mock_get.return_value = make_response(status_code=404)

        result = PageFetcher().fetch("https://example.com/missing")
        assert result.meta.status == 404

    @patch('requests.Session.get')
    def test_get_text_raises_on_error_status(self, mock_get):
        mock_get.return_value = make_response(status_code=500)

        with pytest.raises(FetchError) as excinfo:
            PageFetcher().get_text("https://example.com/robots.txt")
        assert excinfo.value.reason == "HTTP 500"

    @pytest.mark.parametrize("exception,reason", [
        (requests.exceptions.Timeout(), "timeout"),
        (requests.exceptions.ConnectionError(), "connection error"),
    ])
    @patch('requests.Session.get')
    def test_fetch_network_errors(self, mock_get, exception, reason):
        mock_get.side_effect = exception

        with pytest.raises(FetchError) as excinfo:
            PageFetcher().fetch("https://example.com/")
        assert excinfo.value.reason == reason
        assert excinfo.value.url == "https://example.com/"

    def test_fetch_invalid_url(self):
        with pytest.raises(FetchError):
            PageFetcher().fetch("not a url")


def test_lowercase_headers():
    assert lowercase_headers({"Cache-Control": "no-cache", "X-Test": 1}) == {
        "cache-control": "no-cache", "x-test": "1"
    }
