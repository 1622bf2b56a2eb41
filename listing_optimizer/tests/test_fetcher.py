"""
Tests for page fetching and URL validation.
"""
from unittest.mock import MagicMock

import pytest
import requests

from listing_optimizer.client import PageFetcher, sanitize_url, validate_listing_url
from listing_optimizer.client.fetcher import is_html_body
from listing_optimizer.errors import NetworkError, ValidationError


LISTING_URL = "https://www.ebay.com/itm/123456"


def response(
    status_code: int = 200,
    text: str = "",
    content_type: str = "text/html; charset=utf-8",
) -> MagicMock:
    mock = MagicMock()
    mock.status_code = status_code
    mock.text = text
    mock.headers = {"Content-Type": content_type} if content_type else {}
    return mock


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


class TestUrlValidation:
    """Tests for URL sanitizing and listing URL checks."""

    def test_sanitize_forces_https(self):
        """Test http is upgraded and non-web URLs are dropped."""
        assert sanitize_url(" http://www.ebay.com/itm/1 ") == "https://www.ebay.com/itm/1"
        assert sanitize_url("javascript:alert(1)") == ""
        assert sanitize_url("") == ""

    def test_valid_listing_url(self):
        """Test listing URLs on the marketplace are accepted."""
        assert validate_listing_url("http://www.ebay.com/itm/123", domain="ebay.com") == \
            "https://www.ebay.com/itm/123"
        assert validate_listing_url("https://ebay.com/itm/123", domain="ebay.com") == \
            "https://ebay.com/itm/123"

    @pytest.mark.parametrize("url", [
        "",
        None,
        "www.ebay.com/itm/1",
        "https://ebay.com.evil.com/itm/1",
        "https://notebay.com/itm/1",
        "https://www.ebay.com/sch/widgets",
    ])
    def test_rejected(self, url):
        """Test URLs off the marketplace or outside listings are rejected."""
        with pytest.raises(ValidationError):
            validate_listing_url(url, domain="ebay.com")


class TestPageFetcher:
    """Tests for PageFetcher."""

    def test_success(self, session):
        """Test a fetched page carries its title and meta description."""
        html = (
            "<html><head><title>Widget Pro | eBay</title>"
            '<meta name="description" content="A great widget"></head>'
            "<body>Widget</body></html>"
        )
        session.get.return_value = response(200, html)

        page = PageFetcher(session=session).fetch(LISTING_URL)

        assert page.url == LISTING_URL
        assert page.html == html
        assert page.title == "Widget Pro | eBay"
        assert page.metadata == {"description": "A great widget"}
        assert session.get.call_args.kwargs["headers"]["User-Agent"]

    def test_rate_limited(self, session):
        """Test HTTP 429 maps to a rate-limit NetworkError."""
        session.get.return_value = response(429, "slow down")

        with pytest.raises(NetworkError) as exc_info:
            PageFetcher(session=session).fetch(LISTING_URL)

        assert exc_info.value.status_code == 429
        assert "Rate limited" in str(exc_info.value)

    def test_http_error(self, session):
        """Test other HTTP errors keep their status code."""
        session.get.return_value = response(503, "unavailable")

        with pytest.raises(NetworkError) as exc_info:
            PageFetcher(session=session).fetch(LISTING_URL)

        assert exc_info.value.status_code == 503

    def test_empty_body(self, session):
        """Test an empty body is rejected."""
        session.get.return_value = response(200, "")

        with pytest.raises(NetworkError):
            PageFetcher(session=session).fetch(LISTING_URL)

    def test_json_body_rejected(self, session):
        """Test a JSON response is not accepted as listing markup."""
        session.get.return_value = response(200, '{"error": "not html"}', "application/json")

        with pytest.raises(NetworkError) as exc_info:
            PageFetcher(session=session).fetch(LISTING_URL)

        assert "expected HTML content" in str(exc_info.value)
        assert exc_info.value.status_code == 200

    def test_undeclared_body_sniffed(self, session):
        """Test bodies without a content type must start with markup."""
        session.get.return_value = response(200, '{"error": "not html"}', "")
        with pytest.raises(NetworkError):
            PageFetcher(session=session).fetch(LISTING_URL)

        session.get.return_value = response(200, "  <html><body>ok</body></html>", "")
        assert PageFetcher(session=session).fetch(LISTING_URL).html.strip().startswith("<html>")

    @pytest.mark.parametrize("body,content_type,expected", [
        ("<html></html>", "text/html", True),
        ("<html></html>", "application/xhtml+xml", True),
        ("<html></html>", "application/json", False),
        ("<p>hi</p>", "", True),
        ("plain text", "", False),
    ])
    def test_is_html_body(self, body, content_type, expected):
        """Test content type and markup sniffing."""
        assert is_html_body(body, content_type) is expected

    def test_connection_error(self, session):
        """Test DNS and connection failures map to NetworkError."""
        session.get.side_effect = requests.ConnectionError("dns failure")

        with pytest.raises(NetworkError) as exc_info:
            PageFetcher(session=session, max_retries=1).fetch(LISTING_URL)

        assert "unable to reach the server" in str(exc_info.value)
        assert session.get.call_count == 1

    def test_timeout(self, session):
        """Test timeouts map to NetworkError."""
        session.get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(NetworkError) as exc_info:
            PageFetcher(session=session, max_retries=1).fetch(LISTING_URL)

        assert "Request timeout" in str(exc_info.value)

    def test_invalid_url_not_fetched(self, session):
        """Test an invalid URL never reaches the session."""
        with pytest.raises(ValidationError):
            PageFetcher(session=session).fetch("https://example.com/itm/1")

        session.get.assert_not_called()
