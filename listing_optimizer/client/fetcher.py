"""
Listing page fetcher with retry logic and URL validation.
"""
import logging
import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..config import get_config
from ..errors import NetworkError, ValidationError


logger = logging.getLogger(__name__)


class WebpageContent(BaseModel):
    """Raw page as returned by the fetcher."""
    url: str = ""
    html: str
    title: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.now)


def is_html_body(body: str, content_type: str = "") -> bool:
    """Trust a declared content type; otherwise the body must open with markup."""
    if content_type:
        return "html" in content_type.lower()
    return body.lstrip().startswith("<")


def sanitize_url(url: str) -> str:
    """Return the URL forced to https, or "" when it is not an http(s) URL."""
    if not url or not isinstance(url, str):
        return ""
    url = url.strip()
    if not re.match(r"^https?://", url, re.IGNORECASE):
        return ""
    return re.sub(r"^http://", "https://", url, flags=re.IGNORECASE)


def validate_listing_url(
    url: str,
    domain: Optional[str] = None,
    path_marker: Optional[str] = None,
) -> str:
    """
    Check that url is a marketplace listing URL and return it sanitized.

    Raises:
        ValidationError: if the URL is empty, not http(s), on another
            domain, or missing the listing path marker
    """
    config = get_config().fetch
    domain = domain or config.marketplace_domain
    path_marker = path_marker or config.listing_path_marker

    if not url or not isinstance(url, str):
        raise ValidationError("Invalid URL: URL must be a non-empty string")

    sanitized = sanitize_url(url)
    if not sanitized:
        raise ValidationError(f"Invalid URL: {url!r} is not an http(s) URL")

    host = (urlparse(sanitized).hostname or "").lower()
    if host != domain and not host.endswith("." + domain):
        raise ValidationError(f"Invalid listing URL: {url!r} is not on {domain}")

    if path_marker not in urlparse(sanitized).path:
        raise ValidationError(f"Invalid listing URL: {url!r} is not a listing page")

    return sanitized


class PageFetcher:
    """
    Fetches listing pages over HTTP.
    Connection-level failures are retried; everything surfaces as NetworkError.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        config = get_config().fetch
        self.session = session or requests.Session()
        self.timeout = timeout or config.timeout
        self.max_retries = max_retries or config.max_retries
        self.headers = {
            "User-Agent": config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        before_sleep=lambda retry_state: logger.warning(
            f"Retry attempt {retry_state.attempt_number}"
        ),
        reraise=True,
    )
    def _get(self, url: str) -> requests.Response:
        """Fetch a single page."""
        return self.session.get(url, headers=self.headers, timeout=self.timeout)

    def fetch(self, url: str) -> WebpageContent:
        """
        Fetch a listing page.

        Args:
            url: Listing URL, validated against the marketplace domain

        Returns:
            WebpageContent with the raw HTML, page title and meta description

        Raises:
            ValidationError: if the URL is not a listing URL
            NetworkError: on timeout, DNS/connection failure, rate limiting,
                HTTP errors or a non-HTML body
        """
        sanitized = validate_listing_url(url)
        logger.info(f"Fetching URL: {sanitized}")

        get = self._get.retry_with(stop=stop_after_attempt(self.max_retries))
        try:
            response = get(self, sanitized)
        except requests.Timeout as e:
            logger.error(f"Timeout fetching {sanitized}: {e}")
            raise NetworkError("Request timeout: the server took too long to respond") from e
        except requests.ConnectionError as e:
            logger.error(f"Connection failed for {sanitized}: {e}")
            raise NetworkError("Network error: unable to reach the server") from e
        except requests.RequestException as e:
            logger.error(f"Request failed for {sanitized}: {e}")
            raise NetworkError(f"Failed to fetch URL: {e}") from e

        if response.status_code == 429:
            raise NetworkError("Rate limited: please try again later", status_code=429)
        if response.status_code >= 400:
            raise NetworkError(
                f"Failed to fetch URL: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        html = response.text
        content_type = response.headers.get("Content-Type", "")
        if not html or not isinstance(html, str) or not is_html_body(html, content_type):
            raise NetworkError("Invalid response: expected HTML content", status_code=response.status_code)

        soup = BeautifulSoup(html, "html.parser")
        title = soup.title.get_text(strip=True) if soup.title else ""

        metadata = {}
        description = soup.find("meta", attrs={"name": "description"})
        if description and description.get("content"):
            metadata["description"] = description["content"]

        logger.info(f"Fetched {len(html)} characters from {sanitized}")
        return WebpageContent(url=sanitized, html=html, title=title, metadata=metadata)
