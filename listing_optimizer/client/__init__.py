"""HTTP boundary for fetching listing pages."""

from .fetcher import PageFetcher, WebpageContent, sanitize_url, validate_listing_url

__all__ = [
    "PageFetcher",
    "WebpageContent",
    "sanitize_url",
    "validate_listing_url",
]
