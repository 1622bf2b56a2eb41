"""
Shared fixtures for listing optimizer tests.
"""
import pytest

from listing_optimizer.config import ContentConfig, ResearchConfig
from listing_optimizer.models import ComparableListing, ImageRef, ProductFacts, SizeClass
from listing_optimizer.pipeline.market_data import MarketDataProvider


class ZeroProvider(MarketDataProvider):
    """Provider that never finds comparables."""

    def find_comparables(self, facts):
        return []


class FixedProvider(MarketDataProvider):
    """Provider returning comparables at fixed prices."""

    def __init__(self, prices):
        self.prices = prices

    def find_comparables(self, facts):
        listings = [
            ComparableListing(title=f"Comparable {i}", price=p, condition="Used", platform="eBay")
            for i, p in enumerate(self.prices)
        ]
        return sorted(listings, key=lambda c: c.price, reverse=True)


@pytest.fixture
def research_config() -> ResearchConfig:
    return ResearchConfig(seed=None)


@pytest.fixture
def content_config() -> ContentConfig:
    return ContentConfig()


@pytest.fixture
def widget_facts() -> ProductFacts:
    return ProductFacts(
        title="Widget Pro 3000",
        description="A professional widget with a durable body.",
        price=100.0,
        condition="Brand New",
        images=[ImageRef(url="https://i.ebayimg.com/images/g/a/s-l1600.jpg", size_class=SizeClass.LARGE)],
        specifications={"Brand": "Acme", "Color": "Black"},
        seller="widget_seller",
        location="Austin, Texas",
    )


@pytest.fixture
def zero_provider() -> MarketDataProvider:
    return ZeroProvider()


@pytest.fixture
def fixed_provider():
    """Factory for providers with fixed comparable prices."""
    return FixedProvider
