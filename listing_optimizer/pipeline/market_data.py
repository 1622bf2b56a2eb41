"""
Market data providers - sources of comparable listings.

SimulatedMarketDataProvider fabricates plausible comparables from the
product itself. It is the default until a real marketplace data source is
plugged in behind MarketDataProvider.
"""
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Optional

import numpy as np

from ..models.product import ProductFacts
from ..models.research import ComparableListing
from ..text import ARTICLES, extract_words


logger = logging.getLogger(__name__)


PLATFORMS = ["eBay", "Amazon", "Mercari", "Facebook Marketplace"]
LISTING_CONDITIONS = ["New", "Used - Like New", "Used - Good", "Used - Fair"]

TITLE_VARIATIONS = [
    "Excellent", "Great", "Perfect", "Amazing", "Fantastic", "Premium", "Quality",
    "Authentic", "Genuine", "Original", "Rare", "Vintage", "Classic", "Modern",
]
TITLE_CONDITIONS = ["New", "Like New", "Mint", "Excellent", "Very Good", "Good"]


def extract_key_terms(title: str, limit: int = 5) -> list[str]:
    """Meaningful title terms (brands, models, descriptors)."""
    words = extract_words((title or "").lower())
    return [w for w in words if len(w) > 2 and w not in ARTICLES][:limit]


class MarketDataProvider(ABC):
    """Source of comparable listings for a product."""

    @abstractmethod
    def find_comparables(self, facts: ProductFacts) -> list[ComparableListing]:
        """Return comparable listings, sorted by price descending."""


class SimulatedMarketDataProvider(MarketDataProvider):
    """
    Synthesizes comparables around the product's own price.

    Up to max_listings candidates are drawn; each is kept only if its
    simulated similarity reaches the threshold. Kept candidates are priced
    at 70%-130% of the source price.
    The generator is shared, so concurrent calls are serialized.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        max_listings: int = 10,
        similarity_threshold: float = 0.6,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_listings = max_listings
        self.similarity_threshold = similarity_threshold
        self.clock = clock
        self._lock = threading.Lock()

    def find_comparables(self, facts: ProductFacts) -> list[ComparableListing]:
        key_terms = extract_key_terms(facts.title)
        comparables = []

        with self._lock:
            for _ in range(self.max_listings):
                similarity = self.rng.random()
                if similarity < self.similarity_threshold:
                    continue

                price_variation = 0.7 + self.rng.random() * 0.6
                comparables.append(ComparableListing(
                    title=self._similar_title(key_terms),
                    price=round(facts.price * price_variation, 2),
                    condition=str(self.rng.choice(LISTING_CONDITIONS)),
                    platform=str(self.rng.choice(PLATFORMS)),
                    sold_date=self._recent_date() if self.rng.random() > 0.3 else None,
                ))

        comparables.sort(key=lambda c: c.price, reverse=True)
        logger.debug(f"Synthesized {len(comparables)} comparables for {facts.title!r}")
        return comparables

    def _similar_title(self, key_terms: list[str]) -> str:
        variation = self.rng.choice(TITLE_VARIATIONS)
        condition = self.rng.choice(TITLE_CONDITIONS)
        terms = " ".join(key_terms[:3])
        return f"{variation} {terms} - {condition} Condition".replace("  ", " ")

    def _recent_date(self) -> datetime:
        days_ago = int(self.rng.integers(0, 90))
        return self.clock() - timedelta(days=days_ago)
