"""
Market research - comparables, price and keyword statistics, trends.
"""
import logging
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import numpy as np
from pydantic import ValidationError as PydanticValidationError

from ..config import ResearchConfig, get_config
from ..errors import SynthesisError, ValidationError
from ..models.product import ImageRef, ProductFacts, SizeClass, UNKNOWN_LOCATION
from ..models.research import (
    CodeResearchResult,
    ComparableListing,
    KeywordStats,
    MarketIntelligence,
    PriceStats,
    TrendDirection,
    TrendPoint,
)
from ..text import STOP_WORDS, extract_words, normalize_product_code
from .market_data import MarketDataProvider, SimulatedMarketDataProvider


logger = logging.getLogger(__name__)


# Newest first
TREND_PERIODS = ["Last 30 days", "Last 60 days", "Last 90 days", "Last 6 months"]

# Comparable count at which confidence stops growing linearly
CONFIDENCE_SATURATION = 10

PRODUCT_CATEGORIES = {
    "Electronics": "Device",
    "Clothing": "Apparel",
    "Home & Garden": "Item",
    "Sports": "Equipment",
    "Books": "Guide",
    "Toys": "Playset",
    "Automotive": "Part",
    "Health": "Product",
    "Beauty": "Care",
    "Food": "Food Item",
}
BRANDS = [
    "Premium", "Quality", "Pro", "Elite", "Classic", "Modern",
    "Standard", "Deluxe", "Professional", "Superior",
]

TITLE_PREFIXES = ["Premium", "Quality", "Professional", "Deluxe", "Authentic"]
TITLE_SUFFIXES = ["- Excellent Condition", "- New in Box", "- Free Shipping", "- Best Value"]
DESCRIPTION_ENHANCEMENTS = [
    "This premium quality product is perfect for both personal and professional use.",
    "Excellent condition with all original accessories and documentation included.",
    "Fast shipping and excellent customer service guaranteed.",
    "Limited time offer - don't miss out on this amazing deal.",
    "Backed by manufacturer warranty and our satisfaction guarantee.",
]
CODE_SELLING_POINTS = [
    "High-quality construction",
    "Excellent value for money",
    "Fast and reliable shipping",
    "Perfect gift option",
    "Limited stock available",
    "Manufacturer warranty included",
    "Customer satisfaction guaranteed",
    "Professional grade quality",
]
QUALITY_TERMS = ["premium", "quality", "professional", "deluxe", "authentic"]


class MarketResearcher:
    """
    Builds market intelligence for a product.

    Comparable search, keyword analysis and trend analysis are independent
    and run concurrently; price statistics are computed once comparables
    are in. All randomness flows from one SeedSequence, so a fixed seed
    reproduces the output regardless of thread scheduling.
    One instance may serve concurrent research() calls; each call draws
    its own child generators.
    """

    def __init__(
        self,
        provider: Optional[MarketDataProvider] = None,
        seed: Optional[int] = None,
        config: Optional[ResearchConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or get_config().research
        self.logger = logger or logging.getLogger(__name__)
        self._seed_lock = threading.Lock()
        self._seeds = np.random.SeedSequence(seed if seed is not None else self.config.seed)

        if provider is None:
            provider = SimulatedMarketDataProvider(
                rng=self._child_rng(),
                max_listings=self.config.max_comparables,
                similarity_threshold=self.config.similarity_threshold,
            )
        self.provider = provider

    def _child_rng(self) -> np.random.Generator:
        # SeedSequence.spawn mutates a child counter
        with self._seed_lock:
            child = self._seeds.spawn(1)[0]
        return np.random.default_rng(child)

    def research(self, facts: ProductFacts) -> MarketIntelligence:
        """
        Research the market for a product.

        Args:
            facts: Extracted product facts

        Returns:
            MarketIntelligence with comparables, price/keyword stats and trends

        Raises:
            SynthesisError: if any sub-analysis fails
        """
        self.logger.info(f"Conducting market research for: {facts.title}")
        keyword_rng = self._child_rng()
        trend_rng = self._child_rng()

        try:
            with ThreadPoolExecutor(max_workers=3) as pool:
                comparables_future = pool.submit(self.provider.find_comparables, facts)
                keywords_future = pool.submit(self.analyze_keywords, facts, keyword_rng)
                trends_future = pool.submit(self.analyze_trends, facts, trend_rng)

                comparables = comparables_future.result()
                keyword_stats = keywords_future.result()
                trends = trends_future.result()

            price_stats = self.analyze_pricing(comparables, facts.price)
            intel = MarketIntelligence(
                comparable_listings=comparables,
                price_stats=price_stats,
                keyword_stats=keyword_stats,
                trends=trends,
            )
        except Exception as e:
            self.logger.error(f"Market research failed for: {facts.title}: {e}")
            raise SynthesisError(facts.title, f"Market research failed: {e}") from e

        if not comparables:
            self.logger.warning(f"No comparables found for: {facts.title}")
        self.logger.info(
            f"Market research completed: {len(comparables)} comparables, "
            f"recommended price {price_stats.recommended_price}"
        )
        return intel

    def analyze_pricing(
        self,
        comparables: list[ComparableListing],
        original_price: float,
    ) -> PriceStats:
        """
        Price statistics over the comparables.

        With no comparables the original price is echoed back with a
        +/-20% range and a token confidence of 0.1.
        """
        if not comparables:
            return PriceStats(
                average=original_price,
                min_price=round(original_price * 0.8, 2),
                max_price=round(original_price * 1.2, 2),
                recommended_price=original_price,
                confidence=0.1,
                comparable_count=0,
            )

        prices = np.array([c.price for c in comparables])
        average = round(float(np.mean(prices)), 2)
        confidence = min(self.config.max_confidence, len(comparables) / CONFIDENCE_SATURATION)
        recommended = original_price + self.config.price_adjustment * (average - original_price)

        return PriceStats(
            average=average,
            min_price=round(float(np.min(prices)), 2),
            max_price=round(float(np.max(prices)), 2),
            recommended_price=round(recommended, 2),
            confidence=round(confidence, 2),
            comparable_count=len(comparables),
        )

    def analyze_keywords(
        self,
        facts: ProductFacts,
        rng: Optional[np.random.Generator] = None,
    ) -> KeywordStats:
        """Top keywords by frequency with an estimated search volume each."""
        rng = rng if rng is not None else self._child_rng()
        words = extract_words(facts.title.lower()) + extract_words(facts.description.lower())
        meaningful = [w for w in words if len(w) > 2 and w not in STOP_WORDS]

        frequency = Counter(meaningful)
        top_keywords = [word for word, _ in frequency.most_common(10)]

        estimated_volume = {}
        for keyword in top_keywords:
            base_volume = int(rng.integers(100, 10100))
            length_bonus = len(keyword) * 100
            frequency_bonus = frequency[keyword] * 500
            estimated_volume[keyword] = base_volume + length_bonus + frequency_bonus

        return KeywordStats(
            top_keywords=top_keywords,
            frequency=dict(frequency),
            estimated_volume=estimated_volume,
        )

    def analyze_trends(
        self,
        facts: ProductFacts,
        rng: Optional[np.random.Generator] = None,
    ) -> list[TrendPoint]:
        """
        Random-walk price trend over fixed periods, newest first.
        Each step moves at most 10%; moves under 5% count as stable.
        """
        rng = rng if rng is not None else self._child_rng()
        trends = []
        previous_price = facts.price

        for period in reversed(TREND_PERIODS):
            price_change = (rng.random() - 0.5) * 0.2
            current_price = previous_price * (1 + price_change)
            sales_volume = int(rng.integers(50, 550))

            delta = (current_price - previous_price) / previous_price if previous_price else 0.0
            if abs(delta) < 0.05:
                direction = TrendDirection.STABLE
            elif delta > 0:
                direction = TrendDirection.INCREASING
            else:
                direction = TrendDirection.DECREASING

            trends.append(TrendPoint(
                period=period,
                average_price=round(current_price, 2),
                sales_volume=sales_volume,
                direction=direction,
            ))
            previous_price = current_price

        trends.reverse()
        return trends

    def research_by_code(
        self,
        code: str,
        partial_facts: Optional[dict[str, Any]] = None,
    ) -> CodeResearchResult:
        """
        Research a product known only by its code.

        Placeholder facts are synthesized from the code, overridden by any
        partial facts the caller has, and researched like extracted facts.

        Raises:
            ValidationError: if the code is not UPC/EAN-like
            SynthesisError: if research fails
        """
        code = normalize_product_code(code)
        self.logger.info(f"Conducting market research for code: {code}")

        rng = self._child_rng()
        facts = self.placeholder_facts(code, rng)
        if partial_facts:
            try:
                facts = ProductFacts(**{**facts.model_dump(), **partial_facts})
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid partial facts for {code}: {e}") from e

        intel = self.research(facts)

        try:
            stats = intel.price_stats
            result = CodeResearchResult(
                **intel.model_dump(),
                code=code,
                facts=facts,
                suggested_title=self._suggest_title(facts.title, rng),
                suggested_description=self._suggest_description(facts.description, rng),
                suggested_price=stats.recommended_price,
                keywords=list(intel.keyword_stats.top_keywords),
                selling_points=self._suggest_selling_points(facts.title, rng),
                confidence=stats.confidence,
                price_range=stats.price_range,
                trend=intel.current_trend,
                average_price=stats.average,
            )
        except Exception as e:
            self.logger.error(f"Code research failed for: {code}: {e}")
            raise SynthesisError(facts.title, f"Code research failed: {e}") from e

        self.logger.info(f"Code research completed for: {code}")
        return result

    def placeholder_facts(self, code: str, rng: np.random.Generator) -> ProductFacts:
        """Plausible stand-in facts keyed by category and brand word lists."""
        category = str(rng.choice(list(PRODUCT_CATEGORIES)))
        brand = str(rng.choice(BRANDS))
        base_price = int(rng.integers(10, 210))
        price_variation = 0.8 + rng.random() * 0.4

        return ProductFacts(
            title=f"{brand} {category} {PRODUCT_CATEGORIES[category]}",
            description=(
                f"High-quality {category.lower()} product from {brand}. "
                "Perfect for everyday use."
            ),
            price=round(base_price * price_variation, 2),
            condition="New",
            images=[ImageRef(
                url=f"https://example.com/images/{code}_1.jpg",
                alt_text=f"Product {code}",
                size_class=SizeClass.MEDIUM,
            )],
            specifications={
                "Brand": brand,
                "Category": category,
                "UPC": code,
                "Model": f"MDL-{int(rng.integers(0, 10000))}",
            },
            seller=f"{brand} Official",
            location=UNKNOWN_LOCATION,
            product_code=code,
        )

    def _suggest_title(self, title: str, rng: np.random.Generator) -> str:
        return f"{rng.choice(TITLE_PREFIXES)} {title} {rng.choice(TITLE_SUFFIXES)}"

    def _suggest_description(self, description: str, rng: np.random.Generator) -> str:
        return f"{description} {rng.choice(DESCRIPTION_ENHANCEMENTS)}".strip()

    def _suggest_selling_points(self, title: str, rng: np.random.Generator) -> list[str]:
        lowered = title.lower()
        if any(term in lowered for term in QUALITY_TERMS):
            return CODE_SELLING_POINTS[:5]
        picks = rng.choice(len(CODE_SELLING_POINTS), size=3, replace=False)
        return [CODE_SELLING_POINTS[i] for i in picks]
