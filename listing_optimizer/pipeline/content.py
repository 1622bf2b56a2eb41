"""
Content optimizer - marketing copy from product facts and market research.
"""
import logging
import re
from typing import Optional

from ..config import ContentConfig, get_config
from ..errors import SynthesisError
from ..models.content import OptimizedContent
from ..models.product import ProductFacts
from ..models.research import MarketIntelligence, PriceStats
from ..text import STOP_WORDS, contains_word, extract_words, strip_boilerplate


logger = logging.getLogger(__name__)


SECTION_RULE = "─" * 41

CONDITION_EXPLANATIONS = {
    "brand new": "This item is brand new in original packaging.",
    "new": "This item is new and unused.",
    "like new": "This item is in like new condition with minimal signs of use.",
    "very good": "This item is in very good condition with normal signs of use.",
    "good": "This item is in good condition with visible signs of use.",
    "used": "This item is used and shows signs of normal wear.",
    "refurbished": "This item has been professionally refurbished and tested.",
    "open box": "This item is an open box return in excellent condition.",
    "for parts": "This item is sold for parts or repair and may not be fully functional.",
}

CONDITION_SELLING_POINTS = {
    "brand new": ["Factory sealed in original packaging", "Full manufacturer warranty included"],
    "new": ["Factory sealed in original packaging", "Full manufacturer warranty included"],
    "like new": ["Excellent condition - barely used", "No visible signs of wear"],
    "refurbished": ["Professionally tested and certified", "Comes with 90-day warranty"],
}

VALUE_SELLING_POINTS = [
    "Great value - below market average",
    "Save money without compromising quality",
]

GENERIC_SELLING_POINTS = [
    "Fast and secure shipping",
    "Excellent customer service",
    "Quality guaranteed",
    "Hassle-free returns",
    "Authentic product",
]

CALL_TO_ACTION = (
    "🛒 READY TO BUY?\n"
    f"{SECTION_RULE}\n"
    "Don't miss out on this amazing deal! Add this item to your cart now and secure yours today.\n"
    "Fast shipping and excellent customer service guaranteed!\n\n"
    "📞 Questions? Feel free to message us with any inquiries about this product."
)


def select_specifications(specifications: dict[str, str], limit: int = 8) -> list[tuple[str, str]]:
    """Listing-worthy specifics: no description/title echoes, at most limit entries."""
    selected = []
    for key, value in specifications.items():
        if not key.strip() or not value.strip():
            continue
        text = f"{key} {value}".lower()
        if "description" in text or "title" in text:
            continue
        selected.append((key, value))
    return selected[:limit]


def normalize_whitespace(text: str) -> str:
    """Collapse runs of spaces within lines and runs of blank lines."""
    lines = [re.sub(r"[ \t\f\v]+", " ", line).strip() for line in text.splitlines()]
    collapsed = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", collapsed).strip()


class ContentOptimizer:
    """
    Synthesizes optimized title, description and selling points
    under marketplace length limits.
    """

    def __init__(
        self,
        config: Optional[ContentConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or get_config().content
        self.logger = logger or logging.getLogger(__name__)

    def synthesize(self, facts: ProductFacts, intel: MarketIntelligence) -> OptimizedContent:
        """
        Build optimized content for a product.

        Args:
            facts: Extracted product facts
            intel: Market research for the product

        Returns:
            OptimizedContent; suggested price is the recommended market price

        Raises:
            SynthesisError: if any part of the synthesis fails
        """
        self.logger.info(f"Optimizing content for: {facts.title}")

        try:
            keywords = intel.keyword_stats.top_keywords[: self.config.max_keywords]
            selling_points = self.generate_selling_points(facts, intel.price_stats)

            content = OptimizedContent(
                optimized_title=self.optimize_title(facts.title, keywords),
                optimized_description=self.optimize_description(facts, intel, selling_points),
                suggested_price=intel.price_stats.recommended_price,
                keywords=keywords,
                selling_points=selling_points,
            )
        except Exception as e:
            self.logger.error(f"Content optimization failed for: {facts.title}: {e}")
            raise SynthesisError(facts.title, f"Content optimization failed: {e}") from e

        self.logger.info(f"Content optimization completed: {content.optimized_title}")
        return content

    def optimize_title(self, original_title: str, keywords: list[str]) -> str:
        """Prepend up to two missing keywords, then enforce the length limit."""
        title = strip_boilerplate(original_title)

        missing = [k for k in keywords if not contains_word(title, k)]
        to_add = missing[:2]
        if to_add:
            title = f"{' '.join(to_add)} {title}".strip()

        limit = self.config.max_title_length
        if len(title) > limit:
            title = title[: limit - 3] + "..."
        return title

    def optimize_description(
        self,
        facts: ProductFacts,
        intel: MarketIntelligence,
        selling_points: list[str],
    ) -> str:
        sections = [facts.description or ""]

        if selling_points:
            lines = [f"{i}. {point}" for i, point in enumerate(selling_points, start=1)]
            sections.append(self._section("✨ KEY FEATURES & BENEFITS:", lines))

        specs = select_specifications(facts.specifications, self.config.max_specifications)
        if specs:
            sections.append(self._section("📋 PRODUCT SPECIFICATIONS:", [f"• {k}: {v}" for k, v in specs]))

        condition_text = self._condition_text(facts.condition)
        if condition_text:
            sections.append(self._section("🏷️ CONDITION:", [condition_text]))

        sections.append(self._pricing_section(facts.price, intel.price_stats))
        sections.append(CALL_TO_ACTION)

        return normalize_whitespace("\n\n".join(sections))

    def generate_selling_points(self, facts: ProductFacts, price_stats: PriceStats) -> list[str]:
        """
        Title-derived points, then condition and value points, padded from
        a generic pool. No duplicates; capped at the configured maximum.
        """
        points: list[str] = []

        def add(point: str) -> None:
            if point not in points:
                points.append(point)

        important = []
        for word in extract_words(facts.title.lower()):
            if len(word) > 3 and word not in STOP_WORDS and word not in important:
                important.append(word)
        for word in important[:3]:
            add(f"Premium {word.capitalize()} quality")

        for point in CONDITION_SELLING_POINTS.get(facts.condition.strip().lower(), []):
            add(point)

        if facts.price < price_stats.average:
            for point in VALUE_SELLING_POINTS:
                add(point)

        for point in GENERIC_SELLING_POINTS:
            if len(points) >= self.config.max_selling_points:
                break
            add(point)

        return points[: self.config.max_selling_points]

    def _condition_text(self, condition: str) -> str:
        key = (condition or "").strip().lower()
        if not key or key == "unknown":
            return ""
        return CONDITION_EXPLANATIONS.get(key, f"Condition: {condition}")

    def _pricing_section(self, original_price: float, stats: PriceStats) -> str:
        lines = [
            f"• Your Price: ${original_price:.2f}",
            f"• Market Average: ${stats.average:.2f}",
            f"• Market Range: ${stats.min_price:.2f} - ${stats.max_price:.2f}",
            f"• Recommended Price: ${stats.recommended_price:.2f}",
            f"• Market Confidence: {round(stats.confidence * 100)}%",
            "",
        ]

        if stats.recommended_price > original_price:
            difference = stats.recommended_price - original_price
            lines.append(
                f"💡 Opportunity: You could potentially increase your price by "
                f"${difference:.2f} to match market rates."
            )
        elif stats.recommended_price < original_price:
            difference = original_price - stats.recommended_price
            lines.append(
                f"⚠️ Consideration: Your price is ${difference:.2f} above the "
                "recommended market rate."
            )
        else:
            lines.append("✅ Your pricing is well-aligned with the market.")

        return self._section("💰 PRICING ANALYSIS:", lines)

    @staticmethod
    def _section(heading: str, lines: list[str]) -> str:
        return "\n".join([heading, SECTION_RULE, *lines])
