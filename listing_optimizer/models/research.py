"""
Market research models - comparables, price and keyword statistics, trends.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .product import ProductFacts


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class ComparableListing(BaseModel):
    """A listing used as a market reference point for pricing."""
    title: str
    price: float = Field(ge=0)
    condition: str
    platform: str
    sold_date: Optional[datetime] = None


class PriceStats(BaseModel):
    """Price statistics over the comparable set."""
    average: float
    min_price: float
    max_price: float
    recommended_price: float
    confidence: float = Field(ge=0, le=1, description="Weight to give the recommendation")
    comparable_count: int = Field(default=0, ge=0)

    @property
    def price_range(self) -> tuple[float, float]:
        return (self.min_price, self.max_price)


class KeywordStats(BaseModel):
    """Keyword frequency and estimated search volume."""
    top_keywords: list[str] = Field(default_factory=list, max_length=10)
    frequency: dict[str, int] = Field(default_factory=dict)
    estimated_volume: dict[str, int] = Field(default_factory=dict)


class TrendPoint(BaseModel):
    """Average price and sales volume over one period."""
    period: str
    average_price: float
    sales_volume: int
    direction: TrendDirection


class MarketIntelligence(BaseModel):
    """
    Combined market research for one product.
    Trends are ordered most recent first.
    """
    comparable_listings: list[ComparableListing] = Field(default_factory=list)
    price_stats: PriceStats
    keyword_stats: KeywordStats = Field(default_factory=KeywordStats)
    trends: list[TrendPoint] = Field(default_factory=list)

    @property
    def current_trend(self) -> TrendDirection:
        """Direction of the most recent period, stable when unknown."""
        if not self.trends:
            return TrendDirection.STABLE
        return self.trends[0].direction


class CodeResearchResult(MarketIntelligence):
    """
    Research keyed by a bare product code, with convenience fields for
    callers that never had full product facts.
    """
    code: str
    facts: ProductFacts
    suggested_title: str
    suggested_description: str
    suggested_price: float
    keywords: list[str] = Field(default_factory=list)
    selling_points: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1)
    price_range: tuple[float, float]
    trend: TrendDirection = TrendDirection.STABLE
    average_price: float
