"""
Pydantic models for the listing optimizer.
All data contracts are defined here for strict validation.
"""

from .product import (
    ImageRef,
    ProductFacts,
    SizeClass,
    UNKNOWN_LOCATION,
    UNKNOWN_SELLER,
)
from .research import (
    CodeResearchResult,
    ComparableListing,
    KeywordStats,
    MarketIntelligence,
    PriceStats,
    TrendDirection,
    TrendPoint,
)
from .content import OptimizedContent
from .result import CodePipelineResult, PipelineResult

__all__ = [
    # Product
    "ImageRef",
    "ProductFacts",
    "SizeClass",
    "UNKNOWN_LOCATION",
    "UNKNOWN_SELLER",
    # Research
    "CodeResearchResult",
    "ComparableListing",
    "KeywordStats",
    "MarketIntelligence",
    "PriceStats",
    "TrendDirection",
    "TrendPoint",
    # Content
    "OptimizedContent",
    # Results
    "CodePipelineResult",
    "PipelineResult",
]
