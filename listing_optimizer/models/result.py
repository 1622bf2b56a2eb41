"""
Pipeline result models.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .content import OptimizedContent
from .product import ProductFacts
from .research import CodeResearchResult, MarketIntelligence


class PipelineResult(BaseModel):
    """Final artifact of a URL-driven run. Immutable once returned."""
    model_config = ConfigDict(frozen=True)

    original_details: ProductFacts
    optimized_content: OptimizedContent
    rendered_html: str
    research_data: Optional[MarketIntelligence] = None
    completed_at: datetime = Field(default_factory=datetime.now)

    def to_minimal_export(self) -> dict[str, Any]:
        """Export a small JSON-serializable summary of the run."""
        summary: dict[str, Any] = {
            "exported_at": datetime.now().isoformat(),
            "original": {
                "title": self.original_details.title,
                "price": self.original_details.price,
                "condition": self.original_details.condition,
                "image_count": len(self.original_details.images),
            },
            "optimized": {
                "title": self.optimized_content.optimized_title,
                "suggested_price": self.optimized_content.suggested_price,
                "keywords": list(self.optimized_content.keywords),
                "selling_points": list(self.optimized_content.selling_points),
            },
        }
        if self.research_data:
            stats = self.research_data.price_stats
            summary["market"] = {
                "comparables": len(self.research_data.comparable_listings),
                "average_price": stats.average,
                "price_range": [stats.min_price, stats.max_price],
                "confidence": stats.confidence,
                "trend": self.research_data.current_trend.value,
            }
        return summary


class CodePipelineResult(BaseModel):
    """Result of a code-driven run; the extractor is never involved."""
    model_config = ConfigDict(frozen=True)

    code: str
    facts: ProductFacts
    research: CodeResearchResult
    optimized_content: OptimizedContent
    rendered_html: str
