"""
Optimized listing content.
"""
from pydantic import BaseModel, Field


class OptimizedContent(BaseModel):
    """Marketing copy synthesized from product facts and market research."""
    optimized_title: str = Field(max_length=80)
    optimized_description: str = Field(description="Sectioned plain text")
    suggested_price: float = Field(ge=0, description="Equals the recommended market price")
    keywords: list[str] = Field(default_factory=list, max_length=5)
    selling_points: list[str] = Field(default_factory=list, max_length=5)
