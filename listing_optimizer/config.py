"""
Configuration and environment handling for the listing optimizer.
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


class FetchConfig(BaseModel):
    """Page fetching configuration."""
    timeout: float = Field(default_factory=lambda: float(os.getenv("LISTING_FETCH_TIMEOUT", "30")))
    max_retries: int = Field(default=3)
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        )
    )
    marketplace_domain: str = Field(
        default_factory=lambda: os.getenv("LISTING_MARKETPLACE_DOMAIN", "ebay.com")
    )
    listing_path_marker: str = Field(default="/itm/", description="Path segment every listing URL contains")


class ExtractionConfig(BaseModel):
    """Markup extraction configuration."""
    placeholder_image_url: str = Field(
        default="https://via.placeholder.com/400x300/4A90E2/FFFFFF?text=Product+Image"
    )
    description_cap: int = Field(default=1000, description="Max length of stitched-together description")
    spec_key_cap: int = Field(default=50)
    spec_value_cap: int = Field(default=200)


class ResearchConfig(BaseModel):
    """Market research configuration."""
    max_comparables: int = Field(default=10, description="Candidate comparables generated per run")
    similarity_threshold: float = Field(default=0.6, ge=0, le=1)
    price_adjustment: float = Field(default=0.3, description="Share of the gap to market average to close")
    max_confidence: float = Field(default=0.9, ge=0, le=1)
    seed: Optional[int] = Field(default_factory=lambda: _optional_int("LISTING_RESEARCH_SEED"))


class ContentConfig(BaseModel):
    """Content synthesis limits."""
    max_title_length: int = Field(default=80)
    max_keywords: int = Field(default=5)
    max_selling_points: int = Field(default=5)
    max_specifications: int = Field(default=8)


class Config(BaseModel):
    """Main configuration."""
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    research: ResearchConfig = Field(default_factory=ResearchConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
