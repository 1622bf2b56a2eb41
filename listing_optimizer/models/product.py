"""
Product models - facts extracted from a listing page.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


UNKNOWN_SELLER = "Unknown Seller"
UNKNOWN_LOCATION = "Unknown Location"


class SizeClass(str, Enum):
    """Canonical image size class."""
    THUMBNAIL = "thumbnail"
    MEDIUM = "medium"
    LARGE = "large"


class ImageRef(BaseModel):
    """A single listing image. Created once per extraction, never mutated."""
    model_config = ConfigDict(frozen=True)

    url: str
    alt_text: Optional[str] = None
    size_class: SizeClass = SizeClass.MEDIUM
    is_valid: bool = True


class ProductFacts(BaseModel):
    """
    Structured facts about a product listing.
    The extractor guarantees at least one image (a placeholder on failure).
    """
    title: str = ""
    description: str = ""
    price: float = Field(default=0.0, ge=0)
    condition: str = Field(default="Unknown", description="Free text, loosely classified")
    images: list[ImageRef] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    seller: str = UNKNOWN_SELLER
    location: str = UNKNOWN_LOCATION
    product_code: Optional[str] = Field(
        default=None,
        description="UPC/EAN-like code found on the page, if any"
    )

    def missing_fields(self) -> list[str]:
        """Required fields that are empty or invalid."""
        missing = []
        if not self.title.strip():
            missing.append("title")
        if not self.description.strip():
            missing.append("description")
        if self.price <= 0:
            missing.append("price")
        if not self.condition.strip():
            missing.append("condition")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()
