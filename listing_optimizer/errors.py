"""
Error taxonomy for the listing optimizer.
"""
from typing import Optional


class ListingOptimizerError(Exception):
    """Base class for all optimizer errors."""


class ValidationError(ListingOptimizerError, ValueError):
    """Malformed or ineligible input URL or product code."""


class NetworkError(ListingOptimizerError):
    """Failure at the fetch boundary: timeout, DNS, rate limit."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ExtractionIncomplete(ListingOptimizerError):
    """
    Raised inside the extractor when the primary pass leaves required fields
    empty. Always caught there; triggers the fallback pass.
    """

    def __init__(self, missing_fields: list[str]):
        super().__init__(f"Missing fields: {', '.join(missing_fields)}")
        self.missing_fields = missing_fields


class SynthesisError(ListingOptimizerError):
    """Failure while researching the market or synthesizing content."""

    def __init__(self, product_title: str, message: str):
        super().__init__(f"{message} (product: {product_title or 'untitled'})")
        self.product_title = product_title
        self.reason = message


class PipelineError(ListingOptimizerError):
    """Uniform wrapper for any failed pipeline stage."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"Pipeline failed at stage '{stage}': {message}")
        self.stage = stage
        self.reason = message
