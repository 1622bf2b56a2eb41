"""
Listing optimizer - extract product facts from a marketplace listing,
research the market and produce optimized listing copy.
"""

from .errors import (
    ExtractionIncomplete,
    ListingOptimizerError,
    NetworkError,
    PipelineError,
    SynthesisError,
    ValidationError,
)
from .pipeline import ListingPipeline, MarketResearcher, run_code_pipeline, run_pipeline

__version__ = "0.1.0"

__all__ = [
    "ExtractionIncomplete",
    "ListingOptimizerError",
    "NetworkError",
    "PipelineError",
    "SynthesisError",
    "ValidationError",
    "ListingPipeline",
    "MarketResearcher",
    "run_pipeline",
    "run_code_pipeline",
]
