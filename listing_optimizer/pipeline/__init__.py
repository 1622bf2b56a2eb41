"""Pipeline stages for listing optimization."""

from .extractor import ProductExtractor
from .market_data import MarketDataProvider, SimulatedMarketDataProvider
from .research import MarketResearcher
from .content import ContentOptimizer
from .rendering import ListingRenderer
from .orchestrator import ListingPipeline, run_code_pipeline, run_pipeline

__all__ = [
    "ProductExtractor",
    "MarketDataProvider",
    "SimulatedMarketDataProvider",
    "MarketResearcher",
    "ContentOptimizer",
    "ListingRenderer",
    "ListingPipeline",
    "run_pipeline",
    "run_code_pipeline",
]
