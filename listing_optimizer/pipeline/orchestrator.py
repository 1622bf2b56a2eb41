"""
Pipeline orchestrator - runs fetch, extract, research, synthesize, render.
"""
import logging
from typing import Any, Callable, Optional

from ..client.fetcher import PageFetcher, WebpageContent, validate_listing_url
from ..errors import NetworkError, PipelineError, ValidationError
from ..models.result import CodePipelineResult, PipelineResult
from ..text import normalize_product_code

from .content import ContentOptimizer
from .extractor import ProductExtractor
from .rendering import ListingRenderer
from .research import MarketResearcher


logger = logging.getLogger(__name__)


class ListingPipeline:
    """
    Sequences the pipeline stages strictly in order.

    A failed stage ends the run: NetworkError and ValidationError propagate
    unchanged, everything else is wrapped in PipelineError naming the stage.
    No retries and no partial results.
    """

    def __init__(
        self,
        fetch: Optional[Callable[[str], WebpageContent]] = None,
        extractor: Optional[ProductExtractor] = None,
        researcher: Optional[MarketResearcher] = None,
        optimizer: Optional[ContentOptimizer] = None,
        renderer: Optional[ListingRenderer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self._fetch = fetch
        self.extractor = extractor or ProductExtractor(logger=logger)
        self.researcher = researcher or MarketResearcher(logger=logger)
        self.optimizer = optimizer or ContentOptimizer(logger=logger)
        self.renderer = renderer or ListingRenderer(logger=logger)

    @property
    def fetch(self) -> Callable[[str], WebpageContent]:
        if self._fetch is None:
            self._fetch = PageFetcher().fetch
        return self._fetch

    def _run_stage(self, stage: str, func: Callable, *args: Any) -> Any:
        self.logger.info(f"Stage {stage}: starting")
        try:
            return func(*args)
        except (NetworkError, ValidationError) as e:
            self.logger.error(f"Stage {stage} failed: {e}")
            raise
        except Exception as e:
            self.logger.error(f"Stage {stage} failed: {e}")
            raise PipelineError(stage, str(e)) from e

    def run(self, url: str, template_path: Optional[str] = None) -> PipelineResult:
        """
        Optimize a marketplace listing.

        Args:
            url: Listing URL on the marketplace domain
            template_path: Accepted for compatibility; the built-in layout is always used

        Returns:
            PipelineResult with original facts, optimized content, HTML and research

        Raises:
            ValidationError: if the URL is not a listing URL (before any stage runs)
            NetworkError: if fetching fails
            PipelineError: if any later stage fails
        """
        url = validate_listing_url(url)
        self.logger.info(f"Starting pipeline for URL: {url}")

        page = self._run_stage("fetch", self.fetch, url)
        self.logger.info(f"Fetched content length: {len(page.html)}")

        facts = self._run_stage("extract", self.extractor.extract, page.html)
        self.logger.info(f"Extracted: {facts.title!r}, ${facts.price}")

        research = self._run_stage("research", self.researcher.research, facts)
        self.logger.info(f"Research: {len(research.comparable_listings)} comparables")

        content = self._run_stage("synthesize", self.optimizer.synthesize, facts, research)
        self.logger.info(f"Optimized title: {content.optimized_title}")

        html = self._run_stage("render", self.renderer.render, content, facts)

        self.logger.info("Pipeline completed successfully")
        return PipelineResult(
            original_details=facts,
            optimized_content=content,
            rendered_html=html,
            research_data=research,
        )

    def run_code(
        self,
        code: str,
        partial_facts: Optional[dict[str, Any]] = None,
    ) -> CodePipelineResult:
        """
        Optimize a product known only by its code. The extractor is never used.

        Raises:
            ValidationError: if the code or partial facts are invalid
            PipelineError: if research, synthesis or rendering fails
        """
        code = normalize_product_code(code)
        self.logger.info(f"Starting code pipeline for: {code}")

        research = self._run_stage("research", self.researcher.research_by_code, code, partial_facts)
        content = self._run_stage("synthesize", self.optimizer.synthesize, research.facts, research)
        html = self._run_stage("render", self.renderer.render, content, research.facts)

        self.logger.info(f"Code pipeline completed for: {code}")
        return CodePipelineResult(
            code=code,
            facts=research.facts,
            research=research,
            optimized_content=content,
            rendered_html=html,
        )


def run_pipeline(
    url: str,
    fetch: Optional[Callable[[str], WebpageContent]] = None,
    seed: Optional[int] = None,
) -> PipelineResult:
    """Run the URL-driven pipeline with default components."""
    pipeline = ListingPipeline(fetch=fetch, researcher=MarketResearcher(seed=seed))
    return pipeline.run(url)


def run_code_pipeline(
    code: str,
    partial_facts: Optional[dict[str, Any]] = None,
    seed: Optional[int] = None,
) -> CodePipelineResult:
    """Run the code-driven pipeline with default components."""
    pipeline = ListingPipeline(researcher=MarketResearcher(seed=seed))
    return pipeline.run_code(code, partial_facts)
