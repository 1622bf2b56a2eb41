"""
Product extraction - turn raw listing markup into ProductFacts.

Every field has an ordered cascade of strategies from most specific
(structured attribute markers) to most generic (free-text patterns). After
the primary pass a validator checks the required fields; if any are
missing, a field-scoped fallback pass fills only those.
"""
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup
from bs4 import ParserRejectedMarkup

from ..config import ExtractionConfig, get_config
from ..errors import ExtractionIncomplete
from ..models.product import (
    ImageRef,
    ProductFacts,
    SizeClass,
    UNKNOWN_LOCATION,
    UNKNOWN_SELLER,
)
from ..text import strip_boilerplate
from .strategies import (
    CallableStrategy,
    DocumentPatternStrategy,
    DocumentPriceStrategy,
    FieldStrategy,
    MetaContentStrategy,
    PatternClassifierStrategy,
    SelectorTextStrategy,
    TitleTagStrategy,
    document_text,
    element_text,
    first_success,
    price_selector,
)


logger = logging.getLogger(__name__)


TITLE_SELECTORS = [
    'h1[data-testid="x-item-title-label"]',
    "h1#x-item-title-label",
    "h1.it-ttl",
    "h1.notranslate",
    ".x-item-title-label",
    'h1[id*="title"]',
    "h1",
    "h2",
    "h3",
]

DESCRIPTION_SELECTORS = [
    '[data-testid="ux-layout-section-evo"]',
    "#desc_div",
    ".u-flL.condText",
    '[data-testid="item-description"]',
    ".item-description",
    "#viTabs_0_is",
    ".section-title + div",
]

TEXT_BLOCK_SELECTOR = 'p, div[class*="description"], div[class*="detail"], .item-condition-text'

PRICE_SELECTORS = [
    '[data-testid="notranslate"]',
    ".x-price-primary",
    ".u-flL.notranslate",
    '[data-testid="x-price-primary"]',
    ".price-current",
    ".vi-price .notranslate",
    '[class*="price"]',
]

CONDITION_SELECTORS = [
    '[data-testid="u-flL condText"]',
    ".u-flL.condText",
    ".condition-text",
    '[class*="condition"]',
    ".item-condition",
]

CONDITION_VOCABULARY = [
    "new", "used", "refurbished", "open box", "for parts",
    "brand new", "like new", "very good", "good", "acceptable",
]

# Free text -> canonical condition label, most specific first
CONDITION_CLASSIFIERS = [
    (r"brand new|new with tags|new in box", "Brand New"),
    (r"like new|excellent condition", "Like New"),
    (r"very good|good condition", "Very Good"),
    (r"used|pre-owned|previously owned", "Used"),
    (r"refurbished|renewed", "Refurbished"),
    (r"open box|opened", "Open Box"),
    (r"for parts|not working|broken", "For Parts"),
    (r"excellent", "Excellent"),
    (r"good", "Good"),
    (r"\bnew\b", "New"),
]

# The fallback pass only trusts the unambiguous phrases
FALLBACK_CONDITION_CLASSIFIERS = CONDITION_CLASSIFIERS[:7]

UNKNOWN_CONDITION = "Unknown"
FALLBACK_CONDITION = "Used"

MAIN_IMAGE_SELECTORS = [
    'img[data-testid="ux-image-carousel-item"]',
    "img[data-zoom-src]",
    "#icImg",
    "#image",
    ".img img",
    ".image img",
    'img[src*="ebayimg.com"]',
    'img[src*="i.ebayimg.com"]',
]

IMAGE_URL_ATTRIBUTES = ["data-zoom-src", "data-src", "src"]

IMAGE_URL_PATTERNS = [
    re.compile(r"\.(jpg|jpeg|png|gif|webp)(\?|$)", re.IGNORECASE),
    re.compile(r"ebayimg\.com"),
    re.compile(r"thumbs\d*\.ebaystatic\.com"),
]

LARGE_SIZE_TOKENS = ["s-l1600", "s-l1200", "s-l800"]
MEDIUM_SIZE_TOKENS = ["s-l400", "s-l300", "s-l225"]
THUMBNAIL_SIZE_TOKENS = ["s-l64", "s-l96", "s-l140"]

SELLER_SELECTORS = [
    '[data-testid="x-sellercard-atf"] a',
    ".seller-persona a",
    ".mbg-nw",
    '[data-testid="seller-link"]',
    'a[href*="/usr/"]',
]

LOCATION_SELECTORS = [
    '[data-testid="ux-textspans"]',
    ".vi-acc-del-range",
    ".location-text",
    '[class*="location"]',
    ".ship-from",
]

LOCATION_PATTERNS = [
    r"(?i:ships from)\s+([A-Z][a-z]+(?: [A-Z][a-z]+)*,\s*(?:[A-Z]{2}\b|[A-Z][a-z]+))",
    r"(?i:located in)\s+([A-Z][a-z]+(?: [A-Z][a-z]+)*,\s*(?:[A-Z]{2}\b|[A-Z][a-z]+))",
    r"\b[A-Z][a-z]+,\s*[A-Z]{2}\b",
    r"\b[A-Z][a-z]+,\s*[A-Z][a-z]+\b",
]

LOCATION_BLOCK_PATTERN = re.compile(r"^[A-Z][a-z]+,\s*(?:[A-Z][a-z]+|[A-Z]{2})$")

PRODUCT_CODE_PATTERN = re.compile(r"\b\d{12,13}\b")


def is_valid_condition(condition: str) -> bool:
    lowered = condition.lower()
    return any(term in lowered for term in CONDITION_VOCABULARY)


def is_valid_location(location: str) -> bool:
    """Length bounds, not purely numeric, not a shipping notice."""
    return (
        2 < len(location) < 100
        and not location.isdigit()
        and "shipping" not in location.lower()
    )


def is_valid_image_url(url: str) -> bool:
    if not url or len(url) < 10:
        return False
    return any(pattern.search(url) for pattern in IMAGE_URL_PATTERNS)


def to_high_resolution(url: str) -> str:
    """Rewrite a recognized image host URL to its largest variant."""
    if "ebayimg.com" not in url:
        return url
    url = re.sub(r"/s-l\d+\.", "/s-l1600.", url)
    url = re.sub(r"/s-l\d+$", "/s-l1600.jpg", url)
    url = re.sub(r"\$_\w+\.", "$_57.", url)
    return url


def classify_image_size(url: str) -> SizeClass:
    """Explicit size tokens win over generic hints; medium by default."""
    if any(token in url for token in LARGE_SIZE_TOKENS):
        return SizeClass.LARGE
    if any(token in url for token in MEDIUM_SIZE_TOKENS):
        return SizeClass.MEDIUM
    if any(token in url for token in THUMBNAIL_SIZE_TOKENS):
        return SizeClass.THUMBNAIL

    lowered = url.lower()
    if "thumb" in lowered or "small" in lowered:
        return SizeClass.THUMBNAIL
    if "large" in lowered or "big" in lowered or "full" in lowered:
        return SizeClass.LARGE
    return SizeClass.MEDIUM


class ImageSelectorStrategy(FieldStrategy):
    """First valid image URL on the first element matching a selector."""

    def __init__(self, selector: str):
        self.selector = selector
        self.name = f"image:{selector}"

    def try_extract(self, soup: BeautifulSoup) -> Optional[ImageRef]:
        element = soup.select_one(self.selector)
        if element is None:
            return None
        for attr in IMAGE_URL_ATTRIBUTES:
            url = element.get(attr)
            if url and is_valid_image_url(url):
                high_res = to_high_resolution(url)
                return ImageRef(
                    url=high_res,
                    alt_text=element.get("alt") or None,
                    size_class=classify_image_size(high_res),
                    is_valid=True,
                )
        return None


def _clean_label(text: str) -> str:
    return text.replace(":", "").strip()


def label_value_pairs(soup: BeautifulSoup) -> dict[str, str]:
    """Modern item specifics: label/value pair lists."""
    specs = {}
    for container in soup.select('[data-testid="ux-labels-values"]'):
        for dt in container.find_all("dt"):
            dd = dt.find_next_sibling("dd")
            if dd is not None:
                specs[_clean_label(element_text(dt))] = element_text(dd)
        label = container.select_one(".ux-labels-values__labels")
        value = container.select_one(".ux-labels-values__values")
        if label is not None and value is not None:
            specs[_clean_label(element_text(label))] = element_text(value)
    return {k: v for k, v in specs.items() if k and v}


def attribute_table(soup: BeautifulSoup) -> dict[str, str]:
    """Classic two-column item specifics table (two pairs per row at most)."""
    specs = {}
    for row in soup.select(".itemAttr tr"):
        cells = row.find_all("td")
        for i in range(0, len(cells) - 1, 2):
            key = _clean_label(element_text(cells[i]))
            value = element_text(cells[i + 1])
            if key and value:
                specs[key] = value
    return specs


def definition_pairs(soup: BeautifulSoup) -> dict[str, str]:
    """Generic dt/dd and th/td pairs anywhere in the document."""
    specs = {}
    for element in soup.find_all(["dt", "th"]):
        value_element = element.find_next_sibling(["dd", "td"])
        if value_element is None:
            continue
        key = _clean_label(element_text(element))
        value = element_text(value_element)
        if key and value:
            specs[key] = value
    return specs


def merge_specifications(
    maps: list[dict[str, str]],
    key_cap: int = 50,
    value_cap: int = 200,
) -> dict[str, str]:
    """
    Fold candidate maps in order; the last writer for a label wins.
    Labels or values at or over the caps are discarded.
    """
    merged: dict[str, str] = {}
    for candidate in maps:
        for key, value in candidate.items():
            if len(key) < key_cap and len(value) < value_cap:
                merged[key] = value
    return merged


class ProductExtractor:
    """
    Extracts ProductFacts from listing markup.
    Never raises on malformed input; degrades toward defaults instead.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or get_config().extraction
        self.logger = logger or logging.getLogger(__name__)

        title_strategies: list[FieldStrategy] = [
            SelectorTextStrategy(s, clean=strip_boilerplate, validate=lambda t: len(t) > 5)
            for s in TITLE_SELECTORS
        ]
        title_strategies.append(TitleTagStrategy())

        self.cascades: dict[str, list[FieldStrategy]] = {
            "title": title_strategies,
            "price": [price_selector(s) for s in PRICE_SELECTORS] + [DocumentPriceStrategy()],
            "condition": [
                SelectorTextStrategy(s, validate=is_valid_condition)
                for s in CONDITION_SELECTORS
            ] + [PatternClassifierStrategy(CONDITION_CLASSIFIERS, name="condition-classifier")],
            "images": [ImageSelectorStrategy(s) for s in MAIN_IMAGE_SELECTORS],
            "seller": [
                SelectorTextStrategy(s, validate=lambda v: 0 < len(v) < 50)
                for s in SELLER_SELECTORS
            ],
            "location": [
                SelectorTextStrategy(s, validate=is_valid_location)
                for s in LOCATION_SELECTORS
            ] + [
                DocumentPatternStrategy(p, validate=is_valid_location)
                for p in LOCATION_PATTERNS
            ] + [CallableStrategy("location-block", self._location_block)],
        }

        self.fallback_cascades: dict[str, list[FieldStrategy]] = {
            "title": [
                MetaContentStrategy([("property", "og:title"), ("name", "title")], min_length=5),
                SelectorTextStrategy("h1, h2, h3", validate=lambda t: len(t) > 5),
                TitleTagStrategy(),
            ],
            "description": [
                MetaContentStrategy(
                    [("name", "description"), ("property", "og:description")],
                    min_length=20,
                ),
                CallableStrategy("longest-block", self._longest_block),
                MetaContentStrategy(
                    [("name", "description"), ("property", "og:description")],
                    min_length=0,
                ),
            ],
            "price": [DocumentPriceStrategy()],
            "condition": [
                PatternClassifierStrategy(FALLBACK_CONDITION_CLASSIFIERS, name="fallback-condition"),
            ],
        }

    def extract(self, raw_html: str) -> ProductFacts:
        """
        Extract product facts from raw listing HTML.

        Args:
            raw_html: Page markup, possibly malformed or empty

        Returns:
            ProductFacts with at least one image
        """
        soup = self._parse(raw_html)
        facts = self._primary_pass(soup)

        try:
            self._validate(facts)
        except ExtractionIncomplete as e:
            self.logger.warning(f"Primary extraction incomplete ({e}), running fallback pass")
            facts = self._fallback_pass(soup, facts, e.missing_fields)

        code = self._find_product_code(soup, facts)
        if code:
            facts = facts.model_copy(update={"product_code": code})

        self.logger.info(f"Extracted product: {facts.title!r} at {facts.price}")
        return facts

    def _parse(self, raw_html: str) -> BeautifulSoup:
        if not isinstance(raw_html, str):
            raw_html = ""
        try:
            return BeautifulSoup(raw_html, "html.parser")
        except ParserRejectedMarkup as e:
            self.logger.warning(f"Markup rejected by parser: {e}")
            return BeautifulSoup("", "html.parser")

    def _primary_pass(self, soup: BeautifulSoup) -> ProductFacts:
        def run(field: str):
            return first_success(self.cascades[field], soup, field, self.logger)

        return ProductFacts(
            title=run("title") or "",
            description=self._extract_description(soup),
            price=run("price") or 0.0,
            condition=run("condition") or UNKNOWN_CONDITION,
            images=self._extract_images(soup),
            specifications=merge_specifications(
                [label_value_pairs(soup), attribute_table(soup), definition_pairs(soup)],
                key_cap=self.config.spec_key_cap,
                value_cap=self.config.spec_value_cap,
            ),
            seller=run("seller") or UNKNOWN_SELLER,
            location=run("location") or UNKNOWN_LOCATION,
        )

    def _validate(self, facts: ProductFacts) -> None:
        missing = facts.missing_fields()
        if missing:
            raise ExtractionIncomplete(missing)

    def _fallback_pass(
        self,
        soup: BeautifulSoup,
        facts: ProductFacts,
        missing_fields: list[str],
    ) -> ProductFacts:
        """Re-extract only the fields that failed validation."""
        to_fix = list(missing_fields)
        if facts.condition == UNKNOWN_CONDITION and "condition" not in to_fix:
            to_fix.append("condition")

        update = {}
        for field in to_fix:
            value = first_success(self.fallback_cascades[field], soup, field, self.logger)
            if field == "condition":
                value = value or FALLBACK_CONDITION
            if value:
                update[field] = value
            else:
                self.logger.warning(f"Fallback extraction found no {field}")

        return facts.model_copy(update=update)

    def _extract_description(self, soup: BeautifulSoup) -> str:
        description = ""
        for selector in DESCRIPTION_SELECTORS:
            text = element_text(soup.select_one(selector))
            if len(text) > len(description):
                description = text

        if len(description) < 50:
            stitched = self._stitch_text_blocks(soup)
            if len(stitched) > len(description):
                description = stitched

        return description

    def _stitch_text_blocks(self, soup: BeautifulSoup) -> str:
        """Join distinct text blocks longer than 20 characters."""
        blocks: list[str] = []
        for element in soup.select(TEXT_BLOCK_SELECTOR):
            text = element_text(element)
            if len(text) > 20 and text not in blocks:
                blocks.append(text)
        return " ".join(blocks)[: self.config.description_cap]

    def _longest_block(self, soup: BeautifulSoup) -> Optional[str]:
        longest = ""
        for element in soup.find_all(["p", "div"]):
            text = element_text(element)
            if len(text) > 50 and len(text) > len(longest):
                longest = text
        return longest or None

    def _extract_images(self, soup: BeautifulSoup) -> list[ImageRef]:
        image = first_success(self.cascades["images"], soup, "images", self.logger)
        if image is not None:
            self.logger.info(f"Found main image: {image.url}")
            return [image]

        self.logger.warning("No main image found, using placeholder")
        return [ImageRef(
            url=self.config.placeholder_image_url,
            alt_text="Product Image",
            size_class=SizeClass.LARGE,
            is_valid=True,
        )]

    def _location_block(self, soup: BeautifulSoup) -> Optional[str]:
        for element in soup.find_all(["div", "span"]):
            text = element_text(element)
            if LOCATION_BLOCK_PATTERN.match(text) and is_valid_location(text):
                return text
        return None

    def _find_product_code(self, soup: BeautifulSoup, facts: ProductFacts) -> Optional[str]:
        """First 12-13 digit code in title, specifics, description, then body."""
        sources = [
            facts.title,
            " ".join(facts.specifications.values()),
            facts.description,
            document_text(soup),
        ]
        for source in sources:
            match = PRODUCT_CODE_PATTERN.search(source or "")
            if match:
                return match.group(0)
        return None
