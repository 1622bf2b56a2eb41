"""
Extraction strategies - one ordered cascade per product field.

Each strategy looks at the parsed document and either returns a validated
value or None. Cascades are evaluated with first_success(); the first
strategy producing a value wins and later ones are not attempted.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from bs4 import BeautifulSoup

from ..text import collapse_whitespace, find_prices, parse_price


logger = logging.getLogger(__name__)


def element_text(element: Any) -> str:
    """Visible text of an element with whitespace collapsed."""
    if element is None:
        return ""
    return collapse_whitespace(element.get_text(" ", strip=True))


def document_text(soup: BeautifulSoup) -> str:
    """Visible text of the whole document body."""
    root = soup.body or soup
    return collapse_whitespace(root.get_text(" ", strip=True))


class FieldStrategy(ABC):
    """Base class for a single way of extracting one field."""

    name: str = "strategy"

    @abstractmethod
    def try_extract(self, soup: BeautifulSoup) -> Optional[Any]:
        """Return a validated value, or None when this strategy finds nothing."""


class SelectorTextStrategy(FieldStrategy):
    """Text of the first element matching a CSS selector, cleaned and validated."""

    def __init__(
        self,
        selector: str,
        clean: Callable[[str], Any] = collapse_whitespace,
        validate: Callable[[Any], bool] = bool,
    ):
        self.selector = selector
        self.clean = clean
        self.validate = validate
        self.name = f"selector:{selector}"

    def try_extract(self, soup: BeautifulSoup) -> Optional[Any]:
        element = soup.select_one(self.selector)
        if element is None:
            return None
        value = self.clean(element_text(element))
        return value if self.validate(value) else None


class MetaContentStrategy(FieldStrategy):
    """Content of the first matching <meta> tag."""

    def __init__(self, attributes: list[tuple[str, str]], min_length: int = 1):
        self.attributes = attributes
        self.min_length = min_length
        self.name = "meta:" + ",".join(value for _, value in attributes)

    def try_extract(self, soup: BeautifulSoup) -> Optional[str]:
        for attr, value in self.attributes:
            tag = soup.find("meta", attrs={attr: value})
            if tag is None:
                continue
            content = collapse_whitespace(tag.get("content") or "")
            if len(content) > self.min_length:
                return content
        return None


class TitleTagStrategy(FieldStrategy):
    """The document <title>, with the trailing marketplace suffix stripped."""

    name = "title-tag"

    SUFFIX_PATTERN = re.compile(r"\s*\|\s*eBay.*$", re.IGNORECASE)

    def try_extract(self, soup: BeautifulSoup) -> Optional[str]:
        if soup.title is None:
            return None
        title = self.SUFFIX_PATTERN.sub("", element_text(soup.title)).strip()
        return title or None


class DocumentPriceStrategy(FieldStrategy):
    """First positive currency amount anywhere in the document text."""

    name = "document-price"

    def try_extract(self, soup: BeautifulSoup) -> Optional[float]:
        prices = find_prices(document_text(soup))
        return prices[0] if prices else None


class PatternClassifierStrategy(FieldStrategy):
    """Ordered regex classifiers over the document text; first match wins."""

    def __init__(self, classifiers: list[tuple[str, str]], name: str = "classifier"):
        self.classifiers = [(re.compile(p, re.IGNORECASE), label) for p, label in classifiers]
        self.name = name

    def try_extract(self, soup: BeautifulSoup) -> Optional[str]:
        text = document_text(soup)
        for pattern, label in self.classifiers:
            if pattern.search(text):
                return label
        return None


class DocumentPatternStrategy(FieldStrategy):
    """
    Regex search over the document text. Uses the first capture group when
    the pattern has one, the whole match otherwise.
    """

    def __init__(self, pattern: str, validate: Callable[[str], bool] = bool, flags: int = 0):
        self.pattern = re.compile(pattern, flags)
        self.validate = validate
        self.name = f"pattern:{pattern}"

    def try_extract(self, soup: BeautifulSoup) -> Optional[str]:
        match = self.pattern.search(document_text(soup))
        if not match:
            return None
        value = (match.group(1) if match.groups() else match.group(0)).strip()
        return value if self.validate(value) else None


class CallableStrategy(FieldStrategy):
    """Adapter for extraction logic that does not fit the shapes above."""

    def __init__(self, name: str, func: Callable[[BeautifulSoup], Optional[Any]]):
        self.name = name
        self.func = func

    def try_extract(self, soup: BeautifulSoup) -> Optional[Any]:
        return self.func(soup)


def first_success(
    strategies: list[FieldStrategy],
    soup: BeautifulSoup,
    field: str = "",
    log: Optional[logging.Logger] = None,
) -> Optional[Any]:
    """
    Evaluate strategies in order and return the first non-empty value.

    A strategy that trips over malformed markup is skipped, never fatal.
    """
    log = log or logger
    for strategy in strategies:
        try:
            value = strategy.try_extract(soup)
        except (AttributeError, TypeError, ValueError, KeyError) as e:
            log.debug(f"{field}: strategy {strategy.name} failed: {e}")
            continue
        if value is not None and value != "" and value != {} and value != []:
            log.debug(f"{field}: matched by {strategy.name}")
            return value
    return None


def price_selector(selector: str) -> SelectorTextStrategy:
    """Selector strategy that parses a currency amount and rejects zero."""
    return SelectorTextStrategy(selector, clean=parse_price, validate=lambda p: p > 0)
