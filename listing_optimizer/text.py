"""
Text helpers shared by the extraction and synthesis stages.
"""
import re

from .errors import ValidationError


PRICE_PATTERN = re.compile(r"[$£€¥]\s*[\d,]+(?:\.\d+)?")

# Marketplace boilerplate that precedes the real listing title
BOILERPLATE_PREFIXES = [
    re.compile(r"^\s*details about\s*", re.IGNORECASE),
    re.compile(r"^\s*see details about\s*", re.IGNORECASE),
    re.compile(r"^\s*new listing\s*", re.IGNORECASE),
]

STOP_WORDS = frozenset([
    "the", "and", "or", "for", "with", "in", "on", "at", "to", "a", "an",
    "is", "are", "was", "were", "be", "been", "have", "has", "had", "do",
    "does", "did", "will", "would", "could", "should", "may", "might",
    "must", "can", "this", "that", "these", "those",
])

# Smaller list used when picking key terms out of a title
ARTICLES = frozenset(["the", "and", "or", "for", "with", "in", "on", "at", "to", "a", "an"])


def parse_price(text: str) -> float:
    """
    Parse the first currency amount in text.

    "$1,234.56" -> 1234.56. Returns 0.0 when there is no currency
    pattern or the amount cannot be parsed.
    """
    if not text:
        return 0.0
    match = PRICE_PATTERN.search(text)
    if not match:
        return 0.0
    cleaned = re.sub(r"[^\d.]", "", match.group(0))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def find_prices(text: str) -> list[float]:
    """All positive currency amounts in text, in document order."""
    prices = []
    for match in PRICE_PATTERN.finditer(text or ""):
        price = parse_price(match.group(0))
        if price > 0:
            prices.append(price)
    return prices


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def strip_boilerplate(title: str) -> str:
    """Remove known marketplace prefixes and collapse whitespace."""
    cleaned = title or ""
    for pattern in BOILERPLATE_PREFIXES:
        cleaned = pattern.sub("", cleaned)
    return collapse_whitespace(cleaned)


def extract_words(text: str) -> list[str]:
    """Split text into word tokens, dropping punctuation."""
    return [w for w in re.sub(r"[^\w\s]", " ", text or "").split() if w]


def contains_word(text: str, word: str) -> bool:
    """Case-insensitive whole-word containment."""
    if not word:
        return False
    pattern = r"(?<!\w)" + re.escape(word.lower()) + r"(?!\w)"
    return re.search(pattern, (text or "").lower()) is not None


def normalize_product_code(code: str) -> str:
    """
    Strip spaces and hyphens from a UPC/EAN-like code and check it.

    Raises:
        ValidationError: unless 8-14 digits remain
    """
    if not code or not isinstance(code, str):
        raise ValidationError("Invalid product code: code must be a non-empty string")
    cleaned = re.sub(r"[\s-]", "", code)
    if not re.fullmatch(r"\d{8,14}", cleaned):
        raise ValidationError(f"Invalid product code: {code!r}")
    return cleaned
