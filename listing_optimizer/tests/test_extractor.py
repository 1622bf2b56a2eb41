"""
Tests for product extraction.
"""
import pytest

from listing_optimizer.models import SizeClass, UNKNOWN_SELLER
from listing_optimizer.pipeline.extractor import (
    ProductExtractor,
    classify_image_size,
    is_valid_location,
    merge_specifications,
    to_high_resolution,
)


FULL_PAGE = """
<html>
<head><title>Widget Pro 3000 | eBay</title></head>
<body>
  <h1 data-testid="x-item-title-label">Details about Widget Pro 3000</h1>
  <div class="x-price-primary"><span>US $1,234.56</span></div>
  <div class="condition-text">Brand New</div>
  <img data-testid="ux-image-carousel-item"
       src="https://i.ebayimg.com/images/g/abc/s-l500.jpg" alt="Widget front">
  <div class="item-description">The Widget Pro 3000 is a professional grade widget
    with a durable body and long battery life.</div>
  <div data-testid="ux-labels-values"><dl><dt>Brand:</dt><dd>Acme</dd></dl></div>
  <div class="itemAttr"><table>
    <tr><td>Color:</td><td>Black</td><td>Model:</td><td>WP-3000</td></tr>
  </table></div>
  <div data-testid="x-sellercard-atf"><a href="/usr/widget_seller">widget_seller</a></div>
  <div class="ship-from">Austin, Texas</div>
</body>
</html>
"""

META_ONLY_PAGE = """
<html>
<head>
  <title>Vintage Camera Lens 50mm | eBay</title>
  <meta name="description" content="Vintage 50mm camera lens in working order, minor scratches.">
</head>
<body><span class="amount">$45.00</span><p>Used</p></body>
</html>
"""


@pytest.fixture
def extractor() -> ProductExtractor:
    return ProductExtractor()


class TestFullPage:
    """Tests against a page where every primary strategy has a target."""

    @pytest.fixture
    def facts(self, extractor):
        return extractor.extract(FULL_PAGE)

    def test_title_strips_boilerplate(self, facts):
        """Test the title loses its marketplace prefix."""
        assert facts.title == "Widget Pro 3000"

    def test_price(self, facts):
        """Test the structured price element is parsed."""
        assert facts.price == 1234.56

    def test_condition(self, facts):
        """Test the condition element is matched against the vocabulary."""
        assert facts.condition == "Brand New"

    def test_image_upgraded(self, facts):
        """Test the main image is rewritten to its largest variant."""
        assert len(facts.images) == 1
        image = facts.images[0]
        assert image.url == "https://i.ebayimg.com/images/g/abc/s-l1600.jpg"
        assert image.size_class == SizeClass.LARGE
        assert image.alt_text == "Widget front"

    def test_description(self, facts):
        """Test the description container text is used."""
        assert facts.description.startswith("The Widget Pro 3000 is a professional grade widget")

    def test_specifications_merged(self, facts):
        """Test all three specification shapes are merged."""
        assert facts.specifications == {"Brand": "Acme", "Color": "Black", "Model": "WP-3000"}

    def test_seller_and_location(self, facts):
        """Test seller and location selector cascades."""
        assert facts.seller == "widget_seller"
        assert facts.location == "Austin, Texas"

    def test_no_product_code(self, facts):
        """Test no product code is recorded when none is present."""
        assert facts.product_code is None


class TestDegradedInput:
    """Tests for empty, malformed and sparse pages."""

    @pytest.mark.parametrize("raw", ["", None, "<<<not html", "<html><body></body></html>"])
    def test_never_raises(self, extractor, raw):
        """Test that bad markup degrades to defaults with a placeholder image."""
        facts = extractor.extract(raw)

        assert facts.title == ""
        assert facts.price == 0
        assert facts.condition == "Used"
        assert facts.seller == UNKNOWN_SELLER
        assert len(facts.images) == 1
        assert facts.images[0].url == extractor.config.placeholder_image_url
        assert facts.images[0].size_class == SizeClass.LARGE

    def test_meta_fallback(self, extractor):
        """Test title from the title tag and description from meta."""
        facts = extractor.extract(META_ONLY_PAGE)

        assert facts.title == "Vintage Camera Lens 50mm"
        assert facts.description == "Vintage 50mm camera lens in working order, minor scratches."
        assert facts.price == 45.0
        assert facts.condition == "Used"

    def test_short_meta_description_used_last(self, extractor):
        """Test a short meta description still fills an empty description."""
        html = (
            "<title>Vintage Lens 50mm | eBay</title>"
            '<meta name="description" content="Nice vintage lens">'
            "<body><span>$45.00</span></body>"
        )
        facts = extractor.extract(html)

        assert facts.title == "Vintage Lens 50mm"
        assert facts.description == "Nice vintage lens"

    def test_condition_from_free_text(self, extractor):
        """Test the most specific condition phrase wins."""
        html = "<html><body><p>This item is brand new in box, never opened.</p></body></html>"
        assert extractor.extract(html).condition == "Brand New"

    def test_price_from_body_text(self, extractor):
        """Test the price falls back to a document text scan."""
        html = "<html><body><div>Asking only $250 for this</div></body></html>"
        assert extractor.extract(html).price == 250.0

    def test_fallback_keeps_validated_fields(self, extractor):
        """Test the fallback pass only touches fields that failed validation."""
        html = """
        <html>
        <head><meta property="og:title" content="Other Title Entirely"></head>
        <body>
          <h1>Widget Pro 3000</h1>
          <span class="price">$10.00</span>
          <div class="condition">Used</div>
        </body>
        </html>
        """
        facts = extractor.extract(html)

        assert facts.title == "Widget Pro 3000"
        assert facts.price == 10.0
        assert facts.condition == "Used"
        assert facts.description == ""


class TestImages:
    """Tests for image discovery."""

    def test_zoom_source_preferred(self, extractor):
        """Test the zoom source wins over the plain src attribute."""
        html = """
        <img data-zoom-src="https://i.ebayimg.com/images/g/x/s-l1600.jpg"
             src="https://i.ebayimg.com/images/g/x/s-l64.jpg">
        """
        image = extractor.extract(html).images[0]
        assert image.url == "https://i.ebayimg.com/images/g/x/s-l1600.jpg"

    def test_invalid_image_uses_placeholder(self, extractor):
        """Test an unusable image URL yields the placeholder."""
        html = '<img id="icImg" src="javascript:void(0)">'
        images = extractor.extract(html).images
        assert [i.url for i in images] == [extractor.config.placeholder_image_url]

    def test_to_high_resolution(self):
        """Test recognized image hosts are rewritten to the largest variant."""
        assert to_high_resolution("https://i.ebayimg.com/g/a/s-l64.jpg") == "https://i.ebayimg.com/g/a/s-l1600.jpg"
        assert to_high_resolution("https://i.ebayimg.com/g/a/s-l64") == "https://i.ebayimg.com/g/a/s-l1600.jpg"
        assert to_high_resolution("https://cdn.example.com/s-l64.jpg") == "https://cdn.example.com/s-l64.jpg"

    @pytest.mark.parametrize("url,expected", [
        ("https://x.com/s-l1600.jpg", SizeClass.LARGE),
        ("https://x.com/s-l300.jpg", SizeClass.MEDIUM),
        ("https://x.com/s-l64.jpg", SizeClass.THUMBNAIL),
        ("https://x.com/thumb/a.jpg", SizeClass.THUMBNAIL),
        ("https://x.com/full/a.jpg", SizeClass.LARGE),
        ("https://x.com/a.jpg", SizeClass.MEDIUM),
    ])
    def test_classify_image_size(self, url, expected):
        """Test size tokens and hints map to size classes."""
        assert classify_image_size(url) == expected


class TestSpecifications:
    """Tests for specification merging."""

    def test_last_writer_wins_and_caps(self):
        """Test later maps win and oversized entries are dropped."""
        merged = merge_specifications([
            {"Brand": "Acme"},
            {"Brand": "Acme Corp", "k" * 50: "too long key"},
            {"Notes": "x" * 200},
        ])
        assert merged == {"Brand": "Acme Corp"}


class TestLocationAndCode:
    """Tests for location validation and product code detection."""

    @pytest.mark.parametrize("location,expected", [
        ("Austin, TX", True),
        ("12345", False),
        ("Free shipping", False),
        ("ab", False),
        ("x" * 100, False),
    ])
    def test_is_valid_location(self, location, expected):
        """Test the location heuristic."""
        assert is_valid_location(location) is expected

    def test_location_from_free_text(self, extractor):
        """Test a location is found in shipping text."""
        html = "<html><body><p>Item ships from Portland, Oregon within 2 days.</p></body></html>"
        assert extractor.extract(html).location == "Portland, Oregon"

    def test_product_code_in_title(self, extractor):
        """Test a product code in the title is detected."""
        html = "<html><body><h1>Acme Widget 012345678905</h1></body></html>"
        assert extractor.extract(html).product_code == "012345678905"

    def test_product_code_in_specifications(self, extractor):
        """Test a product code in the specifications is detected."""
        html = "<dl><dt>UPC</dt><dd>0123456789012</dd></dl>"
        assert extractor.extract(html).product_code == "0123456789012"
