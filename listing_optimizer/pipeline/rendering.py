"""
Listing renderer - a self-contained HTML document for the optimized listing.

Pure function of its inputs: no clock, randomness, network or filesystem.
"""
import logging
from html import escape
from typing import Optional

from ..config import ContentConfig, get_config
from ..models.content import OptimizedContent
from ..models.product import ImageRef, ProductFacts, UNKNOWN_SELLER
from .content import select_specifications


logger = logging.getLogger(__name__)


COLORS = {
    "primary": "#1e88e5",
    "primary_dark": "#1565c0",
    "primary_light": "#e3f2fd",
    "success": "#2e7d32",
    "accent": "#4caf50",
    "accent_dark": "#388e3c",
    "background": "#f9f9f9",
    "surface": "#f5f5f5",
    "border": "#e0e0e0",
    "text": "#333",
    "text_muted": "#666",
}


def _styles() -> str:
    return f"""
        body {{
            font-family: Arial, sans-serif;
            line-height: 1.6;
            margin: 0;
            padding: 20px;
            background-color: {COLORS['background']};
            color: {COLORS['text']};
        }}
        .container {{
            max-width: 1200px;
            margin: 0 auto;
            background-color: white;
            border-radius: 8px;
            box-shadow: 0 2px 10px rgba(0,0,0,0.1);
            overflow: hidden;
        }}
        .header {{
            background: linear-gradient(135deg, {COLORS['primary']}, {COLORS['primary_dark']});
            color: white;
            padding: 20px;
            text-align: center;
        }}
        .header h1 {{ margin: 0; font-size: 2.2em; font-weight: 300; }}
        .price-section {{
            background-color: {COLORS['surface']};
            padding: 20px;
            text-align: center;
            border-bottom: 1px solid {COLORS['border']};
        }}
        .current-price {{ font-size: 2.5em; font-weight: bold; color: {COLORS['success']}; margin: 10px 0; }}
        .suggested-price {{ font-size: 1.2em; color: {COLORS['text_muted']}; margin-bottom: 10px; }}
        .condition {{
            display: inline-block;
            background-color: {COLORS['accent']};
            color: white;
            padding: 5px 15px;
            border-radius: 20px;
            font-size: 0.9em;
        }}
        .content {{ padding: 30px; }}
        .image-gallery {{ margin-bottom: 30px; text-align: center; }}
        .main-image img {{
            width: 100%;
            max-width: 600px;
            height: auto;
            border-radius: 8px;
            box-shadow: 0 4px 8px rgba(0,0,0,0.1);
        }}
        .thumbnails img {{ width: 96px; height: auto; margin: 8px 4px 0; border-radius: 4px; }}
        h2 {{ color: {COLORS['primary']}; border-bottom: 2px solid {COLORS['primary_light']}; padding-bottom: 10px; }}
        .description, .features, .specs, .seller-info {{ margin-bottom: 30px; }}
        .features ul {{ list-style-type: none; padding: 0; }}
        .features li {{
            background-color: {COLORS['surface']};
            margin-bottom: 10px;
            padding: 12px;
            border-radius: 5px;
            border-left: 4px solid {COLORS['primary']};
        }}
        .specs table {{ width: 100%; border-collapse: collapse; margin-top: 15px; }}
        .specs td {{ padding: 12px; text-align: left; border-bottom: 1px solid {COLORS['border']}; }}
        .seller-info {{ background-color: {COLORS['surface']}; padding: 20px; border-radius: 8px; }}
        .seller-info h3 {{ color: {COLORS['primary']}; margin-top: 0; }}
        .cta-section {{
            background: linear-gradient(135deg, {COLORS['accent']}, {COLORS['accent_dark']});
            color: white;
            padding: 30px;
            text-align: center;
            border-radius: 8px;
        }}
        .cta-button {{
            display: inline-block;
            background-color: white;
            color: {COLORS['accent']};
            padding: 15px 30px;
            text-decoration: none;
            border-radius: 5px;
            font-weight: bold;
        }}
        .footer {{ background-color: {COLORS['text']}; color: white; text-align: center; padding: 20px; font-size: 0.9em; }}
        @media (max-width: 768px) {{
            .content {{ padding: 20px; }}
            .header h1 {{ font-size: 1.8em; }}
            .current-price {{ font-size: 2em; }}
        }}
    """


class ListingRenderer:
    """Renders optimized content and product facts into one HTML document."""

    def __init__(
        self,
        config: Optional[ContentConfig] = None,
        placeholder_image_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or get_config().content
        self.placeholder_image_url = (
            placeholder_image_url or get_config().extraction.placeholder_image_url
        )
        self.logger = logger or logging.getLogger(__name__)

    def render(self, content: OptimizedContent, facts: ProductFacts) -> str:
        """
        Render the listing document.

        Args:
            content: Optimized copy
            facts: Product facts (images, specifications, seller)

        Returns:
            Complete HTML document; identical inputs give identical output
        """
        self.logger.info(f"Rendering listing for: {facts.title}")

        title = escape(content.optimized_title)
        meta_description = escape(content.optimized_description[:160].replace("\n", " "))
        meta_keywords = escape(", ".join(content.keywords))
        description_html = "<br>\n".join(
            escape(line) for line in content.optimized_description.split("\n")
        )
        features_html = "\n".join(
            f"                    <li>{escape(point)}</li>" for point in content.selling_points
        )

        html = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="description" content="{meta_description}">
    <meta name="keywords" content="{meta_keywords}">
    <title>{title}</title>
    <style>{_styles()}</style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{title}</h1>
        </div>

        <div class="price-section">
            <div class="current-price">${facts.price:.2f}</div>
            <div class="suggested-price">Market Suggested Price: ${content.suggested_price:.2f}</div>
            <div class="condition">{escape(facts.condition)}</div>
        </div>

        <div class="content">
{self._image_gallery(facts.images)}

            <div class="description">
                <h2>Product Description</h2>
                <div>{description_html}</div>
            </div>

            <div class="features">
                <h2>Key Features &amp; Benefits</h2>
                <ul>
{features_html}
                </ul>
            </div>
{self._specifications_table(facts.specifications)}{self._seller_info(facts)}
            <div class="cta-section">
                <h2>Ready to Purchase?</h2>
                <p>Don't miss out on this amazing deal! Add this item to your cart now and secure yours today.</p>
                <a href="#" class="cta-button">Add to Cart</a>
            </div>
        </div>

        <div class="footer">
            <p>Optimized listing template generated by Listing Optimizer.</p>
        </div>
    </div>
</body>
</html>
"""
        self.logger.info(f"Rendering completed: {len(html)} characters")
        return html

    def _image_gallery(self, images: list[ImageRef]) -> str:
        """Main image plus thumbnails of the rest; placeholder when empty."""
        if not images:
            main_url, main_alt, rest = self.placeholder_image_url, "Product Image", []
        else:
            main_url = images[0].url or self.placeholder_image_url
            main_alt = images[0].alt_text or "Product Image"
            rest = images[1:]

        parts = [
            '            <div class="image-gallery">',
            '                <div class="main-image">',
            f'                    <img src="{escape(main_url)}" alt="{escape(main_alt)}">',
            "                </div>",
        ]
        if rest:
            parts.append('                <div class="thumbnails">')
            for image in rest:
                parts.append(
                    f'                    <img src="{escape(image.url)}" '
                    f'alt="{escape(image.alt_text or "Product Image")}">'
                )
            parts.append("                </div>")
        parts.append("            </div>")
        return "\n".join(parts)

    def _specifications_table(self, specifications: dict[str, str]) -> str:
        rows = select_specifications(specifications, self.config.max_specifications)
        if not rows:
            return ""

        row_html = "\n".join(
            f"                        <tr><td><strong>{escape(key)}</strong></td><td>{escape(value)}</td></tr>"
            for key, value in rows
        )
        return f"""
            <div class="specs">
                <h2>Product Specifications</h2>
                <table>
                    <tbody>
{row_html}
                    </tbody>
                </table>
            </div>
"""

    def _seller_info(self, facts: ProductFacts) -> str:
        if facts.seller == UNKNOWN_SELLER:
            return ""
        return f"""
            <div class="seller-info">
                <h3>Seller Information</h3>
                <p><strong>Seller:</strong> {escape(facts.seller)}</p>
                <p><strong>Location:</strong> {escape(facts.location)}</p>
            </div>
"""
