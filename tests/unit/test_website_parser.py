"""Unit tests for website theme extraction."""

import httpx
import pytest

from pharmacy.services.website_parser import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_THEME_COLORS,
    WebsiteThemeParser,
    extract_theme,
    site_name,
    style_property,
)

BRANDED_PAGE = """
<html>
  <head>
    <meta name="theme-color" content="#123456">
    <link rel="icon" href="/favicon.ico">
    <style>
      :root { --primary-color: #FF0000; --secondary: #00FF00; --radius: 12px; }
    </style>
  </head>
  <body style="font-family: Georgia">
    <header><a href="/"><img src="/img/logo.png" alt="Acme"></a></header>
    <button style="background-color: #222222; color: #EEEEEE">Shop</button>
  </body>
</html>
"""


@pytest.mark.unit
class TestHelpers:
    """Unit tests for small parsing helpers."""

    def test_style_property(self) -> None:
        """Test that one property is read from an inline style."""
        style = "color: #fff; background-color: #000"

        assert style_property(style, "background-color") == "#000"
        assert style_property(style, "color") == "#fff"
        assert style_property(style, "font-family") is None

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.acme.com", "Acme"),
            ("https://shop.example.org/path", "Shop"),
            ("http://pharma.co.uk", "Pharma"),
        ],
    )
    def test_site_name(self, url: str, expected: str) -> None:
        """Test that the site name comes from the host name."""
        assert site_name(url) == expected


@pytest.mark.unit
class TestExtractTheme:
    """Unit tests for extract_theme."""

    def test_css_variables_take_precedence(self) -> None:
        """Test that CSS custom properties win over inline styles and meta tags."""
        theme = extract_theme(BRANDED_PAGE, "https://www.acme.com/")

        assert theme.name == "Acme"
        assert theme.primary_color == "#FF0000"
        assert theme.secondary_color == "#00FF00"
        assert theme.border_radius == "12px"

    def test_assets_resolved_against_page_url(self) -> None:
        """Test that logo and favicon become absolute URLs."""
        theme = extract_theme(BRANDED_PAGE, "https://www.acme.com/")

        assert theme.logo_url == "https://www.acme.com/img/logo.png"
        assert theme.favicon == "https://www.acme.com/favicon.ico"

    def test_body_font_from_inline_style(self) -> None:
        """Test that the body font is used when no CSS variable sets one."""
        theme = extract_theme(BRANDED_PAGE, "https://www.acme.com/")

        assert theme.font_family == "Georgia"

    def test_inline_button_colors(self) -> None:
        """Test that button styles supply colors when no CSS variables exist."""
        html = '<body><button style="background-color: #222222; color: #EEEEEE">Buy</button></body>'

        theme = extract_theme(html, "https://acme.com")

        assert theme.primary_color == "#222222"
        assert theme.secondary_color == "#EEEEEE"

    def test_meta_theme_color_fallback(self) -> None:
        """Test that the theme-color meta tag is the last primary color source."""
        html = '<head><meta name="theme-color" content="#abcdef"></head><body></body>'

        theme = extract_theme(html, "https://acme.com")

        assert theme.primary_color == "#abcdef"

    def test_defaults_for_plain_page(self) -> None:
        """Test that a page without branding yields the default theme."""
        theme = extract_theme("<html><body><p>Hello</p></body></html>", "https://acme.com")

        assert theme.primary_color == DEFAULT_THEME_COLORS["primary_color"]
        assert theme.secondary_color == DEFAULT_THEME_COLORS["secondary_color"]
        assert theme.accent_color == DEFAULT_THEME_COLORS["accent_color"]
        assert theme.text_color == DEFAULT_THEME_COLORS["text_color"]
        assert theme.background_color == DEFAULT_THEME_COLORS["background_color"]
        assert theme.font_family == DEFAULT_FONT_FAMILY
        assert theme.border_radius == "0.5rem"
        assert theme.logo_url is None
        assert theme.favicon is None

    def test_logo_by_class_name(self) -> None:
        """Test that an image with a logo class is picked up outside the header."""
        html = '<body><div><img class="site-logo" src="brand.svg"></div></body>'

        theme = extract_theme(html, "https://acme.com/about/")

        assert theme.logo_url == "https://acme.com/about/brand.svg"


@pytest.mark.unit
class TestWebsiteThemeParser:
    """Unit tests for fetching and parsing a website."""

    @pytest.mark.asyncio
    async def test_parse_fetches_page(self) -> None:
        """Test that the page is fetched and its theme extracted."""
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, text=BRANDED_PAGE)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            theme = await WebsiteThemeParser(http_client=http_client).parse("www.acme.com")

        assert requested[0].startswith("https://www.acme.com")
        assert theme.name == "Acme"
        assert theme.primary_color == "#FF0000"

    @pytest.mark.asyncio
    async def test_parse_raises_on_http_error(self) -> None:
        """Test that error responses propagate as httpx errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="not found")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            with pytest.raises(httpx.HTTPStatusError):
                await WebsiteThemeParser(http_client=http_client).parse("https://acme.com")
