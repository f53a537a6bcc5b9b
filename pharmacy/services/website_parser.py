"""Extract a branding theme from an existing website."""

import re
from html.parser import HTMLParser
from urllib.parse import urljoin, urlparse

import httpx
import structlog

from pharmacy.models.white_label import DEFAULT_BORDER_RADIUS, WebsiteTheme

logger = structlog.get_logger(__name__)

DEFAULT_THEME_COLORS = {
    "primary_color": "#3B82F6",
    "secondary_color": "#10B981",
    "accent_color": "#F59E0B",
    "text_color": "#111827",
    "background_color": "#FFFFFF",
}
DEFAULT_FONT_FAMILY = "Inter, sans-serif"

CSS_VARIABLE_PATTERNS = {
    "primary_color": re.compile(r"--(?:primary|brand|theme-primary|main-color)[^:]*:\s*([^;}]+)", re.I),
    "secondary_color": re.compile(r"--(?:secondary|theme-secondary)[^:]*:\s*([^;}]+)", re.I),
    "accent_color": re.compile(r"--(?:accent|highlight|theme-accent)[^:]*:\s*([^;}]+)", re.I),
    "text_color": re.compile(r"--(?:text-color|text|font-color)[^:]*:\s*([^;}]+)", re.I),
    "background_color": re.compile(r"--(?:background|bg-color|background-color)[^:]*:\s*([^;}]+)", re.I),
    "font_family": re.compile(r"--(?:font-family|font)[^:]*:\s*([^;}]+)", re.I),
    "border_radius": re.compile(r"--(?:border-radius|radius|rounded)[^:]*:\s*([^;}]+)", re.I),
}

BUTTON_CLASSES = ("btn", "button", "btn-primary")
HEADER_TAGS = {"header", "nav"}
HEADER_CLASSES = ("navbar", "header", "nav")


def style_property(style: str, prop: str) -> str | None:
    """Value of one property from an inline style attribute."""
    match = re.search(rf"(?:^|;)\s*{re.escape(prop)}\s*:\s*([^;]+)", style, re.I)
    return match.group(1).strip() if match else None


def site_name(url: str) -> str:
    """Capitalized first label of the host name (www. stripped)."""
    host = (urlparse(url).hostname or "").removeprefix("www.")
    label = host.split(".")[0]
    return label[:1].upper() + label[1:]


class _ThemeCollector(HTMLParser):
    """Collects style text, inline styles and branding assets from a page."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.css: list[str] = []
        self.inline: dict[str, str] = {}
        self.logo: str | None = None
        self.favicon: str | None = None
        self.theme_color: str | None = None
        self._in_style = False
        self._logo_depth = 0
        self._logo_container = False

    def handle_starttag(self, tag, attrs):
        attributes = {name: value or "" for name, value in attrs}
        classes = attributes.get("class", "").lower()
        style = attributes.get("style", "")

        if tag == "style":
            self._in_style = True
        elif tag == "link" and self.favicon is None:
            rel = attributes.get("rel", "").lower()
            if rel in ("icon", "shortcut icon") and attributes.get("href"):
                self.favicon = attributes["href"]
        elif tag == "meta" and attributes.get("name", "").lower() == "theme-color":
            self.theme_color = attributes.get("content") or None
        elif tag == "img" and self.logo is None and attributes.get("src"):
            if self._logo_depth or self._logo_container or "logo" in classes:
                self.logo = attributes["src"]

        if tag in HEADER_TAGS:
            self._logo_depth += 1
        elif "logo" in classes and tag != "img":
            self._logo_container = True

        if not style:
            return
        is_button = tag == "button" or any(name in classes.split() for name in BUTTON_CLASSES)
        is_header = tag in HEADER_TAGS or any(name in classes.split() for name in HEADER_CLASSES)

        if is_button:
            self._remember("button_background", style_property(style, "background-color"))
            self._remember("button_color", style_property(style, "color"))
        if is_header:
            self._remember("header_background", style_property(style, "background-color"))
        if tag == "a" or "accent" in classes or "highlight" in classes:
            self._remember("link_color", style_property(style, "color"))
        if tag == "body":
            self._remember("body_font", style_property(style, "font-family"))

    def handle_endtag(self, tag):
        if tag == "style":
            self._in_style = False
        elif tag in HEADER_TAGS and self._logo_depth:
            self._logo_depth -= 1

    def handle_data(self, data):
        if self._in_style:
            self.css.append(data)

    def _remember(self, key: str, value: str | None) -> None:
        if value and key not in self.inline:
            self.inline[key] = value


def extract_theme(html: str, url: str) -> WebsiteTheme:
    """Build a theme from page markup.

    CSS custom properties win over inline styles, which win over the
    theme-color meta tag; anything not found keeps its default.
    """
    collector = _ThemeCollector()
    collector.feed(html)
    collector.close()

    css = "\n".join(collector.css)
    found: dict[str, str] = {}
    for field, pattern in CSS_VARIABLE_PATTERNS.items():
        match = pattern.search(css)
        if match:
            found[field] = match.group(1).strip()

    inline = collector.inline
    primary = (
        found.get("primary_color")
        or inline.get("button_background")
        or inline.get("header_background")
        or collector.theme_color
    )

    return WebsiteTheme(
        name=site_name(url),
        primary_color=primary or DEFAULT_THEME_COLORS["primary_color"],
        secondary_color=found.get("secondary_color")
        or inline.get("button_color")
        or DEFAULT_THEME_COLORS["secondary_color"],
        accent_color=found.get("accent_color")
        or inline.get("link_color")
        or DEFAULT_THEME_COLORS["accent_color"],
        text_color=found.get("text_color") or DEFAULT_THEME_COLORS["text_color"],
        background_color=found.get("background_color") or DEFAULT_THEME_COLORS["background_color"],
        font_family=found.get("font_family") or inline.get("body_font") or DEFAULT_FONT_FAMILY,
        logo_url=urljoin(url, collector.logo) if collector.logo else None,
        favicon=urljoin(url, collector.favicon) if collector.favicon else None,
        border_radius=found.get("border_radius") or DEFAULT_BORDER_RADIUS,
    )


class WebsiteThemeParser:
    """Fetches a website and extracts its branding."""

    def __init__(self, http_client: httpx.AsyncClient | None = None, timeout: float = 10.0):
        """Initialize parser.

        Args:
            http_client: Client to fetch pages with (a new one is created per call when omitted)
            timeout: Request timeout in seconds
        """
        self.http_client = http_client
        self.timeout = timeout

    async def parse(self, url: str) -> WebsiteTheme:
        """Fetch a page and extract its theme.

        Args:
            url: Website address; ``https://`` is assumed when no scheme is given

        Returns:
            Extracted theme with defaults for anything not found

        Raises:
            httpx.HTTPError: If the page cannot be fetched
        """
        if not url.startswith(("http://", "https://")):
            url = f"https://{url}"

        if self.http_client is not None:
            response = await self.http_client.get(url, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
                response = await client.get(url, follow_redirects=True)
        response.raise_for_status()

        theme = extract_theme(response.text, str(response.url))
        logger.info("website_theme_parsed", url=url, name=theme.name)
        return theme
