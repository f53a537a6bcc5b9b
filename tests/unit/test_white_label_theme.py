"""Unit tests for storefront branding payloads and theme CSS."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from pharmacy.models.white_label import (
    DEFAULT_BRAND_NAME,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_TAGLINE,
    StorefrontConfig,
    StorefrontTheme,
    WhiteLabelCreate,
    WhiteLabelDB,
    WhiteLabelUpdate,
)
from pharmacy.services.white_labels import SYSTEM_FONT_STACK, render_theme_css, storefront_config


def _row(**fields) -> WhiteLabelDB:
    values = {
        "name": "Acme Pharmacy",
        "company_name": "Acme Health LLC",
        "contact_email": "care@acme.com",
        "contact_phone": None,
        "logo": "https://acme.com/logo.png",
        "favicon": None,
        "primary_color": "#112233",
        "secondary_color": None,
        "accent_color": None,
        "font_family": None,
        "border_radius": "0.25rem",
        "tagline": None,
        "address": None,
        "terms_url": None,
        "privacy_url": None,
        "allow_guest_cart": False,
    }
    values.update(fields)
    row = MagicMock(spec=WhiteLabelDB)
    for key, value in values.items():
        setattr(row, key, value)
    return row


@pytest.mark.unit
class TestStorefrontConfig:
    """Unit tests for the public branding payload."""

    def test_defaults_without_configuration(self) -> None:
        """Test that built-in branding is served when nothing is configured."""
        config = storefront_config(None)

        assert config.name == DEFAULT_BRAND_NAME
        assert config.primary_color == DEFAULT_PRIMARY_COLOR
        assert config.tagline == DEFAULT_TAGLINE
        assert config.allow_guest_cart is True
        assert config.theme.border_radius == "0.5rem"
        assert config.theme.font_family is None

    def test_configured_values(self) -> None:
        """Test that stored branding maps onto the payload."""
        config = storefront_config(_row())

        assert config.name == "Acme Pharmacy"
        assert config.legal_name == "Acme Health LLC"
        assert config.primary_color == "#112233"
        assert config.logo == "https://acme.com/logo.png"
        assert config.allow_guest_cart is False
        assert config.theme.border_radius == "0.25rem"

    def test_missing_values_fall_back(self) -> None:
        """Test that blank colors, tagline and radius use defaults."""
        config = storefront_config(_row(primary_color=None, tagline=None, border_radius=None))

        assert config.primary_color == DEFAULT_PRIMARY_COLOR
        assert config.tagline == DEFAULT_TAGLINE
        assert config.theme.border_radius == "0.5rem"


@pytest.mark.unit
class TestRenderThemeCss:
    """Unit tests for the storefront stylesheet."""

    def test_default_theme(self) -> None:
        """Test the stylesheet for the built-in branding."""
        css = render_theme_css(StorefrontConfig())

        assert css == (
            ":root {\n"
            "  --primary: #0070f3;\n"
            "  --primary-foreground: #ffffff;\n"
            "  --radius: 0.5rem;\n"
            "}\n"
        )

    def test_optional_colors_and_font(self) -> None:
        """Test that secondary, accent and font rules are emitted when set."""
        config = StorefrontConfig(
            primary_color="#112233",
            secondary_color="#445566",
            accent_color="#778899",
            theme=StorefrontTheme(font_family="Lato", border_radius="1rem"),
        )

        css = render_theme_css(config)

        assert "  --secondary: #445566;" in css
        assert "  --accent: #778899;" in css
        assert "  --radius: 1rem;" in css
        assert f"body {{\n  font-family: Lato, {SYSTEM_FONT_STACK};\n}}" in css

    def test_custom_css_appended(self) -> None:
        """Test that custom CSS follows the generated rules."""
        css = render_theme_css(StorefrontConfig(), custom_css="  .hero { color: red; }\n")

        assert css.endswith("}\n\n.hero { color: red; }\n")

    def test_blank_custom_css_ignored(self) -> None:
        """Test that whitespace-only custom CSS adds nothing."""
        assert render_theme_css(StorefrontConfig(), custom_css="   ") == render_theme_css(
            StorefrontConfig()
        )


@pytest.mark.unit
class TestBorderRadiusValidation:
    """Unit tests for the border radius accepted by branding forms."""

    @pytest.mark.parametrize("value", ["0", "12px", "0.25rem", "1.5em"])
    def test_css_lengths_accepted(self, value: str) -> None:
        """Test that plain CSS lengths are accepted on create and update."""
        assert WhiteLabelCreate(name="Acme", border_radius=value).border_radius == value
        assert WhiteLabelUpdate(border_radius=value).border_radius == value

    @pytest.mark.parametrize("value", ["0;}body{display:none", "4px }", "calc(1px)", "red"])
    def test_rule_breaking_values_rejected(self, value: str) -> None:
        """Test that values which could escape the generated CSS rule are rejected."""
        with pytest.raises(ValidationError):
            WhiteLabelCreate(name="Acme", border_radius=value)
        with pytest.raises(ValidationError):
            WhiteLabelUpdate(border_radius=value)
