"""Integration tests for white-label configuration storage."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.models.white_label import DEFAULT_BRAND_NAME, WhiteLabelCreate, WhiteLabelUpdate
from pharmacy.services.white_labels import WhiteLabelService


@pytest.fixture
def white_labels(async_db_session: AsyncSession) -> WhiteLabelService:
    return WhiteLabelService(async_db_session)


@pytest.mark.integration
class TestActivation:
    """Integration tests for the active and default flags."""

    @pytest.mark.asyncio
    async def test_activate_is_exclusive(self, async_db_session, white_labels) -> None:
        """Test that activating one configuration deactivates the others."""
        acme = await white_labels.create_config(WhiteLabelCreate(name="Acme", is_active=True))
        globex = await white_labels.create_config(WhiteLabelCreate(name="Globex"))

        await white_labels.activate(globex.id)

        await async_db_session.refresh(acme)
        assert acme.is_active is False
        assert (await white_labels.get_active()).id == globex.id

    @pytest.mark.asyncio
    async def test_create_active_replaces_active(self, async_db_session, white_labels) -> None:
        """Test that creating an active configuration deactivates the previous one."""
        acme = await white_labels.create_config(WhiteLabelCreate(name="Acme", is_active=True))

        await white_labels.create_config(WhiteLabelCreate(name="Globex", is_active=True))

        await async_db_session.refresh(acme)
        assert acme.is_active is False

    @pytest.mark.asyncio
    async def test_default_is_exclusive(self, async_db_session, white_labels) -> None:
        """Test that only one configuration is the default."""
        acme = await white_labels.create_config(WhiteLabelCreate(name="Acme"))
        globex = await white_labels.create_config(WhiteLabelCreate(name="Globex"))

        await white_labels.set_default(acme.id)
        await white_labels.set_default(globex.id)

        await async_db_session.refresh(acme)
        assert acme.is_default is False
        assert (await white_labels.get_default()).id == globex.id

    @pytest.mark.asyncio
    async def test_missing_config(self, white_labels) -> None:
        """Test that flag changes on unknown configurations return None."""
        assert await white_labels.activate(404) is None
        assert await white_labels.set_default(404) is None
        assert await white_labels.delete_config(404) is False


@pytest.mark.integration
class TestStorefrontResolution:
    """Integration tests for the branding the storefront sees."""

    @pytest.mark.asyncio
    async def test_defaults_when_unconfigured(self, white_labels) -> None:
        """Test that built-in branding is used with no configuration."""
        config = await white_labels.storefront_config()

        assert config.name == DEFAULT_BRAND_NAME

    @pytest.mark.asyncio
    async def test_active_wins_over_default(self, white_labels) -> None:
        """Test that the active configuration takes precedence over the default."""
        fallback = await white_labels.create_config(WhiteLabelCreate(name="Fallback"))
        await white_labels.set_default(fallback.id)
        await white_labels.create_config(
            WhiteLabelCreate(name="Acme", primary_color="#112233", is_active=True)
        )

        config = await white_labels.storefront_config()

        assert config.name == "Acme"
        assert config.primary_color == "#112233"

    @pytest.mark.asyncio
    async def test_default_used_when_nothing_active(self, white_labels) -> None:
        """Test that the default configuration is the fallback."""
        fallback = await white_labels.create_config(WhiteLabelCreate(name="Fallback"))
        await white_labels.set_default(fallback.id)

        assert (await white_labels.storefront_config()).name == "Fallback"

    @pytest.mark.asyncio
    async def test_theme_css_includes_custom_css(self, white_labels) -> None:
        """Test that the active configuration's custom CSS is served."""
        await white_labels.create_config(
            WhiteLabelCreate(name="Acme", custom_css=".hero { color: red; }", is_active=True)
        )

        css = await white_labels.theme_css()

        assert css.endswith(".hero { color: red; }\n")

    @pytest.mark.asyncio
    async def test_update_active_creates_configuration(self, white_labels) -> None:
        """Test that updating with nothing active creates an active configuration."""
        config = await white_labels.update_active(WhiteLabelUpdate(primary_color="#abcdef"))

        assert config.is_active is True
        assert config.name == DEFAULT_BRAND_NAME
        assert config.primary_color == "#abcdef"

    @pytest.mark.asyncio
    async def test_update_active_edits_in_place(self, white_labels) -> None:
        """Test that updating changes the existing active configuration."""
        acme = await white_labels.create_config(WhiteLabelCreate(name="Acme", is_active=True))

        updated = await white_labels.update_active(WhiteLabelUpdate(tagline="Fast refills"))

        assert updated.id == acme.id
        assert updated.tagline == "Fast refills"
        assert len(await white_labels.list_configs()) == 1
