"""White-label branding: configuration storage and storefront theme."""

import structlog
from sqlalchemy import delete, select, update

from pharmacy.models.white_label import (
    DEFAULT_BORDER_RADIUS,
    DEFAULT_BRAND_NAME,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_TAGLINE,
    StorefrontConfig,
    StorefrontTheme,
    WhiteLabelCreate,
    WhiteLabelDB,
    WhiteLabelUpdate,
)
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)

SYSTEM_FONT_STACK = (
    '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif, '
    '"Apple Color Emoji", "Segoe UI Emoji", "Segoe UI Symbol"'
)


def storefront_config(row: WhiteLabelDB | None) -> StorefrontConfig:
    """Public branding payload for a configuration (built-in defaults when None)."""
    if row is None:
        return StorefrontConfig()

    return StorefrontConfig(
        name=row.name or DEFAULT_BRAND_NAME,
        primary_color=row.primary_color or DEFAULT_PRIMARY_COLOR,
        secondary_color=row.secondary_color,
        accent_color=row.accent_color,
        logo=row.logo,
        favicon=row.favicon,
        tagline=row.tagline or DEFAULT_TAGLINE,
        legal_name=row.company_name,
        contact_email=row.contact_email,
        contact_phone=row.contact_phone,
        address=row.address,
        terms_url=row.terms_url,
        privacy_url=row.privacy_url,
        allow_guest_cart=row.allow_guest_cart,
        theme=StorefrontTheme(
            font_family=row.font_family,
            border_radius=row.border_radius or DEFAULT_BORDER_RADIUS,
        ),
    )


def render_theme_css(config: StorefrontConfig, custom_css: str | None = None) -> str:
    """Stylesheet injected into the storefront head.

    Emits ``:root`` custom properties for the brand colors and radius, a body
    font rule when a font is configured, then any custom CSS verbatim.
    """
    variables = [
        f"  --primary: {config.primary_color};",
        "  --primary-foreground: #ffffff;",
    ]
    if config.secondary_color:
        variables.append(f"  --secondary: {config.secondary_color};")
    if config.accent_color:
        variables.append(f"  --accent: {config.accent_color};")
    variables.append(f"  --radius: {config.theme.border_radius};")

    blocks = [":root {\n" + "\n".join(variables) + "\n}"]
    if config.theme.font_family:
        blocks.append(f"body {{\n  font-family: {config.theme.font_family}, {SYSTEM_FONT_STACK};\n}}")
    if custom_css and custom_css.strip():
        blocks.append(custom_css.strip())

    return "\n\n".join(blocks) + "\n"


class WhiteLabelService(Repository):
    """Manages branding configurations.

    At most one configuration is active and at most one is the default. The
    storefront uses the active configuration, falling back to the default and
    then to built-in branding.
    """

    async def list_configs(self) -> list[WhiteLabelDB]:
        result = await self.db_session.execute(select(WhiteLabelDB).order_by(WhiteLabelDB.id))
        return list(result.scalars().all())

    async def get_config(self, config_id: int) -> WhiteLabelDB | None:
        return await self.db_session.get(WhiteLabelDB, config_id)

    async def get_active(self) -> WhiteLabelDB | None:
        query = select(WhiteLabelDB).where(WhiteLabelDB.is_active.is_(True)).limit(1)
        result = await self.db_session.execute(query)
        return result.scalars().first()

    async def get_default(self) -> WhiteLabelDB | None:
        query = select(WhiteLabelDB).where(WhiteLabelDB.is_default.is_(True)).limit(1)
        result = await self.db_session.execute(query)
        return result.scalars().first()

    async def create_config(self, data: WhiteLabelCreate) -> WhiteLabelDB:
        if data.is_active:
            await self._clear_flag("is_active")

        config = WhiteLabelDB(**data.model_dump())
        await self._persist(config)

        logger.info("white_label_created", white_label_id=config.id, name=config.name)
        return config

    async def update_config(self, config_id: int, data: WhiteLabelUpdate) -> WhiteLabelDB | None:
        config = await self.get_config(config_id)
        if config is None:
            return None

        changes = self._apply_changes(config, data)
        await self._persist(config)

        logger.info("white_label_updated", white_label_id=config_id, fields=sorted(changes))
        return config

    async def delete_config(self, config_id: int) -> bool:
        result = await self.db_session.execute(
            delete(WhiteLabelDB).where(WhiteLabelDB.id == config_id)
        )
        await self.db_session.commit()
        return result.rowcount > 0

    async def activate(self, config_id: int) -> WhiteLabelDB | None:
        """Make a configuration the only active one."""
        config = await self.get_config(config_id)
        if config is None:
            return None

        await self._clear_flag("is_active", keep_id=config_id)
        config.is_active = True
        await self._persist(config)

        logger.info("white_label_activated", white_label_id=config_id)
        return config

    async def deactivate(self, config_id: int) -> WhiteLabelDB | None:
        config = await self.get_config(config_id)
        if config is None:
            return None

        config.is_active = False
        await self._persist(config)

        logger.info("white_label_deactivated", white_label_id=config_id)
        return config

    async def set_default(self, config_id: int) -> WhiteLabelDB | None:
        """Make a configuration the only default one."""
        config = await self.get_config(config_id)
        if config is None:
            return None

        await self._clear_flag("is_default", keep_id=config_id)
        config.is_default = True
        await self._persist(config)
        return config

    async def unset_default(self, config_id: int) -> WhiteLabelDB | None:
        config = await self.get_config(config_id)
        if config is None:
            return None

        config.is_default = False
        await self._persist(config)
        return config

    async def resolve_storefront(self) -> WhiteLabelDB | None:
        """Configuration the storefront should use: active, then default."""
        return await self.get_active() or await self.get_default()

    async def storefront_config(self) -> StorefrontConfig:
        return storefront_config(await self.resolve_storefront())

    async def theme_css(self) -> str:
        row = await self.resolve_storefront()
        return render_theme_css(storefront_config(row), row.custom_css if row else None)

    async def update_active(self, data: WhiteLabelUpdate) -> WhiteLabelDB:
        """Apply changes to the active configuration, creating one if none is active."""
        config = await self.get_active()
        if config is None:
            values = data.model_dump(exclude_none=True)
            values.setdefault("name", DEFAULT_BRAND_NAME)
            values.setdefault("primary_color", DEFAULT_PRIMARY_COLOR)
            values.setdefault("tagline", DEFAULT_TAGLINE)
            return await self.create_config(WhiteLabelCreate(**values, is_active=True))

        self._apply_changes(config, data)
        await self._persist(config)
        return config

    async def _clear_flag(self, flag: str, keep_id: int | None = None) -> None:
        column = getattr(WhiteLabelDB, flag)
        statement = update(WhiteLabelDB).where(column.is_(True))
        if keep_id is not None:
            statement = statement.where(WhiteLabelDB.id != keep_id)
        await self.db_session.execute(
            statement.values({flag: False}).execution_options(synchronize_session="fetch")
        )
