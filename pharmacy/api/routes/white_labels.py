"""White-label branding endpoints.

The storefront reads ``/config`` and ``/theme.css`` anonymously; every other
endpoint is an admin back-office operation.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import require_admin
from pharmacy.models.user import UserDB
from pharmacy.models.white_label import (
    ParseWebsiteRequest,
    StorefrontConfig,
    WebsiteTheme,
    WhiteLabel,
    WhiteLabelCreate,
    WhiteLabelDB,
    WhiteLabelUpdate,
)
from pharmacy.services.database import get_db_session
from pharmacy.services.website_parser import WebsiteThemeParser
from pharmacy.services.white_labels import WhiteLabelService

router = APIRouter(prefix="/api/white-labels", tags=["white-labels"])


def get_website_parser() -> WebsiteThemeParser:
    """FastAPI dependency returning the website theme parser (overridable in tests)."""
    return WebsiteThemeParser()


def _config_not_found(config_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"White label configuration {config_id} not found",
    )


# ========== Storefront ==========


@router.get("/config", response_model=StorefrontConfig)
async def get_storefront_config(db: AsyncSession = Depends(get_db_session)) -> StorefrontConfig:
    """Branding for the storefront: active, else default, else built-in."""
    return await WhiteLabelService(db).storefront_config()


@router.patch("/config", response_model=WhiteLabel)
async def update_storefront_config(
    request: WhiteLabelUpdate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    """Update the active configuration, creating one when none is active."""
    return await WhiteLabelService(db).update_active(request)


@router.get("/theme.css", response_class=PlainTextResponse)
async def get_theme_css(db: AsyncSession = Depends(get_db_session)) -> PlainTextResponse:
    css = await WhiteLabelService(db).theme_css()
    return PlainTextResponse(css, media_type="text/css")


@router.post("/parse-website", response_model=WebsiteTheme)
async def parse_website(
    request: ParseWebsiteRequest,
    admin: UserDB = Depends(require_admin),
    parser: WebsiteThemeParser = Depends(get_website_parser),
) -> WebsiteTheme:
    """Suggest a theme from an existing website.

    Raises:
        httpx.HTTPError: If the site cannot be fetched (mapped to 502)
    """
    return await parser.parse(request.url)


# ========== Admin CRUD ==========


@router.get("", response_model=list[WhiteLabel])
async def list_configs(
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> list[WhiteLabelDB]:
    return await WhiteLabelService(db).list_configs()


@router.post("", response_model=WhiteLabel, status_code=status.HTTP_201_CREATED)
async def create_config(
    request: WhiteLabelCreate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    return await WhiteLabelService(db).create_config(request)


@router.get("/{config_id}", response_model=WhiteLabel)
async def get_config(
    config_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    config = await WhiteLabelService(db).get_config(config_id)
    if config is None:
        raise _config_not_found(config_id)
    return config


@router.put("/{config_id}", response_model=WhiteLabel)
async def update_config(
    config_id: int,
    request: WhiteLabelUpdate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    config = await WhiteLabelService(db).update_config(config_id, request)
    if config is None:
        raise _config_not_found(config_id)
    return config


@router.delete("/{config_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_config(
    config_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    if not await WhiteLabelService(db).delete_config(config_id):
        raise _config_not_found(config_id)


@router.post("/{config_id}/activate", response_model=WhiteLabel)
async def activate_config(
    config_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    """Activate a configuration; every other one is deactivated."""
    config = await WhiteLabelService(db).activate(config_id)
    if config is None:
        raise _config_not_found(config_id)
    return config


@router.post("/{config_id}/deactivate", response_model=WhiteLabel)
async def deactivate_config(
    config_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    config = await WhiteLabelService(db).deactivate(config_id)
    if config is None:
        raise _config_not_found(config_id)
    return config


@router.post("/{config_id}/set-default", response_model=WhiteLabel)
async def set_default_config(
    config_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    config = await WhiteLabelService(db).set_default(config_id)
    if config is None:
        raise _config_not_found(config_id)
    return config


@router.post("/{config_id}/unset-default", response_model=WhiteLabel)
async def unset_default_config(
    config_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WhiteLabelDB:
    config = await WhiteLabelService(db).unset_default(config_id)
    if config is None:
        raise _config_not_found(config_id)
    return config
