"""Common plumbing for async repository classes."""

from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository:
    """Base class for services that persist ORM rows through an AsyncSession."""

    def __init__(self, db_session: AsyncSession):
        """Initialize repository.

        Args:
            db_session: Database session for persistence
        """
        self.db_session = db_session

    async def _persist(self, *rows: ModelT) -> None:
        """Add rows, commit, and reload server-generated columns."""
        for row in rows:
            self.db_session.add(row)
        await self.db_session.commit()
        for row in rows:
            await self.db_session.refresh(row)

    @staticmethod
    def _apply_changes(row: ModelT, changes: BaseModel | dict[str, Any]) -> dict[str, Any]:
        """Copy explicitly-set fields onto an ORM row.

        Returns:
            The applied field mapping
        """
        if isinstance(changes, BaseModel):
            values = changes.model_dump(exclude_unset=True, mode="json")
        else:
            values = dict(changes)

        for field, value in values.items():
            setattr(row, field, value)
        return values
