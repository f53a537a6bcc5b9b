"""Shared SQLAlchemy declarative base for all pharmacy tables."""

from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

# Constraint naming convention shared with Alembic
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "%(table_name)s_%(column_0_name)s_unique",
    "ck": "%(table_name)s_%(constraint_name)s_check",
    "fk": "%(table_name)s_%(column_0_name)s_%(referred_table_name)s_id_fk",
    "pk": "%(table_name)s_pkey",
}

# Single Base for all models so relationships resolve across modules
Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))
