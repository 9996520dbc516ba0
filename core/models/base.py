"""Base model and mixins for all SQLAlchemy models.

Provides:
- Base: Declarative base class for all models
- IdentityMixin: Adds an auto-incrementing integer primary key

Every model inherits from Base and includes IdentityMixin. Integer ids keep
the URLs and JSON payloads compatible with the existing Boardcamp clients.
"""

from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all Boardcamp models."""
    pass


class IdentityMixin:
    """Mixin providing the standard `id` primary key column."""

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
