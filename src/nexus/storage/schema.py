"""SQLAlchemy ORM schema for Nexus.

Defines the tables: context_state (a single row holding the shared
state), error_records (bounded rolling error log), _nexus_meta.

ErrorKind is imported from the domain models, not redefined here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from nexus.models.errors import ErrorKind


class Base(DeclarativeBase):
    """Base class for all Nexus ORM models."""

    pass


class ContextStateRow(Base):
    """The saved shared state. Only row ``id == 1`` is used."""

    __tablename__ = "context_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    objective: Mapped[str] = mapped_column(Text, nullable=False, default="")
    scratchpad: Mapped[str] = mapped_column(Text, nullable=False, default="")
    artifact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    artifact_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class ErrorRecordRow(Base):
    """One recorded failure. Oldest rows are pruned past the log size."""

    __tablename__ = "error_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[ErrorKind] = mapped_column(nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    hint: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class NexusMetaRow(Base):
    """Key-value metadata for the Nexus database itself (e.g., schema version)."""

    __tablename__ = "_nexus_meta"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
