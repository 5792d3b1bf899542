from __future__ import annotations

"""SQLAlchemy ORM models for agent persistence.

These ORM models define the SQL schema used by
``mindloop_ai.agent_core.repos.sql``.

Design
------

- Messages are an append-only log ordered by an autoincrement ``seq``.
- Options are a flat key/value table holding the scheduler flags and lease.
- Contexts store the agent configuration bundle; one row is active.

JSON columns use ``JSONB`` on Postgres and generic ``JSON`` elsewhere so the
same models run against SQLite in tests. Table names are prefixed with
``ml_`` to avoid collisions in shared databases.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JsonType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class MessageRow(Base):
    """Row model for ``ml_messages``."""

    __tablename__ = "ml_messages"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    context_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    role: Mapped[str] = mapped_column(String(16), index=True)
    content: Mapped[str] = mapped_column(Text)
    is_visible_to_user: Mapped[bool] = mapped_column(Boolean, default=False)
    meta: Mapped[Dict[str, Any]] = mapped_column("metadata", JsonType, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class OptionRow(Base):
    """Row model for ``ml_options``; ``value`` holds any JSON scalar or document."""

    __tablename__ = "ml_options"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[Any] = mapped_column(JsonType, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class ContextRow(Base):
    """Row model for ``ml_agent_contexts``."""

    __tablename__ = "ml_agent_contexts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128))
    engine: Mapped[str] = mapped_column(String(128))
    system_prompt: Mapped[str] = mapped_column(Text, default="")
    disabled_plugins: Mapped[List[str]] = mapped_column(JsonType, default=list)
    mood: Mapped[float] = mapped_column(Float, default=0.5)
    memory: Mapped[str] = mapped_column(Text, default="")
    history_limit: Mapped[int] = mapped_column(Integer, default=8)
    loop_interval_seconds: Mapped[int] = mapped_column(Integer, default=15)
    plugin_config: Mapped[Dict[str, Dict[str, Any]]] = mapped_column(JsonType, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
