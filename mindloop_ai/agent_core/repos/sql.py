from __future__ import annotations

"""SQLAlchemy async repository implementations.

Postgres-backed (or SQLite, for tests) persistence for the interfaces in
``mindloop_ai.agent_core.repos.interfaces``.

Usage
-----

- Create an async engine with ``create_engine``.
- Create tables with ``create_all`` (tests/dev).
- Create a session factory with ``create_sessionmaker``.
- Build repository instances with ``build_sql_repos``.

Transaction model
-----------------

Each repository method opens an ``AsyncSession``, performs its operation and
commits, so every write is durable when the method returns. The scheduler
relies on this: its lease lives in ``ml_options`` and must be visible to
every worker process as soon as ``set`` returns.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..schemas.domain import AgentContext, Message, MessageRole
from .interfaces import DEFAULT_EXCLUDED_ROLES, ContextProvider, MessageRepository, OptionsStore
from .models import Base, ContextRow, MessageRow, OptionRow

logger = logging.getLogger(__name__)


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Postgres URLs are normalised to the ``asyncpg`` driver, e.g.
    ``postgresql://`` becomes ``postgresql+asyncpg://``.
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata (tests and local development)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _message_from_row(row: MessageRow) -> Message:
    return Message(
        id=row.id,
        role=MessageRole(row.role),
        content=row.content,
        context_id=row.context_id,
        is_visible_to_user=row.is_visible_to_user,
        metadata=dict(row.meta or {}),
        created_at=_as_utc(row.created_at),
    )


@dataclass(frozen=True)
class SqlMessageRepository(MessageRepository):
    """SQL implementation of ``MessageRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, message: Message) -> Message:
        async with self.session_factory() as s:
            s.add(
                MessageRow(
                    id=message.id,
                    context_id=message.context_id,
                    role=message.role.value,
                    content=message.content,
                    is_visible_to_user=message.is_visible_to_user,
                    meta=dict(message.metadata),
                    created_at=message.created_at,
                )
            )
            await s.commit()
        return message

    async def recent(self, limit: int, exclude_roles: Iterable[MessageRole] = DEFAULT_EXCLUDED_ROLES) -> List[Message]:
        """
        Return the newest ``limit`` messages, oldest first.

        Args:
            limit: Maximum number of rows.
            exclude_roles: Roles filtered out in SQL.
        """
        if limit <= 0:
            return []
        excluded = [r.value for r in exclude_roles]
        stmt = select(MessageRow)
        if excluded:
            stmt = stmt.where(MessageRow.role.not_in(excluded))
        stmt = stmt.order_by(MessageRow.seq.desc()).limit(limit)
        async with self.session_factory() as s:
            rows = (await s.execute(stmt)).scalars().all()
        return [_message_from_row(r) for r in reversed(rows)]

    async def list(self, limit: int = 100) -> List[Message]:
        return await self.recent(limit, exclude_roles=())


@dataclass(frozen=True)
class SqlOptionsStore(OptionsStore):
    """SQL implementation of ``OptionsStore`` backed by ``ml_options``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def get(self, key: str, default: Any = None) -> Any:
        async with self.session_factory() as s:
            row = await s.get(OptionRow, key)
        if row is None:
            return default
        return row.value

    async def set(self, key: str, value: Any) -> None:
        async with self.session_factory() as s:
            row = await s.get(OptionRow, key)
            if row is None:
                s.add(OptionRow(key=key, value=value, updated_at=_utc_now()))
            else:
                row.value = value
                row.updated_at = _utc_now()
            await s.commit()

    async def delete(self, key: str) -> None:
        async with self.session_factory() as s:
            await s.execute(delete(OptionRow).where(OptionRow.key == key))
            await s.commit()


@dataclass(frozen=True)
class SqlContextProvider(ContextProvider):
    """SQL implementation of ``ContextProvider`` backed by ``ml_agent_contexts``.

    ``fallback`` is returned when no context row is marked active.
    """

    session_factory: async_sessionmaker[AsyncSession]
    fallback: Optional[AgentContext] = None

    async def get_active(self) -> AgentContext:
        stmt = select(ContextRow).where(ContextRow.is_active.is_(True)).limit(1)
        async with self.session_factory() as s:
            row = (await s.execute(stmt)).scalars().first()
        if row is None:
            logger.warning("No active agent context stored; using fallback context")
            return self.fallback or AgentContext()
        return AgentContext(
            id=row.id,
            name=row.name,
            engine=row.engine,
            system_prompt=row.system_prompt,
            disabled_plugins=list(row.disabled_plugins or []),
            mood=row.mood,
            memory=row.memory,
            history_limit=row.history_limit,
            loop_interval_seconds=row.loop_interval_seconds,
            plugin_config=dict(row.plugin_config or {}),
        )

    async def save(self, context: AgentContext, *, active: bool = True) -> None:
        """Insert or update ``context``; when ``active`` it becomes the only active row."""
        async with self.session_factory() as s:
            if active:
                await s.execute(update(ContextRow).values(is_active=False))
            row = await s.get(ContextRow, context.id)
            if row is None:
                row = ContextRow(id=context.id)
                s.add(row)
            row.name = context.name
            row.engine = context.engine
            row.system_prompt = context.system_prompt
            row.disabled_plugins = list(context.disabled_plugins)
            row.mood = context.mood
            row.memory = context.memory
            row.history_limit = context.history_limit
            row.loop_interval_seconds = context.loop_interval_seconds
            row.plugin_config = dict(context.plugin_config)
            row.is_active = active
            await s.commit()


@dataclass(frozen=True)
class SqlRepoBundle:
    messages: SqlMessageRepository
    options: SqlOptionsStore
    contexts: SqlContextProvider


def build_sql_repos(
    *, session_factory: async_sessionmaker[AsyncSession], fallback_context: Optional[AgentContext] = None
) -> SqlRepoBundle:
    """Build a ``SqlRepoBundle`` from a session factory."""
    return SqlRepoBundle(
        messages=SqlMessageRepository(session_factory=session_factory),
        options=SqlOptionsStore(session_factory=session_factory),
        contexts=SqlContextProvider(session_factory=session_factory, fallback=fallback_context),
    )
