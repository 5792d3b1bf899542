"""Repository interfaces and implementations for agent persistence.

The repository layer is the persistence boundary for the think-cycle and
the scheduler:

- an append-only message log (the conversation the model sees),
- a flat options store (scheduler flags and the cycle lease),
- the active agent context.

In-memory implementations live in ``repos.memory``; async SQLAlchemy
implementations in ``repos.sql``.
"""

from .interfaces import ContextProvider, MessageRepository, OptionsStore
from .memory import InMemoryMessageRepository, InMemoryOptionsStore, StaticContextProvider
from .sql import (
    SqlContextProvider,
    SqlMessageRepository,
    SqlOptionsStore,
    SqlRepoBundle,
    build_sql_repos,
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "ContextProvider",
    "InMemoryMessageRepository",
    "InMemoryOptionsStore",
    "MessageRepository",
    "OptionsStore",
    "SqlContextProvider",
    "SqlMessageRepository",
    "SqlOptionsStore",
    "SqlRepoBundle",
    "StaticContextProvider",
    "build_sql_repos",
    "create_all",
    "create_engine",
    "create_sessionmaker",
]
