from __future__ import annotations

"""Repository interface contracts.

The think-cycle and the scheduler depend on these Protocols instead of
concrete persistence implementations.

Contract guidelines
-------------------

- All methods are async.
- Implementations must not leak SQLAlchemy sessions or transactions.
- The message repository is append-only.
- The options store is a flat key/value map with JSON-serialisable values;
  the scheduler keeps its run flags and lease there.
"""

from typing import Any, Iterable, List, Protocol

from ..schemas.domain import AgentContext, Message, MessageRole

DEFAULT_EXCLUDED_ROLES = (MessageRole.system,)


class MessageRepository(Protocol):
    """Append-only conversation log."""

    async def create(self, message: Message) -> Message:
        """
        Persist a new message.

        Args:
            message: The message to append.

        Returns:
            The stored message.
        """
        ...

    async def recent(self, limit: int, exclude_roles: Iterable[MessageRole] = DEFAULT_EXCLUDED_ROLES) -> List[Message]:
        """
        Return the newest ``limit`` messages, oldest first.

        Args:
            limit: Maximum number of messages.
            exclude_roles: Roles that never enter the model history.
        """
        ...

    async def list(self, limit: int = 100) -> List[Message]:
        """Return the newest ``limit`` messages of every role, oldest first."""
        ...


class OptionsStore(Protocol):
    """Flat key/value settings store."""

    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...


class ContextProvider(Protocol):
    """Resolves the active agent context for the next cycle."""

    async def get_active(self) -> AgentContext: ...
