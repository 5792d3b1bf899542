from __future__ import annotations

"""In-memory repository implementations for tests and local runs."""

import copy
from typing import Any, Dict, Iterable, List, Optional

from ..schemas.domain import AgentContext, Message, MessageRole
from .interfaces import DEFAULT_EXCLUDED_ROLES


class InMemoryMessageRepository:
    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self.messages: List[Message] = list(messages)

    async def create(self, message: Message) -> Message:
        self.messages.append(message)
        return message

    async def recent(self, limit: int, exclude_roles: Iterable[MessageRole] = DEFAULT_EXCLUDED_ROLES) -> List[Message]:
        if limit <= 0:
            return []
        excluded = set(exclude_roles)
        kept = [m for m in self.messages if m.role not in excluded]
        return kept[-limit:]

    async def list(self, limit: int = 100) -> List[Message]:
        if limit <= 0:
            return []
        return self.messages[-limit:]


class InMemoryOptionsStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self.values: Dict[str, Any] = dict(initial or {})

    async def get(self, key: str, default: Any = None) -> Any:
        if key not in self.values:
            return default
        return copy.deepcopy(self.values[key])

    async def set(self, key: str, value: Any) -> None:
        self.values[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)


class StaticContextProvider:
    """Always returns the same context; ``set_active`` swaps it."""

    def __init__(self, context: Optional[AgentContext] = None) -> None:
        self.context = context or AgentContext()

    async def get_active(self) -> AgentContext:
        return self.context

    async def set_active(self, context: AgentContext) -> None:
        self.context = context
