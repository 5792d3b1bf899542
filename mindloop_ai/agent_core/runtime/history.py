from __future__ import annotations

from typing import Iterable, List

from ..schemas.domain import HistoryEntry, Message, MessageRole

CONTINUATION_ROLES = (MessageRole.thinking, MessageRole.speaking)


def shape_cycle_history(
    messages: Iterable[Message],
    *,
    start_instruction: str,
    continue_instruction: str,
) -> List[HistoryEntry]:
    """
    Turn recent messages (oldest first) into the engine history.

    An empty history becomes a single user turn with ``start_instruction``.
    When the agent spoke last (``thinking``/``speaking``), a user turn with
    ``continue_instruction`` is appended so the model keeps going.
    """
    history = [HistoryEntry(role=m.role.value, content=m.content) for m in messages]
    if not history:
        return [HistoryEntry(role=MessageRole.user.value, content=start_instruction)]
    if history[-1].role in {r.value for r in CONTINUATION_ROLES}:
        history.append(HistoryEntry(role=MessageRole.user.value, content=continue_instruction))
    return history
