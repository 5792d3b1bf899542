from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, List, Union

from ..schemas.domain import EngineRequest, EngineResponse


class ScriptedEngine:
    """Returns queued responses in order and records every request.

    Plain strings are wrapped into successful responses. When the queue runs
    dry an error response is returned.
    """

    def __init__(self, responses: Iterable[Union[str, EngineResponse]] = ()) -> None:
        self._responses: Deque[EngineResponse] = deque(self._wrap(r) for r in responses)
        self.requests: List[EngineRequest] = []

    @staticmethod
    def _wrap(response: Union[str, EngineResponse]) -> EngineResponse:
        if isinstance(response, EngineResponse):
            return response
        return EngineResponse(text=response, metadata={"engine": "scripted"})

    def push(self, response: Union[str, EngineResponse]) -> None:
        self._responses.append(self._wrap(response))

    async def generate(self, request: EngineRequest) -> EngineResponse:
        self.requests.append(request)
        if not self._responses:
            return EngineResponse(text="No scripted response left", is_error=True, metadata={"engine": "scripted"})
        return self._responses.popleft()
