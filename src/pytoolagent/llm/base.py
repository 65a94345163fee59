from __future__ import annotations

from typing import Any, Protocol

from ..session.models import AssistantTurn


class ModelCallError(RuntimeError):
    pass


class ChatProvider(Protocol):
    model: str

    def chat(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None = None) -> AssistantTurn: ...
