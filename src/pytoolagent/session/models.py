from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal, Union

Role = Literal["user", "assistant"]

@dataclass(frozen=True)
class TextBlock:
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}

@dataclass(frozen=True)
class ToolUseBlock:
    id: str
    name: str
    input: Any  # parsed json object as sent by the model

    def to_wire(self) -> dict[str, Any]:
        return {"type": "tool_use", "id": self.id, "name": self.name, "input": self.input}

@dataclass(frozen=True)
class ToolResultBlock:
    tool_use_id: str
    content: str
    is_error: bool = False

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
            "is_error": self.is_error,
        }

ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock]

@dataclass
class Message:
    role: Role
    content: list[ContentBlock] = field(default_factory=list)

    @staticmethod
    def user_text(text: str) -> "Message":
        return Message(role="user", content=[TextBlock(text)])

    def tool_uses(self) -> list[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    def text(self) -> str:
        return "\n".join(b.text for b in self.content if isinstance(b, TextBlock))

    def to_wire(self) -> dict[str, Any]:
        return {"role": self.role, "content": [b.to_wire() for b in self.content]}

@dataclass
class AssistantTurn:
    """One model response: ordered text and tool_use blocks."""
    content: list[ContentBlock] = field(default_factory=list)
    stop_reason: str | None = None

    def to_message(self) -> Message:
        return Message(role="assistant", content=list(self.content))
