import io
from dataclasses import dataclass, field

import pytest
from rich.console import Console

from pytoolagent.session.models import AssistantTurn, TextBlock, ToolUseBlock
from pytoolagent.tools.base import ToolContext


@dataclass
class ScriptedProvider:
    """Returns canned turns in order and records every request it receives."""

    turns: list
    model: str = "test-model"
    requests: list = field(default_factory=list)

    def chat(self, messages, tools=None):
        self.requests.append({"messages": messages, "tools": tools})
        if not self.turns:
            raise AssertionError("model called more times than scripted")
        nxt = self.turns.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def text_turn(text):
    return AssistantTurn(content=[TextBlock(text)], stop_reason="end_turn")


def tool_turn(*calls, text=None):
    content = [TextBlock(text)] if text else []
    content += [ToolUseBlock(id=cid, name=name, input=inp) for cid, name, inp in calls]
    return AssistantTurn(content=content, stop_reason="tool_use")


def scripted_input(*lines):
    it = iter(lines)
    return lambda: next(it, None)


@pytest.fixture
def ctx(tmp_path):
    return ToolContext(cwd=str(tmp_path))


@pytest.fixture
def quiet_console():
    return Console(file=io.StringIO(), width=200, color_system=None)
