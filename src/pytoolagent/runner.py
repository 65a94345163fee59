from __future__ import annotations

import json
import time
from enum import Enum
from typing import Any, Callable, Optional

from rich.console import Console
from rich.markup import escape

from .events.store import EventStore
from .llm.base import ChatProvider, ModelCallError
from .session.models import Message, TextBlock, ToolResultBlock, ToolUseBlock
from .tools.base import ToolContext, ToolResult
from .tools.registry import ToolRegistry

console = Console()


class AgentState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    AWAITING_MODEL_RESPONSE = "awaiting_model_response"
    DISPATCHING_TOOLS = "dispatching_tools"


def _input_preview(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return json.dumps(raw, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(raw)


class Agent:
    """Turn-taking loop between the user, the model and the tool registry.

    ``get_user_message`` returns the next input line, or None at end of input.
    The history is owned by the agent and only grows; tool results for a model
    turn are appended as one user message before the model is called again,
    so the user is never prompted while a tool call is unanswered.
    """

    def __init__(
        self,
        provider: ChatProvider,
        tools: ToolRegistry,
        get_user_message: Callable[[], Optional[str]],
        *,
        cwd: str,
        debug: bool = False,
        events: EventStore | None = None,
        out: Console | None = None,
    ) -> None:
        self.provider = provider
        self.tools = tools
        self.get_user_message = get_user_message
        self.cwd = cwd
        self.debug = debug
        self.events = events
        self.console = out or console
        self.history: list[Message] = []
        self.state = AgentState.AWAITING_USER_INPUT
        self._pending: list[ToolUseBlock] = []
        self._step = 0

    def run(self) -> None:
        """Run until end of input. A failed model call raises ModelCallError."""
        while True:
            if self.state is AgentState.AWAITING_USER_INPUT:
                text = self.get_user_message()
                if text is None:
                    return
                self.history.append(Message.user_text(text))
                self.state = AgentState.AWAITING_MODEL_RESPONSE

            elif self.state is AgentState.AWAITING_MODEL_RESPONSE:
                reply = self._infer()
                self.history.append(reply)
                for block in reply.content:
                    if isinstance(block, TextBlock):
                        self.console.print(f"[bold yellow]Assistant[/bold yellow]: {escape(block.text)}")
                self._pending = reply.tool_uses()
                self.state = (
                    AgentState.DISPATCHING_TOOLS if self._pending else AgentState.AWAITING_USER_INPUT
                )

            elif self.state is AgentState.DISPATCHING_TOOLS:
                results = [self.dispatch(call) for call in self._pending]
                self._pending = []
                self.history.append(Message(role="user", content=list(results)))
                self.state = AgentState.AWAITING_MODEL_RESPONSE

    def _infer(self) -> Message:
        messages = [m.to_wire() for m in self.history]
        tools = [spec.to_wire() for spec in self.tools.list_specs()]
        step = self._step
        self._step += 1

        if self.events:
            self.events.llm_request(step, self.provider.model, len(messages), len(tools))

        t0 = time.perf_counter()
        try:
            turn = self.provider.chat(messages, tools=tools)
        except Exception as e:
            if self.events:
                self.events.llm_error(step, e)
            if isinstance(e, ModelCallError):
                raise
            raise ModelCallError(f"model call failed: {e}") from e
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        reply = turn.to_message()
        if self.events:
            self.events.llm_response(
                step,
                elapsed_ms,
                turn.stop_reason,
                reply.text(),
                [{"id": c.id, "name": c.name, "input": c.input} for c in reply.tool_uses()],
            )
        return reply

    def dispatch(self, call: ToolUseBlock) -> ToolResultBlock:
        """Run one requested tool call. Tool failures come back as error results, never raised."""
        preview = _input_preview(call.input)
        self.console.print(f"[bold green]tool[/bold green]: {escape(call.name)}({escape(preview)})")

        if self.events:
            self.events.tool_call(call.name, call.id, call.input, known=call.name in self.tools)

        t0 = time.perf_counter()
        res: ToolResult = self.tools.dispatch(call.name, call.input, ToolContext(cwd=self.cwd))
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        if self.debug:
            kind = "Tool error" if res.is_error else "Tool response"
            self.console.print(f"[bold cyan]debug[/bold cyan]: {kind}: {escape(res.content)}")

        if self.events:
            self.events.tool_result(call.name, call.id, res.content, res.is_error, elapsed_ms)

        return ToolResultBlock(tool_use_id=call.id, content=res.content, is_error=res.is_error)
