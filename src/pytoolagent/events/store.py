from __future__ import annotations

import json
import time
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterator

from platformdirs import user_data_dir

APP_NAME = "pytoolagent"

LLM_REQUEST = "llm.request"
LLM_RESPONSE = "llm.response"
LLM_ERROR = "llm.error"
TOOL_CALL = "tool.call"
TOOL_MISSING = "tool.missing"
TOOL_RESULT = "tool.result"
DYNAMIC_TOOLS_LOADED = "dynamic_tools.loaded"
DYNAMIC_TOOLS_WARNING = "dynamic_tools.warning"

# long model text / tool output is cut to this many characters
PREVIEW_CHARS = 4000


@dataclass
class Event:
    type: str
    data: dict[str, Any]
    ts: float = field(default_factory=time.time)

    @staticmethod
    def from_line(line: str) -> "Event | None":
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            return None
        if not isinstance(obj, dict):
            return None
        data = obj.get("data")
        return Event(
            type=str(obj.get("type")),
            data=data if isinstance(data, dict) else {},
            ts=float(obj.get("ts") or 0.0),
        )


@dataclass
class EventStore:
    """Append-only jsonl trace of one agent session.

    One line per event: model requests and replies, tool calls and their
    results, and dynamic tool loading. A line cut short by a crash is skipped
    when reading back.
    """

    session_id: str
    path: Path

    @staticmethod
    def open(session_id: str | None = None, root: Path | None = None) -> "EventStore":
        sid = session_id or uuid.uuid4().hex[:12]
        d = (root or Path(user_data_dir(APP_NAME))) / "events"
        d.mkdir(parents=True, exist_ok=True)
        return EventStore(session_id=sid, path=d / f"{sid}.jsonl")

    def append(self, event_type: str, data: dict[str, Any]) -> Event:
        ev = Event(type=event_type, data=data)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(ev), ensure_ascii=False, default=str) + "\n")
        return ev

    def iter_events(self, event_type: str | None = None) -> Iterator[Event]:
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if not line.strip():
                    continue
                ev = Event.from_line(line)
                if ev is None or (event_type and ev.type != event_type):
                    continue
                yield ev

    # model calls

    def llm_request(self, step: int, model: str, messages_count: int, tools_count: int) -> Event:
        return self.append(
            LLM_REQUEST,
            {"step": step, "model": model, "messages_count": messages_count, "tools_count": tools_count},
        )

    def llm_response(
        self, step: int, elapsed_ms: int, stop_reason: str | None, text: str, tool_calls: list[dict[str, Any]]
    ) -> Event:
        return self.append(
            LLM_RESPONSE,
            {
                "step": step,
                "elapsed_ms": elapsed_ms,
                "stop_reason": stop_reason,
                "text": text[:PREVIEW_CHARS],
                "tool_calls": tool_calls,
            },
        )

    def llm_error(self, step: int, error: Exception) -> Event:
        return self.append(LLM_ERROR, {"step": step, "error": str(error)[:2000]})

    # tool dispatch

    def tool_call(self, tool: str, tool_call_id: str, tool_input: Any, *, known: bool = True) -> Event:
        return self.append(
            TOOL_CALL if known else TOOL_MISSING,
            {"tool": tool, "tool_call_id": tool_call_id, "input": tool_input},
        )

    def tool_result(self, tool: str, tool_call_id: str, content: str, is_error: bool, elapsed_ms: int) -> Event:
        return self.append(
            TOOL_RESULT,
            {
                "tool": tool,
                "tool_call_id": tool_call_id,
                "is_error": is_error,
                "elapsed_ms": elapsed_ms,
                "content_len": len(content),
                "content_preview": content[:PREVIEW_CHARS],
            },
        )

    # dynamic tools

    def dynamic_tools_loaded(self, path: Path, names: list[str]) -> Event:
        return self.append(DYNAMIC_TOOLS_LOADED, {"path": str(path), "tools": names})

    def dynamic_tools_warning(self, message: str) -> Event:
        return self.append(DYNAMIC_TOOLS_WARNING, {"message": message})
