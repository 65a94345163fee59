from __future__ import annotations

import json
import urllib.request
import urllib.error
from dataclasses import dataclass
from typing import Any

from .base import ModelCallError
from ..session.models import AssistantTurn, TextBlock, ToolUseBlock

DEFAULT_MODEL = "claude-3-7-sonnet-latest"
DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_MAX_TOKENS = 1024
API_VERSION = "2023-06-01"


def parse_response(obj: dict[str, Any]) -> AssistantTurn:
    turn = AssistantTurn(stop_reason=obj.get("stop_reason"))
    for block in obj.get("content") or []:
        kind = block.get("type")
        if kind == "text":
            turn.content.append(TextBlock(text=block.get("text") or ""))
        elif kind == "tool_use":
            turn.content.append(ToolUseBlock(
                id=str(block.get("id") or ""),
                name=str(block.get("name") or ""),
                input=block.get("input") if block.get("input") is not None else {},
            ))
        # other block kinds (thinking, etc.) are not part of the conversation model
    return turn


@dataclass
class MessagesProvider:
    """
    Minimal synchronous Messages API client.
    Sends the whole history plus tool declarations and returns the ordered content blocks.
    """
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = 120.0
    provider_name: str = "anthropic"

    def build_payload(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if tools:
            payload["tools"] = tools
        return payload

    def chat(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None = None) -> AssistantTurn:
        if not self.api_key:
            raise ModelCallError("Missing API key. Set ANTHROPIC_API_KEY or configure api_key in pytoolagent.yaml.")

        url = self.base_url.rstrip("/") + "/v1/messages"
        data = json.dumps(self.build_payload(messages, tools)).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": API_VERSION,
        }
        req = urllib.request.Request(url, data=data, headers=headers, method="POST")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if hasattr(e, "read") else ""
            raise ModelCallError(f"Provider HTTPError {e.code}: {e.reason}\n{body}") from e
        except urllib.error.URLError as e:
            raise ModelCallError(f"Provider URLError: {e}") from e
        except TimeoutError as e:
            raise ModelCallError(f"Provider timed out after {self.timeout}s") from e

        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ModelCallError(f"Provider returned invalid JSON: {e}") from e
        if not isinstance(obj, dict):
            raise ModelCallError("Provider returned an unexpected response shape")
        return parse_response(obj)
