"""Tests for the backend client and provider configuration (no network)."""

import io
import json
import urllib.error

import pytest

from pytoolagent.llm import messages_api
from pytoolagent.llm.base import ModelCallError
from pytoolagent.llm.factory import load_provider_registry, resolve_provider
from pytoolagent.llm.messages_api import DEFAULT_MAX_TOKENS, MessagesProvider, parse_response
from pytoolagent.session.models import TextBlock, ToolUseBlock


class _FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class TestMessagesProvider:

    def test_payload_shape(self):
        p = MessagesProvider(model="m", api_key="k", max_tokens=64)
        payload = p.build_payload([{"role": "user", "content": []}], tools=[{"name": "t"}])
        assert payload == {
            "model": "m",
            "max_tokens": 64,
            "messages": [{"role": "user", "content": []}],
            "tools": [{"name": "t"}],
        }

    def test_parse_response_keeps_block_order(self):
        turn = parse_response({
            "stop_reason": "tool_use",
            "content": [
                {"type": "text", "text": "checking"},
                {"type": "tool_use", "id": "tu_1", "name": "grep", "input": {"pattern": "x"}},
                {"type": "thinking", "thinking": "..."},
            ],
        })
        assert turn.stop_reason == "tool_use"
        assert turn.content == [
            TextBlock("checking"),
            ToolUseBlock(id="tu_1", name="grep", input={"pattern": "x"}),
        ]

    def test_chat_posts_and_parses(self, monkeypatch):
        captured = {}

        def fake_urlopen(req, timeout):
            captured["url"] = req.full_url
            captured["headers"] = dict(req.header_items())
            captured["body"] = json.loads(req.data)
            body = {"content": [{"type": "text", "text": "pong"}], "stop_reason": "end_turn"}
            return _FakeResponse(json.dumps(body).encode())

        monkeypatch.setattr(messages_api.urllib.request, "urlopen", fake_urlopen)
        p = MessagesProvider(model="m", base_url="http://backend/", api_key="secret")
        turn = p.chat([{"role": "user", "content": [{"type": "text", "text": "ping"}]}])

        assert captured["url"] == "http://backend/v1/messages"
        assert captured["headers"]["X-api-key"] == "secret"
        assert captured["body"]["max_tokens"] == DEFAULT_MAX_TOKENS
        assert "tools" not in captured["body"]
        assert turn.content == [TextBlock("pong")]

    def test_http_error_becomes_model_call_error(self, monkeypatch):
        def fake_urlopen(req, timeout):
            raise urllib.error.HTTPError(req.full_url, 529, "Overloaded", {}, io.BytesIO(b"busy"))

        monkeypatch.setattr(messages_api.urllib.request, "urlopen", fake_urlopen)
        with pytest.raises(ModelCallError, match="529"):
            MessagesProvider(api_key="k").chat([])

    def test_missing_key(self):
        with pytest.raises(ModelCallError):
            MessagesProvider(api_key="").chat([])


class TestProviderConfig:

    def test_yaml_with_env_placeholder(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_KEY", "sk-test")
        cfg = tmp_path / "pytoolagent.yaml"
        cfg.write_text(
            "providers:\n"
            "  main:\n"
            "    model: claude-test\n"
            "    api_key: ${MY_KEY}\n"
            "    max_tokens: 2048\n"
        )
        reg = load_provider_registry(cfg)
        main = reg.get("MAIN")
        assert main.api_key == "sk-test"
        assert main.max_tokens == 2048

        provider = resolve_provider(provider=None, model="override", yaml_path=cfg)
        assert provider.model == "override"
        assert provider.api_key == "sk-test"

    def test_unset_placeholder_rejected(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
        cfg = tmp_path / "pytoolagent.yaml"
        cfg.write_text("providers:\n  a:\n    api_key: ${NOT_SET_ANYWHERE}\n")
        with pytest.raises(ValueError):
            load_provider_registry(cfg)

    def test_env_fallback_requires_key(self, tmp_path, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(RuntimeError, match="Missing API key"):
            resolve_provider(provider=None, yaml_path=tmp_path / "absent.yaml")

    def test_env_fallback(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        monkeypatch.setenv("PYTOOLAGENT_MODEL", "env-model")
        provider = resolve_provider(provider=None, yaml_path=tmp_path / "absent.yaml")
        assert provider.api_key == "env-key"
        assert provider.model == "env-model"
