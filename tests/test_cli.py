"""CLI smoke tests via typer's CliRunner."""

import json

from typer.testing import CliRunner

from pytoolagent import main as cli

runner = CliRunner()


def test_tools_lists_builtin_and_dynamic(tmp_path):
    (tmp_path / "tools_config.json").write_text(json.dumps({"tools": [
        {"name": "hello", "description": "Say hi", "command": "echo hi"},
    ]}))
    result = runner.invoke(cli.app, ["tools", "--cwd", str(tmp_path)])
    assert result.exit_code == 0
    for name in ("read_file", "list_files", "edit_file", "grep", "execute", "hello"):
        assert name in result.output


def test_tools_warns_on_broken_config(tmp_path):
    (tmp_path / "tools_config.json").write_text("{broken")
    result = runner.invoke(cli.app, ["tools", "--cwd", str(tmp_path)])
    assert result.exit_code == 0
    assert "Warning" in result.output
    assert "read_file" in result.output


def test_missing_credential_is_fatal(tmp_path, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    result = runner.invoke(cli.app, [
        "run", "-p", "hi", "--cwd", str(tmp_path),
        "--config", str(tmp_path / "absent.yaml"), "--no-events",
    ])
    assert result.exit_code == 1
    assert "Missing API key" in result.output


def test_run_single_prompt(tmp_path, monkeypatch):
    from conftest import ScriptedProvider, text_turn

    provider = ScriptedProvider(turns=[text_turn("hello back")])
    monkeypatch.setenv("ANTHROPIC_API_KEY", "k")
    monkeypatch.setattr("pytoolagent.app_context.resolve_provider", lambda **kw: provider)

    result = runner.invoke(cli.app, [
        "run", "-p", "hello", "--cwd", str(tmp_path), "--no-events",
    ])
    assert result.exit_code == 0, result.output
    assert len(provider.requests) == 1
    assert provider.requests[0]["messages"][0]["content"][0]["text"] == "hello"


def test_run_model_failure_exits_non_zero(tmp_path, monkeypatch):
    from conftest import ScriptedProvider
    from pytoolagent.llm.base import ModelCallError

    provider = ScriptedProvider(turns=[ModelCallError("Provider URLError: down")])
    monkeypatch.setattr("pytoolagent.app_context.resolve_provider", lambda **kw: provider)

    result = runner.invoke(cli.app, ["run", "-p", "hello", "--cwd", str(tmp_path), "--no-events"])
    assert result.exit_code == 1


def test_chat_ends_on_end_of_input(tmp_path, monkeypatch):
    from conftest import ScriptedProvider, text_turn

    provider = ScriptedProvider(turns=[text_turn("hi there")])
    monkeypatch.setattr("pytoolagent.app_context.resolve_provider", lambda **kw: provider)

    result = runner.invoke(cli.app, ["chat", "--cwd", str(tmp_path), "--no-events"], input="hello\n")
    assert result.exit_code == 0, result.output
    assert len(provider.requests) == 1
    assert "hi there" in result.output
