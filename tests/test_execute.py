"""Tests for the execute tool and the shell runner underneath it."""

import json
import os
import time

import pytest

from pytoolagent.tools.builtin_tools.bash_tool import ExecuteTool
from pytoolagent.util.subprocess import (
    DEFAULT_TIMEOUT,
    MAX_TIMEOUT,
    CommandTimeoutError,
    clamp_timeout,
    run_shell,
    shell_argv,
)

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses bash syntax")


class TestClampTimeout:

    @pytest.mark.parametrize("raw, expected", [
        (None, DEFAULT_TIMEOUT),
        (0, DEFAULT_TIMEOUT),
        (-5, DEFAULT_TIMEOUT),
        ("abc", DEFAULT_TIMEOUT),
        (1, 1),
        (120, 120),
        (300, 300),
        (301, MAX_TIMEOUT),
        (10_000, MAX_TIMEOUT),
    ])
    def test_bounds(self, raw, expected):
        assert clamp_timeout(raw) == expected


def test_shell_argv_matches_platform():
    argv = shell_argv("echo hi")
    if os.name == "nt":
        assert argv == ["cmd", "/C", "echo hi"]
    else:
        assert argv == ["bash", "-c", "echo hi"]


@posix_only
class TestExecuteTool:

    def test_captures_stdout_and_stderr_separately(self, ctx):
        res = ExecuteTool().execute(ctx, {"command": "echo out; echo err >&2"})
        assert not res.is_error
        payload = json.loads(res.content)
        assert payload == {"stdout": "out\n", "stderr": "err\n", "exit_code": 0}

    def test_non_zero_exit_is_a_successful_result(self, ctx):
        res = ExecuteTool().execute(ctx, {"command": "exit 3"})
        assert not res.is_error
        assert json.loads(res.content)["exit_code"] == 3

    def test_timeout_is_an_error(self, ctx):
        t0 = time.monotonic()
        res = ExecuteTool().execute(ctx, {"command": "sleep 5", "timeout": 1})
        assert res.is_error
        assert "timed out after 1 seconds" in res.content
        assert time.monotonic() - t0 < 4

    def test_timeout_kills_background_children(self, ctx):
        t0 = time.monotonic()
        res = ExecuteTool().execute(ctx, {"command": "sleep 5 & sleep 5; wait", "timeout": 1})
        assert res.is_error
        assert time.monotonic() - t0 < 4

    def test_runs_in_context_cwd(self, tmp_path, ctx):
        res = ExecuteTool().execute(ctx, {"command": "pwd"})
        assert os.path.realpath(json.loads(res.content)["stdout"].strip()) == os.path.realpath(tmp_path)

    def test_empty_command(self, ctx):
        res = ExecuteTool().execute(ctx, {"command": "   "})
        assert res.is_error


@posix_only
def test_run_shell_raises_typed_timeout():
    with pytest.raises(CommandTimeoutError) as exc_info:
        run_shell("sleep 3", timeout=1)
    assert exc_info.value.timeout == 1
