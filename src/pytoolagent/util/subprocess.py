from __future__ import annotations

import json
import os
import signal
import subprocess
from dataclasses import dataclass

DEFAULT_TIMEOUT = 30
MAX_TIMEOUT = 300


class CommandError(RuntimeError):
    pass


class CommandLaunchError(CommandError):
    pass


class CommandTimeoutError(CommandError):
    def __init__(self, timeout: int):
        super().__init__(f"command timed out after {timeout} seconds")
        self.timeout = timeout


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str
    exit_code: int

    def to_json(self) -> str:
        return json.dumps(
            {"stdout": self.stdout, "stderr": self.stderr, "exit_code": self.exit_code},
            ensure_ascii=False,
            indent=2,
        )


def clamp_timeout(timeout: object) -> int:
    """Normalize a timeout in seconds: missing/invalid/<=0 -> default, capped at MAX_TIMEOUT."""
    try:
        t = int(timeout)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT
    if t <= 0:
        return DEFAULT_TIMEOUT
    return min(t, MAX_TIMEOUT)


def shell_argv(command: str) -> list[str]:
    if os.name == "nt":
        return ["cmd", "/C", command]
    return ["bash", "-c", command]


def _kill_tree(proc: subprocess.Popen) -> None:
    if os.name == "nt":
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_shell(command: str, cwd: str | None = None, timeout: int = DEFAULT_TIMEOUT) -> CommandResult:
    """Run ``command`` through the platform shell and capture its output.

    A non-zero exit status is returned as part of the result. Exceeding
    ``timeout`` kills the whole process group and raises CommandTimeoutError;
    no partial output is returned in that case.
    """
    popen_kwargs: dict = {}
    if os.name != "nt":
        # own process group so a timeout also reaps grandchildren
        popen_kwargs["start_new_session"] = True

    try:
        proc = subprocess.Popen(
            shell_argv(command),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            **popen_kwargs,
        )
    except OSError as e:
        raise CommandLaunchError(f"failed to execute command: {e}") from e

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_tree(proc)
        proc.communicate()
        raise CommandTimeoutError(timeout)

    return CommandResult(stdout=stdout or "", stderr=stderr or "", exit_code=proc.returncode)
