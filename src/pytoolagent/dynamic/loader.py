from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

from platformdirs import user_config_dir

from .bridge import TemplateCommandTool, check_template
from .models import DynamicToolConfig, DynamicToolConfigError, DynamicToolDecl, DynamicToolError

APP_NAME = "pytoolagent"
CONFIG_FILENAME = "tools_config.json"


def candidate_paths(cwd: Path) -> list[Path]:
    # project-level first, then the user's config dir
    return [
        cwd / CONFIG_FILENAME,
        Path(user_config_dir(APP_NAME)) / CONFIG_FILENAME,
    ]


def find_tools_config(*, cwd: Path, explicit_path: Path | None = None) -> Path:
    """Pick the tools config to load.

    An explicit path always wins, even if it does not exist (so the caller
    gets a warning about it). Otherwise the first existing candidate is used,
    falling back to ``<cwd>/tools_config.json``.
    """
    if explicit_path is not None:
        return explicit_path.expanduser().resolve()
    for p in candidate_paths(cwd):
        if p.is_file():
            return p
    return cwd / CONFIG_FILENAME


def load_dynamic_tools(
    config_path: Path,
    warn: Callable[[str], None] | None = None,
) -> list[TemplateCommandTool]:
    """Build command tools from a JSON tools config.

    Raises DynamicToolConfigError if the file cannot be read or is not a valid
    config document. A bad individual declaration is reported through
    ``warn`` and skipped; the rest still load.
    """
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DynamicToolConfigError(f"failed to read tools config file {config_path}: {e}") from e
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise DynamicToolConfigError(f"failed to parse tools config {config_path}: {e}") from e

    cfg = DynamicToolConfig.from_obj(obj)

    tools: list[TemplateCommandTool] = []
    for i, raw in enumerate(cfg.tools):
        try:
            decl = DynamicToolDecl.from_obj(raw)
        except DynamicToolError as e:
            if warn:
                warn(f"Failed to create tool #{i + 1}: {e}")
            continue

        problem = check_template(decl.command, {p.name for p in decl.parameters})
        if problem and warn:
            # still registered; each call will report the template error
            warn(f"Tool {decl.name} has an invalid command template: {problem}")

        tools.append(TemplateCommandTool.from_decl(decl))
    return tools
