from __future__ import annotations
import json
import tempfile
from pathlib import Path

from pytoolagent.tools.base import ToolContext
from pytoolagent.tools.builtin import register_builtin_tools
from pytoolagent.tools.registry import ToolRegistry
from pytoolagent.dynamic.bridge import register_dynamic_tools
from pytoolagent.dynamic.loader import load_dynamic_tools

def main():
    with tempfile.TemporaryDirectory() as td:
        cwd = Path(td)
        ctx = ToolContext(cwd=str(cwd))
        reg = ToolRegistry()
        register_builtin_tools(reg)

        # edit_file (create)
        print("CREATE:", reg.dispatch("edit_file", {"path": "src/a.txt", "old_str": "", "new_str": "hello\nworld\n"}, ctx).content)

        # read_file
        print("READ:", reg.dispatch("read_file", {"path": "src/a.txt"}, ctx).content.strip())

        # edit_file (replace)
        print("EDIT:", reg.dispatch("edit_file", {"path": "src/a.txt", "old_str": "world", "new_str": "WORLD"}, ctx).content)

        # grep
        print("GREP:", reg.dispatch("grep", {"pattern": "WORLD"}, ctx).content)

        # list_files
        (cwd / "node_modules").mkdir()
        (cwd / "node_modules" / "skip.js").write_text("")
        print("LIST:", reg.dispatch("list_files", {}, ctx).content)

        # execute
        print("EXEC:", reg.dispatch("execute", {"command": "echo hi; exit 3"}, ctx).content)
        print("TIMEOUT:", reg.dispatch("execute", {"command": "sleep 3", "timeout": 1}, ctx).content)

        # dynamic tool
        cfg = cwd / "tools_config.json"
        cfg.write_text(json.dumps({"tools": [{
            "name": "greet",
            "description": "Say hello",
            "command": "echo hello {{name}}",
            "parameters": [{"name": "name", "required": True}],
        }]}))
        register_dynamic_tools(reg, load_dynamic_tools(cfg, warn=print), warn=print)
        print("DYN:", reg.dispatch("greet", {"name": "agent"}, ctx).content)
        print("DYN (missing):", reg.dispatch("greet", {}, ctx).content)
        print("UNKNOWN:", reg.dispatch("nope", {}, ctx).content)

if __name__ == "__main__":
    main()
