#!/usr/bin/env python3
"""
Call one d6bridge tool and print its JSON response.

Usage:
    python scripts/call_tool.py --list
    python scripts/call_tool.py get_system_health
    python scripts/call_tool.py get_learners '{"schoolId": 1000, "limit": 5}'
"""

import json
import sys

from d6bridge.config import configure_logging, get_config
from d6bridge.context import build_context
from d6bridge.tools import ToolArgumentError, UnknownToolError, call_tool, list_tools


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    if sys.argv[1] == "--list":
        for tool in list_tools():
            print(f"{tool['name']:<22} {tool['description']}")
        return

    cfg = get_config()
    configure_logging(cfg)

    try:
        arguments = json.loads(sys.argv[2]) if len(sys.argv) > 2 else {}
    except json.JSONDecodeError as e:
        print(f"ERROR: arguments must be a JSON object: {e}")
        sys.exit(1)

    # A one-shot call wants real availability before resolving
    ctx = build_context(cfg, probe="sync")

    try:
        response = call_tool(ctx, sys.argv[1], arguments)
    except (UnknownToolError, ToolArgumentError) as e:
        print(f"ERROR: {e}")
        sys.exit(2)

    print(response.text)
    sys.exit(0 if response.ok else 3)


if __name__ == "__main__":
    main()
