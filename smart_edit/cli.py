"""
CLI entry point — run the MCP server or a single edit tool from the shell.
"""

import argparse
import json
import os
import sys

from .config import Config
from .editing.metrics import read_edit_stats
from .log_setup import setup_logger
from .tools import EditTools


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-edit",
        description="Fuzzy code replacement and patch application",
    )
    parser.add_argument("--config", default=None,
                        help="Path to a .smart_edit.yaml config file")
    parser.add_argument("--root", default=None,
                        help="Sandbox root directory (default: from config, else CWD)")
    parser.add_argument("--no-metrics", action="store_true",
                        help="Do not append to the edit metrics log")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the MCP server on stdio")

    p = sub.add_parser("replace", help="Replace a code snippet")
    p.add_argument("file_path")
    p.add_argument("--old", required=True, help="Code to find")
    p.add_argument("--new", required=True, help="Replacement code")
    p.add_argument("--mode", choices=["exact", "fuzzy", "smart"], default=None,
                   help="Match mode (default: from config)")

    p = sub.add_parser("patch", help="Apply a patch to a file")
    p.add_argument("file_path")
    p.add_argument("patch_file", nargs="?", default="-",
                   help="Patch file, or - for stdin (default)")

    p = sub.add_parser("search", help="Search a file for literal text")
    p.add_argument("file_path")
    p.add_argument("search_text")
    p.add_argument("-i", "--ignore-case", action="store_true")

    p = sub.add_parser("context", help="Show lines around a line number")
    p.add_argument("file_path")
    p.add_argument("line_number", type=int)
    p.add_argument("-n", "--context-lines", type=int, default=None)

    p = sub.add_parser("delete-lines", help="Delete an inclusive line range")
    p.add_argument("file_path")
    p.add_argument("start_line", type=int)
    p.add_argument("end_line", type=int)

    p = sub.add_parser("stats", help="Show edit metrics summary")
    p.add_argument("--last", type=int, default=50, help="Number of recent entries")

    return parser


def _read_patch(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, "r", encoding="utf-8", newline="") as f:
        return f.read()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = Config.load(args.config)
    if args.root:
        config.SANDBOX_ROOT = os.path.abspath(args.root)
    if args.no_metrics:
        config.METRICS_ENABLED = False

    if args.command == "serve":
        from .server import main as serve

        serve(config)
        return 0

    setup_logger(config.LOG_DIR, config.LOG_LEVEL)

    if args.command == "stats":
        result = read_edit_stats(
            last_n=args.last,
            project_root=config.SANDBOX_ROOT,
            metrics_dir=config.METRICS_DIR,
        )
        print(json.dumps(result, indent=2))
        return 0

    tools = EditTools(config)
    if args.command == "replace":
        result = tools.apply_direct_edit(args.file_path, args.old, args.new, args.mode)
    elif args.command == "patch":
        result = tools.apply_patch(args.file_path, _read_patch(args.patch_file))
    elif args.command == "search":
        result = tools.search_in_file(args.file_path, args.search_text,
                                      case_sensitive=not args.ignore_case)
    elif args.command == "context":
        result = tools.get_code_context(args.file_path, args.line_number,
                                        args.context_lines)
    else:
        result = tools.delete_lines(args.file_path, args.start_line, args.end_line)

    print(json.dumps(result, indent=2))
    return 1 if result.get("error") else 0


if __name__ == "__main__":
    sys.exit(main())
