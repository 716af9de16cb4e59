"""One-shot command line for folder sync.

Examples:
    gdoc-sync sync ~/notes/project
    gdoc-sync sync-all ~/notes
    gdoc-sync status ~/notes/project
    gdoc-sync unlink ~/notes/project
"""

import argparse
import json
import logging
import sys

from . import __version__
from .config import resolve_settings, validate_settings
from .file_handler import validate_folder_path
from .logger import setup_logging
from .mcp.lifespan import build_engine
from .sync.models import SyncOutcome
from .sync.reporter import (
    format_sync_report,
    format_sync_result,
    report_to_json,
    result_to_json,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFLICT = 2
EXIT_USAGE = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gdoc-sync",
        description="Sync local Markdown folders with Google Docs",
    )
    parser.add_argument("--vault-root", help="Folder searched by sync-all")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--version", action="version", version=f"gdoc-sync {__version__}"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_sync = sub.add_parser("sync", help="Sync one folder")
    p_sync.add_argument("path")
    p_all = sub.add_parser("sync-all", help="Sync every linked folder")
    p_all.add_argument("root", nargs="?")
    p_status = sub.add_parser("status", help="Show the link state of a folder")
    p_status.add_argument("path")
    p_unlink = sub.add_parser("unlink", help="Forget a folder's link")
    p_unlink.add_argument("path")
    return parser


def _emit(text: str, payload: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        print(text)


def main(argv: list[str] | None = None) -> int:
    """Run one command and return the process exit code."""
    args = _build_parser().parse_args(argv)
    setup_logging(mode="cli", debug=args.debug, log_file=args.log_file)

    overrides = {"vault_root": args.vault_root, "debug": args.debug}
    try:
        settings = resolve_settings(overrides)
        needs_remote = args.command in ("sync", "sync-all")
        validate_settings(settings, require_credentials=needs_remote)
        engine = build_engine(settings)

        match args.command:
            case "sync":
                folder = validate_folder_path(args.path)
                result = engine.sync_folder(folder)
                _emit(format_sync_result(result), result_to_json(result), args.json)
                if result.outcome == SyncOutcome.CONFLICT:
                    return EXIT_CONFLICT
                return EXIT_OK if result.success else EXIT_FAILED
            case "sync-all":
                root = validate_folder_path(args.root) if args.root else None
                report = engine.sync_all(root)
                _emit(format_sync_report(report), report_to_json(report), args.json)
                return EXIT_OK if not report.failed else EXIT_FAILED
            case "status":
                status = engine.status(validate_folder_path(args.path))
                _emit(
                    json.dumps(status.model_dump(), indent=2),
                    status.model_dump(),
                    args.json,
                )
                return EXIT_OK
            case "unlink":
                folder = validate_folder_path(args.path)
                removed = engine.unlink(folder)
                _emit(
                    f"Unlinked {folder}" if removed else f"{folder} was not linked",
                    {"folder_path": str(folder), "unlinked": removed},
                    args.json,
                )
                return EXIT_OK
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    return EXIT_USAGE


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
