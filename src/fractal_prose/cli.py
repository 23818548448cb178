"""
fractal-prose command-line tool.

Usage:
  fractal-prose <command> [options]

Commands:
  check    Lint chapters: structural errors, warnings, legacy content.
  migrate  Move legacy summaries inline and rewrite status-less markers.
  toc      Print the section table of contents of a reference document.
  strip    Print the clean manuscript (all engine comments removed).
  serve    Serve the MCP tools over HTTP (JSON-RPC at POST /mcp).

Exit codes: 0 success, 1 lint problems found, 2 error.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from . import __version__
from .config import LOG_LEVELS, normalize_log_level, settings
from .engine import (
    check_document,
    index_sections,
    migrate_document,
    reconcile_sidecar,
    strip_markers,
)
from .engine.handlers import HandlerContext
from .errors import FileAccessError, ProseError
from .log import setup_logging
from .models import ChapterMeta
from .store import ProjectStore

logger = logging.getLogger(__name__)


def _local_store(path: str) -> tuple[ProjectStore, str]:
    """Store rooted at the file's directory, plus the file name within it."""
    target = Path(path)
    return ProjectStore(target.parent), target.name


def _read(path: str) -> str:
    store, name = _local_store(path)
    return store.read_text(name)


def _summary_length(value: str) -> int:
    """argparse type for --max-length: an integer of at least 20."""
    try:
        length = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if length < 20:
        raise argparse.ArgumentTypeError(f"must be at least 20, got {length}")
    return length


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_check(args: argparse.Namespace) -> int:
    failed = False
    results = {}
    for path in args.paths:
        report = check_document(_read(path))
        results[path] = report.to_dict()
        failed = failed or not report.ok or (args.strict and report.needs_migration)
        if args.json:
            continue
        status = "ok" if report.ok else "FAILED"
        print(f"{path}: {status} ({report.beats} beats)")
        for issue in report.issues:
            print(f"  error: {issue}")
        for warning in report.warnings:
            print(f"  warning: line {warning.line}: {warning.message}")
        if report.needs_migration:
            legacy = ", ".join(f"{k}={v}" for k, v in report.legacy.items() if v)
            print(f"  legacy: {legacy} (run 'fractal-prose migrate')")
    if args.json:
        print(json.dumps(results, indent=2))
    return 1 if failed else 0


def cmd_migrate(args: argparse.Namespace) -> int:
    store, name = _local_store(args.path)
    text = store.read_text(name)
    sidecar = None
    if args.sidecar:
        sidecar_store, sidecar_name = _local_store(args.sidecar)
        if sidecar_store.exists(sidecar_name):
            try:
                sidecar = ChapterMeta.model_validate(sidecar_store.read_json(sidecar_name))
            except ValidationError as e:
                raise FileAccessError(args.sidecar, "not a chapter sidecar") from e
        else:
            logger.warning(f"Sidecar {args.sidecar} not found; migrating from briefs only")

    report = migrate_document(text, sidecar, summary_max_length=args.max_length)
    if not args.write:
        sys.stdout.write(report.text)
        return 0

    for action in report.actions:
        print(f"  {action}")
    if report.changed:
        store.write_text(name, report.text)
        print(f"{args.path}: migrated")
    else:
        print(f"{args.path}: already current")
    if args.sidecar and args.rewrite_sidecar:
        sidecar_store, sidecar_name = _local_store(args.sidecar)
        meta = reconcile_sidecar(report.text, sidecar)
        sidecar_store.write_json(sidecar_name, meta.model_dump(mode="json", exclude_none=True))
        print(f"{args.sidecar}: rewritten")
    return 0


def cmd_toc(args: argparse.Namespace) -> int:
    index = index_sections(_read(args.path), args.level)
    if args.json:
        print(json.dumps(index.table_of_contents(), indent=2))
        return 0
    for section in index.sections:
        print(f"{section.slug}\t{section.display_name}")
    return 0


def cmd_strip(args: argparse.Namespace) -> int:
    sys.stdout.write(strip_markers(_read(args.path)))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from .server import run

    ctx = HandlerContext(store=ProjectStore(args.root), default_author=args.author)
    run(ctx, host=args.host, port=args.port, log_level=args.log_level)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fractal-prose",
        description="Structured-prose chapter tools.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"fractal-prose {__version__}")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        type=normalize_log_level,
        choices=LOG_LEVELS,
    )

    subparsers = parser.add_subparsers(title="commands", metavar="<command>", dest="command")
    subparsers.required = True

    check = subparsers.add_parser("check", help="Lint chapters")
    check.add_argument("paths", nargs="+", help="Chapter files")
    check.add_argument("--json", action="store_true", help="Print reports as JSON")
    check.add_argument("--strict", action="store_true", help="Treat legacy content as a failure")
    check.set_defaults(func=cmd_check)

    migrate = subparsers.add_parser("migrate", help="Migrate a chapter to inline summaries")
    migrate.add_argument("path", help="Chapter file")
    migrate.add_argument("--sidecar", help="Sidecar JSON with legacy beat metadata")
    migrate.add_argument("--write", action="store_true", help="Rewrite the file in place")
    migrate.add_argument(
        "--rewrite-sidecar",
        action="store_true",
        help="With --write and --sidecar, rewrite the sidecar from the migrated chapter",
    )
    migrate.add_argument(
        "--max-length",
        type=_summary_length,
        default=None,
        help="Truncate migrated summaries to this many characters (at least 20)",
    )
    migrate.set_defaults(func=cmd_migrate)

    toc = subparsers.add_parser("toc", help="List sections of a reference document")
    toc.add_argument("path", help="Reference document")
    toc.add_argument("--level", type=int, choices=range(1, 7), default=None)
    toc.add_argument("--json", action="store_true")
    toc.set_defaults(func=cmd_toc)

    strip = subparsers.add_parser("strip", help="Print the clean manuscript")
    strip.add_argument("path", help="Chapter file")
    strip.set_defaults(func=cmd_strip)

    serve = subparsers.add_parser("serve", help="Serve the MCP tools over HTTP")
    serve.add_argument("--root", default=None, help="Project root (default from settings)")
    serve.add_argument("--author", default=None, help="Default annotation author")
    serve.add_argument("--host", default=None, help="Bind address (default from settings)")
    serve.add_argument("--port", type=int, default=None, help="Port (default from settings)")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        return args.func(args)
    except ProseError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 2
