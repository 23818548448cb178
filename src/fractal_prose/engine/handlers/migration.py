"""Migration and lint tool handlers.

Handles:
- migrate_chapter: Move legacy sidecar/brief data into inline summaries (idempotent)
- check_chapter: Report structural issues, warnings and leftover legacy content
"""

import logging

from pydantic import ValidationError

from ...errors import FileAccessError
from ...models import (
    ChapterMeta,
    CheckChapterParams,
    CheckIssue,
    CheckResult,
    MigrateChapterParams,
    MigrationResult,
    ToolResult,
    WarningInfo,
)
from ..migration import check_document, migrate_document, reconcile_sidecar
from .base import HandlerContext, tool_handler, tool_result

logger = logging.getLogger(__name__)


@tool_handler("migrate_chapter", MigrateChapterParams)
async def handle_migrate_chapter(args: MigrateChapterParams, ctx: HandlerContext) -> ToolResult:
    """Migrate one chapter, optionally rewriting its sidecar from the result.

    Args:
        args: path, sidecar_path, rewrite_sidecar, dry_run

    Returns:
        ToolResult with the list of actions taken
    """
    text = ctx.store.read_text(args.path)
    sidecar = None
    if args.sidecar_path and ctx.store.exists(args.sidecar_path):
        try:
            sidecar = ChapterMeta.model_validate(ctx.store.read_json(args.sidecar_path))
        except ValidationError as e:
            raise FileAccessError(
                args.sidecar_path, f"not a chapter sidecar ({e.error_count()} invalid field(s))"
            ) from e
    elif args.sidecar_path:
        logger.warning(f"Sidecar {args.sidecar_path} not found; migrating from the text alone")

    report = migrate_document(text, sidecar, wrap_column=ctx.wrap_column)

    rewrite = bool(args.rewrite_sidecar and args.sidecar_path)
    commit = None
    if not args.dry_run:
        changed: list[str] = []
        if report.changed:
            ctx.store.write_text(args.path, report.text)
            changed.append(args.path)
        if rewrite:
            reconciled = reconcile_sidecar(report.text, sidecar)
            ctx.store.write_json(args.sidecar_path, reconciled.model_dump(mode="json"))
            changed.append(args.sidecar_path)
        if changed:
            commit = await ctx.versions.commit(changed, f"Migrated {args.path} to inline summaries")

    if report.changed:
        message = f"Migrated {args.path}: {len(report.actions)} action(s)"
    else:
        message = f"{args.path} is already in the current format"
    result = MigrationResult(
        path=args.path,
        changed=report.changed,
        actions=report.actions,
        sidecar_rewritten=rewrite and not args.dry_run,
        dry_run=args.dry_run,
        commit=commit,
        message=message,
    )
    return tool_result(result, text)


@tool_handler("check_chapter", CheckChapterParams)
async def handle_check_chapter(args: CheckChapterParams, ctx: HandlerContext) -> ToolResult:
    """Lint a chapter. Never fails on a broken chapter; that is what it reports."""
    text = ctx.store.read_text(args.path)
    report = check_document(text)
    data = report.to_dict()
    result = CheckResult(
        path=args.path,
        ok=report.ok,
        beats=report.beats,
        issues=[CheckIssue(**issue) for issue in data["issues"]],
        warnings=[WarningInfo(**warning) for warning in data["warnings"]],
        legacy=report.legacy,
        needs_migration=report.needs_migration,
    )
    return tool_result(result, text)
