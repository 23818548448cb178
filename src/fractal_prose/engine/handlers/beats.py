"""Beat editing tool handlers.

Handles:
- write_beat_prose: Replace a beat's prose (optionally setting its status)
- edit_beat_prose: Exact-match replacements inside a beat's prose
- add_beat: Insert a new beat after another one, or at the end
- remove_beat: Remove a beat, optionally archiving its prose
- reorder_beats: Rewrite the beat order from a full permutation
- update_beat: Patch status, summary or label
"""

import logging

from ...models import (
    AddBeatParams,
    EditBeatProseParams,
    RemoveBeatParams,
    RemoveBeatResult,
    ReorderBeatsParams,
    ToolResult,
    UpdateBeatParams,
    WriteBeatProseParams,
    WriteResult,
)
from ..core.document import Block
from ..editor import (
    edit_prose,
    insert_block,
    patch_block,
    remove_block,
    reorder_blocks,
    replace_prose,
)
from .base import HandlerContext, tool_handler, tool_result, warning_infos

logger = logging.getLogger(__name__)


@tool_handler("write_beat_prose", WriteBeatProseParams)
async def handle_write_beat_prose(args: WriteBeatProseParams, ctx: HandlerContext) -> ToolResult:
    """Replace the prose of a beat; its marker and summary stay untouched.

    Args:
        args: path, beat_id, prose, optional status

    Returns:
        ToolResult with the commit id
    """
    text, document = ctx.read_chapter(args.path)
    updated = replace_prose(document, args.beat_id, args.prose)
    if args.status is not None:
        updated = patch_block(updated, args.beat_id, status=args.status)
    commit = await ctx.save_chapter(
        args.path, text, updated, f"Updated prose for {args.path}:{args.beat_id}"
    )
    result = WriteResult(
        path=args.path,
        beat_ids=updated.ids,
        commit=commit,
        message=f"Wrote {len(args.prose.split())} words to beat '{args.beat_id}'",
        warnings=warning_infos(updated.warnings),
    )
    return tool_result(result, args.prose)


@tool_handler("edit_beat_prose", EditBeatProseParams)
async def handle_edit_beat_prose(args: EditBeatProseParams, ctx: HandlerContext) -> ToolResult:
    """Apply exact-match edits to one beat; all edits validate before anything is written."""
    text, document = ctx.read_chapter(args.path)
    edits = [(edit.old_str, edit.new_str) for edit in args.edits]
    updated = edit_prose(document, args.beat_id, edits)
    commit = await ctx.save_chapter(
        args.path, text, updated, f"Edited prose for {args.path}:{args.beat_id}"
    )
    result = WriteResult(
        path=args.path,
        beat_ids=updated.ids,
        commit=commit,
        message=f"Applied {len(edits)} edit(s) to beat '{args.beat_id}'",
        warnings=warning_infos(updated.warnings),
    )
    return tool_result(result, "".join(old + new for old, new in edits))


@tool_handler("add_beat", AddBeatParams)
async def handle_add_beat(args: AddBeatParams, ctx: HandlerContext) -> ToolResult:
    """Insert a new beat (marker, summary, prose) after ``after_beat_id`` or at the end."""
    text, document = ctx.read_chapter(args.path)
    block = Block(
        id=args.beat_id,
        status=args.status,
        label=args.label,
        summary=args.summary,
        prose=args.prose,
    )
    updated = insert_block(document, block, after_id=args.after_beat_id)
    commit = await ctx.save_chapter(
        args.path, text, updated, f"Added beat {args.beat_id} to {args.path}"
    )
    where = f"after '{args.after_beat_id}'" if args.after_beat_id else "at the end"
    result = WriteResult(
        path=args.path,
        beat_ids=updated.ids,
        commit=commit,
        message=f"Added beat '{args.beat_id}' {where}",
        warnings=warning_infos(updated.warnings),
    )
    return tool_result(result, args.prose + args.summary)


@tool_handler("remove_beat", RemoveBeatParams)
async def handle_remove_beat(args: RemoveBeatParams, ctx: HandlerContext) -> ToolResult:
    """Remove a beat as one unit and return its prose.

    With ``archive_path`` and non-empty prose, the prose is written there
    first; the chapter is only rewritten once the archive exists.
    """
    text, document = ctx.read_chapter(args.path)
    updated, removed = remove_block(document, args.beat_id)
    archived_to = None
    if args.archive_path and removed:
        ctx.store.write_text(
            args.archive_path, f"# Removed beat: {args.path}:{args.beat_id}\n\n{removed}\n"
        )
        archived_to = args.archive_path
        logger.info(f"Archived prose of {args.path}:{args.beat_id} to {archived_to}")
    commit = await ctx.save_chapter(
        args.path,
        text,
        updated,
        f"Removed beat {args.beat_id} from {args.path}",
        extra_paths=[archived_to] if archived_to else None,
    )
    result = RemoveBeatResult(
        path=args.path,
        beat_ids=updated.ids,
        commit=commit,
        message=f"Removed beat '{args.beat_id}'",
        warnings=warning_infos(updated.warnings),
        removed_prose=removed,
        archived_to=archived_to,
    )
    return tool_result(result, text)


@tool_handler("reorder_beats", ReorderBeatsParams)
async def handle_reorder_beats(args: ReorderBeatsParams, ctx: HandlerContext) -> ToolResult:
    """Rewrite the beat order. The order must list every beat exactly once."""
    text, document = ctx.read_chapter(args.path)
    updated = reorder_blocks(document, args.order)
    commit = await ctx.save_chapter(args.path, text, updated, f"Reordered beats in {args.path}")
    result = WriteResult(
        path=args.path,
        beat_ids=updated.ids,
        commit=commit,
        message=f"Reordered {len(args.order)} beats",
        warnings=warning_infos(updated.warnings),
    )
    return tool_result(result)


@tool_handler("update_beat", UpdateBeatParams)
async def handle_update_beat(args: UpdateBeatParams, ctx: HandlerContext) -> ToolResult:
    """Patch a beat's status, summary or label. Any status may follow any other."""
    text, document = ctx.read_chapter(args.path)
    updated = patch_block(
        document, args.beat_id, status=args.status, summary=args.summary, label=args.label
    )
    given = {"status": args.status, "summary": args.summary, "label": args.label}
    fields = [name for name, value in given.items() if value is not None]
    commit = await ctx.save_chapter(
        args.path,
        text,
        updated,
        f"Updated {', '.join(fields) or 'nothing'} of {args.path}:{args.beat_id}",
    )
    result = WriteResult(
        path=args.path,
        beat_ids=updated.ids,
        commit=commit,
        message=f"Updated beat '{args.beat_id}': {', '.join(fields) or 'no fields given'}",
        warnings=warning_infos(updated.warnings),
    )
    return tool_result(result, args.summary or "")
