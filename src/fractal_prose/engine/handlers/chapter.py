"""Chapter-level tool handlers.

Handles:
- get_chapter: Beat list with status, label and summary (prose on request)
- get_beat: One beat with its prose
- set_chapter_summary: Insert, replace or remove the chapter summary
"""

from ...models import (
    BeatInfo,
    BeatResult,
    ChapterResult,
    GetBeatParams,
    GetChapterParams,
    SetChapterSummaryParams,
    ToolResult,
    WriteResult,
)
from ..core.document import Block
from ..editor import set_document_summary
from .base import HandlerContext, tool_handler, tool_result, warning_infos


def beat_info(block: Block, include_prose: bool = False, clean: bool = False) -> BeatInfo:
    """Tool-facing view of a beat."""
    prose = None
    if include_prose:
        prose = block.clean_prose if clean else block.prose
    return BeatInfo(
        id=block.id,
        status=block.status,
        label=block.label,
        summary=block.summary,
        word_count=len(block.clean_prose.split()),
        prose=prose,
    )


@tool_handler("get_chapter", GetChapterParams)
async def handle_get_chapter(args: GetChapterParams, ctx: HandlerContext) -> ToolResult:
    """Read a chapter's structure.

    Args:
        args: path, include_prose

    Returns:
        ToolResult with title, summary and the ordered beats
    """
    text, document = ctx.read_chapter(args.path)
    result = ChapterResult(
        path=args.path,
        title=document.title,
        summary=document.document_summary,
        closed=document.closed,
        beats=[beat_info(block, args.include_prose) for block in document.blocks],
        warnings=warning_infos(document.warnings),
    )
    return tool_result(result, text)


@tool_handler("get_beat", GetBeatParams)
async def handle_get_beat(args: GetBeatParams, ctx: HandlerContext) -> ToolResult:
    """Read one beat, prose included.

    Args:
        args: path, beat_id, clean (strip annotations)

    Returns:
        ToolResult with the beat and its position
    """
    text, document = ctx.read_chapter(args.path)
    position = document.index_of(args.beat_id)
    block = document.blocks[position]
    result = BeatResult(
        path=args.path,
        beat=beat_info(block, include_prose=True, clean=args.clean),
        position=position,
        warnings=warning_infos([w for w in document.warnings if w.block_id == block.id]),
    )
    return tool_result(result, text)


@tool_handler("set_chapter_summary", SetChapterSummaryParams)
async def handle_set_chapter_summary(
    args: SetChapterSummaryParams, ctx: HandlerContext
) -> ToolResult:
    """Set (or with '' remove) the chapter summary after the leading heading."""
    text, document = ctx.read_chapter(args.path)
    updated = set_document_summary(document, args.summary)
    action = "Set" if updated.document_summary else "Removed"
    commit = await ctx.save_chapter(
        args.path, text, updated, f"{action} chapter summary of {args.path}"
    )
    result = WriteResult(
        path=args.path,
        beat_ids=updated.ids,
        commit=commit,
        message=f"{action} chapter summary",
        warnings=warning_infos(updated.warnings),
    )
    return tool_result(result, args.summary)
