"""Annotation tool handlers.

Handles:
- get_annotations: List annotations (ids valid until the next edit)
- add_annotation: Insert an annotation after a unique anchor in a beat
- remove_annotation: Delete an annotation by id
"""

from ...config import settings
from ...errors import AnnotationNotFoundError
from ...models import (
    AddAnnotationParams,
    AnnotationInfo,
    AnnotationsResult,
    AnnotationWriteResult,
    GetAnnotationsParams,
    RemoveAnnotationParams,
    ToolResult,
)
from ..annotations import (
    extract_document_annotations,
    format_annotation,
    insert_annotation_after,
    remove_annotation,
)
from ..editor import replace_prose
from .base import HandlerContext, tool_handler, tool_result, warning_infos


@tool_handler("get_annotations", GetAnnotationsParams)
async def handle_get_annotations(args: GetAnnotationsParams, ctx: HandlerContext) -> ToolResult:
    """List annotations, optionally filtered by beat, type and author.

    Unterminated or malformed annotation markup comes back as warnings; the
    rest of the chapter still reads.
    """
    text, document = ctx.read_chapter(args.path)
    annotations, warnings = extract_document_annotations(
        document, ctx.default_author, document_id=args.path, block_id=args.beat_id
    )
    if args.type is not None:
        annotations = [a for a in annotations if a.type == args.type]
    if args.author is not None:
        annotations = [a for a in annotations if a.author == args.author]
    result = AnnotationsResult(
        path=args.path,
        annotations=[AnnotationInfo(**a.to_dict()) for a in annotations],
        total_count=len(annotations),
        warnings=warning_infos(warnings),
    )
    return tool_result(result, text)


@tool_handler("add_annotation", AddAnnotationParams)
async def handle_add_annotation(args: AddAnnotationParams, ctx: HandlerContext) -> ToolResult:
    """Insert a single-line annotation directly after the line holding ``anchor``."""
    text, document = ctx.read_chapter(args.path)
    author = args.author or ctx.default_author or settings.default_annotation_author
    prose = insert_annotation_after(
        document.get(args.beat_id).prose, args.anchor, args.type, author, args.message
    )
    updated = replace_prose(document, args.beat_id, prose)
    commit = await ctx.save_chapter(
        args.path, text, updated, f"Added @{args.type} annotation to {args.path}:{args.beat_id}"
    )
    result = AnnotationWriteResult(
        path=args.path,
        beat_id=args.beat_id,
        annotation=format_annotation(args.type, author, args.message),
        commit=commit,
        message=f"Added @{args.type} annotation to beat '{args.beat_id}'",
    )
    return tool_result(result, args.message)


@tool_handler("remove_annotation", RemoveAnnotationParams)
async def handle_remove_annotation(
    args: RemoveAnnotationParams, ctx: HandlerContext
) -> ToolResult:
    """Delete an annotation by the id get_annotations returned.

    Ids are line-derived: if the chapter changed since they were listed, the
    id may no longer resolve and the caller must list again.
    """
    text, document = ctx.read_chapter(args.path)
    annotations, _ = extract_document_annotations(
        document, ctx.default_author, document_id=args.path
    )
    target = next((a for a in annotations if a.id == args.annotation_id), None)
    if target is None:
        raise AnnotationNotFoundError(args.annotation_id, [a.id for a in annotations])

    prose = remove_annotation(
        document.get(target.block_id).prose,
        args.annotation_id,
        document_id=args.path,
        block_id=target.block_id,
    )
    updated = replace_prose(document, target.block_id, prose)
    commit = await ctx.save_chapter(
        args.path, text, updated, f"Removed annotation {args.annotation_id}"
    )
    result = AnnotationWriteResult(
        path=args.path,
        beat_id=target.block_id,
        commit=commit,
        message=f"Removed @{target.type} annotation by {target.author}",
    )
    return tool_result(result)
