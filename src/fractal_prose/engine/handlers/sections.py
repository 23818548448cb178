"""Reference document tool handlers.

Handles:
- get_sections: Top matter plus table of contents (slugs) of a reference document
- get_section: Fetch sections by slug (or the whole document)
"""

from ...models import (
    GetSectionParams,
    GetSectionsParams,
    SectionInfo,
    SectionResult,
    SectionsResult,
    ToolResult,
)
from ..sections import index_sections
from .base import HandlerContext, count_tokens, tool_handler, tool_result


@tool_handler("get_sections", GetSectionsParams)
async def handle_get_sections(args: GetSectionsParams, ctx: HandlerContext) -> ToolResult:
    """Index a reference document without returning section bodies.

    A document with no headings at the level comes back as top matter only.
    """
    text = ctx.store.read_text(args.path)
    index = index_sections(text, args.level)
    result = SectionsResult(
        path=args.path,
        top_matter=index.top_matter,
        sections=[SectionInfo(**entry) for entry in index.table_of_contents()],
        total_count=len(index.sections),
    )
    return tool_result(result, text)


@tool_handler("get_section", GetSectionParams)
async def handle_get_section(args: GetSectionParams, ctx: HandlerContext) -> ToolResult:
    """Fetch one or more sections, indexing the document once.

    Unknown slugs fail together, with every available slug in the error.
    """
    text = ctx.store.read_text(args.path)
    if not args.slugs:
        result = SectionResult(path=args.path, content=text, token_count=count_tokens(text))
        return tool_result(result, text)

    sections = index_sections(text, args.level).fetch_many(args.slugs)
    result = SectionResult(
        path=args.path,
        sections=sections,
        token_count=count_tokens("".join(sections.values())),
    )
    return tool_result(result, text)
