"""Tool handlers for the prose engine.

This package contains the tool handlers organized by domain:
- chapter: Chapter reads and the chapter summary (get_chapter, get_beat, set_chapter_summary)
- beats: Beat editing (write/edit prose, add, remove, reorder, update)
- annotations: Inline annotations (get, add, remove)
- sections: Reference documents (get_sections, get_section)
- migration: Legacy migration and linting (migrate_chapter, check_chapter)

Each handler is a standalone async function that takes:
- params: dict[str, Any] - Tool parameters from the MCP call
- ctx: HandlerContext - Project store, version store and engine overrides

And returns:
- ToolResult with data, input_tokens, output_tokens
"""

from .annotations import (
    handle_add_annotation,
    handle_get_annotations,
    handle_remove_annotation,
)
from .base import HandlerContext, HandlerFunc, count_tokens
from .beats import (
    handle_add_beat,
    handle_edit_beat_prose,
    handle_remove_beat,
    handle_reorder_beats,
    handle_update_beat,
    handle_write_beat_prose,
)
from .chapter import handle_get_beat, handle_get_chapter, handle_set_chapter_summary
from .migration import handle_check_chapter, handle_migrate_chapter
from .sections import handle_get_section, handle_get_sections

__all__ = [
    # Base
    "HandlerContext",
    "HandlerFunc",
    "count_tokens",
    # Chapter handlers
    "handle_get_chapter",
    "handle_get_beat",
    "handle_set_chapter_summary",
    # Beat handlers
    "handle_write_beat_prose",
    "handle_edit_beat_prose",
    "handle_add_beat",
    "handle_remove_beat",
    "handle_reorder_beats",
    "handle_update_beat",
    # Annotation handlers
    "handle_get_annotations",
    "handle_add_annotation",
    "handle_remove_annotation",
    # Reference document handlers
    "handle_get_sections",
    "handle_get_section",
    # Migration handlers
    "handle_migrate_chapter",
    "handle_check_chapter",
]
