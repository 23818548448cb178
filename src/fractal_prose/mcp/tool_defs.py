"""MCP Tool Definitions for the prose engine.

This module contains all tool definitions returned by the tools/list method.
Each tool definition includes the schema for its input parameters.

Tool Categories:
    - Chapter Reads: get_chapter, get_beat, check_chapter
    - Beat Editing: write_beat_prose, edit_beat_prose, add_beat, remove_beat,
      reorder_beats, update_beat, set_chapter_summary
    - Annotations: get_annotations, add_annotation, remove_annotation
    - Reference Documents: get_sections, get_section
    - Migration: migrate_chapter

Every chapter tool takes a project-relative ``path``. Mutating tools write
the chapter atomically and commit it through the version store.
"""

from enum import Enum

_STATUSES = ["planned", "written", "dirty", "conflict"]
_ANNOTATION_TYPES = ["note", "dev", "line", "continuity", "query", "flag"]

_PATH = {"type": "string", "description": "Chapter file path, relative to the project root"}
_BEAT_ID = {"type": "string", "description": "Beat id"}


class ToolTier(str, Enum):
    """Tool tier classification for user guidance."""

    READ = "read"  # No side effects
    WRITE = "write"  # Rewrites a chapter and commits it
    MAINTENANCE = "maintenance"  # Batch/one-time operations


# Mapping of tool name -> tier for discovery and filtering
TOOL_TIERS: dict[str, ToolTier] = {
    "get_chapter": ToolTier.READ,
    "get_beat": ToolTier.READ,
    "get_annotations": ToolTier.READ,
    "get_sections": ToolTier.READ,
    "get_section": ToolTier.READ,
    "check_chapter": ToolTier.READ,
    "write_beat_prose": ToolTier.WRITE,
    "edit_beat_prose": ToolTier.WRITE,
    "add_beat": ToolTier.WRITE,
    "remove_beat": ToolTier.WRITE,
    "reorder_beats": ToolTier.WRITE,
    "update_beat": ToolTier.WRITE,
    "set_chapter_summary": ToolTier.WRITE,
    "add_annotation": ToolTier.WRITE,
    "remove_annotation": ToolTier.WRITE,
    "migrate_chapter": ToolTier.MAINTENANCE,
}


def get_tool_tier(tool_name: str) -> ToolTier:
    """Get tier for a tool (defaults to READ if not mapped)."""
    return TOOL_TIERS.get(tool_name, ToolTier.READ)


TOOL_DEFINITIONS: list[dict] = [
    # ============ Chapter Reads ============
    {
        "name": "get_chapter",
        "description": "Read a chapter's structure: title, chapter summary, and every beat "
        "(id, status, label, summary, word count) in order.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "include_prose": {
                    "type": "boolean",
                    "default": False,
                    "description": "Include each beat's prose",
                },
            },
            "required": ["path"],
        },
    },
    {
        "name": "get_beat",
        "description": "Read one beat including its prose.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": _BEAT_ID,
                "clean": {
                    "type": "boolean",
                    "default": False,
                    "description": "Strip annotations from the returned prose",
                },
            },
            "required": ["path", "beat_id"],
        },
    },
    {
        "name": "check_chapter",
        "description": "Lint a chapter: duplicate or malformed markers, unterminated annotations, "
        "and legacy content that migrate_chapter would convert.",
        "inputSchema": {
            "type": "object",
            "properties": {"path": _PATH},
            "required": ["path"],
        },
    },
    # ============ Beat Editing ============
    {
        "name": "write_beat_prose",
        "description": "Replace a beat's prose. Marker and summary are left untouched.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": _BEAT_ID,
                "prose": {"type": "string", "description": "New prose"},
                "status": {
                    "type": "string",
                    "enum": _STATUSES,
                    "description": "Optionally set the status in the same write",
                },
            },
            "required": ["path", "beat_id", "prose"],
        },
    },
    {
        "name": "edit_beat_prose",
        "description": "Apply exact-match replacements to a beat's prose. Each old_str must occur "
        "exactly once; if any edit fails, nothing is written.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": _BEAT_ID,
                "edits": {
                    "type": "array",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "properties": {
                            "old_str": {"type": "string", "description": "Text to replace"},
                            "new_str": {"type": "string", "description": "Replacement"},
                        },
                        "required": ["old_str", "new_str"],
                    },
                },
            },
            "required": ["path", "beat_id", "edits"],
        },
    },
    {
        "name": "add_beat",
        "description": "Insert a new beat after another beat, or at the end of the chapter.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": {"type": "string", "description": "New, unique beat id"},
                "label": {"type": "string", "description": "Short display label"},
                "summary": {"type": "string", "default": "", "description": "Beat summary"},
                "status": {"type": "string", "enum": _STATUSES, "default": "planned"},
                "prose": {"type": "string", "default": "", "description": "Initial prose"},
                "after_beat_id": {
                    "type": "string",
                    "description": "Insert after this beat (default: at the end)",
                },
            },
            "required": ["path", "beat_id", "label"],
        },
    },
    {
        "name": "remove_beat",
        "description": "Remove a beat (marker, summary and prose) and return its prose. "
        "With archive_path, the prose is also saved to that file.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": _BEAT_ID,
                "archive_path": {
                    "type": "string",
                    "description": "Project-relative file to archive the removed prose in",
                },
            },
            "required": ["path", "beat_id"],
        },
    },
    {
        "name": "reorder_beats",
        "description": "Reorder beats. 'order' must list every current beat id exactly once.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "order": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "All beat ids in the new order",
                },
            },
            "required": ["path", "order"],
        },
    },
    {
        "name": "update_beat",
        "description": "Update a beat's status, summary or label without touching its prose. "
        "Any status may follow any other.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": _BEAT_ID,
                "status": {"type": "string", "enum": _STATUSES},
                "summary": {"type": "string", "description": "New summary ('' clears it)"},
                "label": {"type": "string", "description": "New label"},
            },
            "required": ["path", "beat_id"],
        },
    },
    {
        "name": "set_chapter_summary",
        "description": "Set the chapter summary (placed after the leading heading). "
        "An empty string removes it.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "summary": {"type": "string", "description": "Chapter summary"},
            },
            "required": ["path", "summary"],
        },
    },
    # ============ Annotations ============
    {
        "name": "get_annotations",
        "description": "List inline annotations. Ids are line-based: list again after any edit "
        "before removing by id.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": {"type": "string", "description": "Only this beat"},
                "type": {"type": "string", "enum": _ANNOTATION_TYPES},
                "author": {"type": "string", "description": "Only this author"},
            },
            "required": ["path"],
        },
    },
    {
        "name": "add_annotation",
        "description": "Add a one-line annotation after the line containing 'anchor' in a beat. "
        "The anchor must occur exactly once in the beat.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "beat_id": _BEAT_ID,
                "anchor": {"type": "string", "description": "Unique text to annotate"},
                "type": {"type": "string", "enum": _ANNOTATION_TYPES},
                "message": {
                    "type": "string",
                    "default": "",
                    "description": "Message (may be empty only for flag)",
                },
                "author": {"type": "string", "description": "Author (default from settings)"},
            },
            "required": ["path", "beat_id", "anchor", "type"],
        },
    },
    {
        "name": "remove_annotation",
        "description": "Remove an annotation by the id returned from get_annotations.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "annotation_id": {"type": "string", "description": "Annotation id"},
            },
            "required": ["path", "annotation_id"],
        },
    },
    # ============ Reference Documents ============
    {
        "name": "get_sections",
        "description": "Table of contents of a reference document: top matter plus section "
        "names and slugs.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Reference document path"},
                "level": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 6,
                    "description": "Heading level to index (default from settings)",
                },
            },
            "required": ["path"],
        },
    },
    {
        "name": "get_section",
        "description": "Fetch sections of a reference document by slug. With no slugs, "
        "returns the whole document.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Reference document path"},
                "slugs": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Slugs from get_sections",
                },
                "level": {"type": "integer", "minimum": 1, "maximum": 6},
            },
            "required": ["path"],
        },
    },
    # ============ Migration ============
    {
        "name": "migrate_chapter",
        "description": "Move legacy summaries (sidecar JSON, beat/chapter briefs) inline and "
        "rewrite status-less markers. Safe to run repeatedly.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "sidecar_path": {"type": "string", "description": "Sidecar JSON path"},
                "rewrite_sidecar": {
                    "type": "boolean",
                    "default": False,
                    "description": "Rewrite the sidecar from the migrated chapter",
                },
                "dry_run": {"type": "boolean", "default": False},
            },
            "required": ["path"],
        },
    },
]
