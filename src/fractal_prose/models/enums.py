"""Enumeration types for the prose engine and its tool surface."""

from enum import StrEnum


class ToolName(StrEnum):
    """Available prose tools."""

    # Chapter reads
    GET_CHAPTER = "get_chapter"
    GET_BEAT = "get_beat"
    CHECK_CHAPTER = "check_chapter"
    # Beat editing
    WRITE_BEAT_PROSE = "write_beat_prose"
    EDIT_BEAT_PROSE = "edit_beat_prose"
    ADD_BEAT = "add_beat"
    REMOVE_BEAT = "remove_beat"
    REORDER_BEATS = "reorder_beats"
    UPDATE_BEAT = "update_beat"
    SET_CHAPTER_SUMMARY = "set_chapter_summary"
    # Annotations
    GET_ANNOTATIONS = "get_annotations"
    ADD_ANNOTATION = "add_annotation"
    REMOVE_ANNOTATION = "remove_annotation"
    # Reference documents
    GET_SECTIONS = "get_sections"
    GET_SECTION = "get_section"
    # Migration
    MIGRATE_CHAPTER = "migrate_chapter"


class BeatStatus(StrEnum):
    """Status of a beat. Transitions are unrestricted; the caller asserts the value."""

    PLANNED = "planned"
    WRITTEN = "written"
    DIRTY = "dirty"
    CONFLICT = "conflict"


class AnnotationType(StrEnum):
    """Kind of inline editorial annotation."""

    NOTE = "note"
    DEV = "dev"
    LINE = "line"
    CONTINUITY = "continuity"
    QUERY = "query"
    FLAG = "flag"  # Only type allowed without a message


class TokenKind(StrEnum):
    """Lexical forms recognised by the marker grammar."""

    BLOCK_OPEN = "block_open"
    BLOCK_SUMMARY = "block_summary"
    DOC_SUMMARY = "doc_summary"
    CLOSE = "close"
    ANNOTATION = "annotation"
    LEGACY_BRIEF = "legacy_brief"  # <!-- beat-brief:ID [TAG] text -->
    LEGACY_DOC_BRIEF = "legacy_doc_brief"  # <!-- chapter-brief [TAG] text -->


class IssueCode(StrEnum):
    """Structural problems that abort an operation."""

    DUPLICATE_ID = "duplicate_id"
    MALFORMED_MARKER = "malformed_marker"
    MARKER_AFTER_CLOSE = "marker_after_close"


class WarningCode(StrEnum):
    """Tolerated anomalies, reported alongside successful results."""

    UNTERMINATED_ANNOTATION = "unterminated_annotation"
    MALFORMED_ANNOTATION = "malformed_annotation"
