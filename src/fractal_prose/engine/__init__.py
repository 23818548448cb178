"""Structured-prose engine.

- core: marker grammar and the chapter document model
- editor: beat operations (insert, remove, replace, patch, reorder, edit)
- annotations: inline editorial annotations
- sections: section index for reference documents
- migration: legacy format migration, sidecar reconciliation, linting
- handlers: async tool handlers over a project store
"""

from .annotations import (
    Annotation,
    extract_annotations,
    extract_document_annotations,
    format_annotation,
    insert_annotation_after,
    remove_annotation,
)
from .core import Block, ChapterDocument, parse_document, serialize_document, strip_markers
from .editor import (
    edit_prose,
    insert_block,
    patch_block,
    remove_block,
    reorder_blocks,
    replace_prose,
    set_document_summary,
)
from .migration import check_document, migrate, migrate_document, reconcile_sidecar
from .sections import Section, SectionIndex, fetch_section, fetch_sections, index_sections

__all__ = [
    # Document model
    "Block",
    "ChapterDocument",
    "parse_document",
    "serialize_document",
    "strip_markers",
    # Editor
    "insert_block",
    "remove_block",
    "replace_prose",
    "patch_block",
    "reorder_blocks",
    "edit_prose",
    "set_document_summary",
    # Annotations
    "Annotation",
    "extract_annotations",
    "extract_document_annotations",
    "format_annotation",
    "insert_annotation_after",
    "remove_annotation",
    # Sections
    "Section",
    "SectionIndex",
    "index_sections",
    "fetch_section",
    "fetch_sections",
    # Migration
    "migrate",
    "migrate_document",
    "reconcile_sidecar",
    "check_document",
]
