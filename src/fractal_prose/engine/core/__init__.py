"""Engine core module.

This module contains the grammar and data structures shared by every
engine operation:
- Marker tokenizer (structural issues and tolerated warnings)
- Chapter document model with byte-exact serialisation
- Text helpers (comment rendering, slugs, line-aware excision)
"""

from .document import (
    CLOSE_MARKER,
    Block,
    ChapterDocument,
    format_block_marker,
    format_document_summary,
    format_summary,
    parse_document,
    serialize_document,
    strip_markers,
)
from .grammar import (
    AnnotationToken,
    BlockOpen,
    BlockSummary,
    Close,
    DocSummary,
    LegacyBrief,
    LegacyDocBrief,
    ParseWarning,
    StructuralIssue,
    Token,
    TokenStream,
    tokenize,
)
from .text import excise, normalize_space, render_comment, slugify, truncate_words

__all__ = [
    # Grammar
    "tokenize",
    "Token",
    "TokenStream",
    "BlockOpen",
    "BlockSummary",
    "DocSummary",
    "Close",
    "AnnotationToken",
    "LegacyBrief",
    "LegacyDocBrief",
    "StructuralIssue",
    "ParseWarning",
    # Document model
    "Block",
    "ChapterDocument",
    "CLOSE_MARKER",
    "parse_document",
    "serialize_document",
    "strip_markers",
    "format_block_marker",
    "format_summary",
    "format_document_summary",
    # Text helpers
    "normalize_space",
    "render_comment",
    "slugify",
    "truncate_words",
    "excise",
]
