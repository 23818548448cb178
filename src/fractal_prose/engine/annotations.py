"""Annotation engine: inline editorial comments inside beat prose.

Annotations are values derived from the prose, never stored on their own.
Their ids are built from (document id, beat id, line) at extraction time, so
they are only valid until the next edit that shifts lines: extract, then act.

Reading is tolerant (an annotation may span several physical lines and is
normalised to one message); writing is strict (always exactly one line).
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from ..config import settings
from ..errors import (
    AmbiguousAnchorError,
    AnchorNotFoundError,
    AnnotationNotFoundError,
    StructuralError,
)
from ..models.enums import AnnotationType
from .core.document import ChapterDocument
from .core.grammar import AnnotationToken, ParseWarning, tokenize
from .core.text import ensure_comment_safe, excise, normalize_space

logger = logging.getLogger(__name__)


@dataclass
class Annotation:
    """One parsed annotation.

    Attributes:
        id: ``document_id:block_id:line`` (``.N`` suffix for the Nth on a shared line)
        type: Annotation kind
        author: Explicit author, or the default author when omitted
        message: Whitespace-normalised message ("" only for flags)
        block_id: Owning beat
        line: 1-based line within the beat's prose where the comment starts
        end_line: 1-based line where it ends (> line for multi-line annotations)
    """

    id: str
    type: AnnotationType
    author: str
    message: str
    block_id: str
    line: int
    end_line: int
    start: int = dataclasses.field(default=0, repr=False)
    end: int = dataclasses.field(default=0, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "author": self.author,
            "message": self.message,
            "block_id": self.block_id,
            "line": self.line,
            "end_line": self.end_line,
        }


def extract_annotations(
    prose: str,
    default_author: str | None = None,
    *,
    document_id: str = "",
    block_id: str = "",
) -> tuple[list[Annotation], list[ParseWarning]]:
    """Extract annotations from one beat's prose.

    Args:
        prose: Beat prose
        default_author: Author for annotations written without one
            (falls back to ``settings.default_annotation_author``)
        document_id: Used to build annotation ids
        block_id: Owning beat, used in ids and warnings

    Returns:
        (annotations in text order, warnings for unterminated/malformed markup)
    """
    author_fallback = default_author or settings.default_annotation_author
    stream = tokenize(prose)
    annotations: list[Annotation] = []
    per_line: dict[int, int] = {}
    for token in stream.of(AnnotationToken):
        per_line[token.line] = per_line.get(token.line, 0) + 1
        annotation_id = f"{document_id}:{block_id}:{token.line}"
        if per_line[token.line] > 1:
            annotation_id += f".{per_line[token.line]}"
        annotations.append(
            Annotation(
                id=annotation_id,
                type=token.type,
                author=token.author or author_fallback,
                message=token.message,
                block_id=block_id,
                line=token.line,
                end_line=token.end_line,
                start=token.start,
                end=token.end,
            )
        )
    warnings = [dataclasses.replace(w, block_id=block_id or w.block_id) for w in stream.warnings]
    return annotations, warnings


def extract_document_annotations(
    document: ChapterDocument,
    default_author: str | None = None,
    *,
    document_id: str = "",
    block_id: str | None = None,
) -> tuple[list[Annotation], list[ParseWarning]]:
    """Extract annotations from every beat (or one beat) of a parsed document."""
    blocks = [document.get(block_id)] if block_id is not None else document.blocks
    annotations: list[Annotation] = []
    warnings: list[ParseWarning] = []
    for block in blocks:
        found, problems = extract_annotations(
            block.prose, default_author, document_id=document_id, block_id=block.id
        )
        annotations.extend(found)
        warnings.extend(problems)
    if warnings:
        logger.warning(f"{len(warnings)} annotation warning(s) in '{document_id or 'document'}'")
    return annotations, warnings


def format_annotation(
    annotation_type: AnnotationType | str,
    author: str | None,
    message: str = "",
) -> str:
    """Render an annotation on exactly one physical line.

    Newlines inside ``message`` collapse to single spaces.

    Raises:
        StructuralError: If the type is unknown, a non-flag message is empty,
            or a field would break the comment
    """
    try:
        kind = AnnotationType(str(annotation_type).lower())
    except ValueError:
        expected = ", ".join(t.value for t in AnnotationType)
        raise StructuralError(
            [f"unknown annotation type {annotation_type!r} (expected one of: {expected})"]
        ) from None
    message = normalize_space(message)
    if not message and kind != AnnotationType.FLAG:
        raise StructuralError([f"@{kind.value} annotation needs a message"])
    ensure_comment_safe(message, "Annotation message")

    head = f"@{kind.value}"
    if author:
        author = normalize_space(author)
        if any(ch in author for ch in "()") or "-->" in author:
            raise StructuralError([f"invalid annotation author {author!r}"])
        head += f"({author})"
    if message:
        head += f": {message}"
    return f"<!-- {head} -->"


def insert_annotation_after(
    prose: str,
    anchor: str,
    annotation_type: AnnotationType | str,
    author: str | None,
    message: str = "",
) -> str:
    """Insert a new annotation on its own line directly after the anchor's line.

    When that line ends inside a multi-line comment, the annotation goes after
    the line where the comment closes.

    Args:
        prose: Beat prose
        anchor: Exact text that must occur exactly once in ``prose``
        annotation_type: Annotation kind
        author: Author to record (None writes the default author)
        message: Message; may span lines, is written as one

    Returns:
        The new prose

    Raises:
        AnchorNotFoundError: If the anchor does not occur
        AmbiguousAnchorError: If the anchor occurs more than once
    """
    occurrences = prose.count(anchor) if anchor else 0
    if occurrences == 0:
        raise AnchorNotFoundError(anchor)
    if occurrences > 1:
        raise AmbiguousAnchorError(anchor, occurrences)
    comment = format_annotation(
        annotation_type, author or settings.default_annotation_author, message
    )

    match_end = prose.index(anchor) + len(anchor)
    line_end = prose.find("\n", match_end - 1)
    # Never split a comment: skip to the line where it closes.
    for token in tokenize(prose).tokens:
        if token.start <= line_end < token.end:
            line_end = prose.find("\n", token.end)
    if line_end == -1:
        return f"{prose}\n{comment}"
    return f"{prose[: line_end + 1]}{comment}\n{prose[line_end + 1 :]}"


def remove_annotation(
    prose: str,
    annotation_id: str,
    *,
    document_id: str = "",
    block_id: str = "",
) -> str:
    """Delete one annotation identified by an id from ``extract_annotations``.

    An annotation alone on its line(s) takes those lines with it; one that
    shares a line with prose is cut out of the line.

    Raises:
        AnnotationNotFoundError: If the id does not resolve (re-extract and retry)
    """
    annotations, _ = extract_annotations(prose, document_id=document_id, block_id=block_id)
    target = next((a for a in annotations if a.id == annotation_id), None)
    if target is None:
        raise AnnotationNotFoundError(annotation_id, [a.id for a in annotations])
    logger.debug(f"Removing annotation {annotation_id} (lines {target.line}-{target.end_line})")
    return excise(prose, target.start, target.end).strip()
