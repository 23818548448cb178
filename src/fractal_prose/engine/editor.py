"""Beat editing operations on ChapterDocument values.

Every operation validates all of its preconditions first, then works on a
copy: it either returns a complete new document or raises with the input
untouched. A beat's marker, summary and prose always move as one unit.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from ..errors import (
    AmbiguousAnchorError,
    AnchorNotFoundError,
    DuplicateIdError,
    InvalidPermutationError,
    StructuralError,
)
from ..models.enums import BeatStatus
from .core.document import Block, ChapterDocument, format_block_marker, format_summary
from .core.grammar import AnnotationToken, LegacyBrief, tokenize
from .core.text import ensure_comment_safe, normalize_space

logger = logging.getLogger(__name__)


def _coerce_status(value: BeatStatus | str) -> BeatStatus:
    try:
        return BeatStatus(value)
    except ValueError:
        expected = ", ".join(s.value for s in BeatStatus)
        raise StructuralError([f"invalid status {value!r} (expected one of: {expected})"]) from None


def check_prose(prose: str) -> None:
    """Reject prose that would smuggle structure into a beat.

    Annotations and legacy briefs are allowed; beat markers, summaries, the
    chapter summary and the closing sentinel are not.

    Raises:
        StructuralError: If the prose contains structural markers
    """
    stream = tokenize(prose)
    problems = [str(issue) for issue in stream.issues]
    for token in stream.tokens:
        if not isinstance(token, (AnnotationToken, LegacyBrief)):
            problems.append(f"line {token.line}: prose may not contain a {token.kind.value} marker")
    if problems:
        raise StructuralError(problems)


def insert_block(
    document: ChapterDocument,
    block: Block,
    after_id: str | None = None,
) -> ChapterDocument:
    """Insert a beat after ``after_id``'s prose, or at the end (before the close).

    Args:
        document: Source document (not modified)
        block: New beat; its id must be fresh
        after_id: Beat to insert after, or None to append

    Returns:
        New document containing the beat

    Raises:
        DuplicateIdError: If the id already exists
        NotFoundError: If ``after_id`` is given but absent
        StructuralError: If the id, label, summary or prose is not representable
    """
    if block.id in document.ids:
        raise DuplicateIdError(block.id)
    position = document.index_of(after_id) + 1 if after_id is not None else len(document.blocks)

    status = _coerce_status(block.status)
    new_block = Block(
        id=block.id,
        status=status,
        label=normalize_space(block.label),
        summary=normalize_space(block.summary),
        prose=block.prose.strip(),
    )
    format_block_marker(new_block.id, new_block.status, new_block.label)
    if new_block.summary:
        format_summary(new_block.summary)
    check_prose(new_block.prose)

    result = document.copy()
    result.blocks.insert(position, new_block)
    result.ensure_separated()
    where = f"after '{after_id}'" if after_id is not None else "at end"
    logger.info(f"Inserted beat '{block.id}' {where}")
    return result


def remove_block(document: ChapterDocument, block_id: str) -> tuple[ChapterDocument, str]:
    """Remove a beat's marker, summary and prose as one unit.

    Returns:
        (new document, the removed prose) so the caller can archive it

    Raises:
        NotFoundError: If the beat does not exist
    """
    position = document.index_of(block_id)
    result = document.copy()
    removed = result.blocks.pop(position)
    result.ensure_separated()
    logger.info(f"Removed beat '{block_id}' ({len(removed.prose)} chars of prose)")
    return result, removed.prose


def replace_prose(document: ChapterDocument, block_id: str, prose: str) -> ChapterDocument:
    """Replace only the prose of a beat; marker and summary stay as they are.

    Raises:
        NotFoundError: If the beat does not exist
        StructuralError: If the prose contains structural markers
    """
    position = document.index_of(block_id)
    prose = prose.strip()
    check_prose(prose)
    result = document.copy()
    result.blocks[position].prose = prose
    logger.info(f"Replaced prose of beat '{block_id}' ({len(prose)} chars)")
    return result


def patch_block(
    document: ChapterDocument,
    block_id: str,
    *,
    status: BeatStatus | str | None = None,
    summary: str | None = None,
    label: str | None = None,
) -> ChapterDocument:
    """Update marker/summary fields of a beat without touching its prose.

    Any status may follow any other; the engine records, it does not judge.

    Raises:
        NotFoundError: If the beat does not exist
        StructuralError: If a value is not representable (bad status, '-->' in text)
    """
    position = document.index_of(block_id)
    new_status = _coerce_status(status) if status is not None else None
    if summary is not None:
        summary = normalize_space(summary)
        ensure_comment_safe(summary, "Summary")
    if label is not None:
        label = normalize_space(label)
        format_block_marker(block_id, BeatStatus.PLANNED, label)

    result = document.copy()
    block = result.blocks[position]
    changed = []
    if new_status is not None and new_status != block.status:
        logger.debug(f"Beat '{block_id}' status {block.status} -> {new_status}")
        block.status = new_status
        changed.append("status")
    if summary is not None and summary != block.summary:
        block.summary = summary
        changed.append("summary")
    if label is not None and label != block.label:
        block.label = label
        changed.append("label")
    logger.info(f"Patched beat '{block_id}': {', '.join(changed) or 'no changes'}")
    return result


def reorder_blocks(document: ChapterDocument, order: Sequence[str]) -> ChapterDocument:
    """Rewrite the beat sequence in the given order.

    Args:
        document: Source document
        order: Every current beat id exactly once

    Raises:
        InvalidPermutationError: If ``order`` drops, repeats or invents ids
    """
    expected = document.ids
    counts = Counter(order)
    duplicates = [block_id for block_id, n in counts.items() if n > 1]
    missing = [block_id for block_id in expected if block_id not in counts]
    unexpected = [block_id for block_id in counts if block_id not in expected]
    if duplicates or missing or unexpected:
        raise InvalidPermutationError(expected, missing, unexpected, duplicates)

    result = document.copy()
    by_id = {block.id: block for block in result.blocks}
    result.blocks = [by_id[block_id] for block_id in order]
    result.ensure_separated()
    logger.info(f"Reordered beats: {', '.join(order)}")
    return result


def edit_prose(
    document: ChapterDocument,
    block_id: str,
    edits: Iterable[tuple[str, str]],
) -> ChapterDocument:
    """Apply exact-match ``(old, new)`` replacements to one beat's prose.

    Edits apply in order; each ``old`` must occur exactly once in the prose as
    it stands after the previous edits.

    Raises:
        NotFoundError: If the beat does not exist
        AnchorNotFoundError: If an ``old`` string is absent
        AmbiguousAnchorError: If an ``old`` string occurs more than once
        StructuralError: If the result contains structural markers
    """
    position = document.index_of(block_id)
    prose = document.blocks[position].prose
    applied = 0
    for old, new in edits:
        occurrences = prose.count(old) if old else 0
        if occurrences == 0:
            raise AnchorNotFoundError(old)
        if occurrences > 1:
            raise AmbiguousAnchorError(old, occurrences)
        prose = prose.replace(old, new, 1)
        applied += 1
    logger.debug(f"Applied {applied} edit(s) to beat '{block_id}'")
    return replace_prose(document, block_id, prose)


def set_document_summary(document: ChapterDocument, summary: str) -> ChapterDocument:
    """Insert, replace or (with "") remove the chapter summary.

    A new summary goes directly after the leading heading, before the first beat.
    """
    summary = normalize_space(summary)
    ensure_comment_safe(summary, "Chapter summary")
    result = document.copy()
    result.document_summary = summary
    logger.info("Cleared chapter summary" if not summary else "Set chapter summary")
    return result
