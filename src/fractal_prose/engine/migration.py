"""Format normaliser: one-time, idempotent migration to inline summaries.

Legacy chapters kept beat summaries in the sidecar (or in ``beat-brief``
comments) and used status-less beat markers. Migration:

1. Removes every legacy brief and every stray summary comment (one a beat
   does not own), remembering their text.
2. Fills the chapter summary, if absent, from the sidecar or the first
   ``chapter-brief``. It is written directly after the leading heading.
3. Fills each beat's summary, if absent, from the sidecar or the beat's first
   ``beat-brief``. Summaries already inline are never touched.
4. Rewrites status-less markers in the current format, taking the status from
   the sidecar, then the brief tag, then the prose (written if any).

Running it on its own output changes nothing, byte for byte.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..config import settings
from ..models.enums import BeatStatus
from ..models.sidecar import BeatMeta, ChapterMeta
from .core.document import ChapterDocument, parse_document
from .core.grammar import (
    BlockOpen,
    BlockSummary,
    Close,
    DocSummary,
    LegacyBrief,
    LegacyDocBrief,
    ParseWarning,
    StructuralIssue,
    Token,
    tokenize,
)
from .core.text import excise, truncate_words

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    """Outcome of one migration run.

    Attributes:
        text: Migrated text (identical to the input when nothing was needed)
        changed: Whether the text differs from the input
        actions: Human-readable list of what was done
    """

    text: str
    changed: bool = False
    actions: list[str] = field(default_factory=list)


@dataclass
class CheckReport:
    """Lint result for one chapter. Produced without raising."""

    issues: list[StructuralIssue] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)
    beats: int = 0
    legacy: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def needs_migration(self) -> bool:
        return any(self.legacy.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "beats": self.beats,
            "issues": [
                {"code": i.code.value, "message": i.message, "line": i.line, "block_id": i.block_id}
                for i in self.issues
            ],
            "warnings": [w.to_dict() for w in self.warnings],
            "legacy": self.legacy,
            "needs_migration": self.needs_migration,
        }


def _load_sidecar(sidecar: ChapterMeta | dict[str, Any] | None) -> ChapterMeta:
    if sidecar is None:
        return ChapterMeta()
    if isinstance(sidecar, ChapterMeta):
        return sidecar
    return ChapterMeta.model_validate(sidecar)


def _status_from_tag(tag: str) -> BeatStatus | None:
    """``PLANNED`` / ``WRITTEN`` / ``DIRTY: reason`` -> status."""
    word = tag.split(":", 1)[0].strip().lower()
    try:
        return BeatStatus(word)
    except ValueError:
        return None


def _status_from_meta(meta: BeatMeta | None) -> BeatStatus | None:
    if meta is None or not meta.status:
        return None
    try:
        return BeatStatus(meta.status.strip().lower())
    except ValueError:
        return None


def _legacy_briefs(tokens: list[Token]) -> list[Token]:
    """Every beat and chapter brief before the close sentinel."""
    briefs: list[Token] = []
    for token in tokens:
        if isinstance(token, Close):
            break
        if isinstance(token, (LegacyBrief, LegacyDocBrief)):
            briefs.append(token)
    return briefs


def _stray_summaries(text: str, tokens: list[Token]) -> list[Token]:
    """Summary comments no beat (or the chapter) owns, before the close sentinel.

    A beat owns the summary right after its marker with only whitespace between;
    the chapter owns the first chapter summary before the first beat.
    """
    stray: list[Token] = []
    beat_seen = False
    doc_summary_seen = False
    previous: Token | None = None
    for token in tokens:
        if isinstance(token, Close):
            break
        if isinstance(token, BlockOpen):
            beat_seen = True
        elif isinstance(token, DocSummary):
            if beat_seen or doc_summary_seen:
                stray.append(token)
            doc_summary_seen = True
        elif isinstance(token, BlockSummary):
            attached = isinstance(previous, BlockOpen)
            if not attached or text[previous.end : token.start].strip():
                stray.append(token)
        previous = token
    return stray


def _remove(text: str, tokens: list[Token]) -> str:
    for token in sorted(tokens, key=lambda t: t.start, reverse=True):
        text = excise(text, token.start, token.end)
    return text


def migrate_document(
    text: str,
    sidecar: ChapterMeta | dict[str, Any] | None = None,
    *,
    summary_max_length: int | None = None,
    wrap_column: int | None = None,
) -> MigrationReport:
    """Migrate one chapter to the current inline-summary format.

    Args:
        text: Raw chapter text
        sidecar: Parsed sidecar (model or plain dict), or None
        summary_max_length: Truncate synthesised summaries (defaults to settings)
        wrap_column: Wrap column for new summary comments (defaults to settings)

    Returns:
        MigrationReport with the new text

    Raises:
        StructuralError: If the chapter has structural errors (nothing is migrated)
    """
    limit = summary_max_length if summary_max_length is not None else settings.summary_max_length
    meta = _load_sidecar(sidecar)
    parse_document(text)  # reject structurally broken input before touching anything

    briefs = _legacy_briefs(tokenize(text).tokens)
    beat_briefs: dict[str, LegacyBrief] = {}
    chapter_brief: LegacyDocBrief | None = None
    for token in briefs:
        if isinstance(token, LegacyBrief):
            beat_briefs.setdefault(token.block_id, token)
        elif isinstance(token, LegacyDocBrief) and chapter_brief is None:
            chapter_brief = token

    actions: list[str] = []
    cleaned = _remove(text, briefs)
    stray = _stray_summaries(cleaned, tokenize(cleaned).tokens)
    cleaned = _remove(cleaned, stray)
    if briefs:
        logger.warning(f"Removing {len(briefs)} legacy brief(s)")
        actions.append(f"removed {len(briefs)} legacy brief(s)")
    if stray:
        logger.warning(f"Removing {len(stray)} stray summary comment(s)")
        actions.append(f"removed {len(stray)} stray summary comment(s)")

    document = parse_document(cleaned)

    def synthesised(value: str) -> str:
        value = " ".join(value.split())
        return truncate_words(value, limit) if limit else value

    # Chapter summary first: its position is fixed (after the heading).
    if not document.document_summary:
        source = meta.summary or (chapter_brief.text if chapter_brief else "")
        if source.strip():
            document.document_summary = synthesised(source)
            origin = "sidecar" if meta.summary else "chapter brief"
            actions.append(f"chapter summary from {origin}")

    for block in document.blocks:
        record = meta.beat(block.id)
        brief = beat_briefs.get(block.id)
        if not block.summary:
            source = (record.summary if record else "") or (brief.text if brief else "")
            if source.strip():
                block.summary = synthesised(source)
                origin = "sidecar" if record and record.summary else "beat brief"
                actions.append(f"{block.id}: summary from {origin}")
        if block.is_legacy:
            status = (
                _status_from_meta(record)
                or (_status_from_tag(brief.tag) if brief else None)
                or block.status
            )
            block.status = status
            block.canonicalize()
            actions.append(f"{block.id}: marker rewritten with status '{status}'")

    new_text = document.to_text(wrap_column)
    report = MigrationReport(text=new_text, changed=new_text != text, actions=actions)
    if report.changed:
        logger.info(f"Migrated chapter: {len(actions)} action(s)")
    else:
        logger.debug("Chapter already in current format")
    return report


def migrate(
    text: str,
    sidecar: ChapterMeta | dict[str, Any] | None = None,
    **options: Any,
) -> str:
    """Text-to-text form of ``migrate_document``."""
    return migrate_document(text, sidecar, **options).text


def reconcile_sidecar(
    text: str,
    sidecar: ChapterMeta | dict[str, Any] | None = None,
) -> ChapterMeta:
    """Recompute the sidecar cache from the prose.

    Beat order, label, status and summary come from the text. Non-prose fields
    (characters, dirty_reason, dependencies, unknown keys) carry over per id;
    records for beats no longer in the text are dropped.

    Raises:
        StructuralError: If the chapter has structural errors
    """
    meta = _load_sidecar(sidecar)
    document: ChapterDocument = parse_document(text)
    beats: list[BeatMeta] = []
    for block in document.blocks:
        fields = {"label": block.label, "summary": block.summary, "status": block.status.value}
        previous = meta.beat(block.id)
        if previous is not None:
            beats.append(previous.model_copy(update=fields))
        else:
            beats.append(BeatMeta(id=block.id, **fields))

    dropped = [b.id for b in meta.beats if b.id not in document.ids]
    if dropped:
        logger.info(f"Dropping sidecar records for removed beats: {', '.join(dropped)}")

    update: dict[str, Any] = {"beats": beats, "summary": document.document_summary}
    if document.title:
        update["title"] = document.title
    return meta.model_copy(update=update)


def check_document(text: str) -> CheckReport:
    """Lint a chapter without raising: structural issues, warnings, legacy content."""
    stream = tokenize(text)
    opens: list[BlockOpen] = stream.of(BlockOpen)
    briefs = _legacy_briefs(stream.tokens)
    report = CheckReport(
        issues=list(stream.issues),
        warnings=list(stream.warnings),
        beats=len(opens),
        legacy={
            "status_less_markers": sum(1 for t in opens if t.status is None),
            "beat_briefs": sum(1 for t in briefs if isinstance(t, LegacyBrief)),
            "chapter_briefs": sum(1 for t in briefs if isinstance(t, LegacyDocBrief)),
        },
    )
    if report.needs_migration:
        logger.warning(f"Legacy content found: {report.legacy}")
    return report
