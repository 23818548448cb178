"""Document data structures for the prose engine.

A chapter file is a preamble (heading, optional chapter summary), an ordered
run of beats, and an optional closing sentinel followed by an opaque tail:

    # The Market

    <!-- chapter-summary: Unit 7 visits the morning market. -->

    <!-- beat:b01 [written] | Arriving at market -->
    <!-- summary: Unit 7 enters through the east gate. -->

    The gate was already open...

    <!-- /chapter -->

Parsing keeps the raw source of every segment next to the parsed values.
Serialising emits the raw source for anything whose value is unchanged and
canonical text for anything edited, so untouched text survives byte-for-byte
and ``parse_document(text).to_text() == text`` for every accepted input.
"""

import copy
import logging
import re
from dataclasses import dataclass, field

from ...config import settings
from ...errors import NotFoundError, StructuralError
from ...models.enums import BeatStatus
from .grammar import BlockOpen, BlockSummary, Close, DocSummary, ParseWarning, tokenize
from .text import ensure_comment_safe, excise, normalize_space, render_comment

logger = logging.getLogger(__name__)

CLOSE_MARKER = "<!-- /chapter -->"

_VALID_ID = re.compile(r"[^\s\[\]|<>]+")
_HEADING_LINE = re.compile(r"^#{1,6}[ \t]+\S.*$", re.MULTILINE)
_EXCESS_BLANK_LINES = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")


# ============ RENDERING ============


def format_block_marker(block_id: str, status: BeatStatus, label: str) -> str:
    """Render the canonical ``<!-- beat:ID [STATUS] | LABEL -->`` marker."""
    if not _VALID_ID.fullmatch(block_id):
        raise StructuralError([f"invalid beat id {block_id!r}: use letters, digits, '-' or '_'"])
    label = normalize_space(label)
    ensure_comment_safe(label, "Beat label")
    return f"<!-- beat:{block_id} [{BeatStatus(status).value}] | {label} -->"


def format_summary(summary: str, width: int | None = None) -> str:
    """Render a block summary comment, wrapped at ``width``."""
    body = normalize_space(summary)
    ensure_comment_safe(body, "Summary")
    return render_comment(f"summary: {body}", width)


def format_document_summary(summary: str, width: int | None = None) -> str:
    """Render the chapter summary comment, wrapped at ``width``."""
    body = normalize_space(summary)
    ensure_comment_safe(body, "Chapter summary")
    return render_comment(f"chapter-summary: {body}", width)


def _rebuild_body(old_body: str | None, prose: str) -> str:
    """New body text for changed prose, keeping the old surrounding whitespace."""
    if not prose:
        return "\n\n"
    if old_body is not None and old_body.strip():
        lead = old_body[: len(old_body) - len(old_body.lstrip())]
        trail = old_body[len(old_body.rstrip()) :]
        if "\n" not in trail:
            trail = "\n\n"
    else:
        lead, trail = "\n\n", "\n\n"
    return f"{lead}{prose}{trail}"


# ============ MODEL ============


@dataclass
class BlockLayout:
    """Raw source of a parsed beat, used to re-emit untouched parts verbatim.

    Attributes:
        marker: Marker text exactly as parsed
        fields: (id, status, label) as parsed; status is inferred for legacy markers
        legacy: True when the marker carried no status
        summary_text: Text from the marker end through the summary comment ("" if none)
        summary: Summary value as parsed (None if the beat had no summary comment)
        body: Everything after the marker/summary up to the next beat
        prose: ``body.strip()`` at parse time
    """

    marker: str
    fields: tuple[str, BeatStatus, str]
    legacy: bool
    summary_text: str
    summary: str | None
    body: str
    prose: str


@dataclass
class Block:
    """One beat: a structurally marked unit of prose.

    Equality compares the logical fields only, never the raw layout.

    Attributes:
        id: Unique within the document, caller-assigned, opaque
        status: Caller-asserted status (no transition rules)
        label: Short display string
        summary: Free text, may be empty
        prose: Content with leading/trailing whitespace trimmed
    """

    id: str
    status: BeatStatus = BeatStatus.PLANNED
    label: str = ""
    summary: str = ""
    prose: str = ""
    layout: BlockLayout | None = field(default=None, repr=False, compare=False)

    @property
    def marker_changed(self) -> bool:
        return self.layout is None or (self.id, self.status, self.label) != self.layout.fields

    @property
    def is_legacy(self) -> bool:
        """True while the legacy status-less marker is still what gets written."""
        return self.layout is not None and self.layout.legacy and not self.marker_changed

    @property
    def clean_prose(self) -> str:
        """Prose with every engine comment (annotations, briefs) removed."""
        return strip_markers(self.prose).strip()

    def render(self, width: int | None = None) -> str:
        """Serialise this beat: marker, summary comment, body."""
        layout = self.layout
        marker = layout.marker if not self.marker_changed else format_block_marker(
            self.id, self.status, self.label
        )

        if layout is not None and self.summary == (layout.summary or ""):
            summary_part = layout.summary_text
        elif self.summary:
            lead = "\n"
            if layout is not None and layout.summary_text:
                lead = layout.summary_text[: layout.summary_text.find("<!--")]
            summary_part = lead + format_summary(self.summary, width)
        else:
            summary_part = ""

        if layout is not None and self.prose == layout.prose:
            body = layout.body
        else:
            body = _rebuild_body(layout.body if layout else None, self.prose)
        return marker + summary_part + body

    def canonicalize(self) -> None:
        """Write the current-format marker on the next render, even if no field changed."""
        if self.layout is not None and self.layout.legacy:
            self.layout.marker = format_block_marker(self.id, self.status, self.label)
            self.layout.fields = (self.id, self.status, self.label)
            self.layout.legacy = False


@dataclass
class DocumentLayout:
    """Raw source of the parts of a chapter outside its beats."""

    preamble: str = ""
    summary: str | None = None
    summary_span: tuple[int, int] | None = None
    tail: str = ""


@dataclass
class ChapterDocument:
    """An ordered sequence of beats plus chapter-level data.

    Documents are values: built fresh from text for every operation and
    serialised back with ``to_text``. Editors return modified copies.

    Attributes:
        blocks: Beats in document order (order is position, not a field)
        document_summary: Chapter summary, "" when absent
        closed: Whether the text carries the ``<!-- /chapter -->`` sentinel
        warnings: Tolerated anomalies found while parsing
    """

    blocks: list[Block] = field(default_factory=list)
    document_summary: str = ""
    closed: bool = False
    layout: DocumentLayout = field(default_factory=DocumentLayout, repr=False, compare=False)
    warnings: list[ParseWarning] = field(default_factory=list, repr=False, compare=False)

    # ---- lookups ----

    @property
    def ids(self) -> list[str]:
        return [block.id for block in self.blocks]

    def index_of(self, block_id: str) -> int:
        """Position of a beat.

        Raises:
            NotFoundError: If no beat has this id
        """
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        raise NotFoundError(block_id, self.ids)

    def get(self, block_id: str) -> Block:
        return self.blocks[self.index_of(block_id)]

    @property
    def title(self) -> str | None:
        """Text of the first heading in the preamble, if any."""
        match = _HEADING_LINE.search(self.layout.preamble)
        if not match:
            return None
        return match.group(0).lstrip("#").strip()

    def copy(self) -> "ChapterDocument":
        return copy.deepcopy(self)

    # ---- serialisation ----

    def to_text(self, wrap_column: int | None = None) -> str:
        """Serialise back to raw text (see module docstring for the round-trip law)."""
        width = wrap_column if wrap_column is not None else settings.wrap_column
        parts = [self._render_preamble(width)]
        parts.extend(block.render(width) for block in self.blocks)
        if self.closed:
            parts.append(self.layout.tail or CLOSE_MARKER + "\n")
        return "".join(parts)

    def _render_preamble(self, width: int | None) -> str:
        layout = self.layout
        text = layout.preamble
        if self.document_summary == (layout.summary or ""):
            return text

        if layout.summary_span is not None:
            start, end = layout.summary_span
            if self.document_summary:
                comment = format_document_summary(self.document_summary, width)
                return text[:start] + comment + text[end:]
            return excise(text, start, end)

        comment = format_document_summary(self.document_summary, width)
        heading = _HEADING_LINE.search(text)
        if heading is None:
            return f"{comment}\n\n{text}"
        pos = heading.end()
        if pos == len(text):
            return f"{text}\n\n{comment}\n\n"
        pos += 1  # past the heading's newline
        return f"{text[:pos]}\n{comment}\n{text[pos:]}"

    def ensure_separated(self) -> None:
        """Make every segment followed by a marker end with a newline.

        Only called by editors after moving or adding beats, so parsed-but-untouched
        text is never altered.
        """
        if self.blocks and self.layout.preamble and not self.layout.preamble.endswith("\n"):
            self.layout.preamble += "\n\n"
        for i, block in enumerate(self.blocks):
            followed = i + 1 < len(self.blocks) or self.closed
            if followed and block.layout is not None and not block.layout.body.endswith("\n"):
                block.layout.body += "\n\n"


# ============ PARSING ============


def parse_document(text: str) -> ChapterDocument:
    """Parse raw chapter text into a ChapterDocument.

    Args:
        text: Raw UTF-8 chapter text

    Returns:
        A fresh ChapterDocument

    Raises:
        StructuralError: On duplicate beat ids or malformed markers
    """
    stream = tokenize(text)
    if stream.issues:
        logger.warning(f"Rejecting document with {len(stream.issues)} structural issue(s)")
        raise StructuralError(stream.issues)

    opens: list[BlockOpen] = stream.of(BlockOpen)
    closes: list[Close] = stream.of(Close)
    body_end = closes[0].start if closes else len(text)
    preamble_end = opens[0].start if opens else body_end

    layout = DocumentLayout(preamble=text[:preamble_end], tail=text[body_end:] if closes else "")
    doc_summary = next((t for t in stream.of(DocSummary) if t.end <= preamble_end), None)
    if doc_summary is not None:
        layout.summary = doc_summary.text
        layout.summary_span = (doc_summary.start, doc_summary.end)

    summaries: list[BlockSummary] = stream.of(BlockSummary)
    blocks: list[Block] = []
    for i, marker in enumerate(opens):
        segment_end = opens[i + 1].start if i + 1 < len(opens) else body_end
        summary = next(
            (
                s
                for s in summaries
                if marker.end <= s.start < segment_end and not text[marker.end : s.start].strip()
            ),
            None,
        )
        body_start = summary.end if summary else marker.end
        body = text[body_start:segment_end]
        prose = body.strip()
        status = marker.status or (BeatStatus.WRITTEN if prose else BeatStatus.PLANNED)
        label = marker.label

        blocks.append(
            Block(
                id=marker.id,
                status=status,
                label=label,
                summary=summary.text if summary else "",
                prose=prose,
                layout=BlockLayout(
                    marker=text[marker.start : marker.end],
                    fields=(marker.id, status, label),
                    legacy=marker.status is None,
                    summary_text=text[marker.end : summary.end] if summary else "",
                    summary=summary.text if summary else None,
                    body=body,
                    prose=prose,
                ),
            )
        )

    document = ChapterDocument(
        blocks=blocks,
        document_summary=layout.summary or "",
        closed=bool(closes),
        layout=layout,
        warnings=list(stream.warnings),
    )
    logger.debug(f"Parsed document: {len(blocks)} beats, closed={document.closed}")
    return document


def serialize_document(document: ChapterDocument, wrap_column: int | None = None) -> str:
    """Serialise a ChapterDocument back to raw text."""
    return document.to_text(wrap_column)


def strip_markers(text: str) -> str:
    """Remove every engine comment, leaving the clean manuscript.

    Markers, summaries, briefs, annotations and the closing sentinel go; other
    HTML comments belong to the author and stay. Runs of blank lines left
    behind collapse to one.
    """
    stream = tokenize(text)
    for token in reversed(stream.tokens):
        text = excise(text, token.start, token.end)
    text = _EXCESS_BLANK_LINES.sub("\n\n", text).strip()
    return text + "\n" if text else ""
