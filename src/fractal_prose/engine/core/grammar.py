"""Marker grammar: tokenizer for structural comments in prose files.

Recognised forms (all share the ``<!-- ... -->`` bracket pair):
- ``<!-- beat:ID [STATUS] | LABEL -->``        block open (legacy form has no status)
- ``<!-- summary: TEXT -->``                   block summary
- ``<!-- chapter-summary: TEXT -->``           document summary
- ``<!-- /chapter -->``                        closing sentinel
- ``<!-- @TYPE(AUTHOR): MESSAGE -->``          inline annotation (``<!-- @flag -->`` too)
- ``<!-- beat-brief:ID [TAG] TEXT -->``        legacy block brief
- ``<!-- chapter-brief [TAG] TEXT -->``        legacy document brief

Tie-break rules:
1. A comment ends at the first ``-->``. If another ``<!--`` comes first, the
   comment is unterminated and scanning resumes right after its opening bracket.
2. Unterminated or malformed annotations are warnings, never failures.
3. Unterminated or malformed block markers and summaries are structural issues.
4. Repeated block ids are a structural issue naming every line; no occurrence
   is preferred over another.
5. Any other comment is prose.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ...models.enums import AnnotationType, BeatStatus, IssueCode, TokenKind, WarningCode
from .text import COMMENT_CLOSE, COMMENT_OPEN, LineIndex, normalize_space

logger = logging.getLogger(__name__)

_BLOCK_OPEN_RE = re.compile(
    r"\s*beat:(?P<id>[^\s\[\]|]+)[ \t]*"
    r"(?:\[(?P<status>[^\]\n]*)\][ \t]*)?"
    r"\|[ \t]*(?P<label>[^\n]*?)\s*"
)
_BLOCK_SUMMARY_RE = re.compile(r"\s*summary:(?P<text>.*)", re.DOTALL)
_DOC_SUMMARY_RE = re.compile(r"\s*chapter-summary:(?P<text>.*)", re.DOTALL)
_LEGACY_BRIEF_RE = re.compile(
    r"\s*beat-brief:(?P<id>[^\s\[\]]+)\s*(?:\[(?P<tag>[^\]]*)\])?(?P<text>.*)", re.DOTALL
)
_LEGACY_DOC_BRIEF_RE = re.compile(
    r"\s*chapter-brief\b\s*(?:\[(?P<tag>[^\]]*)\])?(?P<text>.*)", re.DOTALL
)
_ANNOTATION_RE = re.compile(
    r"\s*@(?P<type>[A-Za-z][\w-]*)"
    r"(?:\((?P<author>[^()\n]*)\))?"
    r"(?:\s*:(?P<message>.*?))?\s*",
    re.DOTALL,
)


# ============ TOKENS ============


@dataclass(frozen=True)
class Token:
    """Base token: a recognised comment and where it sits in the text.

    Attributes:
        start: Offset of ``<!--``
        end: Offset just past ``-->``
        line: 1-based line of ``start``
        end_line: 1-based line of the closing bracket
    """

    kind: ClassVar[TokenKind]

    start: int
    end: int
    line: int
    end_line: int


@dataclass(frozen=True)
class BlockOpen(Token):
    kind: ClassVar[TokenKind] = TokenKind.BLOCK_OPEN

    id: str
    status: BeatStatus | None  # None for the legacy form without a status
    label: str


@dataclass(frozen=True)
class BlockSummary(Token):
    kind: ClassVar[TokenKind] = TokenKind.BLOCK_SUMMARY

    text: str


@dataclass(frozen=True)
class DocSummary(Token):
    kind: ClassVar[TokenKind] = TokenKind.DOC_SUMMARY

    text: str


@dataclass(frozen=True)
class Close(Token):
    kind: ClassVar[TokenKind] = TokenKind.CLOSE


@dataclass(frozen=True)
class AnnotationToken(Token):
    kind: ClassVar[TokenKind] = TokenKind.ANNOTATION

    type: AnnotationType
    author: str | None
    message: str


@dataclass(frozen=True)
class LegacyBrief(Token):
    kind: ClassVar[TokenKind] = TokenKind.LEGACY_BRIEF

    block_id: str
    tag: str
    text: str


@dataclass(frozen=True)
class LegacyDocBrief(Token):
    kind: ClassVar[TokenKind] = TokenKind.LEGACY_DOC_BRIEF

    tag: str
    text: str


# ============ DIAGNOSTICS ============


@dataclass(frozen=True)
class StructuralIssue:
    """A grammar violation. The caller decides whether it aborts."""

    code: IssueCode
    message: str
    line: int
    block_id: str | None = None

    def __str__(self) -> str:
        return f"line {self.line}: {self.message}"


@dataclass(frozen=True)
class ParseWarning:
    """A tolerated anomaly, returned next to successful results."""

    code: WarningCode
    message: str
    line: int
    block_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "line": self.line,
            "block_id": self.block_id,
        }


@dataclass
class TokenStream:
    """Result of tokenizing one text."""

    tokens: list[Token] = field(default_factory=list)
    issues: list[StructuralIssue] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)

    def of(self, token_type: type) -> list[Any]:
        """All tokens of one class, in text order."""
        return [t for t in self.tokens if isinstance(t, token_type)]

    @property
    def ok(self) -> bool:
        return not self.issues


# ============ TOKENIZER ============


def tokenize(text: str) -> TokenStream:
    """Tokenize raw text into structural tokens.

    Never raises: grammar violations are collected as ``issues`` and tolerated
    anomalies as ``warnings``.

    Args:
        text: Raw document (or block prose) text

    Returns:
        TokenStream with tokens in text order
    """
    stream = TokenStream()
    lines = LineIndex(text)
    current_block: str | None = None
    pos = 0

    while True:
        start = text.find(COMMENT_OPEN, pos)
        if start == -1:
            break
        inner_start = start + len(COMMENT_OPEN)
        close = text.find(COMMENT_CLOSE, inner_start)
        next_open = text.find(COMMENT_OPEN, inner_start)
        terminated = close != -1 and (next_open == -1 or close < next_open)
        if terminated:
            inner = text[inner_start:close]
        else:
            inner = text[inner_start : next_open if next_open != -1 else len(text)]
        head = inner.lstrip()
        line = lines.line_of(start)

        if not terminated:
            _report_unterminated(stream, head, line, current_block)
            pos = inner_start
            continue

        end = close + len(COMMENT_CLOSE)
        end_line = lines.line_of(close)
        token = _classify(stream, inner, head, start, end, line, end_line, current_block)
        if token is not None:
            stream.tokens.append(token)
            if isinstance(token, BlockOpen):
                current_block = token.id
        pos = end

    _check_duplicates(stream)
    _check_after_close(stream)

    logger.debug(
        f"Tokenized {len(text)} chars: {len(stream.tokens)} tokens, "
        f"{len(stream.issues)} issues, {len(stream.warnings)} warnings"
    )
    return stream


def _report_unterminated(
    stream: TokenStream, head: str, line: int, block_id: str | None
) -> None:
    if head.startswith("@"):
        stream.warnings.append(
            ParseWarning(
                code=WarningCode.UNTERMINATED_ANNOTATION,
                message=f"Annotation opened on line {line} is never closed with '-->'",
                line=line,
                block_id=block_id,
            )
        )
        logger.warning(f"Unterminated annotation at line {line}")
    elif head.startswith(("beat:", "summary:", "chapter-summary:", "/chapter")):
        stream.issues.append(
            StructuralIssue(
                code=IssueCode.MALFORMED_MARKER,
                message=f"unterminated marker '{head.splitlines()[0][:40]}'",
                line=line,
                block_id=block_id,
            )
        )


def _classify(
    stream: TokenStream,
    inner: str,
    head: str,
    start: int,
    end: int,
    line: int,
    end_line: int,
    block_id: str | None,
) -> Token | None:
    """Turn one terminated comment into a token (or a diagnostic, or nothing)."""
    span = {"start": start, "end": end, "line": line, "end_line": end_line}

    if head.startswith("beat:"):
        match = _BLOCK_OPEN_RE.fullmatch(inner)
        if not match:
            stream.issues.append(
                StructuralIssue(
                    code=IssueCode.MALFORMED_MARKER,
                    message=f"malformed beat marker '<!--{inner}-->'",
                    line=line,
                )
            )
            return None
        raw_status = match.group("status")
        status = None
        if raw_status is not None:
            try:
                status = BeatStatus(raw_status.strip())
            except ValueError:
                stream.issues.append(
                    StructuralIssue(
                        code=IssueCode.MALFORMED_MARKER,
                        message=(
                            f"invalid status '{raw_status}' for beat '{match.group('id')}' "
                            f"(expected one of: {', '.join(s.value for s in BeatStatus)})"
                        ),
                        line=line,
                        block_id=match.group("id"),
                    )
                )
                return None
        return BlockOpen(id=match.group("id"), status=status, label=match.group("label"), **span)

    if head.startswith("summary:"):
        text = _BLOCK_SUMMARY_RE.fullmatch(inner).group("text")
        return BlockSummary(text=normalize_space(text), **span)

    if head.startswith("chapter-summary:"):
        text = _DOC_SUMMARY_RE.fullmatch(inner).group("text")
        return DocSummary(text=normalize_space(text), **span)

    if head.startswith("/chapter"):
        if inner.strip() != "/chapter":
            stream.issues.append(
                StructuralIssue(
                    code=IssueCode.MALFORMED_MARKER,
                    message=f"malformed closing marker '<!--{inner}-->'",
                    line=line,
                )
            )
            return None
        return Close(**span)

    if head.startswith("@"):
        return _classify_annotation(stream, inner, line, block_id, span)

    if head.startswith("beat-brief:"):
        match = _LEGACY_BRIEF_RE.fullmatch(inner)
        if match:
            return LegacyBrief(
                block_id=match.group("id"),
                tag=normalize_space(match.group("tag") or ""),
                text=normalize_space(match.group("text")),
                **span,
            )
        return None

    if head.startswith("chapter-brief"):
        match = _LEGACY_DOC_BRIEF_RE.fullmatch(inner)
        if match:
            return LegacyDocBrief(
                tag=normalize_space(match.group("tag") or ""),
                text=normalize_space(match.group("text")),
                **span,
            )
        return None

    return None


def _classify_annotation(
    stream: TokenStream,
    inner: str,
    line: int,
    block_id: str | None,
    span: dict[str, int],
) -> AnnotationToken | None:
    match = _ANNOTATION_RE.fullmatch(inner)
    problem = None
    if not match:
        problem = "expected '@TYPE(AUTHOR): MESSAGE'"
    else:
        try:
            ann_type = AnnotationType(match.group("type").lower())
        except ValueError:
            ann_type = None
            problem = (
                f"unknown annotation type '{match.group('type')}' "
                f"(expected one of: {', '.join(t.value for t in AnnotationType)})"
            )
        message = normalize_space(match.group("message") or "")
        if ann_type is not None and ann_type != AnnotationType.FLAG and not message:
            problem = f"@{ann_type.value} annotation has no message"

    if problem is not None:
        stream.warnings.append(
            ParseWarning(
                code=WarningCode.MALFORMED_ANNOTATION,
                message=f"Ignoring annotation on line {line}: {problem}",
                line=line,
                block_id=block_id,
            )
        )
        return None

    author = (match.group("author") or "").strip() or None
    return AnnotationToken(type=ann_type, author=author, message=message, **span)


def _check_duplicates(stream: TokenStream) -> None:
    seen: dict[str, list[int]] = {}
    for token in stream.of(BlockOpen):
        seen.setdefault(token.id, []).append(token.line)
    for block_id, lines in seen.items():
        if len(lines) > 1:
            stream.issues.append(
                StructuralIssue(
                    code=IssueCode.DUPLICATE_ID,
                    message=f"beat id '{block_id}' appears {len(lines)} times "
                    f"(lines {', '.join(map(str, lines))})",
                    line=lines[1],
                    block_id=block_id,
                )
            )


def _check_after_close(stream: TokenStream) -> None:
    closes = stream.of(Close)
    if not closes:
        return
    sentinel = closes[0].start
    for token in stream.of(BlockOpen):
        if token.start > sentinel:
            stream.issues.append(
                StructuralIssue(
                    code=IssueCode.MARKER_AFTER_CLOSE,
                    message=f"beat '{token.id}' appears after the closing '<!-- /chapter -->'",
                    line=token.line,
                    block_id=token.id,
                )
            )
