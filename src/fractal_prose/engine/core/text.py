"""Text utilities shared by the grammar, document model and editors.

This module provides:
- Whitespace normalisation for summaries and annotation messages
- Rendering of engine comments (with reversible word-wrapping)
- Slug generation for section headings
- Line bookkeeping and line-aware excision of comments
"""

import re
import textwrap
from bisect import bisect_right

from ...errors import StructuralError

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

_SLUG_INVALID = re.compile(r"[\W_]+")


def normalize_space(text: str) -> str:
    """Collapse every run of whitespace (newlines included) to one space."""
    return " ".join(text.split())


def ensure_comment_safe(text: str, what: str) -> None:
    """Reject text that would terminate or nest an HTML comment.

    Raises:
        StructuralError: If the text contains a comment delimiter
    """
    if COMMENT_CLOSE in text or COMMENT_OPEN in text:
        raise StructuralError([f"{what} may not contain '{COMMENT_OPEN}' or '{COMMENT_CLOSE}'"])


def render_comment(body: str, width: int | None = None) -> str:
    """Render ``<!-- body -->``, word-wrapped when it exceeds ``width``.

    Wrapping only ever happens at spaces, so normalising the whitespace of the
    wrapped form gives back ``body`` unchanged.

    Args:
        body: Comment content (already whitespace-normalised)
        width: Wrap column, or None for a single line

    Returns:
        The comment text, possibly spanning several physical lines
    """
    single = f"{COMMENT_OPEN} {body} {COMMENT_CLOSE}"
    if width is None or len(single) <= width:
        return single
    lines = textwrap.wrap(
        f"{body} {COMMENT_CLOSE}",
        width=width,
        initial_indent=f"{COMMENT_OPEN} ",
        break_long_words=False,
        break_on_hyphens=False,
    )
    return "\n".join(lines)


def truncate_words(text: str, limit: int, suffix: str = "...") -> str:
    """Shorten text to at most ``limit`` characters, cutting at a word boundary."""
    if len(text) <= limit:
        return text
    if limit < len(suffix):
        return text[:limit]
    cut = text[: max(limit - len(suffix), 0)]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,;:.") + suffix


def slugify(name: str) -> str:
    """Lowercase, replace non-alphanumeric runs with one hyphen, trim edge hyphens.

    Returns "section" when nothing alphanumeric is left.
    """
    slug = _SLUG_INVALID.sub("-", name.lower()).strip("-")
    return slug or "section"


class LineIndex:
    """Maps character offsets to 1-based line numbers."""

    def __init__(self, text: str):
        self.starts = [0]
        for match in re.finditer("\n", text):
            self.starts.append(match.end())

    def line_of(self, offset: int) -> int:
        return bisect_right(self.starts, offset)


def excise(text: str, start: int, end: int) -> str:
    """Remove ``text[start:end]`` (a comment) without leaving debris.

    When the span is alone on its physical line(s), the whole line goes, and a
    blank line that would now be doubled is dropped too. When it shares a line
    with prose, only the span (and one joining space) is removed.
    """
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    line_end = len(text) if line_end == -1 else line_end + 1

    shares_line = bool(text[line_start:start].strip() or text[end:line_end].strip())
    if shares_line:
        if start > 0 and text[start - 1] == " " and text[end : end + 1] in (" ", "\n", ""):
            start -= 1
        return text[:start] + text[end:]

    if line_start == 0:
        blank_before = True
    else:
        prev_start = text.rfind("\n", 0, line_start - 1) + 1
        blank_before = not text[prev_start : line_start - 1].strip()
    blank_after = text[line_end : line_end + 1] == "\n"
    if blank_before and blank_after:
        line_end += 1
    return text[:line_start] + text[line_end:]
