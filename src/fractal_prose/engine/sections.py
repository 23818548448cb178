"""Section index for heading-delimited reference documents.

A reference document (character sheet, setting notes, style guide) is top
matter followed by sections that each start with a heading at the indexing
level. Sections are addressed by slug:

    "Voice & Tone"   -> "voice-tone"
    "Voice & Tone"   -> "voice-tone-2"   (second heading with the same slug)
    "!!!"            -> "section"

Suffixes are assigned in document order, so a literal heading can land on a
slug already suffixed: headings "A", "A", "A-2" give "a", "a-2", "a-2-2".

Each section runs from its heading line up to the next heading at the same
level (or EOF), so ``top_matter + "".join(sections)`` is the whole text.
Headings inside fenced code blocks are not headings.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from ..config import settings
from ..errors import SectionNotFoundError
from .core.text import slugify

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


@dataclass
class Section:
    """One heading-delimited section.

    Attributes:
        display_name: Heading text as written
        slug: Unique identifier within the document
        line: 1-based line of the heading
        start: Offset of the heading line
        end: Offset where the next same-level heading (or EOF) begins
    """

    display_name: str
    slug: str
    line: int
    start: int
    end: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.display_name, "slug": self.slug, "line": self.line}


@dataclass
class SectionIndex:
    """Top matter plus an ordered table of contents, over one text."""

    top_matter: str
    sections: list[Section] = field(default_factory=list)
    text: str = field(default="", repr=False)

    @property
    def slugs(self) -> list[str]:
        return [section.slug for section in self.sections]

    def fetch(self, slug: str) -> str:
        """Text of one section, heading line included.

        Raises:
            SectionNotFoundError: With every available slug
        """
        return self.fetch_many([slug])[slug]

    def fetch_many(self, slugs: list[str]) -> dict[str, str]:
        """Slice several sections out of the already-indexed text.

        Raises:
            SectionNotFoundError: Naming every missing slug and every available one
        """
        by_slug = {section.slug: section for section in self.sections}
        missing = [slug for slug in slugs if slug not in by_slug]
        if missing:
            raise SectionNotFoundError(missing, self.slugs)
        return {slug: self.text[by_slug[slug].start : by_slug[slug].end] for slug in slugs}

    def table_of_contents(self) -> list[dict[str, Any]]:
        return [section.to_dict() for section in self.sections]


def _heading_pattern(level: int) -> re.Pattern:
    return re.compile(rf"^#{{{level}}}[ \t]+(?P<name>\S.*?)(?:[ \t]+#+)?[ \t]*$")


def index_sections(text: str, level: int | None = None) -> SectionIndex:
    """Split a reference document on headings at ``level``.

    Args:
        text: Raw document text
        level: Heading level (number of '#'), defaults to ``settings.section_heading_level``

    Returns:
        SectionIndex; with no headings, the whole text is top matter and there
        are no sections
    """
    level = level or settings.section_heading_level
    heading = _heading_pattern(level)

    headings: list[tuple[str, int, int]] = []
    fence: str | None = None
    offset = 0
    for number, line in enumerate(text.split("\n"), start=1):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
        elif fence is None:
            match = heading.match(line.rstrip("\r"))
            if match:
                headings.append((match.group("name"), number, offset))
        offset += len(line) + 1

    if not headings:
        return SectionIndex(top_matter=text, text=text)

    taken: set[str] = set()
    sections: list[Section] = []
    for i, (name, number, start) in enumerate(headings):
        end = headings[i + 1][2] if i + 1 < len(headings) else len(text)
        base = slugify(name)
        slug = base
        suffix = 2
        while slug in taken:
            slug = f"{base}-{suffix}"
            suffix += 1
        if slug != base:
            logger.debug(f"Heading '{name}' on line {number} disambiguated as '{slug}'")
        taken.add(slug)
        sections.append(Section(display_name=name, slug=slug, line=number, start=start, end=end))

    logger.debug(f"Indexed {len(sections)} level-{level} sections")
    return SectionIndex(top_matter=text[: headings[0][2]], sections=sections, text=text)


def fetch_section(text: str, slug: str, level: int | None = None) -> str:
    """Fetch one section by slug (see ``SectionIndex.fetch``)."""
    return index_sections(text, level).fetch(slug)


def fetch_sections(text: str, slugs: list[str], level: int | None = None) -> dict[str, str]:
    """Fetch several sections, indexing the text once."""
    return index_sections(text, level).fetch_many(slugs)
