"""Exception taxonomy for the prose engine.

Every error a caller can act on carries the context needed to retry without
re-querying: the offending id plus the valid ids, the full slug list, and so on.
Tolerated anomalies are not exceptions; see ``ParseWarning`` in
``engine.core.grammar``.
"""

from typing import Any


class ProseError(Exception):
    """Base class for all engine errors.

    Attributes:
        code: Stable machine-readable error code
        message: Human-readable, actionable message
    """

    code = "prose_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def context(self) -> dict[str, Any]:
        """Extra payload describing how to recover."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.context()}


class StructuralError(ProseError):
    """The text violates the marker grammar (duplicate ids, malformed markers)."""

    code = "structural_error"

    def __init__(self, issues: list[Any]):
        self.issues = list(issues)
        details = "; ".join(str(issue) for issue in self.issues) or "unknown structural problem"
        super().__init__(f"Document has structural errors: {details}")

    def context(self) -> dict[str, Any]:
        return {"issues": [str(issue) for issue in self.issues]}


class NotFoundError(ProseError):
    """A referenced block id does not exist in the document."""

    code = "not_found"

    def __init__(self, block_id: str, available_ids: list[str]):
        self.block_id = block_id
        self.available_ids = list(available_ids)
        listing = ", ".join(self.available_ids) if self.available_ids else "(none)"
        super().__init__(f"Beat '{block_id}' not found. Available beats: {listing}")

    def context(self) -> dict[str, Any]:
        return {"block_id": self.block_id, "available_ids": self.available_ids}


class DuplicateIdError(ProseError):
    """A new block would collide with an existing block id."""

    code = "duplicate_id"

    def __init__(self, block_id: str, lines: list[int] | None = None):
        self.block_id = block_id
        self.lines = list(lines or [])
        where = f" (lines {', '.join(map(str, self.lines))})" if self.lines else ""
        super().__init__(f"Beat id '{block_id}' already exists{where}")

    def context(self) -> dict[str, Any]:
        return {"block_id": self.block_id, "lines": self.lines}


class InvalidPermutationError(ProseError):
    """A reorder request is not an exact permutation of the current ids."""

    code = "invalid_permutation"

    def __init__(
        self,
        expected: list[str],
        missing: list[str],
        unexpected: list[str],
        duplicates: list[str],
    ):
        self.expected = list(expected)
        self.missing = list(missing)
        self.unexpected = list(unexpected)
        self.duplicates = list(duplicates)
        problems = []
        if self.missing:
            problems.append(f"missing {', '.join(self.missing)}")
        if self.unexpected:
            problems.append(f"unknown {', '.join(self.unexpected)}")
        if self.duplicates:
            problems.append(f"repeated {', '.join(self.duplicates)}")
        super().__init__(
            f"Beat order must list every beat exactly once ({'; '.join(problems)}). "
            f"Current beats: {', '.join(self.expected) or '(none)'}"
        )

    def context(self) -> dict[str, Any]:
        return {
            "expected": self.expected,
            "missing": self.missing,
            "unexpected": self.unexpected,
            "duplicates": self.duplicates,
        }


class AnchorNotFoundError(ProseError):
    """Anchor text does not occur in the prose."""

    code = "anchor_not_found"

    def __init__(self, anchor: str):
        self.anchor = anchor
        super().__init__(f"Anchor text not found: {anchor!r}")

    def context(self) -> dict[str, Any]:
        return {"anchor": self.anchor}


class AmbiguousAnchorError(ProseError):
    """Anchor text occurs more than once in the prose."""

    code = "ambiguous_anchor"

    def __init__(self, anchor: str, occurrences: int):
        self.anchor = anchor
        self.occurrences = occurrences
        super().__init__(
            f"Anchor text {anchor!r} occurs {occurrences} times; include more surrounding text"
        )

    def context(self) -> dict[str, Any]:
        return {"anchor": self.anchor, "occurrences": self.occurrences}


class SectionNotFoundError(ProseError):
    """Requested section slug(s) are not in the document."""

    code = "section_not_found"

    def __init__(self, missing: list[str], available: list[str]):
        self.missing = list(missing)
        self.available = list(available)
        super().__init__(
            f"Section(s) not found: {', '.join(self.missing)}. "
            f"Available sections: {', '.join(self.available) or '(none)'}"
        )

    def context(self) -> dict[str, Any]:
        return {"missing": self.missing, "available": self.available}


class AnnotationNotFoundError(ProseError):
    """An annotation id no longer resolves (ids are line-derived and ephemeral)."""

    code = "annotation_not_found"

    def __init__(self, annotation_id: str, available_ids: list[str]):
        self.annotation_id = annotation_id
        self.available_ids = list(available_ids)
        super().__init__(
            f"Annotation '{annotation_id}' not found; re-read annotations and retry. "
            f"Current ids: {', '.join(self.available_ids) or '(none)'}"
        )

    def context(self) -> dict[str, Any]:
        return {"annotation_id": self.annotation_id, "available_ids": self.available_ids}


class FileAccessError(ProseError):
    """A project file is missing, unreadable, or outside the project root."""

    code = "file_error"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot access '{path}': {reason}")

    def context(self) -> dict[str, Any]:
        return {"path": self.path}
