"""
Pytest configuration and shared fixtures.

Chapters are plain strings so tests can assert on exact bytes; the project
fixtures write them under a temporary root for the handler and CLI tests.
"""

import json
from pathlib import Path

import pytest

from fractal_prose.engine.handlers import HandlerContext
from fractal_prose.store import ProjectStore

SAMPLE_CHAPTER = """# The Market

<!-- chapter-summary: Unit 7 visits the morning market. -->

<!-- beat:b01 [written] | Arriving at market -->
<!-- summary: Unit 7 enters through the east gate. -->

The gate was already open. Vendors called out prices.
<!-- @note(ana): Check the gate's name against the map. -->

<!-- beat:b02 [planned] | The fruit stall -->
<!-- summary: A vendor offers Unit 7 an apple. -->

<!-- beat:b03 [dirty] | Leaving -->

Unit 7 left by the north road.

<!-- /chapter -->
"""

LEGACY_CHAPTER = """# The Market

<!-- chapter-brief [PLANNING] Unit 7 visits the morning market. -->

<!-- beat:b01 | Arriving at market -->
<!-- beat-brief:b01 [WRITTEN] Unit 7 enters through the east gate. -->

The gate was already open.

<!-- beat:b02 | The fruit stall -->
<!-- beat-brief:b02 [DIRTY: vendor renamed] A vendor offers an apple. -->
"""

MIGRATED_CHAPTER = """# The Market

<!-- chapter-summary: Unit 7 visits the morning market. -->

<!-- beat:b01 [written] | Arriving at market -->
<!-- summary: Unit 7 enters through the east gate. -->

The gate was already open.

<!-- beat:b02 [dirty] | The fruit stall -->
<!-- summary: A vendor offers an apple. -->
"""

REFERENCE_DOC = """Top matter line.

## Voice & Tone

Dry.

## Setting

The city.

## Voice & Tone

Again.
"""


class RecordingVersionStore:
    """Version store that remembers every commit it was handed."""

    def __init__(self):
        self.commits: list[tuple[list[str], str]] = []

    async def commit(self, paths: list[str], message: str) -> str | None:
        self.commits.append((list(paths), message))
        return f"v{len(self.commits)}"


@pytest.fixture
def sample_chapter() -> str:
    return SAMPLE_CHAPTER


@pytest.fixture
def legacy_chapter() -> str:
    return LEGACY_CHAPTER


@pytest.fixture
def migrated_chapter() -> str:
    return MIGRATED_CHAPTER


@pytest.fixture
def reference_doc() -> str:
    return REFERENCE_DOC


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root with one current chapter, one legacy chapter and its sidecar."""
    (tmp_path / "chapters").mkdir()
    (tmp_path / "notes").mkdir()
    (tmp_path / "chapters" / "ch01.md").write_text(SAMPLE_CHAPTER, encoding="utf-8")
    (tmp_path / "chapters" / "ch02.md").write_text(LEGACY_CHAPTER, encoding="utf-8")
    sidecar = {
        "title": "Old title",
        "pov": "Unit 7",
        "beats": {
            "b01": {"summary": "Sidecar summary for the gate.", "characters": ["Unit 7"]},
            "b09": {"summary": "A beat that no longer exists."},
        },
    }
    (tmp_path / "chapters" / "ch02.meta.json").write_text(json.dumps(sidecar), encoding="utf-8")
    (tmp_path / "notes" / "style.md").write_text(REFERENCE_DOC, encoding="utf-8")
    return tmp_path


@pytest.fixture
def versions() -> RecordingVersionStore:
    return RecordingVersionStore()


@pytest.fixture
def ctx(project: Path, versions: RecordingVersionStore) -> HandlerContext:
    """Handler context over the temporary project."""
    return HandlerContext(
        store=ProjectStore(project),
        versions=versions,
        default_author="ed",
        wrap_column=80,
    )
