"""
Tests for legacy migration, sidecar reconciliation and linting
"""

import pytest

from fractal_prose.engine.migration import (
    check_document,
    migrate,
    migrate_document,
    reconcile_sidecar,
)
from fractal_prose.errors import StructuralError
from fractal_prose.models import ChapterMeta
from fractal_prose.models.enums import IssueCode, WarningCode


class TestMigrate:
    """Tests for migrate_document."""

    def test_migrate_from_briefs(self, legacy_chapter, migrated_chapter):
        """Test briefs become inline summaries and markers gain a status."""
        report = migrate_document(legacy_chapter, wrap_column=80)
        assert report.text == migrated_chapter
        assert report.changed
        assert "chapter summary from chapter brief" in report.actions

    def test_idempotent(self, legacy_chapter):
        """Test migrating migrated text changes nothing."""
        once = migrate(legacy_chapter, wrap_column=80)
        report = migrate_document(once, wrap_column=80)
        assert report.text == once
        assert not report.changed
        assert report.actions == []

    def test_current_chapter_untouched(self, sample_chapter):
        """Test a chapter already in the current format is left byte-identical."""
        assert migrate(sample_chapter) == sample_chapter

    def test_three_duplicate_briefs(self):
        """Test redundant legacy briefs collapse into one summary."""
        text = (
            "<!-- beat:b01 | Opening -->\n"
            "<!-- beat-brief:b01 [PLANNED] First brief. -->\n"
            "<!-- beat-brief:b01 [PLANNED] First brief. -->\n"
            "<!-- beat-brief:b01 [PLANNED] First brief. -->\n"
        )
        result = migrate(text, wrap_column=80)
        assert result == "<!-- beat:b01 [planned] | Opening -->\n<!-- summary: First brief. -->\n"
        assert result.count("<!-- summary:") == 1
        assert "beat-brief" not in result
        assert not check_document(result).needs_migration
        assert migrate(result, wrap_column=80) == result

    def test_stray_summaries_removed(self):
        """Test extra summary comments a beat does not own are dropped."""
        text = (
            "<!-- beat:b01 [written] | Opening -->\n"
            "<!-- summary: Keep me. -->\n"
            "\n"
            "Prose.\n"
            "\n"
            "<!-- summary: Old copy. -->\n"
            "<!-- summary: Older copy. -->\n"
        )
        result = migrate(text)
        assert result == (
            "<!-- beat:b01 [written] | Opening -->\n<!-- summary: Keep me. -->\n\nProse.\n\n"
        )

    def test_brief_between_marker_and_summary(self):
        """Test a brief sitting between a marker and its summary does not orphan the summary."""
        text = (
            "<!-- beat:b01 [written] | Opening -->\n"
            "<!-- beat-brief:b01 [WRITTEN] Brief text. -->\n"
            "<!-- summary: Real summary. -->\n"
            "\n"
            "Prose.\n"
        )
        result = migrate(text)
        assert result == (
            "<!-- beat:b01 [written] | Opening -->\n<!-- summary: Real summary. -->\n\nProse.\n"
        )

    def test_sidecar_takes_precedence(self, legacy_chapter):
        """Test sidecar summaries and statuses win over briefs."""
        sidecar = {
            "summary": "From the sidecar.",
            "beats": [{"id": "b01", "summary": "Sidecar beat.", "status": "conflict"}],
        }
        result = migrate(legacy_chapter, sidecar, wrap_column=80)
        assert "<!-- chapter-summary: From the sidecar. -->" in result
        assert "<!-- beat:b01 [conflict] | Arriving at market -->" in result
        assert "<!-- summary: Sidecar beat. -->" in result
        assert "<!-- summary: A vendor offers an apple. -->" in result

    def test_inline_summary_never_overwritten(self, sample_chapter):
        """Test summaries already inline win over the sidecar."""
        sidecar = {"summary": "Other.", "beats": [{"id": "b01", "summary": "Other."}]}
        assert migrate(sample_chapter, sidecar) == sample_chapter

    def test_status_inferred_without_sources(self):
        """Test a legacy marker with no sidecar or brief gets its status from the prose."""
        text = "<!-- beat:a | A -->\n\nProse.\n\n<!-- beat:b | B -->\n"
        result = migrate(text)
        assert "<!-- beat:a [written] | A -->" in result
        assert "<!-- beat:b [planned] | B -->" in result

    def test_truncation(self, legacy_chapter):
        """Test synthesised summaries respect the maximum length."""
        result = migrate(legacy_chapter, summary_max_length=20, wrap_column=80)
        assert "<!-- summary: Unit 7 enters... -->" in result

    def test_structural_error(self):
        """Test broken chapters are not migrated."""
        text = "<!-- beat:a | A -->\n<!-- beat:a | B -->\n"
        with pytest.raises(StructuralError):
            migrate(text)


class TestReconcileSidecar:
    """Tests for reconcile_sidecar."""

    def test_reconcile(self, migrated_chapter):
        """Test prose-owned fields come from the text and the rest carries over."""
        sidecar = {
            "title": "Old title",
            "pov": "Unit 7",
            "mood": "tense",
            "beats": {
                "b01": {"summary": "stale", "characters": ["Unit 7"], "dirty_reason": "x"},
                "b09": {"summary": "gone"},
            },
        }
        meta = reconcile_sidecar(migrated_chapter, sidecar)
        assert isinstance(meta, ChapterMeta)
        assert [b.id for b in meta.beats] == ["b01", "b02"]
        b01 = meta.beat("b01")
        assert b01.summary == "Unit 7 enters through the east gate."
        assert b01.status == "written"
        assert b01.characters == ["Unit 7"]
        assert b01.dirty_reason == "x"
        assert meta.beat("b02").status == "dirty"
        assert meta.title == "The Market"
        assert meta.summary == "Unit 7 visits the morning market."
        assert meta.pov == "Unit 7"
        assert meta.model_dump()["mood"] == "tense"


class TestCheckDocument:
    """Tests for check_document."""

    def test_clean_chapter(self, sample_chapter):
        """Test a current chapter passes."""
        report = check_document(sample_chapter)
        assert report.ok
        assert report.beats == 3
        assert not report.needs_migration

    def test_legacy_counts(self, legacy_chapter):
        """Test legacy content is counted."""
        report = check_document(legacy_chapter)
        assert report.ok
        assert report.legacy == {"status_less_markers": 2, "beat_briefs": 2, "chapter_briefs": 1}
        assert report.needs_migration

    def test_never_raises(self):
        """Test broken chapters are reported, not raised."""
        text = "<!-- beat:a [planned] | A -->\n<!-- beat:a [planned] | B -->\nText <!-- @note: x"
        report = check_document(text)
        assert not report.ok
        assert report.issues[0].code == IssueCode.DUPLICATE_ID
        assert report.warnings[0].code == WarningCode.UNTERMINATED_ANNOTATION
        data = report.to_dict()
        assert data["issues"][0]["code"] == "duplicate_id"
        assert data["ok"] is False

    def test_briefs_after_close_ignored(self):
        """Test briefs past the close sentinel are neither counted nor migrated."""
        text = (
            "<!-- beat:b01 [written] | Opening -->\n"
            "<!-- summary: Done. -->\n"
            "Text.\n"
            "<!-- /chapter -->\n"
            "<!-- beat-brief:b01 [PLANNED] Old notes. -->\n"
            "<!-- chapter-brief [PLANNING] Old plan. -->\n"
        )
        report = check_document(text)
        assert report.legacy == {"status_less_markers": 0, "beat_briefs": 0, "chapter_briefs": 0}
        assert not report.needs_migration
        assert migrate(text) == text
