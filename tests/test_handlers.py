"""
Tests for the tool handlers: read-modify-write over a temporary project
"""

import json

import pytest

from fractal_prose.engine.handlers import (
    handle_add_annotation,
    handle_add_beat,
    handle_check_chapter,
    handle_edit_beat_prose,
    handle_get_annotations,
    handle_get_beat,
    handle_get_chapter,
    handle_get_section,
    handle_get_sections,
    handle_migrate_chapter,
    handle_remove_annotation,
    handle_remove_beat,
    handle_reorder_beats,
    handle_set_chapter_summary,
    handle_update_beat,
    handle_write_beat_prose,
)

CH01 = "chapters/ch01.md"
CH02 = "chapters/ch02.md"
SIDECAR = "chapters/ch02.meta.json"
NOTE = "<!-- @note(ana): Check the gate's name against the map. -->"


def read(project, path: str) -> str:
    with open(project / path, encoding="utf-8", newline="") as f:
        return f.read()


class TestReadHandlers:
    """Tests for get_chapter and get_beat."""

    @pytest.mark.asyncio
    async def test_get_chapter(self, ctx):
        """Test the beat list comes back without prose by default."""
        result = await handle_get_chapter({"path": CH01}, ctx)
        assert not result.is_error
        data = result.data
        assert data["title"] == "The Market"
        assert data["summary"] == "Unit 7 visits the morning market."
        assert data["closed"] is True
        assert [b["id"] for b in data["beats"]] == ["b01", "b02", "b03"]
        assert [b["status"] for b in data["beats"]] == ["written", "planned", "dirty"]
        assert data["beats"][0]["word_count"] == 9
        assert data["beats"][0]["prose"] is None
        assert result.input_tokens > 0

    @pytest.mark.asyncio
    async def test_get_chapter_with_prose(self, ctx):
        """Test prose is included on request."""
        result = await handle_get_chapter({"path": CH01, "include_prose": True}, ctx)
        assert result.data["beats"][2]["prose"] == "Unit 7 left by the north road."

    @pytest.mark.asyncio
    async def test_get_beat_clean(self, ctx):
        """Test a clean read drops annotations."""
        result = await handle_get_beat({"path": CH01, "beat_id": "b01", "clean": True}, ctx)
        beat = result.data["beat"]
        assert beat["prose"] == "The gate was already open. Vendors called out prices."
        assert result.data["position"] == 0

    @pytest.mark.asyncio
    async def test_get_beat_unknown(self, ctx):
        """Test an unknown beat is error data listing the valid ids."""
        result = await handle_get_beat({"path": CH01, "beat_id": "b99"}, ctx)
        assert result.is_error
        assert result.data["code"] == "not_found"
        assert result.data["available_ids"] == ["b01", "b02", "b03"]

    @pytest.mark.asyncio
    async def test_structural_error(self, ctx):
        """Test a broken chapter is refused by readers."""
        ctx.store.write_text("chapters/bad.md", "<!-- beat:a | A -->\n<!-- beat:a | B -->\n")
        result = await handle_get_chapter({"path": "chapters/bad.md"}, ctx)
        assert result.data["code"] == "structural_error"
        assert result.data["issues"]

    @pytest.mark.asyncio
    async def test_invalid_params(self, ctx):
        """Test missing arguments come back as invalid_params."""
        result = await handle_get_beat({"path": CH01}, ctx)
        assert result.data["code"] == "invalid_params"
        assert "beat_id" in result.data["error"]

    @pytest.mark.asyncio
    async def test_path_outside_project(self, ctx):
        """Test paths that escape the project root are refused."""
        result = await handle_get_chapter({"path": "../outside.md"}, ctx)
        assert result.data["code"] == "file_error"
        assert result.data["path"] == "../outside.md"

    @pytest.mark.asyncio
    async def test_missing_file(self, ctx):
        """Test a missing chapter is a file error."""
        result = await handle_get_chapter({"path": "chapters/nope.md"}, ctx)
        assert result.data["code"] == "file_error"


class TestBeatHandlers:
    """Tests for the beat editing handlers."""

    @pytest.mark.asyncio
    async def test_write_prose_and_status(self, ctx, project, versions):
        """Test prose and status are written and committed together."""
        params = {"path": CH01, "beat_id": "b02", "prose": "An apple.", "status": "written"}
        result = await handle_write_beat_prose(params, ctx)
        assert result.data["commit"] == "v1"
        assert versions.commits == [([CH01], "Updated prose for chapters/ch01.md:b02")]
        text = read(project, CH01)
        assert "<!-- beat:b02 [written] | The fruit stall -->" in text
        assert "an apple. -->\n\nAn apple.\n\n<!-- beat:b03" in text

    @pytest.mark.asyncio
    async def test_unchanged_write_not_committed(self, ctx, project, versions, sample_chapter):
        """Test writing the same prose leaves the file alone and commits nothing."""
        params = {"path": CH01, "beat_id": "b03", "prose": "Unit 7 left by the north road."}
        result = await handle_write_beat_prose(params, ctx)
        assert result.data["commit"] is None
        assert versions.commits == []
        assert read(project, CH01) == sample_chapter

    @pytest.mark.asyncio
    async def test_edit_prose(self, ctx, project, sample_chapter):
        """Test exact-match edits."""
        params = {
            "path": CH01,
            "beat_id": "b01",
            "edits": [{"old_str": "already open", "new_str": "barely open"}],
        }
        result = await handle_edit_beat_prose(params, ctx)
        assert not result.is_error
        assert read(project, CH01) == sample_chapter.replace("already open", "barely open")

    @pytest.mark.asyncio
    async def test_edit_ambiguous(self, ctx, project, versions, sample_chapter):
        """Test an ambiguous edit writes nothing."""
        params = {"path": CH01, "beat_id": "b01", "edits": [{"old_str": "the", "new_str": "a"}]}
        result = await handle_edit_beat_prose(params, ctx)
        assert result.data["code"] == "ambiguous_anchor"
        assert result.data["occurrences"] == 2
        assert read(project, CH01) == sample_chapter
        assert versions.commits == []

    @pytest.mark.asyncio
    async def test_add_beat(self, ctx):
        """Test a beat is inserted after the given beat."""
        params = {"path": CH01, "beat_id": "b04", "label": "Night", "after_beat_id": "b02"}
        result = await handle_add_beat(params, ctx)
        assert result.data["beat_ids"] == ["b01", "b02", "b04", "b03"]
        assert result.data["message"] == "Added beat 'b04' after 'b02'"

    @pytest.mark.asyncio
    async def test_add_duplicate(self, ctx):
        """Test an existing id is refused."""
        result = await handle_add_beat({"path": CH01, "beat_id": "b01", "label": "X"}, ctx)
        assert result.data["code"] == "duplicate_id"

    @pytest.mark.asyncio
    async def test_remove_with_archive(self, ctx, project, versions):
        """Test the prose is archived and both files are committed."""
        params = {"path": CH01, "beat_id": "b01", "archive_path": "archive/b01.md"}
        result = await handle_remove_beat(params, ctx)
        prose = "The gate was already open. Vendors called out prices.\n" + NOTE
        assert result.data["removed_prose"] == prose
        assert result.data["archived_to"] == "archive/b01.md"
        assert result.data["beat_ids"] == ["b02", "b03"]
        assert read(project, "archive/b01.md") == (
            f"# Removed beat: chapters/ch01.md:b01\n\n{prose}\n"
        )
        assert versions.commits[0][0] == [CH01, "archive/b01.md"]

    @pytest.mark.asyncio
    async def test_remove_empty_beat_skips_archive(self, ctx, project):
        """Test a beat without prose is not archived."""
        params = {"path": CH01, "beat_id": "b02", "archive_path": "archive/b02.md"}
        result = await handle_remove_beat(params, ctx)
        assert result.data["archived_to"] is None
        assert not (project / "archive" / "b02.md").exists()

    @pytest.mark.asyncio
    async def test_reorder_invalid(self, ctx, project, sample_chapter):
        """Test a partial order is refused with the missing ids."""
        result = await handle_reorder_beats({"path": CH01, "order": ["b01"]}, ctx)
        assert result.data["code"] == "invalid_permutation"
        assert result.data["missing"] == ["b02", "b03"]
        assert read(project, CH01) == sample_chapter

    @pytest.mark.asyncio
    async def test_reorder(self, ctx):
        """Test a full permutation is applied."""
        result = await handle_reorder_beats({"path": CH01, "order": ["b03", "b02", "b01"]}, ctx)
        assert result.data["beat_ids"] == ["b03", "b02", "b01"]
        reread = await handle_get_chapter({"path": CH01}, ctx)
        assert [b["id"] for b in reread.data["beats"]] == ["b03", "b02", "b01"]

    @pytest.mark.asyncio
    async def test_update_beat(self, ctx, project, versions):
        """Test status and summary are patched."""
        params = {"path": CH01, "beat_id": "b03", "status": "written", "summary": "Exit."}
        await handle_update_beat(params, ctx)
        text = read(project, CH01)
        assert "<!-- beat:b03 [written] | Leaving -->\n<!-- summary: Exit. -->\n" in text
        assert versions.commits[0][1] == "Updated status, summary of chapters/ch01.md:b03"

    @pytest.mark.asyncio
    async def test_update_invalid_status(self, ctx):
        """Test an unknown status fails validation."""
        result = await handle_update_beat(
            {"path": CH01, "beat_id": "b03", "status": "finished"}, ctx
        )
        assert result.data["code"] == "invalid_params"

    @pytest.mark.asyncio
    async def test_set_chapter_summary(self, ctx, project, sample_chapter):
        """Test the chapter summary is replaced in place."""
        result = await handle_set_chapter_summary({"path": CH01, "summary": "Market day."}, ctx)
        assert result.data["message"] == "Set chapter summary"
        expected = sample_chapter.replace("Unit 7 visits the morning market.", "Market day.")
        assert read(project, CH01) == expected


class TestAnnotationHandlers:
    """Tests for the annotation handlers."""

    @pytest.mark.asyncio
    async def test_get_annotations(self, ctx):
        """Test annotations carry path-qualified ids."""
        result = await handle_get_annotations({"path": CH01}, ctx)
        assert result.data["total_count"] == 1
        annotation = result.data["annotations"][0]
        assert annotation["id"] == "chapters/ch01.md:b01:2"
        assert annotation["author"] == "ana"
        assert annotation["block_id"] == "b01"

    @pytest.mark.asyncio
    async def test_get_annotations_filtered(self, ctx):
        """Test type filtering."""
        result = await handle_get_annotations({"path": CH01, "type": "query"}, ctx)
        assert result.data["annotations"] == []

    @pytest.mark.asyncio
    async def test_add_annotation(self, ctx, project):
        """Test the annotation lands after the anchor's line with the context author."""
        params = {
            "path": CH01,
            "beat_id": "b01",
            "anchor": "Vendors called",
            "type": "query",
            "message": "Which gate?",
        }
        result = await handle_add_annotation(params, ctx)
        assert result.data["annotation"] == "<!-- @query(ed): Which gate? -->"
        assert "prices.\n<!-- @query(ed): Which gate? -->\n<!-- @note(ana)" in read(project, CH01)

    @pytest.mark.asyncio
    async def test_add_annotation_missing_anchor(self, ctx):
        """Test an absent anchor is error data."""
        params = {"path": CH01, "beat_id": "b01", "anchor": "xyzzy", "type": "flag"}
        result = await handle_add_annotation(params, ctx)
        assert result.data["code"] == "anchor_not_found"

    @pytest.mark.asyncio
    async def test_remove_annotation(self, ctx, project, sample_chapter):
        """Test removing by id restores the prose without the comment."""
        params = {"path": CH01, "annotation_id": "chapters/ch01.md:b01:2"}
        result = await handle_remove_annotation(params, ctx)
        assert result.data["beat_id"] == "b01"
        assert read(project, CH01) == sample_chapter.replace("\n" + NOTE, "")

    @pytest.mark.asyncio
    async def test_remove_stale_id(self, ctx):
        """Test a stale id lists the current ids."""
        params = {"path": CH01, "annotation_id": "chapters/ch01.md:b01:9"}
        result = await handle_remove_annotation(params, ctx)
        assert result.data["code"] == "annotation_not_found"
        assert result.data["available_ids"] == ["chapters/ch01.md:b01:2"]


class TestSectionHandlers:
    """Tests for the reference document handlers."""

    @pytest.mark.asyncio
    async def test_get_sections(self, ctx):
        """Test the table of contents and top matter."""
        result = await handle_get_sections({"path": "notes/style.md"}, ctx)
        assert [s["slug"] for s in result.data["sections"]] == [
            "voice-tone",
            "setting",
            "voice-tone-2",
        ]
        assert result.data["top_matter"] == "Top matter line.\n\n"
        assert result.data["total_count"] == 3

    @pytest.mark.asyncio
    async def test_get_section(self, ctx):
        """Test fetching by slug."""
        params = {"path": "notes/style.md", "slugs": ["setting"]}
        result = await handle_get_section(params, ctx)
        assert result.data["sections"] == {"setting": "## Setting\n\nThe city.\n\n"}
        assert result.data["content"] is None

    @pytest.mark.asyncio
    async def test_get_whole_document(self, ctx, reference_doc):
        """Test no slugs returns the whole document."""
        result = await handle_get_section({"path": "notes/style.md"}, ctx)
        assert result.data["content"] == reference_doc

    @pytest.mark.asyncio
    async def test_missing_section(self, ctx):
        """Test an unknown slug lists the available slugs."""
        params = {"path": "notes/style.md", "slugs": ["magic"]}
        result = await handle_get_section(params, ctx)
        assert result.data["code"] == "section_not_found"
        assert result.data["missing"] == ["magic"]
        assert result.data["available"] == ["voice-tone", "setting", "voice-tone-2"]


class TestMigrationHandlers:
    """Tests for migrate_chapter and check_chapter."""

    @pytest.mark.asyncio
    async def test_migrate_with_sidecar(self, ctx, project, versions):
        """Test the sidecar summary wins and the sidecar is recomputed."""
        params = {"path": CH02, "sidecar_path": SIDECAR, "rewrite_sidecar": True}
        result = await handle_migrate_chapter(params, ctx)
        assert result.data["changed"] is True
        assert result.data["sidecar_rewritten"] is True
        assert result.data["commit"] == "v1"
        assert versions.commits == [
            ([CH02, SIDECAR], "Migrated chapters/ch02.md to inline summaries")
        ]

        text = read(project, CH02)
        assert "<!-- summary: Sidecar summary for the gate. -->" in text
        assert "<!-- beat:b01 [written] | Arriving at market -->" in text
        assert "beat-brief" not in text

        sidecar = json.loads(read(project, SIDECAR))
        assert [b["id"] for b in sidecar["beats"]] == ["b01", "b02"]
        assert sidecar["beats"][0]["characters"] == ["Unit 7"]
        assert sidecar["beats"][1]["status"] == "dirty"
        assert sidecar["title"] == "The Market"
        assert sidecar["pov"] == "Unit 7"

    @pytest.mark.asyncio
    async def test_migrate_dry_run(self, ctx, project, versions, legacy_chapter):
        """Test a dry run reports without writing."""
        result = await handle_migrate_chapter({"path": CH02, "dry_run": True}, ctx)
        assert result.data["changed"] is True
        assert result.data["actions"]
        assert result.data["commit"] is None
        assert read(project, CH02) == legacy_chapter
        assert versions.commits == []

    @pytest.mark.asyncio
    async def test_migrate_current_chapter(self, ctx, versions):
        """Test a current chapter needs nothing."""
        result = await handle_migrate_chapter({"path": CH01}, ctx)
        assert result.data["changed"] is False
        assert result.data["message"] == "chapters/ch01.md is already in the current format"
        assert versions.commits == []

    @pytest.mark.asyncio
    async def test_migrate_bad_sidecar(self, ctx):
        """Test a sidecar of the wrong shape is a file error."""
        ctx.store.write_text(SIDECAR, '{"beats": 5}\n')
        result = await handle_migrate_chapter({"path": CH02, "sidecar_path": SIDECAR}, ctx)
        assert result.data["code"] == "file_error"
        assert result.data["path"] == SIDECAR

    @pytest.mark.asyncio
    async def test_check_legacy(self, ctx):
        """Test legacy content is counted."""
        result = await handle_check_chapter({"path": CH02}, ctx)
        assert result.data["ok"] is True
        assert result.data["needs_migration"] is True
        assert result.data["legacy"]["beat_briefs"] == 2

    @pytest.mark.asyncio
    async def test_check_broken(self, ctx):
        """Test a broken chapter is reported, not refused."""
        ctx.store.write_text("chapters/bad.md", "<!-- beat:a | A -->\n<!-- beat:a | B -->\n")
        result = await handle_check_chapter({"path": "chapters/bad.md"}, ctx)
        assert not result.is_error
        assert result.data["ok"] is False
        assert result.data["issues"][0]["code"] == "duplicate_id"
