"""Request models (Pydantic *Params classes) for the prose tools."""

from pydantic import BaseModel, Field

from .enums import AnnotationType, BeatStatus


class ChapterParams(BaseModel):
    """Base for tools that address one chapter file."""

    path: str = Field(
        ..., min_length=1, description="Chapter file path, relative to the project root"
    )


class BeatParams(ChapterParams):
    """Base for tools that address one beat of a chapter."""

    beat_id: str = Field(..., min_length=1, description="Beat id")


# ============ CHAPTER READS ============


class GetChapterParams(ChapterParams):
    """Parameters for get_chapter tool."""

    include_prose: bool = Field(default=False, description="Include each beat's prose")


class GetBeatParams(BeatParams):
    """Parameters for get_beat tool."""

    clean: bool = Field(default=False, description="Strip annotations from the returned prose")


class CheckChapterParams(ChapterParams):
    """Parameters for check_chapter tool."""


# ============ BEAT EDITING ============


class WriteBeatProseParams(BeatParams):
    """Parameters for write_beat_prose tool."""

    prose: str = Field(..., description="New prose for the beat (replaces the old prose)")
    status: BeatStatus | None = Field(
        default=None, description="Optionally set the beat status in the same write"
    )


class ProseEdit(BaseModel):
    """One exact-match replacement inside a beat's prose."""

    old_str: str = Field(..., min_length=1, description="Text to replace; must occur exactly once")
    new_str: str = Field(..., description="Replacement text")


class EditBeatProseParams(BeatParams):
    """Parameters for edit_beat_prose tool."""

    edits: list[ProseEdit] = Field(..., min_length=1, description="Edits, applied in order")


class AddBeatParams(BeatParams):
    """Parameters for add_beat tool."""

    label: str = Field(..., description="Short display label")
    summary: str = Field(default="", description="Beat summary")
    status: BeatStatus = Field(default=BeatStatus.PLANNED, description="Initial status")
    prose: str = Field(default="", description="Initial prose")
    after_beat_id: str | None = Field(
        default=None, description="Insert after this beat (default: append at the end)"
    )


class RemoveBeatParams(BeatParams):
    """Parameters for remove_beat tool."""

    archive_path: str | None = Field(
        default=None, description="Write the removed prose to this project-relative file"
    )


class ReorderBeatsParams(ChapterParams):
    """Parameters for reorder_beats tool."""

    order: list[str] = Field(..., description="Every beat id exactly once, in the new order")


class UpdateBeatParams(BeatParams):
    """Parameters for update_beat tool."""

    status: BeatStatus | None = Field(default=None, description="New status")
    summary: str | None = Field(default=None, description="New summary ('' clears it)")
    label: str | None = Field(default=None, description="New label")


class SetChapterSummaryParams(ChapterParams):
    """Parameters for set_chapter_summary tool."""

    summary: str = Field(..., description="Chapter summary ('' removes it)")


# ============ ANNOTATIONS ============


class GetAnnotationsParams(ChapterParams):
    """Parameters for get_annotations tool."""

    beat_id: str | None = Field(default=None, description="Only this beat")
    type: AnnotationType | None = Field(default=None, description="Only this annotation type")
    author: str | None = Field(default=None, description="Only this author")


class AddAnnotationParams(BeatParams):
    """Parameters for add_annotation tool."""

    anchor: str = Field(..., min_length=1, description="Text the annotation follows (unique)")
    type: AnnotationType = Field(..., description="Annotation type")
    message: str = Field(default="", description="Message (may be empty only for flags)")
    author: str | None = Field(default=None, description="Author (default from settings)")


class RemoveAnnotationParams(ChapterParams):
    """Parameters for remove_annotation tool."""

    annotation_id: str = Field(..., min_length=1, description="Id from get_annotations")


# ============ REFERENCE DOCUMENTS ============


class GetSectionsParams(BaseModel):
    """Parameters for get_sections tool."""

    path: str = Field(..., min_length=1, description="Reference document path")
    level: int | None = Field(default=None, ge=1, le=6, description="Heading level to index")


class GetSectionParams(GetSectionsParams):
    """Parameters for get_section tool."""

    slugs: list[str] = Field(
        default_factory=list, description="Section slugs to fetch (empty: the whole document)"
    )


# ============ MIGRATION ============


class MigrateChapterParams(ChapterParams):
    """Parameters for migrate_chapter tool."""

    sidecar_path: str | None = Field(default=None, description="JSON sidecar to migrate from")
    rewrite_sidecar: bool = Field(
        default=False, description="Write the reconciled sidecar back to sidecar_path"
    )
    dry_run: bool = Field(default=False, description="Report without writing anything")
