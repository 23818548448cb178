"""Chapter and beat response models."""

from pydantic import BaseModel, Field

from .enums import BeatStatus

# ============ SHARED ============


class WarningInfo(BaseModel):
    """A tolerated anomaly reported next to a successful result."""

    code: str = Field(..., description="Warning code (e.g. unterminated_annotation)")
    message: str = Field(..., description="Human-readable description")
    line: int = Field(..., ge=1, description="1-based line where the anomaly starts")
    block_id: str | None = Field(default=None, description="Beat the anomaly belongs to")


class BeatInfo(BaseModel):
    """One beat as seen by tool callers."""

    id: str = Field(..., description="Beat id")
    status: BeatStatus = Field(..., description="Beat status")
    label: str = Field(..., description="Display label")
    summary: str = Field(default="", description="Beat summary")
    word_count: int = Field(default=0, ge=0, description="Words of prose (annotations excluded)")
    prose: str | None = Field(default=None, description="Prose (when requested)")


# ============ READ RESULTS ============


class ChapterResult(BaseModel):
    """Result of get_chapter tool."""

    path: str = Field(..., description="Chapter path")
    title: str | None = Field(default=None, description="Leading heading text")
    summary: str = Field(default="", description="Chapter summary")
    closed: bool = Field(..., description="Whether the chapter carries the closing sentinel")
    beats: list[BeatInfo] = Field(default_factory=list, description="Beats in order")
    warnings: list[WarningInfo] = Field(default_factory=list, description="Parse warnings")


class BeatResult(BaseModel):
    """Result of get_beat tool."""

    path: str = Field(..., description="Chapter path")
    beat: BeatInfo = Field(..., description="The beat, prose included")
    position: int = Field(..., ge=0, description="0-based position in the chapter")
    warnings: list[WarningInfo] = Field(default_factory=list, description="Parse warnings")


class CheckIssue(BaseModel):
    """A structural problem found by check_chapter."""

    code: str = Field(..., description="Issue code")
    message: str = Field(..., description="Human-readable description")
    line: int = Field(..., description="1-based line")
    block_id: str | None = Field(default=None, description="Beat involved, if any")


class CheckResult(BaseModel):
    """Result of check_chapter tool."""

    path: str = Field(..., description="Chapter path")
    ok: bool = Field(..., description="True when there are no structural issues")
    beats: int = Field(default=0, ge=0, description="Number of beat markers")
    issues: list[CheckIssue] = Field(default_factory=list, description="Structural issues")
    warnings: list[WarningInfo] = Field(default_factory=list, description="Tolerated anomalies")
    legacy: dict[str, int] = Field(default_factory=dict, description="Legacy content counts")
    needs_migration: bool = Field(default=False, description="Whether migrate_chapter has work")


# ============ WRITE RESULTS ============


class WriteResult(BaseModel):
    """Result of a mutating chapter tool."""

    path: str = Field(..., description="Chapter path")
    beat_ids: list[str] = Field(default_factory=list, description="Beat order after the write")
    commit: str | None = Field(default=None, description="Version id from the version store")
    message: str = Field(..., description="Human-readable status message")
    warnings: list[WarningInfo] = Field(default_factory=list, description="Parse warnings")


class RemoveBeatResult(WriteResult):
    """Result of remove_beat tool."""

    removed_prose: str = Field(default="", description="Prose the beat held")
    archived_to: str | None = Field(default=None, description="Where the prose was archived")


class MigrationResult(BaseModel):
    """Result of migrate_chapter tool."""

    path: str = Field(..., description="Chapter path")
    changed: bool = Field(..., description="Whether the chapter text changed")
    actions: list[str] = Field(default_factory=list, description="What the migration did")
    sidecar_rewritten: bool = Field(default=False, description="Whether the sidecar was rewritten")
    dry_run: bool = Field(default=False, description="Nothing was written")
    commit: str | None = Field(default=None, description="Version id from the version store")
    message: str = Field(..., description="Human-readable status message")
