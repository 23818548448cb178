"""Sidecar metadata models (``<chapter>.meta.json``).

The sidecar is a narrower cache next to the chapter text. The engine reads it
as migration input and recomputes it from the prose; it is never the source of
truth for summary, label, status or prose. Unknown keys are carried through.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BeatMeta(BaseModel):
    """Sidecar record for one beat."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Beat id")
    label: str = Field(default="", description="Display label")
    summary: str = Field(default="", description="Summary (legacy home of beat summaries)")
    status: str = Field(default="", description="Status as recorded by older tooling")
    dirty_reason: str | None = Field(default=None, description="Why the beat was marked dirty")
    characters: list[str] = Field(default_factory=list, description="Characters in the beat")
    depends_on: list[str] = Field(default_factory=list, description="Beats this one depends on")
    depended_by: list[str] = Field(default_factory=list, description="Beats depending on this one")


class ChapterMeta(BaseModel):
    """Sidecar record for one chapter.

    ``beats`` may be stored as a list of records or as a mapping of beat id to
    record; both load to a list.
    """

    model_config = ConfigDict(extra="allow")

    title: str = Field(default="", description="Chapter title")
    summary: str = Field(default="", description="Chapter summary")
    pov: str = Field(default="", description="Point-of-view character")
    location: str = Field(default="", description="Primary location")
    timeline_position: str = Field(default="", description="Position on the story timeline")
    status: str = Field(default="", description="Chapter status as recorded by older tooling")
    beats: list[BeatMeta] = Field(default_factory=list, description="Beat records")

    @field_validator("beats", mode="before")
    @classmethod
    def _beats_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [{**(record or {}), "id": beat_id} for beat_id, record in value.items()]
        return value

    def beat(self, beat_id: str) -> BeatMeta | None:
        return next((beat for beat in self.beats if beat.id == beat_id), None)
