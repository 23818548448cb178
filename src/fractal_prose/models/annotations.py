"""Annotation response models."""

from pydantic import BaseModel, Field

from .chapter import WarningInfo
from .enums import AnnotationType


class AnnotationInfo(BaseModel):
    """An inline annotation. Its id is only valid until the beat's lines shift."""

    id: str = Field(..., description="Ephemeral id (path:beat:line)")
    type: AnnotationType = Field(..., description="Annotation type")
    author: str = Field(..., description="Author (default author when omitted in the text)")
    message: str = Field(default="", description="Message (empty only for flags)")
    block_id: str = Field(..., description="Owning beat")
    line: int = Field(..., ge=1, description="1-based line within the beat's prose")
    end_line: int = Field(..., ge=1, description="Last line (multi-line annotations)")


class AnnotationsResult(BaseModel):
    """Result of get_annotations tool."""

    path: str = Field(..., description="Chapter path")
    annotations: list[AnnotationInfo] = Field(default_factory=list, description="Annotations")
    total_count: int = Field(default=0, ge=0, description="Number of annotations returned")
    warnings: list[WarningInfo] = Field(
        default_factory=list, description="Unterminated or malformed annotation markup"
    )


class AnnotationWriteResult(BaseModel):
    """Result of add_annotation / remove_annotation tools."""

    path: str = Field(..., description="Chapter path")
    beat_id: str = Field(..., description="Beat whose prose changed")
    annotation: str | None = Field(default=None, description="The comment written (add only)")
    commit: str | None = Field(default=None, description="Version id from the version store")
    message: str = Field(..., description="Human-readable status message")
