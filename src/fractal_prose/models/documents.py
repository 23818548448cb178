"""Reference document (section index) response models."""

from pydantic import BaseModel, Field


class SectionInfo(BaseModel):
    """One entry of a reference document's table of contents."""

    name: str = Field(..., description="Heading text as written")
    slug: str = Field(..., description="Unique slug used to fetch the section")
    line: int = Field(..., ge=1, description="1-based line of the heading")


class SectionsResult(BaseModel):
    """Result of get_sections tool."""

    path: str = Field(..., description="Document path")
    top_matter: str = Field(default="", description="Text before the first section heading")
    sections: list[SectionInfo] = Field(default_factory=list, description="Table of contents")
    total_count: int = Field(default=0, ge=0, description="Number of sections")


class SectionResult(BaseModel):
    """Result of get_section tool."""

    path: str = Field(..., description="Document path")
    sections: dict[str, str] = Field(
        default_factory=dict, description="Requested slug -> section text (heading included)"
    )
    content: str | None = Field(
        default=None, description="Whole document, when no slugs were requested"
    )
    token_count: int = Field(default=0, ge=0, description="Estimated tokens returned")
