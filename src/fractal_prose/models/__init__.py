"""Pydantic models for the prose tool surface.

This module re-exports all models. Import from submodules directly for
narrower imports:

    from fractal_prose.models.enums import BeatStatus
    from fractal_prose.models.sidecar import ChapterMeta
"""

# ============ ANNOTATION MODELS ============
from .annotations import AnnotationInfo, AnnotationsResult, AnnotationWriteResult

# ============ CHAPTER MODELS ============
from .chapter import (
    BeatInfo,
    BeatResult,
    ChapterResult,
    CheckIssue,
    CheckResult,
    MigrationResult,
    RemoveBeatResult,
    WarningInfo,
    WriteResult,
)

# ============ DOCUMENT MODELS ============
from .documents import SectionInfo, SectionResult, SectionsResult

# ============ ENUMS ============
from .enums import (
    AnnotationType,
    BeatStatus,
    IssueCode,
    TokenKind,
    ToolName,
    WarningCode,
)

# ============ REQUEST MODELS ============
from .requests import (
    AddAnnotationParams,
    AddBeatParams,
    BeatParams,
    ChapterParams,
    CheckChapterParams,
    EditBeatProseParams,
    GetAnnotationsParams,
    GetBeatParams,
    GetChapterParams,
    GetSectionParams,
    GetSectionsParams,
    MigrateChapterParams,
    ProseEdit,
    RemoveAnnotationParams,
    RemoveBeatParams,
    ReorderBeatsParams,
    SetChapterSummaryParams,
    UpdateBeatParams,
    WriteBeatProseParams,
)

# ============ RESPONSE MODELS ============
from .responses import ToolResult

# ============ SIDECAR MODELS ============
from .sidecar import BeatMeta, ChapterMeta

__all__ = [
    # Enums
    "AnnotationType",
    "BeatStatus",
    "IssueCode",
    "TokenKind",
    "ToolName",
    "WarningCode",
    # Requests
    "ChapterParams",
    "BeatParams",
    "GetChapterParams",
    "GetBeatParams",
    "CheckChapterParams",
    "WriteBeatProseParams",
    "ProseEdit",
    "EditBeatProseParams",
    "AddBeatParams",
    "RemoveBeatParams",
    "ReorderBeatsParams",
    "UpdateBeatParams",
    "SetChapterSummaryParams",
    "GetAnnotationsParams",
    "AddAnnotationParams",
    "RemoveAnnotationParams",
    "GetSectionsParams",
    "GetSectionParams",
    "MigrateChapterParams",
    # Chapter results
    "WarningInfo",
    "BeatInfo",
    "ChapterResult",
    "BeatResult",
    "CheckIssue",
    "CheckResult",
    "WriteResult",
    "RemoveBeatResult",
    "MigrationResult",
    # Annotation results
    "AnnotationInfo",
    "AnnotationsResult",
    "AnnotationWriteResult",
    # Document results
    "SectionInfo",
    "SectionsResult",
    "SectionResult",
    # Sidecar
    "BeatMeta",
    "ChapterMeta",
    # Response envelope
    "ToolResult",
]
