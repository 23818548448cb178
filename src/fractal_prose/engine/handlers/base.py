"""Base infrastructure for tool handlers.

This module provides the common types and utilities used by all handler modules.
Each handler receives a HandlerContext with shared state and returns a ToolResult.
Every mutating handler is read-modify-write: read the text, apply one engine
operation, write the text, then hand the path to the version store.
"""

import functools
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine, TypeVar

from pydantic import BaseModel, ValidationError

from ...errors import ProseError
from ...models import ToolResult, WarningInfo
from ...store import NullVersionStore, ProjectStore, VersionStore
from ..core.document import ChapterDocument, parse_document
from ..core.grammar import ParseWarning

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)


@dataclass
class HandlerContext:
    """Context object passed to all handlers.

    Contains the project store, the version-store collaborator, and engine
    overrides (None means "use settings").
    """

    store: ProjectStore
    versions: VersionStore = field(default_factory=NullVersionStore)
    default_author: str | None = None
    wrap_column: int | None = None

    def read_chapter(self, path: str) -> tuple[str, ChapterDocument]:
        """Read and parse a chapter; raises FileAccessError / StructuralError."""
        text = self.store.read_text(path)
        return text, parse_document(text)

    async def save_chapter(
        self,
        path: str,
        original: str,
        document: ChapterDocument,
        message: str,
        extra_paths: list[str] | None = None,
    ) -> str | None:
        """Write the document back and commit it; skipped when nothing changed."""
        text = document.to_text(self.wrap_column)
        paths = list(extra_paths or [])
        if text != original:
            self.store.write_text(path, text)
            paths.insert(0, path)
        if not paths:
            logger.debug(f"{path}: no changes to write")
            return None
        logger.info(f"{message} ({', '.join(paths)})")
        return await self.versions.commit(paths, message)


# Type alias for handler functions
HandlerFunc = Callable[
    [dict[str, Any], HandlerContext],
    Coroutine[Any, Any, ToolResult],
]


def count_tokens(text: str) -> int:
    """Estimate token count for a string.

    Uses a simple heuristic of ~4 characters per token.
    This is a reasonable approximation for English text.
    """
    if not text:
        return 0
    return max(1, len(text) // 4)


def warning_infos(warnings: list[ParseWarning]) -> list[WarningInfo]:
    return [WarningInfo(**w.to_dict()) for w in warnings]


def tool_result(model: BaseModel, input_text: str = "") -> ToolResult:
    """Wrap a result model in a ToolResult with token estimates."""
    data = model.model_dump(mode="json")
    return ToolResult(
        data=data,
        input_tokens=count_tokens(input_text),
        output_tokens=count_tokens(json.dumps(data)),
    )


def error_result(error: ProseError) -> ToolResult:
    """Turn an engine error into error data the caller can act on."""
    return ToolResult(data=error.to_dict(), input_tokens=0, output_tokens=0)


def params_error(tool: str, error: ValidationError) -> ToolResult:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or 'params'}: {e['msg']}" for e in error.errors()
    )
    return ToolResult(
        data={"error": f"{tool}: invalid parameters ({problems})", "code": "invalid_params"},
        input_tokens=0,
        output_tokens=0,
    )


def tool_handler(tool: str, params_model: type[P]):
    """Decorate ``async def handler(args: Params, ctx) -> ToolResult``.

    The decorated handler takes the raw ``params`` dict, validates it with
    ``params_model``, and returns engine errors as error data instead of raising.
    """

    def decorator(
        func: Callable[[P, HandlerContext], Coroutine[Any, Any, ToolResult]],
    ) -> HandlerFunc:
        @functools.wraps(func)
        async def wrapper(params: dict[str, Any], ctx: HandlerContext) -> ToolResult:
            try:
                args = params_model.model_validate(params or {})
            except ValidationError as e:
                return params_error(tool, e)
            try:
                return await func(args, ctx)
            except ProseError as e:
                logger.info(f"{tool} rejected: {e.message}")
                return error_result(e)

        wrapper.params_model = params_model
        return wrapper

    return decorator
