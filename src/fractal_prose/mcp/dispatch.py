"""Transport-agnostic MCP request dispatch.

``dispatch`` takes one decoded JSON-RPC request (or a batch) and returns the
response dict, or None for notifications. The HTTP transport only
moves bytes.
"""

import logging
from typing import Any

from pydantic import ValidationError

from .. import __version__
from ..engine.handlers import (
    HandlerContext,
    HandlerFunc,
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
from ..models import ToolName
from .jsonrpc import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    SERVER_ERROR,
    jsonrpc_error,
    jsonrpc_response,
    tool_content,
)
from .tool_defs import TOOL_DEFINITIONS

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

TOOL_HANDLERS: dict[ToolName, HandlerFunc] = {
    ToolName.GET_CHAPTER: handle_get_chapter,
    ToolName.GET_BEAT: handle_get_beat,
    ToolName.CHECK_CHAPTER: handle_check_chapter,
    ToolName.WRITE_BEAT_PROSE: handle_write_beat_prose,
    ToolName.EDIT_BEAT_PROSE: handle_edit_beat_prose,
    ToolName.ADD_BEAT: handle_add_beat,
    ToolName.REMOVE_BEAT: handle_remove_beat,
    ToolName.REORDER_BEATS: handle_reorder_beats,
    ToolName.UPDATE_BEAT: handle_update_beat,
    ToolName.SET_CHAPTER_SUMMARY: handle_set_chapter_summary,
    ToolName.GET_ANNOTATIONS: handle_get_annotations,
    ToolName.ADD_ANNOTATION: handle_add_annotation,
    ToolName.REMOVE_ANNOTATION: handle_remove_annotation,
    ToolName.GET_SECTIONS: handle_get_sections,
    ToolName.GET_SECTION: handle_get_section,
    ToolName.MIGRATE_CHAPTER: handle_migrate_chapter,
}


async def dispatch(body: Any, ctx: HandlerContext) -> dict | list | None:
    """Handle a JSON-RPC request or batch.

    Returns:
        The response dict, a list of responses for a batch, or None when
        nothing should be sent back (notifications, all-notification batches).
    """
    if isinstance(body, list):
        if not body:
            return jsonrpc_error(None, INVALID_REQUEST, "Empty batch")
        responses = []
        for request in body:
            response = await _handle_request(request, ctx)
            if response:  # Skip notifications (no id)
                responses.append(response)
        return responses or None
    return await _handle_request(body, ctx)


async def _handle_request(body: Any, ctx: HandlerContext) -> dict | None:
    """Handle a single JSON-RPC request."""
    if not isinstance(body, dict) or not isinstance(body.get("method"), str):
        return jsonrpc_error(None, INVALID_REQUEST, "Invalid request")

    method = body["method"]
    id = body.get("id")
    params = body.get("params") or {}

    if id is None:  # Notification - no response
        logger.debug(f"Notification: {method}")
        return None

    if method == "initialize":
        return jsonrpc_response(
            id,
            {
                "protocolVersion": PROTOCOL_VERSION,
                "serverInfo": {"name": "fractal-prose", "version": __version__},
                "capabilities": {"tools": {}},
            },
        )
    elif method == "tools/list":
        return jsonrpc_response(id, {"tools": TOOL_DEFINITIONS})
    elif method == "tools/call":
        return await _handle_call_tool(id, params, ctx)
    elif method == "ping":
        return jsonrpc_response(id, {})
    else:
        return jsonrpc_error(id, METHOD_NOT_FOUND, f"Method not found: {method}")


async def _handle_call_tool(id: Any, params: dict, ctx: HandlerContext) -> dict:
    """Handle MCP tools/call: validate arguments, run the handler, wrap the result."""
    tool_name = params.get("name")
    arguments = params.get("arguments") or {}

    try:
        tool = ToolName(tool_name)
    except ValueError:
        return jsonrpc_error(id, INVALID_PARAMS, f"Unknown tool: {tool_name}")

    handler = TOOL_HANDLERS[tool]
    try:
        handler.params_model.model_validate(arguments)
    except ValidationError as e:
        return jsonrpc_error(
            id,
            INVALID_PARAMS,
            f"Invalid arguments for {tool}",
            data=e.errors(include_url=False, include_context=False),
        )

    try:
        result = await handler(arguments, ctx)
    except Exception as e:
        logger.error(f"Tool {tool} failed: {e}", exc_info=True)
        return jsonrpc_error(id, SERVER_ERROR, str(e))

    logger.debug(f"{tool}: ~{result.input_tokens} in / ~{result.output_tokens} out tokens")
    return jsonrpc_response(id, tool_content(result))
