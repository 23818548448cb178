"""MCP (Model Context Protocol) surface of the prose engine.

This module contains:
- Tool definitions for tools/list
- JSON-RPC 2.0 helpers
- dispatch(): routes initialize / tools/list / tools/call / ping to the handlers

The transport (``POST /mcp`` in ``fractal_prose.server``) only decodes and encodes JSON.
"""

from .dispatch import PROTOCOL_VERSION, TOOL_HANDLERS, dispatch
from .jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    jsonrpc_error,
    jsonrpc_response,
    tool_content,
)
from .tool_defs import TOOL_DEFINITIONS, TOOL_TIERS, ToolTier, get_tool_tier

__all__ = [
    # Dispatch
    "dispatch",
    "TOOL_HANDLERS",
    "PROTOCOL_VERSION",
    # Tool definitions
    "TOOL_DEFINITIONS",
    "TOOL_TIERS",
    "ToolTier",
    "get_tool_tier",
    # JSON-RPC helpers
    "jsonrpc_response",
    "jsonrpc_error",
    "tool_content",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
]
