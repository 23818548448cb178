"""JSON-RPC 2.0 helpers for the MCP transport.

This module provides utility functions for creating JSON-RPC 2.0
responses and errors, and for wrapping tool results as MCP content.

See: https://www.jsonrpc.org/specification
"""

import json
from typing import Any

from ..models import ToolResult


def jsonrpc_response(id: Any, result: Any) -> dict:
    """Create a JSON-RPC 2.0 success response.

    Args:
        id: Request ID (must match the request)
        result: The result payload

    Returns:
        JSON-RPC 2.0 response dict
    """
    return {"jsonrpc": "2.0", "id": id, "result": result}


def jsonrpc_error(id: Any, code: int, message: str, data: Any = None) -> dict:
    """Create a JSON-RPC 2.0 error response.

    Standard error codes:
        -32700: Parse error
        -32600: Invalid request
        -32601: Method not found
        -32602: Invalid params
        -32603: Internal error

    Args:
        id: Request ID (can be None for parse errors)
        code: Error code (negative integer)
        message: Human-readable error message
        data: Optional structured detail (e.g. validation errors)

    Returns:
        JSON-RPC 2.0 error response dict
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": id, "error": error}


def tool_content(result: ToolResult) -> dict:
    """MCP tools/call result: one JSON text block, flagged when it carries an error."""
    return {
        "content": [{"type": "text", "text": json.dumps(result.data, indent=2, default=str)}],
        "isError": result.is_error,
    }


# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000  # Unexpected failure inside a tool handler
