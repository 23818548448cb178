"""fractal-prose: structured-prose chapters with inline beat markers.

Public entry points live in ``fractal_prose.engine`` (text operations),
``fractal_prose.engine.handlers`` (async tool handlers) and
``fractal_prose.mcp`` (tool definitions and JSON-RPC dispatch).
"""

__version__ = "0.1.0"
