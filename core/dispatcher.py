from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from mcp import types

from core.errors import format_error  # type: ignore
from core.registry import ToolRegistry  # type: ignore

logger = logging.getLogger(__name__)


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


async def dispatch(
    registry: ToolRegistry,
    name: str,
    arguments: Optional[Mapping[str, Any]] = None,
) -> types.CallToolResult:
    """Run the tool called `name` and wrap its output in an MCP tool result.

    Unknown names are reported without running anything. Tools return their
    own error payloads; an exception escaping a tool is still caught here and
    reported as an error result.
    """
    spec = registry.get(name)
    if spec is None:
        logger.warning(f"Unknown tool requested: {name}")
        return _text_result(f"Unknown tool: {name}", is_error=True)

    logger.info(f"Calling tool {name}")
    try:
        result = await spec.func(dict(arguments or {}))
    except Exception as e:
        logger.exception(f"Unhandled exception in tool {name}")
        return _text_result(f"Error: {format_error(e)}", is_error=True)
    return _text_result(result)
