from core.logging_config import setup_logging
from core.clients import aclose_clients
from core.config import get_config
from core.dispatcher import dispatch
from core.registry import ToolRegistry, load_tools
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
import asyncio
import sys
from typing import Any, Optional

# Set up logging using core.logging_config
logger = setup_logging()

SERVER_VERSION = "1.0.0"


class ToolCallError(Exception):
    """Carries an error result's text to the MCP server, which reports it with isError set."""


def create_server(registry: Optional[ToolRegistry] = None) -> Server:
    """Build the MCP server and wire tools/list and tools/call to the tool catalog."""

    ###################################################### MCP Tools ######################################################

    logger.info("Loading MCP tools...")
    if registry is None:
        registry = load_tools()

    server = Server(get_config().get("server_name") or "snyk-mcp", version=SERVER_VERSION)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return registry.list_tools()

    # tools validate their own arguments and answer with error payloads
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: Optional[dict[str, Any]]) -> list[types.TextContent]:
        result = await dispatch(registry, name, arguments)
        if result.isError:
            raise ToolCallError("\n".join(c.text for c in result.content if isinstance(c, types.TextContent)))
        return result.content

    logger.info("MCP server instance created with %d tools", len(registry))
    return server


async def serve() -> None:
    server = create_server()
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await aclose_clients()


###################################################### Startup ######################################################

def main() -> None:
    logger.info("Starting Snyk MCP server...")
    try:
        asyncio.run(serve())
        logger.info("MCP server shut down.")
    except KeyboardInterrupt:
        logger.info("MCP server interrupted.")
    except Exception:
        logger.exception("Unhandled exception running MCP server")
        print("Unhandled exception occurred. See logs/ for details.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
