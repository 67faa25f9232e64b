# tools package for Snyk MCP server tools
# Modules in this package should expose a `get_tools() -> dict[str, dict]` mapping each tool name to
# {"func", "title", "description", "input_schema"}. core.registry imports every module here that does not
# start with "_" and registers the returned tools.
__all__ = []
