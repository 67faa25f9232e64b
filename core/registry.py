"""Discovery of tool modules and the resulting tool catalog.

Every non-underscore module in the `tools` package exposes
`get_tools() -> dict[str, dict]` mapping a tool name to
`{"func", "title", "description", "input_schema"}`. `load_tools` imports them
all once at start-up and returns the catalog keyed by tool name.
"""
from __future__ import annotations

import copy
import logging
import pkgutil
from dataclasses import dataclass
from importlib import import_module
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from mcp import types

logger = logging.getLogger(__name__)

TOOLS_PACKAGE = "tools"

ORG_ID_PROPERTY = {
    "type": "string",
    "description": "The organization ID (uses SNYK_ORG_ID env var if not provided)",
}

LIMIT_PROPERTY_TEMPLATE = "Maximum number of {} to return (default: 100)"


def object_schema(properties: Dict[str, Any], required: Iterable[str] = ()) -> Dict[str, Any]:
    """Build the JSON schema of a tool's arguments."""
    return {
        "type": "object",
        "properties": properties,
        "required": list(required),
    }


def limit_property(items: str) -> Dict[str, Any]:
    return {"type": "number", "description": LIMIT_PROPERTY_TEMPLATE.format(items)}


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_schema: Dict[str, Any]
    func: Callable[..., Awaitable[str]]
    title: Optional[str] = None

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=copy.deepcopy(self.input_schema),
        )


class ToolRegistry:
    """Read-only mapping of tool name to ToolSpec, in registration order."""

    def __init__(self, specs: Iterable[ToolSpec] = ()):
        self._specs: Dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            self._specs[spec.name] = spec

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._specs.get(name)

    def names(self) -> List[str]:
        return list(self._specs)

    def list_tools(self) -> List[types.Tool]:
        return [spec.to_tool() for spec in self._specs.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)


def specs_from_mapping(mapping: Dict[str, Any], module_name: str = "") -> List[ToolSpec]:
    specs = []
    for tool_name, meta in mapping.items():
        func = meta.get("func") if isinstance(meta, dict) else None
        if not func:
            logger.warning(f"Tool {tool_name} in {module_name} did not provide a callable; skipping")
            continue
        specs.append(
            ToolSpec(
                name=tool_name,
                title=meta.get("title"),
                description=meta.get("description") or "",
                input_schema=meta.get("input_schema") or object_schema({}),
                func=func,
            )
        )
    return specs


def load_tools(package_name: str = TOOLS_PACKAGE) -> ToolRegistry:
    """Import every tool module in `package_name` and build the catalog."""
    package = import_module(package_name)
    specs: List[ToolSpec] = []
    for _finder, name, _ispkg in pkgutil.iter_modules(package.__path__):
        if name.startswith("_"):
            continue
        module_name = f"{package_name}.{name}"
        try:
            mod = import_module(module_name)
        except Exception:
            logger.exception(f"Failed to load tools from module {module_name}")
            continue
        if not hasattr(mod, "get_tools"):
            continue
        module_specs = specs_from_mapping(mod.get_tools(), module_name)
        logger.info(f"Imported tools module: {module_name} ({len(module_specs)} tools)")
        specs.extend(module_specs)

    registry = ToolRegistry(specs)
    logger.info(f"Total tools registered: {len(registry)} , tool names: {registry.names()}")
    return registry
