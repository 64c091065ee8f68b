"""Service layer for the static tool catalog."""

import copy
from pathlib import Path
from typing import Iterable, Iterator, Mapping

from pydantic import ValidationError

from .config import ToolCatalogConfig, load_tool_catalog
from .exceptions import CatalogError
from .handlers import HANDLERS
from .models import ToolDescriptor, ToolHandler
from .schemas import ObjectSchema


class ToolCatalog:
    """Immutable, ordered set of tool descriptors keyed by name."""

    def __init__(self, tools: Iterable[ToolDescriptor]):
        self._tools: dict[str, ToolDescriptor] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise CatalogError(f"duplicate tool name in catalog: {tool.name}")
            self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


def build_tool_catalog(
    config: ToolCatalogConfig | None = None,
    config_path: str | Path | None = None,
    handlers: Mapping[str, ToolHandler] | None = None,
) -> ToolCatalog:
    """Bind catalog config entries to handlers.

    Args:
        config: Already-loaded config; loaded from ``config_path`` if omitted.
        config_path: Optional path override for the catalog YAML.
        handlers: Handler table; defaults to the Sweep&Go handlers.

    Returns:
        The tool catalog.

    Raises:
        CatalogError: On duplicate names, unknown handlers or invalid schemas.
    """
    if config is None:
        config = load_tool_catalog(config_path)
    if handlers is None:
        handlers = HANDLERS

    descriptors: list[ToolDescriptor] = []
    for tool in config.tools:
        handler = handlers.get(tool.handler)
        if handler is None:
            raise CatalogError(f"tool '{tool.name}' references unknown handler '{tool.handler}'")

        try:
            schema = ObjectSchema.model_validate(tool.input_schema)
        except ValidationError as e:
            raise CatalogError(f"tool '{tool.name}' has an unsupported input schema: {e}")

        descriptors.append(ToolDescriptor(
            name=tool.name,
            description=tool.description,
            input_schema=copy.deepcopy(tool.input_schema),
            schema=schema,
            mutating=tool.mutating,
            handler=handler,
        ))

    return ToolCatalog(descriptors)
