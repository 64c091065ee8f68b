"""Static tool catalog config loader."""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "catalog.yaml"


class ToolConfig(BaseModel):
    """Tool definition loaded from static config."""

    name: str
    description: str
    handler: str
    mutating: bool = False
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )


class ToolCatalogConfig(BaseModel):
    """Container for tool definitions."""

    tools: list[ToolConfig] = Field(default_factory=list)


def load_tool_catalog(config_path: str | Path | None = None) -> ToolCatalogConfig:
    """Load tool catalog config from YAML.

    Args:
        config_path: Optional custom path for the tool catalog config.

    Returns:
        Parsed ToolCatalogConfig, or an empty config if the file is missing.
    """
    if config_path is None:
        config_path = DEFAULT_CATALOG_PATH
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        logger.warning("tool_catalog_missing", path=str(config_path))
        return ToolCatalogConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    return ToolCatalogConfig(**data)
