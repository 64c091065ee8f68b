from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from . import __version__


class Settings(BaseSettings):
    # App
    APP_NAME: str = "titan-sweepandgo-mcp"
    APP_VERSION: str = __version__
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8787

    # MCP
    MCP_PATH: str = "/mcp"
    MCP_LOG_LEVEL: str = "INFO"
    SSE_KEEPALIVE_SECONDS: float = 15.0
    TOOL_CATALOG_PATH: str = ""

    # Security
    # Empty means open mode: every caller is accepted.
    MCP_BEARER_SECRET: str = ""

    # Sweep&Go downstream
    CRM_BASE_URL: str = "https://openapi.sweepandgo.com"
    SNG_API_KEY: str = ""
    SNG_ALLOW_WRITES: bool = False
    SNG_ORGANIZATION: str = ""
    DOWNSTREAM_TIMEOUT_SECONDS: float = 30.0

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
