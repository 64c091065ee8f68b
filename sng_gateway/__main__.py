"""Run the gateway with uvicorn: ``python -m sng_gateway``."""

import uvicorn

from .config import get_settings
from .main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.MCP_LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
