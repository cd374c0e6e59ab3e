"""Entry point for running XOPlay via ``python -m xoplay``."""

from __future__ import annotations

import uvicorn

from .config import get_settings, setup_logging


def main() -> None:
    """Start the FastAPI-powered XOPlay web server."""

    setup_logging()
    settings = get_settings()
    uvicorn.run(
        "xoplay.ui:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
