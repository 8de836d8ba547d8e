"""Entry point for running the game via ``python -m tictactoe``."""

from __future__ import annotations

import logging

import uvicorn

from . import ui
from .config import load_settings
from .logging_setup import setup_logging


def main() -> None:
    """Start the FastAPI-powered tic-tac-toe web server."""

    settings = load_settings()
    setup_logging(settings)
    ui.configure(settings)
    logging.getLogger(__name__).info(
        "Serving tic-tac-toe on http://%s:%s", settings.host, settings.port
    )
    uvicorn.run(
        ui.app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
