"""Entry point for running the game via ``python -m tictactoe``."""

from __future__ import annotations

import logging
import os

import uvicorn


def resolve_log_level(name: str) -> int:
    """Numeric level for ``name``; unknown names fall back to INFO."""

    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def main() -> None:
    """Start the FastAPI-powered tic-tac-toe web server."""

    host = os.environ.get("TICTACTOE_HOST", "0.0.0.0")
    port = int(os.environ.get("TICTACTOE_PORT", "8000"))
    requested = os.environ.get("TICTACTOE_LOG_LEVEL", "INFO")
    level = resolve_log_level(requested)
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    if not isinstance(logging.getLevelName(requested.strip().upper()), int):
        logging.getLogger(__name__).warning(
            "Unknown TICTACTOE_LOG_LEVEL %r, using INFO", requested
        )
    uvicorn.run("tictactoe.ui:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
