"""CLI entrypoint to run the BetCaddies FastAPI server."""

from __future__ import annotations

import logging
import os

import uvicorn

from betcaddies.config import get_settings
from betcaddies.db.database import init_db


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    init_db()
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("betcaddies.api.server:app", host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":  # pragma: no cover
    main()
