"""Database initialization helper for Movie Night.

Creates all tables for the configured database and exits. The API does the
same on startup; this is for provisioning a database ahead of time.
"""
from __future__ import annotations

import logging
from typing import Optional

from .config import load_settings
from .db import Store

logger = logging.getLogger("movienight_core.init_db")


def init_db(url: Optional[str] = None) -> str:
    """Create tables at ``url`` (default: the configured database). Idempotent.

    Returns the URL that was initialized.
    """
    target = url or load_settings().effective_database_url()
    with Store(target):
        logger.info("init_db ok")
    return target


def main() -> None:
    from .logging_config import configure_logging

    configure_logging()
    init_db()


if __name__ == "__main__":  # pragma: no cover
    main()
