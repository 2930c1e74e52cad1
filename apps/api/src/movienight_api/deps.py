from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from movienight_core.config import Settings
from movienight_core.db import Store
from movienight_core.tokens import RandomSource


def get_db(request: Request) -> Iterator[Session]:
    """One session per request; rolled back on error, always closed."""
    store: Store = request.app.state.store
    with store.session() as db:
        yield db


def get_rng(request: Request) -> RandomSource:
    return request.app.state.rng


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
