"""Configuration utilities.

Reads runtime settings from the environment, optionally seeded from a
``config/env/.env`` file at the repository root.
"""
from dataclasses import dataclass, field
from typing import Optional
import os, sys
from pathlib import Path
from dotenv import load_dotenv  # type: ignore


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(name)
    return val if val not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def repo_root() -> str:
    base = getattr(sys, "_MEIPASS", None)
    if base and os.path.isdir(base):  # Frozen bundle base (PyInstaller, etc.)
        return base
    cur = os.path.abspath(os.path.dirname(__file__))
    markers = ("pyproject.toml", ".git")
    for _ in range(8):
        if any(os.path.exists(os.path.join(cur, m)) for m in markers):
            return cur
        parent = os.path.dirname(cur)
        if parent == cur:
            break
        cur = parent
    # Fallback: 4 levels up from packages/core/src/movienight_core
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../../"))


@dataclass
class Settings:
    # Read at instantiation so tests can monkeypatch the environment
    database_url: Optional[str] = field(
        default_factory=lambda: _env("MOVIENIGHT_DB_URL") or _env("MOVIENIGHT_DATABASE_URL")
    )
    host: str = field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 3000))
    code_length: int = field(default_factory=lambda: _env_int("MOVIENIGHT_CODE_LENGTH", 4))
    max_code_attempts: int = field(default_factory=lambda: _env_int("MOVIENIGHT_MAX_CODE_ATTEMPTS", 5))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        if self.code_length < 3:
            raise ValueError("MOVIENIGHT_CODE_LENGTH must be at least 3")
        if self.max_code_attempts < 1:
            raise ValueError("MOVIENIGHT_MAX_CODE_ATTEMPTS must be at least 1")

    def repo_root(self) -> str:
        return repo_root()

    def resolve_path(self, p: Optional[str]) -> Optional[str]:
        if not p:
            return None
        if os.path.isabs(p):
            return p
        return os.path.abspath(os.path.join(self.repo_root(), p))

    def effective_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        db_path = self.resolve_path(os.path.join("data", "movienight.db"))
        return f"sqlite:///{db_path}"


def load_settings() -> Settings:
    """Load the repository env file, then build settings from the environment."""
    env_file = Path(repo_root()) / "config" / "env" / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)
    return Settings()


__all__ = ["Settings", "load_settings", "repo_root"]
