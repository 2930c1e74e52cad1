"""HTTP API for Movie Night (FastAPI)."""
