"""HTTP service for the scoring engine."""

from sclscore.api.app import build_engine, build_store, create_app

__all__ = ["build_engine", "build_store", "create_app"]
