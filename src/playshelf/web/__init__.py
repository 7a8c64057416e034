"""HTTP API."""

from __future__ import annotations

from .main import create_app, get_app, run_web_server

__all__ = ["create_app", "get_app", "run_web_server"]
