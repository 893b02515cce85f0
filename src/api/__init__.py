"""HTTP interface."""

from src.api.app import build_orchestrator, create_app

__all__ = ["build_orchestrator", "create_app"]
