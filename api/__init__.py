"""HTTP boundary for the expense tracker."""

from .app import create_app

__all__ = ["create_app"]
