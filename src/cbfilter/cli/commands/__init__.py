"""CLI commands package."""

from . import filters, models, paths, providers, run, setup, templates

__all__ = ["providers", "templates", "models", "filters", "run", "setup", "paths"]
