"""CLI utilities."""

from repocache.cli.util.paths import RepoCachePaths

__all__ = ["RepoCachePaths"]
