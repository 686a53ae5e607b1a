# src/pulse_feed/services/__init__.py
"""Business logic services for the Pulse Feed application."""

from . import identity, interactions, graph, feed, mutations  # noqa: I001

__all__ = [
    "feed",
    "graph",
    "identity",
    "interactions",
    "mutations",
]
