"""Route group exports."""

from . import availability, health, operations

__all__ = ["availability", "health", "operations"]
