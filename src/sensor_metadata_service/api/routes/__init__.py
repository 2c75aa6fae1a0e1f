"""Route modules."""

from . import sensors

__all__ = ["sensors"]
