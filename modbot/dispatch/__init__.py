"""Event dispatch across registered modules."""

from .engine import DispatchEngine  # noqa: F401

__all__ = ["DispatchEngine"]
