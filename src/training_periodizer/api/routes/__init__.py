"""API route modules."""

from . import programs, techniques

__all__ = ["programs", "techniques"]
