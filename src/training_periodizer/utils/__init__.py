"""Utility helpers."""

from .dates import as_utc, utc_now
from .numeric import clamp, clamp_int, round_half_up, round_to

__all__ = ["as_utc", "clamp", "clamp_int", "round_half_up", "round_to", "utc_now"]
