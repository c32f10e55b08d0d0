"""Curve set input contract."""

from .curve_set import CurveSet, create_curve_set, curve_set_from_frame

__all__ = ["CurveSet", "create_curve_set", "curve_set_from_frame"]
