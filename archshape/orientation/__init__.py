"""Orientation handlers: placement input → configuration → transform."""

from .handlers import (
    AXIS,
    FACING,
    FIXED,
    HALF,
    AxisOrientation,
    FacingAndHalf,
    FacingDependent,
    FixedOrientation,
    OrientationHandler,
    orientation_handler,
    register_orientation,
)

__all__ = [
    "AXIS",
    "FACING",
    "FIXED",
    "HALF",
    "AxisOrientation",
    "FacingAndHalf",
    "FacingDependent",
    "FixedOrientation",
    "OrientationHandler",
    "orientation_handler",
    "register_orientation",
]
