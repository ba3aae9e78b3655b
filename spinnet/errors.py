"""Exception types raised by the spin-glass model and its solvers."""
from __future__ import annotations


class SpinGlassError(Exception):
    """Base class for every error raised by :mod:`spinnet`."""


class StructuralError(SpinGlassError, ValueError):
    """Malformed model: dangling couplings, length mismatches, bad indices."""


class ConfigurationError(SpinGlassError, ValueError):
    """Invalid solver parameters, detected before any work starts."""


class CapacityError(SpinGlassError, RuntimeError):
    """The instance is too large for the requested solver."""


__all__ = [
    "SpinGlassError",
    "StructuralError",
    "ConfigurationError",
    "CapacityError",
]
