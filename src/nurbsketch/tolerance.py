"""Tolerance utilities for floating-point comparisons in curve evaluation.

Curves are evaluated in either float32 or float64. The presets below give,
per dtype, the tolerances used when comparing parameters against the curve
domain and when checking numerical invariants such as partition of unity.
"""

from functools import cache
from typing import Any, Literal, TypedDict, cast

import numpy as np
from numpy import typing as npt

PresetName = Literal["default", "strict", "conservative"]

_TOLERANCE_PRESETS: dict[PresetName, dict[str, float]] = {
    "default": {"float32": 1e-6, "float64": 1e-12},
    "strict": {"float32": 1e-7, "float64": 1e-15},
    "conservative": {"float32": 1e-5, "float64": 1e-9},
}


@cache
def _ensure_float_dtype_by_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached validator returning a supported floating dtype from its name.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64").

    Returns:
        np.dtype[np.floating[Any]]: Validated floating-point dtype.

    Raises:
        ValueError: If dtype is neither float32 nor float64.
    """
    dtype_obj = np.dtype(name)
    if dtype_obj.type not in (np.float32, np.float64):
        raise ValueError(f"Unsupported dtype: {name}. Expected float32 or float64")
    return cast(np.dtype[np.floating[Any]], dtype_obj)


def ensure_float_dtype(dtype: npt.DTypeLike) -> np.dtype[np.floating[Any]]:
    """Normalize and validate a dtype-like into float32 or float64.

    Args:
        dtype (npt.DTypeLike): Any NumPy dtype-like.

    Returns:
        np.dtype[np.floating[Any]]: The validated dtype.

    Raises:
        ValueError: If dtype is neither float32 nor float64.
    """
    return _ensure_float_dtype_by_name(np.dtype(dtype).name)


def _get_tolerance(dtype: npt.DTypeLike, preset: PresetName) -> float:
    return _TOLERANCE_PRESETS[preset][ensure_float_dtype(dtype).name]


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used for everyday comparisons.

    Used to accept curve parameters that fall marginally outside the domain
    because of rounding.

    Args:
        dtype (npt.DTypeLike): float32 or float64.

    Returns:
        float: Tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not supported.

    Example:
        >>> get_default_tolerance(np.float32)
        1e-06
        >>> get_default_tolerance("float64")
        1e-12
    """
    return _get_tolerance(dtype, "default")


def get_strict_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a strict tolerance for high-precision comparisons.

    Args:
        dtype (npt.DTypeLike): float32 or float64.

    Returns:
        float: Strict tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not supported.
    """
    return _get_tolerance(dtype, "strict")


def get_conservative_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a conservative tolerance for comparisons of accumulated quantities.

    This is the tolerance partition of unity is checked against: sums of
    ``degree + 1`` basis values accumulate rounding error.

    Args:
        dtype (npt.DTypeLike): float32 or float64.

    Returns:
        float: Conservative tolerance value for the given dtype.

    Raises:
        ValueError: If dtype is not supported.
    """
    return _get_tolerance(dtype, "conservative")


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon for a given floating-point dtype.

    Args:
        dtype (npt.DTypeLike): float32 or float64.

    Returns:
        float: Machine epsilon for the given dtype.

    Raises:
        ValueError: If dtype is not supported.
    """
    return float(np.finfo(ensure_float_dtype(dtype)).eps)


class ToleranceInfo(TypedDict):
    """Tolerance and precision summary of a dtype."""

    dtype: npt.DTypeLike
    machine_epsilon: float
    default_tolerance: float
    strict_tolerance: float
    conservative_tolerance: float
    precision_decimals: int
    max_value: float
    min_value: float


def get_tolerance_info(dtype: npt.DTypeLike) -> ToleranceInfo:
    """Get all the tolerances and precision limits of a dtype at once.

    Args:
        dtype (npt.DTypeLike): float32 or float64.

    Returns:
        ToleranceInfo: Dictionary with machine epsilon, the three tolerance
            presets, decimal precision and min/max representable values.

    Raises:
        ValueError: If dtype is not supported.
    """
    dt = ensure_float_dtype(dtype)
    finfo = np.finfo(dt)

    return {
        "dtype": dtype,
        "machine_epsilon": get_machine_epsilon(dt),
        "default_tolerance": get_default_tolerance(dt),
        "strict_tolerance": get_strict_tolerance(dt),
        "conservative_tolerance": get_conservative_tolerance(dt),
        "precision_decimals": finfo.precision,
        "max_value": float(finfo.max),
        "min_value": float(finfo.tiny),
    }


__all__ = [
    "PresetName",
    "ToleranceInfo",
    "ensure_float_dtype",
    "get_conservative_tolerance",
    "get_default_tolerance",
    "get_machine_epsilon",
    "get_strict_tolerance",
    "get_tolerance_info",
]
