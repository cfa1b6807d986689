"""Utility functions shared by basis and curve evaluation."""

import numpy as np
from numpy import typing as npt


def _normalize_parameters(pts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize parameter values to a contiguous 1D float array.

    Scalars become arrays with a single element and multi-dimensional inputs
    are flattened. float32 and float64 inputs keep their dtype; anything else
    is converted to float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: 1D contiguous array.
    """
    pts_arr = np.asarray(pts)

    if pts_arr.dtype not in (np.float32, np.float64):
        pts_arr = pts_arr.astype(np.float64)

    return np.ascontiguousarray(pts_arr.reshape(-1))


def _compute_final_output_shape_1D(input_shape: tuple[int, ...], n_basis: int) -> tuple[int, ...]:
    """Compute the output shape of a tabulation over parameters of shape `input_shape`.

    Args:
        input_shape (tuple[int, ...]): The shape of the input parameters (before normalization).
        n_basis (int): The number of values per parameter (degree + 1 for bases).

    Returns:
        tuple[int, ...]: `(n_basis,)` for scalar inputs, `(*input_shape, n_basis)` otherwise.
    """
    if len(input_shape) == 0:
        return (n_basis,)
    return (*input_shape, n_basis)


def _validate_out_array(
    out: npt.NDArray[np.generic],
    expected_shape: tuple[int, ...],
    expected_dtype: npt.DTypeLike,
) -> None:
    """Validate that an output array has the correct shape and dtype.

    This follows NumPy's style for output array validation.

    Args:
        out (npt.NDArray[np.generic]): The output array to validate.
        expected_shape (tuple[int, ...]): The expected shape of the output array.
        expected_dtype (npt.DTypeLike): The expected dtype.

    Raises:
        ValueError: If the array shape or dtype does not match expectations,
            or if it is not writeable and C-contiguous.
    """
    if out.shape != expected_shape:
        raise ValueError(f"Output array has shape {out.shape}, but expected shape {expected_shape}")
    if out.dtype != expected_dtype:
        raise ValueError(f"Output array has dtype {out.dtype}, but expected dtype {expected_dtype}")
    if not out.flags.writeable:
        raise ValueError("Output array is not writeable")
    if not out.flags.c_contiguous:
        raise ValueError("Output array must be C-contiguous")


def _clip_to_domain(
    pts: npt.NDArray[np.float32 | np.float64],
    domain: tuple[float, float],
    tol: float,
    dtype: npt.DTypeLike,
    domain_name: str,
) -> npt.NDArray[np.float32 | np.float64]:
    """Clip parameters to the domain, accepting those marginally outside it.

    The tolerance is relative: parameters within `tol * max(1, |u_max|)` of
    the domain are clamped onto it.

    Args:
        pts (npt.NDArray[np.float32 | np.float64]): 1D parameter values.
        domain (tuple[float, float]): Domain `(u_min, u_max)`.
        tol (float): Base tolerance, typically the dtype's default tolerance.
        dtype (npt.DTypeLike): dtype of the result.
        domain_name (str): Name of the domain used in the error message.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Parameters clipped to the domain.

    Raises:
        ValueError: If any parameter is non-finite or farther from the domain
            than the tolerance.
    """
    u_min, u_max = domain
    scaled_tol = tol * max(1.0, abs(u_max))
    if not np.all(np.isfinite(pts)) or np.any(
        (pts < u_min - scaled_tol) | (pts > u_max + scaled_tol)
    ):
        raise ValueError(f"One or more parameters are outside the {domain_name} {(u_min, u_max)}")
    return np.clip(pts, u_min, u_max).astype(dtype, copy=False)
