"""Public API surface for NurbSketch.

Defines package metadata and exported interfaces.
"""

import logging
from typing import Final

# Private API imports (accessible but not in __all__)
# Users can access private kernels via: nurbsketch._nurbs_basis_core._function_name, etc.
from . import (
    _nurbs_basis_core,  # noqa: F401
    _nurbs_curve_impl,  # noqa: F401
    _nurbs_knots,  # noqa: F401
)

# Public API imports
from .basis import compute_basis_functions, tabulate_basis_functions
from .curve import NurbsCurve, evaluate_curve_point, get_polyline_length, sample_curve
from .errors import (
    DegenerateEvaluationError,
    InsufficientPointsError,
    InvalidDegreeError,
    InvalidWeightError,
    NurbsError,
)
from .knots import (
    create_clamped_knot_vector,
    create_knot_vector,
    create_uniform_knot_vector,
    find_span,
    find_spans,
    get_parameter_domain,
)
from .settings import get_default_num_segments
from .sketch import SketchFrame, build_frame, can_close, compute_polyline, is_near_start
from .tolerance import (
    ToleranceInfo,
    get_conservative_tolerance,
    get_default_tolerance,
    get_machine_epsilon,
    get_strict_tolerance,
    get_tolerance_info,
)
from .topology import (
    ControlPoint,
    Topology,
    get_curve_degree,
    is_linear_fallback,
    normalize_control_points,
    prepare_evaluation_points,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "NurbSketch contributors"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "ControlPoint",
    "DegenerateEvaluationError",
    "InsufficientPointsError",
    "InvalidDegreeError",
    "InvalidWeightError",
    "NurbsCurve",
    "NurbsError",
    "SketchFrame",
    "ToleranceInfo",
    "Topology",
    "__author__",
    "__license__",
    "__version__",
    "build_frame",
    "can_close",
    "compute_basis_functions",
    "compute_polyline",
    "create_clamped_knot_vector",
    "create_knot_vector",
    "create_uniform_knot_vector",
    "evaluate_curve_point",
    "find_span",
    "find_spans",
    "get_conservative_tolerance",
    "get_curve_degree",
    "get_default_num_segments",
    "get_default_tolerance",
    "get_machine_epsilon",
    "get_parameter_domain",
    "get_polyline_length",
    "get_strict_tolerance",
    "get_tolerance_info",
    "is_linear_fallback",
    "is_near_start",
    "normalize_control_points",
    "prepare_evaluation_points",
    "sample_curve",
    "tabulate_basis_functions",
]
