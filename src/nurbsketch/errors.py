"""Exception types raised by the NURBS curve evaluator.

All of them derive from :class:`ValueError`, so callers that already guard
invalid inputs with ``except ValueError`` keep working.
"""


class NurbsError(ValueError):
    """Base class for all curve evaluation errors."""


class InvalidDegreeError(NurbsError):
    """Raised when a degree is negative or incompatible with the number of points."""


class DegenerateEvaluationError(NurbsError):
    """Raised when the rational denominator of a curve point vanishes."""


class InsufficientPointsError(NurbsError):
    """Raised when fewer than two control points are provided.

    The curve is simply not defined yet: hosts are expected to draw the
    control points only.
    """


class InvalidWeightError(NurbsError):
    """Raised when a control point weight is not strictly positive and finite."""


__all__ = [
    "DegenerateEvaluationError",
    "InsufficientPointsError",
    "InvalidDegreeError",
    "InvalidWeightError",
    "NurbsError",
]
