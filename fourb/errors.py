"""
Engine Errors

Exceptions raised by the 4B engine. Invalid input and insufficient
data subclass ValueError so callers catching ValueError keep working.
"""

from typing import Optional


class FourBError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(FourBError, ValueError):
    """Malformed input rejected before any computation (empty batch, bad frame rate, ...)."""


class InsufficientDataError(FourBError, ValueError):
    """
    Not enough usable samples for the requested computation.

    Attributes:
        required: Minimum number of samples needed
        actual: Number of samples supplied
    """

    def __init__(self, required: int, actual: int, message: Optional[str] = None):
        self.required = required
        self.actual = actual
        super().__init__(
            message or f"Need at least {required} samples, got {actual}"
        )


class SingularMatrixError(FourBError, ArithmeticError):
    """
    Normal equations could not be solved.

    Raised when a pivot vanishes during elimination, which happens when
    a sub-score is constant or collinear with the others across samples.

    Attributes:
        column: Index of the coefficient whose pivot vanished
        label: Human readable name of that coefficient
    """

    def __init__(self, column: int, label: str):
        self.column = column
        self.label = label
        super().__init__(
            f"Calibration matrix is singular at column {column} ({label}); "
            f"the {label} sub-score does not vary independently across samples"
        )
