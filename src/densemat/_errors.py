"""
Error handling for densemat.

Status codes are plain integers so the recursive kernels can pass them
around as part of their results; the public wrappers turn a non-zero code
into an exception with :func:`check_error`.
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# Status Codes
# =============================================================================

# Success
MX_OK = 0

# General errors (1-9)
MX_ERROR_UNKNOWN = 1
MX_ERROR_OUT_OF_MEMORY = 3
MX_ERROR_EMPTY_HANDLE = 4

# Argument errors (10-19)
MX_ERROR_INVALID_ARGUMENT = 10
MX_ERROR_DIMENSION_MISMATCH = 11
MX_ERROR_INDEX_OUT_OF_BOUNDS = 14

# Numerical errors (50-59)
MX_ERROR_NOT_INVERTIBLE = 51


_ERROR_MESSAGES = {
    MX_OK: "Success",
    MX_ERROR_UNKNOWN: "Unknown error",
    MX_ERROR_OUT_OF_MEMORY: "Out of memory",
    MX_ERROR_EMPTY_HANDLE: "Empty matrix handle",
    MX_ERROR_INVALID_ARGUMENT: "Invalid argument",
    MX_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    MX_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of bounds",
    MX_ERROR_NOT_INVERTIBLE: "Matrix is not invertible",
}


# =============================================================================
# Exception Classes
# =============================================================================

class MatrixError(Exception):
    """
    Base exception for all densemat errors.

    Attributes:
        code: Status code (``MX_ERROR_*``)
        message: Human readable message
    """

    OK = MX_OK
    ERROR_UNKNOWN = MX_ERROR_UNKNOWN
    ERROR_OUT_OF_MEMORY = MX_ERROR_OUT_OF_MEMORY
    ERROR_EMPTY_HANDLE = MX_ERROR_EMPTY_HANDLE
    ERROR_INVALID_ARGUMENT = MX_ERROR_INVALID_ARGUMENT
    ERROR_DIMENSION_MISMATCH = MX_ERROR_DIMENSION_MISMATCH
    ERROR_INDEX_OUT_OF_BOUNDS = MX_ERROR_INDEX_OUT_OF_BOUNDS
    ERROR_NOT_INVERTIBLE = MX_ERROR_NOT_INVERTIBLE

    default_code = MX_ERROR_UNKNOWN

    def __init__(self, code: Optional[int] = None, message: Optional[str] = None):
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(f"Matrix Error {code}: {message}")

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "MatrixError":
        """Create the matching exception subclass from a status code."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        exc_type = _CODE_TO_EXCEPTION.get(code, cls)
        return exc_type(code, msg)


class AllocationError(MatrixError, MemoryError):
    """A matrix buffer could not be allocated."""
    default_code = MX_ERROR_OUT_OF_MEMORY


class ShapeMismatchError(MatrixError, ValueError):
    """Operand dimensions violate the operation's precondition."""
    default_code = MX_ERROR_DIMENSION_MISMATCH


class EmptyHandleError(MatrixError, ValueError):
    """A destroyed or moved-from matrix was used as a live one."""
    default_code = MX_ERROR_EMPTY_HANDLE


class NotInvertibleError(MatrixError, ArithmeticError):
    """The determinant is exactly zero."""
    default_code = MX_ERROR_NOT_INVERTIBLE


_CODE_TO_EXCEPTION = {
    MX_ERROR_OUT_OF_MEMORY: AllocationError,
    MX_ERROR_DIMENSION_MISMATCH: ShapeMismatchError,
    MX_ERROR_EMPTY_HANDLE: EmptyHandleError,
    MX_ERROR_NOT_INVERTIBLE: NotInvertibleError,
}


# =============================================================================
# Error Checking Functions
# =============================================================================

def error_message(code: int) -> str:
    """Get the message registered for a status code."""
    return _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")


def check_error(code: int, context: str = "") -> None:
    """
    Check status code and raise exception if not OK.

    Args:
        code: Status code returned by a kernel
        context: Optional context message for better error reporting

    Raises:
        MatrixError: If code indicates an error (subclass chosen by code)
    """
    if code == MX_OK:
        return
    raise MatrixError.from_code(code, context)
