"""Adjugate and inverse.

adjugate(A) is the transpose of A's cofactor matrix; for 1x1 and 2x2
matrices closed forms are used. inverse(A) = adjugate(A) / det(A).

Invertibility has three outcomes: the determinant is non-zero, it is
exactly zero, or it could not be computed because an allocation failed.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional, Tuple

from ._config import config
from ._errors import (
    ShapeMismatchError,
    check_error,
    MX_ERROR_DIMENSION_MISMATCH,
)
from ._format import max_entry_width
from ._matrix import Matrix, adjust_dims, destroy
from .algebra import transpose
from .determinant import _det, minor, try_det

__all__ = ['Invertibility', 'can_invert', 'cofactors', 'adjugate', 'invert']

logger = logging.getLogger("densemat.linalg")


class Invertibility(IntEnum):
    """Outcome of an invertibility check."""
    SINGULAR = 0        # Determinant computed and exactly zero
    INVERTIBLE = 1      # Determinant computed and non-zero
    UNDETERMINED = 2    # Determinant could not be computed (allocation failure)


def _require_square(a: Matrix, op_name: str) -> None:
    a._require_live(f"{op_name} operand")
    if not a.is_square and config.validation.check_shapes:
        raise ShapeMismatchError(MX_ERROR_DIMENSION_MISMATCH,
                                 f"{op_name}: matrix of shape {a.shape} is not square")


def can_invert(a: Matrix) -> Invertibility:
    """
    Check whether ``a`` can be inverted.

    Returns:
        INVERTIBLE or SINGULAR when the determinant was computed,
        UNDETERMINED when computing it failed to allocate.
    """
    _require_square(a, "can_invert")
    res = try_det(a)
    if not res.ok:
        return Invertibility.UNDETERMINED
    return Invertibility.INVERTIBLE if res.value != 0 else Invertibility.SINGULAR


def cofactors(a: Matrix) -> Matrix:
    """
    Matrix of cofactors of a square matrix of size >= 2.

    Entry (r, c) is ``(-1)**(r + c) * det(minor(a, r, c))``.

    Raises:
        ValueError: If ``a`` is 1x1
        AllocationError: If the cofactor matrix or any minor cannot be
            allocated; nothing stays allocated in that case.
    """
    _require_square(a, "cofactors")
    n = a.rows
    if n < 2:
        raise ValueError(f"cofactors: matrix of shape {a.shape} has no minors")
    cof = Matrix(n, n)
    values = []
    try:
        for r in range(n):
            for c in range(n):
                sub = minor(a, r, c)
                try:
                    res = _det(sub)
                finally:
                    destroy(sub)
                check_error(res.status, f"cofactor ({r}, {c})")
                term = res.value
                # No sign flip on zero: keeps -0.0 out of the result
                if term != 0 and (r + c) % 2 != 0:
                    term = -term
                values.append(term)
    except BaseException:
        destroy(cof)
        logger.debug(f"cofactors: released {n}x{n} cofactor matrix after failure")
        raise
    cof._buffer.load(values)
    cof._width = max_entry_width(values)
    return cof


def adjugate(a: Matrix, result: Optional[Matrix] = None) -> Matrix:
    """
    Adjugate of a square matrix.

    Size 1: the single entry becomes 1 if it is non-zero, else 0.
    Size 2: diagonal swapped, off-diagonal negated.
    Size >= 3: transpose of :func:`cofactors`.

    Raises:
        ShapeMismatchError: If ``a`` is not square (when shape checks are on)
        AllocationError: If any buffer cannot be allocated
    """
    _require_square(a, "adjugate")
    n = a.rows

    if n == 1:
        value = 1.0 if a.entries()[0] != 0 else 0.0
        result = adjust_dims(result, 1, 1)
        result._buffer[0] = value
        return result

    if n == 2:
        a11, a12, a21, a22 = a.entries()
        values = [a22, -a12, -a21, a11]
        result = adjust_dims(result, 2, 2)
        result._buffer.load(values)
        result._width = max_entry_width(values)
        return result

    cof = cofactors(a)
    try:
        return transpose(cof, result)
    finally:
        destroy(cof)


def invert(a: Matrix, result: Optional[Matrix] = None) -> Tuple[Optional[Matrix], bool]:
    """
    Inverse of a square matrix.

    Returns:
        ``(result, True)`` with the inverse in ``result`` when the
        determinant is non-zero; ``(result, False)`` with ``result``
        untouched when it is exactly zero.

    Raises:
        AllocationError: If the determinant or adjugate cannot be computed.
            Invertibility is then unknown, which is distinct from a
            ``False`` flag.
        ShapeMismatchError: If ``a`` is not square (when shape checks are on)
    """
    _require_square(a, "invert")
    res = try_det(a)
    check_error(res.status, "inverse")
    d = res.value
    if d == 0:
        logger.debug(f"invert: {a.rows}x{a.cols} matrix is singular")
        return result, False

    result = adjugate(a, result)
    values = [v / d for v in result.entries()]
    result._buffer.load(values)
    result._width = max_entry_width(values)
    return result, True
