"""Determinant by cofactor (Laplace) expansion.

The recursive kernel returns a :class:`DetResult` instead of raising, so an
allocation failure deep in the recursion travels back up as a status code
through ordinary return values. Every minor is destroyed before the frame
that built it returns, on the failure path as well.

Cost is O(n!) for an n x n matrix; sizes 1 and 2 use closed forms.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ._config import config
from ._errors import (
    AllocationError,
    ShapeMismatchError,
    check_error,
    MX_OK,
    MX_ERROR_OUT_OF_MEMORY,
    MX_ERROR_DIMENSION_MISMATCH,
)
from ._matrix import Matrix, destroy

__all__ = ['DetResult', 'minor', 'try_det', 'det']

logger = logging.getLogger("densemat.linalg")


@dataclass(frozen=True)
class DetResult:
    """Determinant value or the status that prevented computing it."""
    value: float = 0.0
    status: int = MX_OK

    @property
    def ok(self) -> bool:
        return self.status == MX_OK


def minor(m: Matrix, skip_row: int, skip_col: int) -> Matrix:
    """
    Build the minor of ``m`` without ``skip_row`` and ``skip_col``.

    Raises:
        AllocationError: If the minor cannot be allocated
    """
    rows, cols = m.rows, m.cols
    if rows < 2 or cols < 2:
        raise ValueError(f"Matrix of shape {m.shape} has no minors")
    src = m.entries()
    sub = Matrix(rows - 1, cols - 1)
    sub._buffer.load(
        src[r * cols + c]
        for r in range(rows) if r != skip_row
        for c in range(cols) if c != skip_col
    )
    return sub


def _det(m: Matrix) -> DetResult:
    n = m.rows
    if n == 1:
        return DetResult(m._buffer[0])
    if n == 2:
        a11, a12, a21, a22 = m.entries()
        return DetResult(a11 * a22 - a12 * a21)

    top = m.entries()[:n]
    total = 0.0
    for c in range(n):
        try:
            sub = minor(m, 0, c)
        except AllocationError:
            logger.debug(f"det: minor ({n - 1}x{n - 1}) allocation failed at column {c}")
            return DetResult(0.0, MX_ERROR_OUT_OF_MEMORY)
        try:
            res = _det(sub)
        finally:
            destroy(sub)
        if not res.ok:
            return res
        if c % 2 == 0:
            total += top[c] * res.value
        else:
            total -= top[c] * res.value
    return DetResult(total)


def try_det(m: Matrix) -> DetResult:
    """
    Determinant of a square matrix as a :class:`DetResult`.

    An allocation failure is reported as ``status == MX_ERROR_OUT_OF_MEMORY``
    with no minors left allocated.

    Raises:
        ShapeMismatchError: If ``m`` is not square (when shape checks are on)
    """
    m._require_live("determinant operand")
    if not m.is_square and config.validation.check_shapes:
        raise ShapeMismatchError(MX_ERROR_DIMENSION_MISMATCH,
                                 f"det: matrix of shape {m.shape} is not square")
    return _det(m)


def det(m: Matrix) -> float:
    """
    Determinant of a square matrix.

    Raises:
        AllocationError: If a minor cannot be allocated
        ShapeMismatchError: If ``m`` is not square (when shape checks are on)
    """
    res = try_det(m)
    check_error(res.status, "determinant")
    return res.value
