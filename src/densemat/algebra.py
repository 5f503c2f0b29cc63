"""Matrix Algebra Operations.

This module provides the element-wise and product operations:
- Shape predicates (can_add, can_sub, can_mult)
- N-ary addition and subtraction
- Multiplication and integer power
- Transpose

Every operation takes an optional ``result`` handle. ``None`` (or an empty
handle) gets a freshly allocated matrix; a live matrix is reshaped through
:func:`adjust_dims` and reused when its capacity allows. All source entries
are read before the result is touched, so ``result`` may be one of the
operands.

Example:
    >>> from densemat import Matrix, add, mult, transpose
    >>> a = Matrix.from_rows([[1, 2], [3, 4]])
    >>> s = add([a, a, a])
    >>> p = mult(a, a)
    >>> t = transpose(a, result=p)   # reuses p's buffer
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ._config import config
from ._errors import AllocationError, ShapeMismatchError, MX_ERROR_DIMENSION_MISMATCH
from ._format import max_entry_width
from ._matrix import Matrix, adjust_dims, copy, destroy, move

__all__ = [
    # Predicates
    'can_add',
    'can_sub',
    'can_mult',

    # Operations
    'add',
    'sub',
    'mult',
    'power',
    'transpose',
]

logger = logging.getLogger("densemat.linalg")


# =============================================================================
# Shape Predicates
# =============================================================================

def can_add(m1: Matrix, m2: Matrix) -> bool:
    """True iff both matrices have the same shape."""
    return m1.rows == m2.rows and m1.cols == m2.cols


def can_sub(m1: Matrix, m2: Matrix) -> bool:
    """True iff both matrices have the same shape."""
    return m1.rows == m2.rows and m1.cols == m2.cols


def can_mult(m1: Matrix, m2: Matrix) -> bool:
    """True iff m1's column count equals m2's row count."""
    return m1.cols == m2.rows


def _require(ok: bool, context: str) -> None:
    if not ok and config.validation.check_shapes:
        raise ShapeMismatchError(MX_ERROR_DIMENSION_MISMATCH, context)


def _store(result: Matrix, values: List[float]) -> Matrix:
    """Write computed row-major values into a prepared result."""
    result._buffer.load(values)
    result._width = max_entry_width(values)
    return result


def _operand_list(operands: Sequence[Matrix], op_name: str) -> List[Matrix]:
    operands = list(operands)
    if not operands:
        raise ValueError(f"{op_name} requires at least one operand")
    for i, m in enumerate(operands):
        m._require_live(f"{op_name} operand {i}")
    first = operands[0]
    for i, m in enumerate(operands[1:], start=1):
        _require(can_add(first, m),
                 f"{op_name}: operand {i} has shape {m.shape}, expected {first.shape}")
    return operands


# =============================================================================
# Addition / Subtraction
# =============================================================================

def add(operands: Sequence[Matrix], result: Optional[Matrix] = None) -> Matrix:
    """Add one or more matrices of equal shape.

    Each result entry is the sum of the operands' entries, accumulated in
    operand order.

    Args:
        operands: Matrices with identical shape.
        result: Optional handle to hold the sum.

    Returns:
        The result matrix.

    Raises:
        ShapeMismatchError: If shapes differ (when shape checks are on).
        AllocationError: If the result buffer cannot be allocated.
    """
    operands = _operand_list(operands, "add")
    rows, cols = operands[0].shape
    sources = [m.entries() for m in operands]

    values = []
    for idx in range(rows * cols):
        total = 0.0
        for src in sources:
            total += src[idx]
        values.append(total)

    result = adjust_dims(result, rows, cols)
    return _store(result, values)


def sub(operands: Sequence[Matrix], result: Optional[Matrix] = None) -> Matrix:
    """Subtract matrices left to right: ``m0 - m1 - m2 - ...``.

    Same shape and result contract as :func:`add`.
    """
    operands = _operand_list(operands, "sub")
    rows, cols = operands[0].shape
    first, rest = operands[0].entries(), [m.entries() for m in operands[1:]]

    values = []
    for idx in range(rows * cols):
        total = first[idx]
        for src in rest:
            total -= src[idx]
        values.append(total)

    result = adjust_dims(result, rows, cols)
    return _store(result, values)


# =============================================================================
# Multiplication / Power
# =============================================================================

def mult(a: Matrix, b: Matrix, result: Optional[Matrix] = None) -> Matrix:
    """Matrix product ``a @ b`` of shape (a.rows, b.cols).

    Raises:
        ShapeMismatchError: If a.cols != b.rows (when shape checks are on).
        AllocationError: If the result buffer cannot be allocated.
    """
    a._require_live("mult operand 0")
    b._require_live("mult operand 1")
    _require(can_mult(a, b), f"mult: cannot multiply {a.shape} by {b.shape}")

    n, inner, p = a.rows, a.cols, b.cols
    av, bv = a.entries(), b.entries()

    values = []
    for i in range(n):
        row_off = i * inner
        for j in range(p):
            total = 0.0
            for k in range(inner):
                total += av[row_off + k] * bv[k * p + j]
            values.append(total)

    result = adjust_dims(result, n, p)
    return _store(result, values)


def power(a: Matrix, exponent: int, result: Optional[Matrix] = None) -> Matrix:
    """Integer power ``a ** exponent`` by repeated multiplication.

    Exponent 1 copies ``a``; exponent 2 is ``mult(a, a)``; larger exponents
    multiply a running accumulator by ``a`` once per remaining step.

    Raises:
        ValueError: If exponent < 1.
        ShapeMismatchError: If ``a`` is not square (when shape checks are on).
        AllocationError: If any intermediate cannot be allocated; every
            intermediate accumulator is released first.
    """
    if not isinstance(exponent, int) or isinstance(exponent, bool):
        raise TypeError(f"Exponent must be an integer, got {exponent!r}")
    if exponent < 1:
        raise ValueError(f"Exponent must be >= 1, got {exponent}")
    a._require_live("power operand")
    _require(a.is_square, f"power: matrix of shape {a.shape} is not square")

    if exponent == 1:
        return copy(result, a)
    if exponent == 2:
        return mult(a, a, result)

    acc = mult(a, a)
    try:
        for _ in range(3, exponent + 1):
            nxt = mult(acc, a)
            destroy(acc)
            acc = nxt
    except AllocationError:
        destroy(acc)
        logger.debug(f"power: allocation failed, released accumulator (exponent={exponent})")
        raise

    if result is None:
        return acc
    return move(result, acc)


# =============================================================================
# Transpose
# =============================================================================

def transpose(a: Matrix, result: Optional[Matrix] = None) -> Matrix:
    """Transpose of ``a``, shape (a.cols, a.rows).

    display_width is carried over from ``a`` unchanged.
    """
    a._require_live("transpose operand")
    rows, cols = a.rows, a.cols
    av = a.entries()
    width = a.display_width

    values = [0.0] * (rows * cols)
    for i in range(rows):
        for j in range(cols):
            values[j * rows + i] = av[i * cols + j]

    result = adjust_dims(result, cols, rows)
    result._buffer.load(values)
    result._width = width
    return result
