"""
Matrix - Dense row-major matrix with explicit lifecycle.

A ``Matrix`` is a handle that owns exactly one entry buffer. The handle
can be copied (deep duplicate), moved (ownership transfer that empties the
source) and destroyed (buffer released, handle emptied). Operations that
produce a matrix take an optional ``result`` handle and reuse its buffer
when it is large enough.

Lifecycle:

    create / Matrix(rows, cols)   -> zero-filled, display_width == 1
    assign(m, entries, r, c)      -> bulk write, display_width recomputed
    adjust_dims(m, r, c)          -> result preparation (reuse or regrow)
    copy(dest, src)               -> deep duplicate
    move(dest, src)               -> transfer, src becomes empty
    destroy(m)                    -> release, m becomes empty

Capacity never shrinks: a smaller logical shape keeps the larger buffer
and only the logically used prefix is zeroed.

Example:
    >>> m = Matrix.from_rows([[1, 2], [3, 4]])
    >>> m2 = m.copy()
    >>> m3 = Matrix.take(m2)      # m2 is now empty
    >>> with Matrix(3, 3) as tmp:
    ...     tmp[0, 0] = 1.0
    # tmp destroyed here
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from ._array import Buffer
from ._errors import EmptyHandleError, MX_ERROR_EMPTY_HANDLE
from ._format import max_entry_width
from ._ownership import Ownership

if TYPE_CHECKING:
    import numpy as np

__all__ = [
    'Matrix',
    'create',
    'copy',
    'move',
    'destroy',
    'adjust_dims',
    'assign',
    'get_entry',
    'set_entry',
]

logger = logging.getLogger("densemat.lifecycle")


def _check_dims(rows: int, cols: int) -> None:
    if not isinstance(rows, int) or not isinstance(cols, int) or isinstance(rows, bool) \
            or isinstance(cols, bool):
        raise TypeError(f"Matrix dimensions must be integers, got ({rows!r}, {cols!r})")
    if rows < 1 or cols < 1:
        raise ValueError(f"Matrix dimensions must be positive, got ({rows}, {cols})")


def _is_empty(m: Optional["Matrix"]) -> bool:
    return m is None or m._buffer is None


# =============================================================================
# Matrix Class
# =============================================================================

class Matrix:
    """
    Dense matrix of real numbers stored row-major in an owned buffer.

    Attributes:
        rows: Logical row count
        cols: Logical column count
        capacity: Allocated elements (>= rows * cols)
        display_width: Width of the widest formatted entry

    Entry (row, col) lives at ``buffer[row * cols + col]``.
    """

    __slots__ = ("_buffer", "_rows", "_cols", "_width", "__weakref__")

    def __init__(self, rows: int, cols: int):
        """
        Create a zero-filled matrix.

        Args:
            rows: Positive row count
            cols: Positive column count

        Raises:
            AllocationError: If the buffer cannot be allocated
        """
        _check_dims(rows, cols)
        self._buffer: Optional[Buffer] = Buffer(rows * cols)
        self._rows = rows
        self._cols = cols
        self._width = 1

    @classmethod
    def _new_empty(cls) -> "Matrix":
        """Create an empty handle (no buffer)."""
        obj = cls.__new__(cls)
        obj._buffer = None
        obj._rows = 0
        obj._cols = 0
        obj._width = 1
        return obj

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_flat(cls, entries: Sequence[float], rows: int, cols: int) -> "Matrix":
        """Create a matrix from row-major entries."""
        _check_dims(rows, cols)
        return assign(None, entries, rows, cols)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        """
        Create a matrix from a nested sequence of rows.

        Example:
            >>> Matrix.from_rows([[1, 2, 3], [4, 5, 6]]).shape
            (2, 3)
        """
        if len(rows) == 0 or len(rows[0]) == 0:
            raise ValueError("Matrix must have at least one row and one column")
        ncols = len(rows[0])
        flat: List[float] = []
        for i, row in enumerate(rows):
            if len(row) != ncols:
                raise ValueError(f"Row {i} has {len(row)} entries, expected {ncols}")
            flat.extend(float(v) for v in row)
        return cls.from_flat(flat, len(rows), ncols)

    @classmethod
    def from_numpy(cls, arr: "np.ndarray") -> "Matrix":
        """Create a matrix from a 2D numpy array (values copied)."""
        import numpy as np

        arr = np.asarray(arr, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"Expected 2D array, got {arr.ndim}D")
        rows, cols = arr.shape
        return cls.from_flat(arr.ravel(order="C").tolist(), rows, cols)

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        """Create the n x n identity matrix."""
        m = cls(n, n)
        for i in range(n):
            m._buffer[i * n + i] = 1.0
        return m

    @classmethod
    def take(cls, src: "Matrix") -> "Matrix":
        """
        Move-construct: a new handle takes over ``src``'s buffer.

        Raises:
            EmptyHandleError: If ``src`` is empty
        """
        return move(None, src)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        """Matrix shape (rows, cols)."""
        return (self._rows, self._cols)

    @property
    def size(self) -> int:
        """Logical number of entries."""
        return self._rows * self._cols

    @property
    def capacity(self) -> int:
        """Allocated number of entries (0 when empty)."""
        return 0 if self._buffer is None else self._buffer.capacity

    @property
    def display_width(self) -> int:
        """Width of the widest formatted entry."""
        return self._width

    @property
    def is_empty(self) -> bool:
        """True once destroyed or moved-from."""
        return self._buffer is None

    @property
    def is_square(self) -> bool:
        return self._rows == self._cols

    @property
    def ownership(self) -> Ownership:
        return Ownership.EMPTY if self._buffer is None else Ownership.OWNED

    def _require_live(self, what: str = "matrix") -> Buffer:
        if self._buffer is None:
            raise EmptyHandleError(MX_ERROR_EMPTY_HANDLE, f"{what} has been destroyed or moved")
        return self._buffer

    def _refresh_width(self) -> None:
        self._width = max_entry_width(self.entries())

    # -------------------------------------------------------------------------
    # Element Access
    # -------------------------------------------------------------------------

    def get_entry(self, row: int, col: int) -> Tuple[float, bool]:
        """Bounds-checked read; ``(0.0, False)`` when out of bounds."""
        return get_entry(self, row, col)

    def set_entry(self, row: int, col: int, value: float) -> bool:
        """Bounds-checked write; False (nothing written) when out of bounds."""
        return set_entry(self, row, col, value)

    def __getitem__(self, key) -> float:
        """Get element at (row, col)."""
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("Index must be (row, col) tuple")
        self._require_live()
        value, found = get_entry(self, key[0], key[1])
        if not found:
            raise IndexError(f"Index {key} out of bounds for shape {self.shape}")
        return value

    def __setitem__(self, key, value: float) -> None:
        """Set element at (row, col)."""
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("Index must be (row, col) tuple")
        self._require_live()
        if not set_entry(self, key[0], key[1], value):
            raise IndexError(f"Index {key} out of bounds for shape {self.shape}")

    def entries(self) -> List[float]:
        """Logical entries in row-major order."""
        return self._require_live().tolist(self.size)

    def to_list(self) -> List[List[float]]:
        """Convert to nested Python lists."""
        flat = self.entries()
        c = self._cols
        return [flat[i * c:(i + 1) * c] for i in range(self._rows)]

    def to_numpy(self) -> "np.ndarray":
        """Convert to a 2D numpy array (copy)."""
        import numpy as np

        return np.array(self.entries(), dtype=np.float64).reshape(self._rows, self._cols)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def copy(self) -> "Matrix":
        """Copy-construct: deep duplicate with its own buffer."""
        return copy(None, self)

    def destroy(self) -> bool:
        """Release the buffer. Returns False if already empty."""
        return destroy(self)

    def __enter__(self) -> "Matrix":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        destroy(self)

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def __add__(self, other: "Matrix") -> "Matrix":
        from .algebra import add
        return add([self, other])

    def __sub__(self, other: "Matrix") -> "Matrix":
        from .algebra import sub
        return sub([self, other])

    def __matmul__(self, other: "Matrix") -> "Matrix":
        from .algebra import mult
        return mult(self, other)

    def __pow__(self, exponent: int) -> "Matrix":
        from .algebra import power
        return power(self, exponent)

    @property
    def T(self) -> "Matrix":
        """Transpose (new matrix)."""
        from .algebra import transpose
        return transpose(self)

    def det(self) -> float:
        """Determinant (square matrices only)."""
        from .determinant import det
        return det(self)

    def adjugate(self) -> "Matrix":
        from .inverse import adjugate
        return adjugate(self)

    def inverse(self) -> "Matrix":
        """
        Inverse as a new matrix.

        Raises:
            NotInvertibleError: If the determinant is exactly zero
        """
        from .inverse import invert
        from ._errors import NotInvertibleError

        result, invertible = invert(self)
        if not invertible:
            raise NotInvertibleError()
        return result

    # -------------------------------------------------------------------------
    # Magic Methods
    # -------------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.is_empty or other.is_empty:
            return self.is_empty and other.is_empty
        return self.shape == other.shape and self.entries() == other.entries()

    __hash__ = None

    def __len__(self) -> int:
        return self._rows

    def __repr__(self) -> str:
        if self._buffer is None:
            return "<Matrix [empty]>"
        if self.size <= 16:
            return f"Matrix({self.to_list()})"
        return f"<Matrix {self._rows}x{self._cols}>"


# =============================================================================
# Lifecycle Functions
# =============================================================================

def create(rows: int, cols: int) -> Matrix:
    """Allocate a zero-filled rows x cols matrix (display_width 1)."""
    return Matrix(rows, cols)


def copy(dest: Optional[Matrix], src: Matrix) -> Matrix:
    """
    Copy ``src`` into ``dest``.

    An empty ``dest`` gets a new matrix; an existing one regrows only when
    its capacity is too small, then takes ``src``'s shape, width and entries.

    Returns:
        The matrix holding the copy (``dest`` itself when it was live)

    Raises:
        AllocationError: If a buffer is needed and cannot be allocated
        EmptyHandleError: If ``src`` is empty
    """
    src_buf = src._require_live("copy source")
    if dest is src:
        return dest
    size = src.size
    if _is_empty(dest):
        if dest is None:
            dest = Matrix(src._rows, src._cols)
        else:
            dest._buffer = Buffer(size)
    elif dest._buffer.capacity < size:
        new_buf = Buffer(size)
        dest._buffer.free()
        dest._buffer = new_buf
        logger.debug(f"copy: regrew destination to {size} elements")
    dest._rows = src._rows
    dest._cols = src._cols
    dest._width = src._width
    dest._buffer.copy_from(src_buf, size)
    return dest


def move(dest: Optional[Matrix], src: Matrix) -> Matrix:
    """
    Transfer ``src``'s buffer, shape and width into ``dest``.

    Whatever ``dest`` owned is destroyed first; ``src`` is left empty.
    No allocation takes place.

    Raises:
        EmptyHandleError: If ``src`` is empty
    """
    if _is_empty(src):
        raise EmptyHandleError(MX_ERROR_EMPTY_HANDLE, "move source is empty")
    if dest is src:
        return dest
    if dest is None:
        dest = Matrix._new_empty()
    else:
        destroy(dest)
    dest._buffer = src._buffer
    dest._rows = src._rows
    dest._cols = src._cols
    dest._width = src._width
    src._buffer = None
    src._rows = 0
    src._cols = 0
    src._width = 1
    logger.debug(f"move: transferred {dest._rows}x{dest._cols} matrix")
    return dest


def destroy(m: Optional[Matrix]) -> bool:
    """
    Release ``m``'s buffer and empty the handle.

    Returns:
        False (and does nothing) if ``m`` is already empty
    """
    if _is_empty(m):
        return False
    m._buffer.free()
    m._buffer = None
    m._rows = 0
    m._cols = 0
    m._width = 1
    return True


def adjust_dims(m: Optional[Matrix], rows: int, cols: int) -> Matrix:
    """
    Prepare a result matrix of shape (rows, cols) with all entries zero.

    An empty handle gets a new matrix. A live one reallocates only when
    its capacity is below rows * cols; otherwise the used prefix is zeroed
    in place. display_width is reset to 1.

    Raises:
        AllocationError: On the (re)allocation path only
    """
    _check_dims(rows, cols)
    size = rows * cols
    if m is None:
        return Matrix(rows, cols)
    if m._buffer is None:
        m._buffer = Buffer(size)
    elif m._buffer.capacity < size:
        new_buf = Buffer(size)
        m._buffer.free()
        m._buffer = new_buf
        logger.debug(f"adjust_dims: regrew to {size} elements")
    else:
        m._buffer.zero(size)
    m._rows = rows
    m._cols = cols
    m._width = 1
    return m


def assign(m: Optional[Matrix], entries: Iterable[float], rows: int, cols: int) -> Matrix:
    """
    Bulk-assign row-major ``entries`` as a rows x cols matrix.

    Capacity grows when needed and never shrinks. display_width is
    recomputed over the new entries. On allocation failure ``m`` keeps
    its previous state.

    Raises:
        ValueError: If the entry count is not rows * cols
        AllocationError: If growing the buffer fails
    """
    _check_dims(rows, cols)
    size = rows * cols
    values = [float(v) for v in entries]
    if len(values) != size:
        raise ValueError(f"Expected {size} entries for a {rows}x{cols} matrix, got {len(values)}")
    width = max_entry_width(values)

    if m is None:
        m = Matrix(rows, cols)
    elif m._buffer is None:
        m._buffer = Buffer(size)
    elif m._buffer.capacity < size:
        new_buf = Buffer(size)
        m._buffer.free()
        m._buffer = new_buf
        logger.debug(f"assign: regrew to {size} elements")
    m._buffer.load(values)
    m._rows = rows
    m._cols = cols
    m._width = width
    return m


def get_entry(m: Matrix, row: int, col: int) -> Tuple[float, bool]:
    """Read entry (row, col); ``(0.0, False)`` when out of bounds."""
    buf = m._require_live()
    if row < 0 or col < 0 or row >= m._rows or col >= m._cols:
        return 0.0, False
    return buf[row * m._cols + col], True


def set_entry(m: Matrix, row: int, col: int, value: float) -> bool:
    """Write entry (row, col) in place; False when out of bounds.

    display_width is recomputed so it never goes stale.
    """
    buf = m._require_live()
    if row < 0 or col < 0 or row >= m._rows or col >= m._cols:
        return False
    buf[row * m._cols + col] = float(value)
    m._refresh_width()
    return True
