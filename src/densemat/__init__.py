"""
densemat - Dense Matrix Algebra

Dense row-major matrices with explicit ownership and a small algebra engine:
- Matrix value type with copy / move / destroy lifecycle
- Buffer reuse: results are written into existing matrices when they fit
- Addition, subtraction, multiplication, integer power, transpose
- Determinant, cofactors, adjugate and inverse by cofactor expansion
- Allocation tracking so failure paths can be checked for leaks

Architecture:
    ┌──────────────────────────────────────────────┐
    │  algebra  │  determinant  │  inverse          │
    ├──────────────────────────────────────────────┤
    │  Matrix + lifecycle (create/copy/move/...)    │
    ├──────────────────────────────────────────────┤
    │  Buffer (ctypes, capacity)  │  registry       │
    └──────────────────────────────────────────────┘

Example:
    >>> from densemat import Matrix, mult, det, invert
    >>>
    >>> a = Matrix.from_rows([[1, 2, 3], [4, 5, 6], [7, 8, 10]])
    >>> det(a)
    -3.0
    >>> inv, invertible = invert(a)
    >>> (a @ inv).to_list()   # identity, up to rounding
"""

__version__ = '0.1.0'

from ._errors import (
    MatrixError,
    AllocationError,
    ShapeMismatchError,
    EmptyHandleError,
    NotInvertibleError,
    check_error,
    MX_OK,
    MX_ERROR_OUT_OF_MEMORY,
    MX_ERROR_EMPTY_HANDLE,
    MX_ERROR_INVALID_ARGUMENT,
    MX_ERROR_DIMENSION_MISMATCH,
    MX_ERROR_INDEX_OUT_OF_BOUNDS,
    MX_ERROR_NOT_INVERTIBLE,
)

from ._config import (
    MemoryConfig,
    FormatConfig,
    ValidationConfig,
    MatrixConfig,
    config,
    get_config,
    set_memory,
)

from ._ownership import Ownership, BufferRegistry, registry
from ._array import Buffer
from ._format import format_entry, entry_width, max_entry_width

from ._matrix import (
    Matrix,
    create,
    copy,
    move,
    destroy,
    adjust_dims,
    assign,
    get_entry,
    set_entry,
)

from .algebra import (
    can_add,
    can_sub,
    can_mult,
    add,
    sub,
    mult,
    power,
    transpose,
)

from .determinant import DetResult, minor, try_det, det
from .inverse import Invertibility, can_invert, cofactors, adjugate, invert

__all__ = [
    # Version
    '__version__',

    # Errors
    'MatrixError',
    'AllocationError',
    'ShapeMismatchError',
    'EmptyHandleError',
    'NotInvertibleError',
    'check_error',
    'MX_OK',
    'MX_ERROR_OUT_OF_MEMORY',
    'MX_ERROR_EMPTY_HANDLE',
    'MX_ERROR_INVALID_ARGUMENT',
    'MX_ERROR_DIMENSION_MISMATCH',
    'MX_ERROR_INDEX_OUT_OF_BOUNDS',
    'MX_ERROR_NOT_INVERTIBLE',

    # Configuration
    'MemoryConfig',
    'FormatConfig',
    'ValidationConfig',
    'MatrixConfig',
    'config',
    'get_config',
    'set_memory',

    # Ownership / memory
    'Ownership',
    'BufferRegistry',
    'registry',
    'Buffer',

    # Formatting
    'format_entry',
    'entry_width',
    'max_entry_width',

    # Matrix and lifecycle
    'Matrix',
    'create',
    'copy',
    'move',
    'destroy',
    'adjust_dims',
    'assign',
    'get_entry',
    'set_entry',

    # Algebra
    'can_add',
    'can_sub',
    'can_mult',
    'add',
    'sub',
    'mult',
    'power',
    'transpose',

    # Determinant / inverse
    'DetResult',
    'minor',
    'try_det',
    'det',
    'Invertibility',
    'can_invert',
    'cofactors',
    'adjugate',
    'invert',
]
