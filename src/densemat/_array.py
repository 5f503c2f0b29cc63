"""
Matrix Entry Buffer

Pure Python/ctypes buffer of ``double`` values backing a matrix.
Capacity (allocated length) is tracked separately from the logical size the
owning matrix uses, so a matrix can shrink without reallocating.
"""

import ctypes
import logging
import weakref
from typing import List, Optional

from ._config import config
from ._errors import AllocationError, MX_ERROR_OUT_OF_MEMORY
from ._ownership import registry

__all__ = ['Buffer', 'allocate']

logger = logging.getLogger("densemat.memory")

_ITEMSIZE = ctypes.sizeof(ctypes.c_double)


# =============================================================================
# Buffer Class
# =============================================================================

class Buffer:
    """
    Contiguous, zero-initialized ``double`` buffer with C-compatible layout.

    Features:
    - Memory-aligned allocation (configurable, 64-byte by default)
    - Explicit ``free()``; the registry counts every live buffer
    - Bulk zero/copy through ``ctypes.memset``/``ctypes.memmove``

    Attributes:
        capacity (int): Number of allocated elements
        nbytes (int): Total bytes
        ptr (int): C pointer address (read-only)

    Example:
        >>> buf = Buffer(12)
        >>> buf[0] = 3.14
        >>> buf.zero(6)
        >>> buf.free()
    """

    __slots__ = ("_capacity", "_align", "_data", "_owner", "_finalizer", "__weakref__")

    def __init__(self, capacity: int, align: Optional[int] = None):
        """
        Allocate a zero-filled buffer.

        Args:
            capacity: Number of elements (>= 1)
            align: Memory alignment in bytes (default: config.memory.alignment)

        Raises:
            AllocationError: If the configured limits forbid the allocation
                or the interpreter cannot provide the memory.
        """
        if capacity < 1:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}")

        mem = config.memory
        if align is None:
            align = mem.alignment

        if mem.max_buffer_elements is not None and capacity > mem.max_buffer_elements:
            logger.warning(f"Buffer of {capacity} elements exceeds per-buffer limit "
                           f"{mem.max_buffer_elements}")
            raise AllocationError(MX_ERROR_OUT_OF_MEMORY,
                                  f"buffer of {capacity} elements exceeds max_buffer_elements")

        try:
            # Over-allocate so the element array can start on an aligned address
            raw = (ctypes.c_uint8 * (capacity * _ITEMSIZE + align))()
            addr = ctypes.addressof(raw)
            aligned_addr = (addr + align - 1) & ~(align - 1)
            data = (ctypes.c_double * capacity).from_address(aligned_addr)
        except (MemoryError, OverflowError) as e:
            logger.warning(f"Allocation of {capacity} elements failed: {e}")
            raise AllocationError(MX_ERROR_OUT_OF_MEMORY,
                                  f"cannot allocate {capacity} elements") from e

        if not registry.acquire(capacity, mem.max_live_elements):
            logger.warning(f"Buffer of {capacity} elements exceeds live limit "
                           f"{mem.max_live_elements} ({registry.live_elements} live)")
            raise AllocationError(MX_ERROR_OUT_OF_MEMORY,
                                  f"buffer of {capacity} elements exceeds max_live_elements")

        self._capacity = capacity
        self._align = align
        self._data = data
        self._owner = raw  # Keep reference to prevent GC
        self._finalizer = weakref.finalize(self, registry.release, capacity, True)
        logger.debug(f"Allocated buffer of {capacity} elements")

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        """Number of allocated elements."""
        return self._capacity

    @property
    def nbytes(self) -> int:
        """Total bytes."""
        return self._capacity * _ITEMSIZE

    @property
    def is_freed(self) -> bool:
        return self._data is None

    @property
    def ptr(self) -> int:
        """C pointer address (read-only)."""
        if self._data is None:
            return 0
        return ctypes.addressof(self._data)

    def get_pointer(self) -> ctypes.c_void_p:
        """Get ctypes pointer for C API calls."""
        if self._data is None:
            return ctypes.c_void_p(0)
        return ctypes.cast(self._data, ctypes.c_void_p)

    # -------------------------------------------------------------------------
    # Release
    # -------------------------------------------------------------------------

    def free(self) -> None:
        """Release the memory. Safe to call more than once."""
        if self._finalizer.detach() is not None:
            registry.release(self._capacity)
            logger.debug(f"Freed buffer of {self._capacity} elements")
        self._data = None
        self._owner = None

    # -------------------------------------------------------------------------
    # Element Access
    # -------------------------------------------------------------------------

    def __getitem__(self, idx: int) -> float:
        if self._data is None:
            raise IndexError("Buffer has been freed")
        if idx < 0 or idx >= self._capacity:
            raise IndexError(f"Index {idx} out of bounds [0, {self._capacity})")
        return self._data[idx]

    def __setitem__(self, idx: int, value: float) -> None:
        if self._data is None:
            raise IndexError("Buffer has been freed")
        if idx < 0 or idx >= self._capacity:
            raise IndexError(f"Index {idx} out of bounds [0, {self._capacity})")
        self._data[idx] = value

    def __len__(self) -> int:
        return self._capacity

    # -------------------------------------------------------------------------
    # Bulk Operations
    # -------------------------------------------------------------------------

    def zero(self, count: Optional[int] = None) -> None:
        """Zero the first ``count`` elements (all by default)."""
        if count is None:
            count = self._capacity
        if self._data is not None and count > 0:
            ctypes.memset(self.get_pointer(), 0, count * _ITEMSIZE)

    def copy_from(self, other: "Buffer", count: int) -> None:
        """Copy the first ``count`` elements of ``other`` into this buffer."""
        if count > self._capacity or count > other.capacity:
            raise IndexError(f"Cannot copy {count} elements between buffers of "
                             f"capacity {other.capacity} and {self._capacity}")
        if count > 0:
            ctypes.memmove(self.get_pointer(), other.get_pointer(), count * _ITEMSIZE)

    def load(self, values) -> None:
        """Write ``values`` starting at index 0."""
        data = self._data
        for i, val in enumerate(values):
            data[i] = val

    def tolist(self, count: Optional[int] = None) -> List[float]:
        """Convert the first ``count`` elements to a Python list."""
        if self._data is None:
            return []
        if count is None:
            count = self._capacity
        return self._data[:count]

    def __repr__(self) -> str:
        if self._data is None:
            return "Buffer([freed])"
        if self._capacity <= 6:
            data_str = str(self.tolist())
        else:
            values = self.tolist()
            data_str = str(values[:3] + ['...'] + values[-3:])
        return f"Buffer({data_str}, capacity={self._capacity})"


# =============================================================================
# Factory Functions
# =============================================================================

def allocate(capacity: int) -> Buffer:
    """Create zero-initialized buffer."""
    return Buffer(capacity)
