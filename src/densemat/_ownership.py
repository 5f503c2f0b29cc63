"""Ownership and Allocation Tracking.

This module keeps the books on matrix buffers so that every code path,
including the failure paths of the recursive kernels, can be checked for
leaked allocations.

Key Concepts:
    - Live buffer: allocated and not yet freed.
    - Explicit release: ``Buffer.free()`` was called (destroy, move, regrow).
    - Implicit release: the garbage collector reclaimed a buffer that was
      never freed. Kernels must never rely on this.

Safety Model:
    1. OWNED handle: holds exactly one live buffer
    2. EMPTY handle: destroyed or moved-from, holds nothing
"""

from enum import Enum
import threading

__all__ = [
    'Ownership',
    'BufferRegistry',
    'registry',
]


class Ownership(Enum):
    """Ownership state of a matrix handle."""
    OWNED = 'owned'
    EMPTY = 'empty'


# =============================================================================
# Buffer Registry
# =============================================================================

class BufferRegistry:
    """Counts live buffers and the elements they hold.

    Attributes:
        live_buffers: Buffers allocated and not yet released.
        live_elements: Total capacity of the live buffers.
        implicit_releases: Buffers reclaimed by the GC without ``free()``.

    Example:
        >>> before = registry.snapshot()
        >>> det(m)
        >>> assert registry.snapshot() == before
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.live_buffers = 0
        self.live_elements = 0
        self.total_allocations = 0
        self.implicit_releases = 0

    def acquire(self, elements: int, limit=None) -> bool:
        """Count a new buffer of ``elements`` unless that would pass ``limit``.

        The limit check and the update happen under the same lock.
        """
        with self._lock:
            if limit is not None and self.live_elements + elements > limit:
                return False
            self.live_buffers += 1
            self.live_elements += elements
            self.total_allocations += 1
            return True

    def release(self, elements: int, implicit: bool = False) -> None:
        with self._lock:
            self.live_buffers -= 1
            self.live_elements -= elements
            if implicit:
                self.implicit_releases += 1

    def snapshot(self) -> tuple:
        """(live_buffers, live_elements, implicit_releases)."""
        with self._lock:
            return (self.live_buffers, self.live_elements, self.implicit_releases)

    def __repr__(self) -> str:
        return (f"BufferRegistry(live_buffers={self.live_buffers}, "
                f"live_elements={self.live_elements}, "
                f"implicit_releases={self.implicit_releases})")


registry = BufferRegistry()
