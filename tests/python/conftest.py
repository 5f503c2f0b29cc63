"""
Pytest configuration and shared fixtures for densemat tests.
"""

import gc
import sys
from contextlib import contextmanager
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from densemat import Matrix, MemoryConfig, config, registry


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts and ends with default configuration."""
    config.reset()
    yield
    config.reset()


@pytest.fixture
def no_gc():
    """Keep the cyclic GC from releasing unrelated buffers mid-test."""
    gc.collect()
    was_enabled = gc.isenabled()
    gc.disable()
    yield
    if was_enabled:
        gc.enable()


@pytest.fixture
def memory_guard():
    """Context manager factory: optional live-element budget + leak check.

    Inside the block at most ``extra`` more elements may be live at once.
    On exit the registry must be back to where it started: no buffer left
    allocated and none reclaimed by the garbage collector instead of being
    freed.
    """
    @contextmanager
    def _guard(extra=None):
        gc.collect()
        was_enabled = gc.isenabled()
        gc.disable()
        try:
            before = registry.snapshot()
            limit = None if extra is None else before[1] + extra
            with config.local(memory=MemoryConfig(max_live_elements=limit)):
                yield registry
            after = registry.snapshot()
        finally:
            if was_enabled:
                gc.enable()
        assert after == before, f"registry changed: {before} -> {after}"

    return _guard


@pytest.fixture
def m2x2():
    """[[1, 2], [3, 4]]"""
    return Matrix.from_rows([[1, 2], [3, 4]])


@pytest.fixture
def m2x3():
    """[[1, 2, 3], [4, 5, 6]]"""
    return Matrix.from_rows([[1, 2, 3], [4, 5, 6]])


@pytest.fixture
def m3x3():
    """[[1, 2, 3], [4, 5, 6], [7, 8, 10]], det == -3."""
    return Matrix.from_rows([[1, 2, 3], [4, 5, 6], [7, 8, 10]])


@pytest.fixture
def m4x4():
    """Invertible 4x4 matrix with integer entries."""
    return Matrix.from_rows([
        [2, 0, 1, 3],
        [1, 1, 0, 2],
        [0, 4, 1, 1],
        [3, 1, 2, 0],
    ])


@pytest.fixture
def rng():
    return np.random.default_rng(42)


# =============================================================================
# Helper Functions
# =============================================================================

def assert_matrix_close(mat, expected, rtol=1e-9, atol=1e-9):
    """Assert a Matrix is approximately equal to a nested list / array."""
    if isinstance(expected, Matrix):
        expected = expected.to_numpy()
    np.testing.assert_allclose(mat.to_numpy(), np.asarray(expected, dtype=float),
                               rtol=rtol, atol=atol)
