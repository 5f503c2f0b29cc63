"""
Tests for the Matrix class and its lifecycle functions.
"""

import numpy as np
import pytest

from densemat import (
    AllocationError,
    EmptyHandleError,
    Matrix,
    MemoryConfig,
    Ownership,
    adjust_dims,
    assign,
    config,
    copy,
    create,
    destroy,
    get_entry,
    move,
    registry,
    set_entry,
)


class TestMatrixCreation:
    """Test Matrix creation."""

    def test_create_zero_filled(self):
        mat = create(2, 3)
        assert mat.shape == (2, 3)
        assert mat.rows == 2
        assert mat.cols == 3
        assert mat.size == 6
        assert mat.capacity == 6
        assert mat.display_width == 1
        assert mat.entries() == [0.0] * 6
        assert mat.ownership is Ownership.OWNED

    def test_invalid_dims(self):
        with pytest.raises(ValueError):
            Matrix(0, 3)
        with pytest.raises(ValueError):
            Matrix(2, -1)
        with pytest.raises(TypeError):
            Matrix(2.0, 3)

    def test_create_allocation_failure(self):
        with config.local(memory=MemoryConfig(max_buffer_elements=5)):
            with pytest.raises(AllocationError):
                create(2, 3)

    def test_from_rows(self, m2x3):
        assert m2x3.shape == (2, 3)
        assert m2x3.to_list() == [[1, 2, 3], [4, 5, 6]]

    def test_from_rows_ragged(self):
        with pytest.raises(ValueError):
            Matrix.from_rows([[1, 2], [3]])
        with pytest.raises(ValueError):
            Matrix.from_rows([])

    def test_from_flat(self):
        mat = Matrix.from_flat([1, 2, 3, 4, 5, 6], 3, 2)
        assert mat.to_list() == [[1, 2], [3, 4], [5, 6]]

    def test_numpy_round_trip(self):
        arr = np.arange(12, dtype=np.float64).reshape(3, 4) / 4
        mat = Matrix.from_numpy(arr)
        assert mat.shape == (3, 4)
        np.testing.assert_array_equal(mat.to_numpy(), arr)

    def test_from_numpy_rejects_1d(self):
        with pytest.raises(ValueError):
            Matrix.from_numpy(np.zeros(3))

    def test_identity(self):
        mat = Matrix.identity(3)
        assert mat.to_list() == [[1, 0, 0], [0, 1, 0], [0, 0, 1]]


class TestEntryAccess:
    """Test bounds-checked entry access."""

    def test_get_entry(self, m2x3):
        assert get_entry(m2x3, 1, 2) == (6.0, True)
        assert m2x3.get_entry(0, 0) == (1.0, True)

    def test_get_entry_out_of_bounds(self, m2x3):
        assert get_entry(m2x3, 2, 0) == (0.0, False)
        assert get_entry(m2x3, 0, 3) == (0.0, False)
        assert get_entry(m2x3, -1, 0) == (0.0, False)

    def test_set_entry(self, m2x3):
        assert set_entry(m2x3, 1, 1, 9.5)
        assert m2x3[1, 1] == 9.5

    def test_set_entry_out_of_bounds(self, m2x3):
        before = m2x3.entries()
        assert not set_entry(m2x3, 2, 0, 1.0)
        assert not m2x3.set_entry(0, 5, 1.0)
        assert m2x3.entries() == before

    def test_set_entry_updates_width(self, m2x2):
        m2x2[0, 0] = -425.73
        assert m2x2.display_width == 7
        m2x2[0, 0] = 1
        assert m2x2.display_width == 1

    def test_getitem_errors(self, m2x2):
        with pytest.raises(IndexError):
            m2x2[2, 0]
        with pytest.raises(IndexError):
            m2x2[0, 2] = 1.0
        with pytest.raises(TypeError):
            m2x2[0]

    def test_logical_mapping(self):
        """Entry (r, c) is stored at r * cols + c."""
        mat = Matrix.from_flat(range(6), 2, 3)
        for r in range(2):
            for c in range(3):
                assert mat[r, c] == r * 3 + c


class TestAssign:
    """Test bulk assignment."""

    def test_assign_width(self):
        mat = create(1, 1)
        assign(mat, [1, -425.73, 3.5, 10], 2, 2)
        assert mat.shape == (2, 2)
        assert mat.display_width == 7

    def test_assign_grows(self):
        mat = create(1, 2)
        assign(mat, range(9), 3, 3)
        assert mat.capacity == 9
        assert mat[2, 2] == 8

    def test_assign_never_shrinks(self):
        mat = create(3, 3)
        assign(mat, [1, 2], 1, 2)
        assert mat.shape == (1, 2)
        assert mat.capacity == 9
        assert mat.entries() == [1.0, 2.0]

    def test_assign_too_few_entries(self):
        mat = create(2, 2)
        with pytest.raises(ValueError):
            assign(mat, [1, 2, 3], 2, 2)

    def test_assign_too_many_entries(self):
        mat = create(2, 2)
        with pytest.raises(ValueError):
            assign(mat, range(5), 2, 2)
        assert mat.entries() == [0.0] * 4

    def test_wrong_count_allocates_nothing(self, memory_guard):
        with memory_guard():
            with pytest.raises(ValueError):
                Matrix.from_flat([1, 2, 3], 2, 2)
            with pytest.raises(ValueError):
                Matrix.from_flat(range(5), 2, 2)
            with pytest.raises(ValueError):
                assign(None, [1], 1, 2)

    def test_assign_failure_preserves_state(self, m2x2):
        with config.local(memory=MemoryConfig(max_buffer_elements=4)):
            with pytest.raises(AllocationError):
                assign(m2x2, range(9), 3, 3)
        assert m2x2.to_list() == [[1, 2], [3, 4]]

    def test_assign_none_creates(self):
        mat = assign(None, [5, 6], 2, 1)
        assert mat.to_list() == [[5], [6]]


class TestCopy:
    """Test copy semantics."""

    def test_copy_construct(self, m2x3):
        dup = m2x3.copy()
        assert dup == m2x3
        assert dup is not m2x3
        dup[0, 0] = 100
        assert m2x3[0, 0] == 1

    def test_copy_into_none(self, m2x3):
        dup = copy(None, m2x3)
        assert dup.to_list() == m2x3.to_list()
        assert dup.display_width == m2x3.display_width

    def test_copy_reuses_capacity(self, m2x2):
        dest = create(3, 3)
        allocations = registry.total_allocations
        copy(dest, m2x2)
        assert registry.total_allocations == allocations
        assert dest.shape == (2, 2)
        assert dest.capacity == 9
        assert dest.to_list() == [[1, 2], [3, 4]]

    def test_copy_grows(self, m3x3):
        dest = create(1, 1)
        result = copy(dest, m3x3)
        assert result is dest
        assert dest.capacity == 9
        assert dest == m3x3

    def test_copy_into_destroyed(self, m2x2):
        dest = create(1, 1)
        dest.destroy()
        copy(dest, m2x2)
        assert dest == m2x2

    def test_copy_from_empty(self):
        src = create(1, 1)
        src.destroy()
        with pytest.raises(EmptyHandleError):
            copy(None, src)


class TestMove:
    """Test move semantics."""

    def test_move_into_none(self, m2x3):
        moved = move(None, m2x3)
        assert moved.to_list() == [[1, 2, 3], [4, 5, 6]]
        assert m2x3.is_empty
        assert m2x3.ownership is Ownership.EMPTY

    def test_move_destroys_destination(self, m2x2, m3x3, no_gc):
        before = registry.live_buffers
        move(m2x2, m3x3)
        assert registry.live_buffers == before - 1
        assert m2x2.shape == (3, 3)
        assert m3x3.is_empty

    def test_move_does_not_allocate(self, m2x2):
        dest = create(1, 1)
        allocations = registry.total_allocations
        move(dest, m2x2)
        assert registry.total_allocations == allocations

    def test_move_from_empty(self, m2x2):
        src = create(1, 1)
        src.destroy()
        with pytest.raises(EmptyHandleError):
            move(m2x2, src)
        assert m2x2.to_list() == [[1, 2], [3, 4]]

    def test_take(self, m2x2):
        taken = Matrix.take(m2x2)
        assert taken.shape == (2, 2)
        assert m2x2.is_empty

    def test_move_to_self(self, m2x2):
        assert move(m2x2, m2x2) is m2x2
        assert not m2x2.is_empty


class TestDestroy:
    """Test destroy semantics."""

    def test_destroy(self, no_gc):
        before = registry.snapshot()
        mat = create(2, 2)
        assert destroy(mat)
        assert mat.is_empty
        assert mat.capacity == 0
        assert registry.snapshot() == before

    def test_destroy_redundant(self):
        mat = create(2, 2)
        assert mat.destroy()
        assert not mat.destroy()
        assert not destroy(None)

    def test_context_manager(self, no_gc):
        before = registry.snapshot()
        with create(3, 3) as mat:
            mat[1, 1] = 5
        assert mat.is_empty
        assert registry.snapshot() == before

    def test_use_after_destroy(self, m2x2):
        m2x2.destroy()
        with pytest.raises(EmptyHandleError):
            m2x2.entries()
        with pytest.raises(EmptyHandleError):
            get_entry(m2x2, 0, 0)
        assert repr(m2x2) == "<Matrix [empty]>"


class TestAdjustDims:
    """Test result preparation."""

    def test_adjust_none(self):
        mat = adjust_dims(None, 2, 4)
        assert mat.shape == (2, 4)
        assert mat.entries() == [0.0] * 8

    def test_adjust_shrink_keeps_capacity(self, m3x3):
        allocations = registry.total_allocations
        result = adjust_dims(m3x3, 2, 2)
        assert result is m3x3
        assert registry.total_allocations == allocations
        assert m3x3.capacity == 9
        assert m3x3.shape == (2, 2)
        assert m3x3.entries() == [0.0] * 4
        assert m3x3.display_width == 1

    def test_adjust_grow_reallocates(self, m2x2, no_gc):
        before = registry.live_buffers
        adjust_dims(m2x2, 3, 3)
        assert m2x2.capacity == 9
        assert m2x2.entries() == [0.0] * 9
        assert registry.live_buffers == before

    def test_adjust_growth_failure(self, m2x2):
        with config.local(memory=MemoryConfig(max_buffer_elements=4)):
            with pytest.raises(AllocationError):
                adjust_dims(m2x2, 3, 3)

    def test_adjust_empty_handle(self):
        mat = create(1, 1)
        mat.destroy()
        adjust_dims(mat, 2, 2)
        assert mat.shape == (2, 2)
        assert not mat.is_empty


class TestMagicMethods:
    """Test equality and representation."""

    def test_equality(self, m2x2):
        assert m2x2 == Matrix.from_rows([[1, 2], [3, 4]])
        assert m2x2 != Matrix.from_rows([[1, 2], [3, 5]])
        assert m2x2 != Matrix.from_rows([[1, 2, 3, 4]])

    def test_repr(self, m2x2):
        assert repr(m2x2) == "Matrix([[1.0, 2.0], [3.0, 4.0]])"
        assert repr(create(5, 5)) == "<Matrix 5x5>"

    def test_len(self, m2x3):
        assert len(m2x3) == 2
