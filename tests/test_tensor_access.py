import numpy as np
import pytest

from strata import (
    ArityError,
    Layout,
    OutOfRangeError,
    Span,
    Tensor,
    TensorConfig,
    _i,
    _j,
    to_index,
)


def test_queries_for_rank_three_tensor():
    t = Tensor(3, 4, 2)
    assert t.rank() == 3
    assert t.order() == 3
    assert t.size() == 24
    assert t.size(1) == 4
    assert t.extents() == (3, 4, 2)
    assert t.strides() == (1, 3, 12)
    assert not t.empty()
    assert t.owns_data


def test_size_of_missing_dimension_raises():
    t = Tensor(3, 4)
    with pytest.raises(OutOfRangeError, match="Dimension 2"):
        t.size(2)


def test_zero_initialized_storage():
    t = Tensor(2, 2)
    assert list(t.values()) == [0.0, 0.0, 0.0, 0.0]


def test_tuple_extents_and_validation():
    assert Tensor((2, 5)).extents() == (2, 5)
    with pytest.raises(ValueError, match="non-negative"):
        Tensor(2, -1)
    with pytest.raises(TypeError):
        Tensor(2.5)


def test_empty_tensor():
    t = Tensor(0, 3)
    assert t.empty()
    assert t.size() == 0
    assert list(t) == []


def test_write_at_then_read_storage_row_major():
    t = Tensor(2, 3, layout=Layout.LAST_ORDER)
    t.set_at(42.0, 1, 2)
    offset = to_index(t.strides(), 1, 2)
    assert offset == 5
    assert t.data()[offset] == 42.0
    assert t.at(1, 2) == 42.0
    assert t.at(5) == 42.0


def test_arity_mismatch_on_rank_three():
    t = Tensor(3, 4, 2)
    with pytest.raises(ArityError, match="does not match with tensor order") as excinfo:
        t.at(1, 2)
    assert excinfo.value.expected == 3
    assert excinfo.value.received == 2
    assert isinstance(excinfo.value, ValueError)


def test_flat_at_is_bounds_checked():
    t = Tensor(2, 2)
    with pytest.raises(OutOfRangeError):
        t.at(4)
    with pytest.raises(IndexError):
        t.at(-1)


def test_multi_index_outside_storage_raises():
    t = Tensor(2, 2)
    with pytest.raises(OutOfRangeError):
        t.at(2, 1)


def test_call_and_subscript_delegate_to_at(row_major_2x3):
    t = row_major_2x3
    assert t(1, 0) == 3.0
    assert t[1, 0] == 3.0
    assert t[4] == 4.0
    with pytest.raises(ArityError):
        t(1, 0, 0)


def test_subscript_assignment(row_major_2x3):
    t = row_major_2x3
    t[0, 1] = 10.0
    t[5] = 11.0
    np.testing.assert_array_equal(t.to_numpy(), [[0.0, 10.0, 2.0], [3.0, 4.0, 11.0]])


def test_unchecked_call_skips_arity_validation():
    cfg = TensorConfig(layout="last_order", checked_access=False)
    t = Tensor.from_array(np.arange(6.0).reshape(2, 3), config=cfg)
    assert t(1, 2) == 5.0
    # Flat access through the call operator on a rank-2 tensor.
    assert t(4) == 4.0
    # numpy wraps negative offsets instead of raising.
    assert t(-1) == 5.0
    with pytest.raises(ArityError):
        t.at(1, 2, 0)


def test_rank_zero_tensor():
    t = Tensor()
    assert t.rank() == 0
    assert t.size() == 1
    t.set_at(3.5)
    assert t.at() == 3.5
    assert t() == 3.5


def test_layout_changes_physical_iteration(layout):
    t = Tensor.from_array(np.arange(6.0).reshape(2, 3), layout=layout)
    expected = [0.0, 3.0, 1.0, 4.0, 2.0, 5.0] if layout is Layout.FIRST_ORDER else list(range(6))
    assert list(t.values()) == expected
    assert list(reversed(t)) == expected[::-1]
    np.testing.assert_array_equal(t.to_numpy(), np.arange(6.0).reshape(2, 3))


def test_data_readonly_overload(row_major_2x3):
    buffer = row_major_2x3.data(readonly=True)
    with pytest.raises(ValueError):
        buffer[0] = 1.0
    row_major_2x3.data()[0] = 1.0
    assert row_major_2x3.at(0, 0) == 1.0


def test_placeholder_call_returns_binding(row_major_2x3):
    binding = row_major_2x3(_i, _j)
    assert binding.tensor is row_major_2x3
    assert binding.indices == (_i, _j)
    assert binding.arity == 2


def test_placeholder_arity_mismatch(row_major_2x3):
    with pytest.raises(ArityError, match="Einstein notation"):
        row_major_2x3(_i)


def test_mixing_placeholders_and_integers(row_major_2x3):
    with pytest.raises(TypeError, match="Cannot mix"):
        row_major_2x3(_i, 1)


def test_numpy_interop(cube):
    arr = np.asarray(cube)
    assert arr.shape == (3, 4, 2)
    assert arr[2, 3, 1] == 231.0
    assert cube.at(2, 3, 1) == 231.0


def test_owning_tensor_checks_storage_not_dimensions():
    t = Tensor.from_array(np.arange(12.0).reshape(3, 4))
    assert t.at(3, 0) == t.at(0, 1)
    assert t.at(-1, 1) == t.at(2, 0)
    view = t(Span(), Span())
    with pytest.raises(OutOfRangeError):
        view.at(3, 0)
