import numpy as np
import pytest

from strata import Layout, ShapeError, Tensor, swap


def test_scalar_assignment_fills_every_element():
    t = Tensor(3, 4, 2)
    t.assign(7.5)
    values = list(t)
    assert len(values) == t.size()
    assert all(v == 7.5 for v in values)


def test_swap_assignment_exchanges_contents():
    a = Tensor.full((2, 2), 1.0)
    b = Tensor.full((2, 2), 2.0)
    a_buffer = a.data()
    b_buffer = b.data()

    swap(a, b)

    assert all(v == 2.0 for v in a)
    assert all(v == 1.0 for v in b)
    assert a.data() is b_buffer
    assert b.data() is a_buffer
    assert not np.shares_memory(a.data(), b.data())


def test_tensor_assignment_copies_source():
    a = Tensor.full((2, 2), 1.0)
    b = Tensor.full((2, 2), 2.0)
    a.assign(b)
    assert list(a.values()) == [2.0] * 4
    assert not np.shares_memory(a.data(), b.data())
    b.set_at(9.0, 0, 0)
    assert a.at(0, 0) == 2.0


def test_tensor_assignment_keeps_receiver_layout():
    a = Tensor(2, 3, layout=Layout.FIRST_ORDER)
    b = Tensor.from_array(np.arange(6.0).reshape(2, 3), layout=Layout.LAST_ORDER)
    a.assign(b)
    assert a.layout is Layout.FIRST_ORDER
    assert a.strides() == (1, 2)
    np.testing.assert_array_equal(a.to_numpy(), b.to_numpy())


def test_failed_assignment_leaves_receiver_untouched():
    a = Tensor.full((2, 2), 1.0)
    before = a.data()
    with pytest.raises(ShapeError, match="Cannot assign tensor"):
        a.assign(Tensor(3, 2))
    assert a.data() is before
    assert list(a.values()) == [1.0] * 4


def test_assignment_from_array():
    t = Tensor(2, 2, layout="last_order")
    t.assign(np.array([[1.0, 2.0], [3.0, 4.0]]))
    assert list(t.values()) == [1.0, 2.0, 3.0, 4.0]
    with pytest.raises(ShapeError):
        t.assign(np.zeros(3))


def test_assignment_rejects_unknown_source():
    with pytest.raises(TypeError, match="Cannot assign"):
        Tensor(2).assign("text")


def test_swap_requires_owning_tensors():
    t = Tensor(2, 2)
    with pytest.raises(TypeError):
        t.swap(t.view(slice(None), slice(None)))


def test_copy_is_independent(cube):
    clone = cube.copy()
    clone.set_at(-1.0, 0, 0, 0)
    assert cube.at(0, 0, 0) == 0.0
    assert clone.layout is cube.layout


def test_copy_can_change_dtype_and_layout(cube):
    clone = cube.copy(layout="last_order", dtype="int32")
    assert clone.dtype == np.dtype("int32")
    assert clone.strides() == (8, 2, 1)
    np.testing.assert_array_equal(clone.to_numpy(), cube.to_numpy().astype(np.int32))


def test_lossy_expression_assignment_is_rejected():
    t = Tensor.from_array(np.array([1, 2, 3]))
    with pytest.raises(TypeError, match="same_kind"):
        t.assign(t / 2)
    assert list(t.values()) == [1, 2, 3]
    t.assign(t * 2)
    assert list(t.values()) == [2, 4, 6]


def test_lossy_tensor_assignment_is_rejected():
    target = Tensor(2, dtype="int32")
    with pytest.raises(TypeError, match="same_kind"):
        target.assign(Tensor.full((2,), 1.5))
    with pytest.raises(TypeError):
        target[0:2] = Tensor.full((2,), 1.5)
    assert list(target.values()) == [0, 0]
    narrow = Tensor(2, dtype="float32")
    narrow.assign(Tensor.full((2,), 1.5))
    assert list(narrow.values()) == [1.5, 1.5]
