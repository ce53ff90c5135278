import itertools

import pytest
from hypothesis import given
from hypothesis import strategies as st

from strata import ConfigError, Layout, PermutedLayout, product, to_index, to_strides
from strata.core.layout import resolve_layout, to_multi_index


def test_first_order_strides():
    assert to_strides((3, 4, 2), Layout.FIRST_ORDER) == (1, 3, 12)


def test_last_order_strides():
    assert to_strides((3, 4, 2), Layout.LAST_ORDER) == (8, 2, 1)


def test_row_major_offset_example():
    strides = to_strides((2, 3), Layout.LAST_ORDER)
    assert to_index(strides, 1, 2) == 5


def test_permuted_layout_orders_dimensions():
    layout = PermutedLayout((1, 0, 2))
    assert to_strides((3, 4, 2), layout) == (4, 1, 12)


def test_permuted_layout_validation():
    with pytest.raises(ConfigError, match="permutation"):
        PermutedLayout((0, 0, 1))
    with pytest.raises(ConfigError, match="rank-2"):
        to_strides((3, 4), PermutedLayout((0, 1, 2)))


def test_empty_dimensions_keep_usable_strides():
    assert to_strides((0, 3), Layout.FIRST_ORDER) == (1, 1)
    assert product((0, 3)) == 0


def test_rank_zero():
    assert to_strides((), Layout.FIRST_ORDER) == ()
    assert product(()) == 1
    assert to_index(()) == 0


@pytest.mark.parametrize(
    "name,expected",
    [
        ("first_order", Layout.FIRST_ORDER),
        ("column-major", Layout.FIRST_ORDER),
        ("F", Layout.FIRST_ORDER),
        ("last_order", Layout.LAST_ORDER),
        ("row_major", Layout.LAST_ORDER),
        ("c", Layout.LAST_ORDER),
    ],
)
def test_resolve_layout_aliases(name, expected):
    assert resolve_layout(name) is expected


def test_resolve_layout_rejects_unknown():
    with pytest.raises(ConfigError, match="Unsupported layout"):
        resolve_layout("diagonal")


extents_strategy = st.lists(st.integers(min_value=1, max_value=5), min_size=1, max_size=4)
layouts = st.sampled_from([Layout.FIRST_ORDER, Layout.LAST_ORDER])


@given(extents_strategy, layouts)
def test_unit_step_moves_by_stride(extents, layout):
    strides = to_strides(extents, layout)
    for r in range(len(extents)):
        base = [0] * len(extents)
        if extents[r] < 2:
            continue
        bumped = list(base)
        bumped[r] = 1
        assert to_index(strides, *bumped) - to_index(strides, *base) == strides[r]


@given(extents_strategy, layouts)
def test_dense_offsets_are_a_bijection(extents, layout):
    strides = to_strides(extents, layout)
    offsets = {
        to_index(strides, *idx) for idx in itertools.product(*(range(e) for e in extents))
    }
    assert offsets == set(range(product(extents)))


@given(extents_strategy, layouts, st.data())
def test_multi_index_round_trip(extents, layout, data):
    strides = to_strides(extents, layout)
    idx = tuple(data.draw(st.integers(min_value=0, max_value=e - 1)) for e in extents)
    offset = to_index(strides, *idx)
    assert to_multi_index(strides, extents, offset, layout) == idx
