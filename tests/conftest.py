import numpy as np
import pytest

from strata import Layout, Tensor


@pytest.fixture
def row_major_2x3():
    """(2, 3) tensor in last-order layout holding 0..5 in logical order."""
    return Tensor.from_array(np.arange(6, dtype=np.float64).reshape(2, 3), layout="last_order")


@pytest.fixture(params=[Layout.FIRST_ORDER, Layout.LAST_ORDER], ids=["first", "last"])
def layout(request):
    return request.param


@pytest.fixture
def cube(layout):
    """(3, 4, 2) tensor whose elements equal 100*i + 10*j + k."""
    i, j, k = np.meshgrid(np.arange(3), np.arange(4), np.arange(2), indexing="ij")
    return Tensor.from_array((100 * i + 10 * j + k).astype(np.float64), layout=layout)
