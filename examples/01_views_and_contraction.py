import numpy as np

from strata import Span, Tensor, _i, _j, _k

# A 4x6 matrix stored first-index-fastest
A = Tensor.from_array(np.arange(24.0).reshape(4, 6))
B = Tensor.from_array(np.ones((6, 3)), layout="last_order")

# Every other column of the middle two rows, written through the view
window = A(Span(1, 3), Span(0, 2, 6))
window.assign(window * 10)

C = Tensor(4, 3)
C(_i, _j).assign(A(_i, _k) * B(_k, _j))

print(window)
print(C.to_numpy())
