"""Dense tensors whose legs carry quantum-number indexes.

The elements are stored in a plain NumPy array; the indexes only add the
bookkeeping needed to compute the divergence of the tensor, i.e. the net
quantum number change it induces.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from .index import IN, Index
from .qn import QN

SUPPORTED_DTYPES = (np.dtype(np.float64), np.dtype(np.complex128))


class QNTensor:
    """A tensor with quantum-number labelled legs.

    Attributes:
        indexes (list[Index]): The legs of the tensor, in storage order.
        data (np.ndarray): The dense elements, shaped by the index dims.
    """

    # Lets numpy scalars defer to __rmul__ instead of broadcasting over the object.
    __array_ufunc__ = None

    def __init__(self, indexes: Sequence[Index], dtype=np.float64, data: Optional[np.ndarray] = None):
        """Initializes a tensor, filled with zeros unless `data` is given.

        Args:
            indexes (Sequence[Index]): The legs of the tensor.
            dtype: The NumPy element type. Defaults to ``np.float64``.
            data (np.ndarray, optional): Initial elements. Must match the
                shape implied by `indexes`.
        """
        self.indexes = list(indexes)
        shape = tuple(index.dim for index in self.indexes)
        if data is None:
            self.data = np.zeros(shape, dtype=dtype)
        else:
            data = np.asarray(data, dtype=dtype)
            assert data.shape == shape, f"Error: Data shape {data.shape} does not match indexes {shape}."
            self.data = data.copy()

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.data.shape

    @property
    def ndim(self) -> int:
        return self.data.ndim

    @property
    def dtype(self):
        return self.data.dtype

    def __getitem__(self, coors):
        return self.data[tuple(coors)]

    def __setitem__(self, coors, value):
        self.data[tuple(coors)] = value

    def nonzero_coors(self):
        """Yields the coordinates of all nonzero elements as tuples."""
        for coors in np.argwhere(self.data != 0):
            yield tuple(int(c) for c in coors)

    def div(self) -> Optional[QN]:
        """Computes the divergence of the tensor.

        The divergence of one element is the sum of the quantum numbers of
        its ``OUT`` coordinates minus those of its ``IN`` coordinates. A
        symmetric tensor has the same divergence for every nonzero element.

        Returns:
            QN | None: The divergence, or None for an all-zero tensor.

        Raises:
            ValueError: If the nonzero elements do not share one divergence.
        """
        qn_lists = [index.qn_list() for index in self.indexes]
        divergence = None
        for coors in self.nonzero_coors():
            elem_div = None
            for index, qns, coor in zip(self.indexes, qn_lists, coors):
                qn = -qns[coor] if index.direction == IN else qns[coor]
                elem_div = qn if elem_div is None else elem_div + qn
            if divergence is None:
                divergence = elem_div
            elif elem_div != divergence:
                raise ValueError(
                    f"Tensor is not quantum-number symmetric: element {coors} has "
                    f"divergence {elem_div}, expected {divergence}.")
        return divergence

    def copy(self):
        return QNTensor(self.indexes, dtype=self.dtype, data=self.data)

    def __mul__(self, scalar):
        data = self.data * scalar
        return QNTensor(self.indexes, dtype=data.dtype, data=data)

    __rmul__ = __mul__

    def __add__(self, other):
        assert self.indexes == other.indexes, "Error: Cannot add tensors with different indexes."
        data = self.data + other.data
        return QNTensor(self.indexes, dtype=data.dtype, data=data)

    def __eq__(self, other):
        if not isinstance(other, QNTensor):
            return NotImplemented
        return self.indexes == other.indexes and np.array_equal(self.data, other.data)

    # Equality is by value and the elements are mutable.
    __hash__ = None

    def __repr__(self):
        return f"QNTensor(shape={self.shape}, dtype={self.dtype})"
