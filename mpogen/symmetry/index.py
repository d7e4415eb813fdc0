"""Tensor indexes carrying quantum-number sector structure."""

from typing import List, Sequence, Tuple

from .qn import QN, QNSector

IN = 'IN'
OUT = 'OUT'


class Index:
    """An ordered list of quantum-number sectors plus a flow direction.

    The basis of the index is the concatenation of its sectors: coordinate
    ``c`` lives in the first sector whose cumulative dimension exceeds ``c``.

    Attributes:
        qnscts (list[QNSector]): The sectors, in basis order.
        direction (str): Either ``IN`` or ``OUT``.
        dim (int): The total dimension of the index.
    """

    def __init__(self, qnscts: Sequence[QNSector], direction: str = OUT):
        if direction not in (IN, OUT):
            raise ValueError(f"Error: Illegal index direction '{direction}'!")
        # Copies, so that sector dims mutated by the caller later do not leak in.
        self.qnscts: List[QNSector] = [QNSector(qnsct.qn, qnsct.dim) for qnsct in qnscts]
        self.direction = direction
        self.dim = sum(qnsct.dim for qnsct in self.qnscts)

    def inverse(self):
        """Returns a copy of this index with the flow direction flipped."""
        return Index(self.qnscts, IN if self.direction == OUT else OUT)

    def coor_offset_and_qnsct(self, coor: int) -> Tuple[int, QNSector]:
        """Locates a coordinate inside the sector structure.

        Args:
            coor (int): A coordinate in ``[0, dim)``.

        Returns:
            tuple[int, QNSector]: The offset of `coor` inside its sector and
                the sector itself.
        """
        assert 0 <= coor < self.dim, f"Error: Coordinate {coor} out of range {self.dim}."
        offset = coor
        for qnsct in self.qnscts:
            if offset < qnsct.dim:
                return offset, qnsct
            offset -= qnsct.dim
        raise AssertionError("unreachable")

    def qn_at(self, coor: int) -> QN:
        """Returns the quantum number of the basis state at `coor`."""
        return self.coor_offset_and_qnsct(coor)[1].qn

    def qn_list(self) -> List[QN]:
        """Returns the quantum number of every basis state in order."""
        qns = []
        for qnsct in self.qnscts:
            qns.extend([qnsct.qn] * qnsct.dim)
        return qns

    def __eq__(self, other):
        if not isinstance(other, Index):
            return NotImplemented
        return self.direction == other.direction and self.qnscts == other.qnscts

    def __hash__(self):
        return hash((self.direction, tuple(self.qnscts)))

    def __repr__(self):
        return f"Index({self.qnscts!r}, {self.direction})"
