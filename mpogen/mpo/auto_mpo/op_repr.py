#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Label-level representations of the operators on FSM edges.

An `OpRepr` is what one FSM edge carries for one site: a sum of
``coefficient * operator`` terms expressed through interned labels. A
`SparOpReprMat` collects all edges between two adjacent FSM layers, i.e. the
label skeleton of one MPO tensor.
"""

from typing import Dict, List, Optional, Sequence, Tuple

# Label 0 of the coefficient convertor is always the number 1.
ID_COEF_LABEL = 0


class OpRepr:
    """A sum of (coefficient label, operator label) terms on one site.

    The terms are kept sorted so that equal sums compare and hash equal.
    Repeated terms are kept: ``c*A + c*A`` realizes to ``2*c*A``.
    """

    __slots__ = ('terms',)

    def __init__(self, op_label: int, coef_label: int = ID_COEF_LABEL):
        self.terms: Tuple[Tuple[int, int], ...] = ((coef_label, op_label),)

    @classmethod
    def from_terms(cls, terms: Sequence[Tuple[int, int]]):
        """Builds an OpRepr from several (coef_label, op_label) pairs."""
        assert len(terms) > 0, "Error: An OpRepr needs at least one term."
        op_repr = cls.__new__(cls)
        op_repr.terms = tuple(sorted(terms))
        return op_repr

    def op_label_list(self) -> List[int]:
        return [op_label for _, op_label in self.terms]

    def coef_label_list(self) -> List[int]:
        return [coef_label for coef_label, _ in self.terms]

    def has_trivial_coef(self) -> bool:
        """True if this is a single operator with coefficient 1."""
        return len(self.terms) == 1 and self.terms[0][0] == ID_COEF_LABEL

    def strip_coef(self):
        """Returns the operator labels alone, used to recognise like terms."""
        return tuple(sorted(set(self.op_label_list())))

    def realize(self, label_coef_mapping: Sequence, label_op_mapping: Sequence):
        """Resolves the labels and returns the concrete operator sum.

        Args:
            label_coef_mapping (Sequence): Coefficients indexed by label.
            label_op_mapping (Sequence[QNTensor]): Operators indexed by label.

        Returns:
            QNTensor: The sum of coefficient times operator over all terms.
        """
        realized = None
        for coef_label, op_label in self.terms:
            term = label_coef_mapping[coef_label] * label_op_mapping[op_label]
            realized = term if realized is None else realized + term
        return realized

    def __add__(self, other):
        return OpRepr.from_terms(self.terms + other.terms)

    def __eq__(self, other):
        if not isinstance(other, OpRepr):
            return NotImplemented
        return self.terms == other.terms

    def __hash__(self):
        return hash(self.terms)

    def __repr__(self):
        return ' + '.join(f"c{coef_label}*O{op_label}" for coef_label, op_label in self.terms)


class SparOpReprMat:
    """A sparse rows x cols matrix of OpRepr.

    Rows index the FSM nodes of layer ``i`` (left virtual bond states) and
    columns the nodes of layer ``i + 1`` (right virtual bond states). Missing
    entries read as None.
    """

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        self._elems: Dict[Tuple[int, int], OpRepr] = {}

    def __call__(self, x: int, y: int) -> Optional[OpRepr]:
        return self._elems.get((x, y))

    def __getitem__(self, coors: Tuple[int, int]) -> Optional[OpRepr]:
        return self._elems.get(tuple(coors))

    def __setitem__(self, coors: Tuple[int, int], op_repr: OpRepr):
        x, y = coors
        assert 0 <= x < self.rows and 0 <= y < self.cols, \
            f"Error: Element ({x}, {y}) out of a {self.rows}x{self.cols} matrix."
        self._elems[(x, y)] = op_repr

    def add_elem(self, x: int, y: int, op_repr: OpRepr):
        """Accumulates `op_repr` into element (x, y)."""
        existing = self(x, y)
        self[x, y] = op_repr if existing is None else existing + op_repr

    def nonzero_count(self) -> int:
        return len(self._elems)

    def items(self):
        """Yields ((x, y), op_repr) for every stored element, row major."""
        for coors in sorted(self._elems):
            yield coors, self._elems[coors]

    def transpose_rows(self, transposed_idxs: Sequence[int]):
        """Reorders the rows in place: new row k is old row ``transposed_idxs[k]``.

        Rows not listed in `transposed_idxs` are dropped.
        """
        new_pos = {old: new for new, old in enumerate(transposed_idxs)}
        assert len(new_pos) == len(transposed_idxs), "Error: Repeated row in permutation."
        self._elems = {(new_pos[x], y): elem for (x, y), elem in self._elems.items() if x in new_pos}
        self.rows = len(transposed_idxs)

    def transpose_cols(self, transposed_idxs: Sequence[int]):
        """Reorders the columns in place: new column k is old column ``transposed_idxs[k]``.

        Columns not listed in `transposed_idxs` are dropped.
        """
        new_pos = {old: new for new, old in enumerate(transposed_idxs)}
        assert len(new_pos) == len(transposed_idxs), "Error: Repeated column in permutation."
        self._elems = {(x, new_pos[y]): elem for (x, y), elem in self._elems.items() if y in new_pos}
        self.cols = len(transposed_idxs)

    def to_symbolic(self) -> List[List[str]]:
        """Returns a nested list of strings, '0' for missing elements."""
        symbol = [['0' for _ in range(self.cols)] for _ in range(self.rows)]
        for (x, y), op_repr in self._elems.items():
            symbol[x][y] = repr(op_repr)
        return symbol
