"""Abelian quantum numbers and quantum-number sectors."""

from typing import Iterable, Tuple


class QN:
    """A conserved quantity valued in Z^k with named components.

    Components are stored in the order given, e.g. ``QN([('N', 1), ('Sz', -1)])``.
    Two quantum numbers can only be combined when their component names agree.
    """

    def __init__(self, name_vals: Iterable[Tuple[str, int]] = ()):
        name_vals = list(name_vals)
        self.names = tuple(name for name, _ in name_vals)
        self.vals = tuple(int(val) for _, val in name_vals)
        if len(set(self.names)) != len(self.names):
            raise ValueError(f"Duplicated quantum number names in {self.names}.")

    def _check_compatible(self, other):
        assert isinstance(other, QN), f"Cannot combine QN with {type(other).__name__}."
        assert self.names == other.names, \
            f"Error: Incompatible quantum numbers {self.names} and {other.names}."

    def __add__(self, other):
        self._check_compatible(other)
        return QN(zip(self.names, (a + b for a, b in zip(self.vals, other.vals))))

    def __sub__(self, other):
        self._check_compatible(other)
        return QN(zip(self.names, (a - b for a, b in zip(self.vals, other.vals))))

    def __neg__(self):
        return QN(zip(self.names, (-a for a in self.vals)))

    def __eq__(self, other):
        if not isinstance(other, QN):
            return NotImplemented
        return self.names == other.names and self.vals == other.vals

    def __hash__(self):
        return hash((self.names, self.vals))

    def __repr__(self):
        inner = ', '.join(f"{name}={val}" for name, val in zip(self.names, self.vals))
        return f"QN({inner})"

    def zero(self):
        """Returns the identity element of the group this QN belongs to."""
        return QN((name, 0) for name in self.names)


class QNSector:
    """A block of `dim` basis states sharing the quantum number `qn`."""

    def __init__(self, qn: QN, dim: int):
        self.qn = qn
        self.dim = dim

    def __eq__(self, other):
        if not isinstance(other, QNSector):
            return NotImplemented
        return self.qn == other.qn and self.dim == other.dim

    def __hash__(self):
        return hash((self.qn, self.dim))

    def __repr__(self):
        return f"QNSector({self.qn!r}, {self.dim})"
