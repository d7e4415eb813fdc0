import pytest
import numpy as np
from .qn import QN, QNSector
from .index import Index, IN, OUT
from .tensor import QNTensor


def sz(val: int) -> QN:
    return QN([('Sz', val)])


@pytest.fixture
def spin_half_index() -> Index:
    """The spin-1/2 basis {up, down} labelled by 2*Sz."""
    return Index([QNSector(sz(1), 1), QNSector(sz(-1), 1)], OUT)


def test_qn_arithmetic():
    a = QN([('N', 1), ('Sz', -1)])
    b = QN([('N', 2), ('Sz', 3)])
    assert a + b == QN([('N', 3), ('Sz', 2)])
    assert b - a == QN([('N', 1), ('Sz', 4)])
    assert -a == QN([('N', -1), ('Sz', 1)])
    assert a.zero() == QN([('N', 0), ('Sz', 0)])
    assert a + a.zero() == a
    assert hash(a + b) == hash(QN([('N', 3), ('Sz', 2)]))


def test_qn_incompatible_names():
    with pytest.raises(AssertionError):
        _ = QN([('N', 1)]) + QN([('Sz', 1)])
    with pytest.raises(ValueError):
        QN([('N', 1), ('N', 2)])


def test_index_coordinates():
    index = Index([QNSector(sz(0), 2), QNSector(sz(2), 1), QNSector(sz(-2), 3)])
    assert index.dim == 6
    assert index.direction == OUT
    offset, qnsct = index.coor_offset_and_qnsct(1)
    assert offset == 1 and qnsct.qn == sz(0)
    offset, qnsct = index.coor_offset_and_qnsct(2)
    assert offset == 0 and qnsct.qn == sz(2)
    offset, qnsct = index.coor_offset_and_qnsct(5)
    assert offset == 2 and qnsct.qn == sz(-2)
    assert index.qn_list() == [sz(0), sz(0), sz(2), sz(-2), sz(-2), sz(-2)]
    assert index.qn_at(2) == sz(2)
    assert index.qn_at(4) == sz(-2)
    with pytest.raises(AssertionError):
        index.coor_offset_and_qnsct(6)


def test_index_inverse(spin_half_index):
    inverse = spin_half_index.inverse()
    assert inverse.direction == IN
    assert inverse.qnscts == spin_half_index.qnscts
    assert inverse != spin_half_index
    assert inverse.inverse() == spin_half_index


def test_index_copies_sectors():
    qnsct = QNSector(sz(0), 1)
    index = Index([qnsct])
    qnsct.dim = 5
    assert index.dim == 1
    assert index.qnscts[0].dim == 1


def test_index_illegal_direction():
    with pytest.raises(ValueError):
        Index([QNSector(sz(0), 1)], 'SIDEWAYS')


def test_tensor_div(spin_half_index):
    # S^+ maps down to up; element (in, out) = (down, up).
    s_plus = QNTensor([spin_half_index.inverse(), spin_half_index])
    s_plus[1, 0] = 1.0
    assert s_plus.div() == sz(2)

    s_z = QNTensor([spin_half_index.inverse(), spin_half_index])
    s_z[0, 0] = 0.5
    s_z[1, 1] = -0.5
    assert s_z.div() == sz(0)

    assert QNTensor([spin_half_index.inverse(), spin_half_index]).div() is None


def test_tensor_div_not_symmetric(spin_half_index):
    mixed = QNTensor([spin_half_index.inverse(), spin_half_index])
    mixed[0, 0] = 1.0
    mixed[1, 0] = 1.0
    with pytest.raises(ValueError):
        mixed.div()


def test_tensor_algebra(spin_half_index):
    indexes = [spin_half_index.inverse(), spin_half_index]
    a = QNTensor(indexes, data=np.diag([1.0, 2.0]))
    b = QNTensor(indexes, data=np.diag([0.5, 0.5]))
    assert a + b == QNTensor(indexes, data=np.diag([1.5, 2.5]))
    assert 2.0 * a == QNTensor(indexes, data=np.diag([2.0, 4.0]))
    assert np.float64(2.0) * a == a * 2.0
    assert (1j * a).dtype == np.complex128
    assert list(a.nonzero_coors()) == [(0, 0), (1, 1)]
    assert a != b


def test_tensor_data_is_copied(spin_half_index):
    data = np.eye(2)
    a = QNTensor([spin_half_index.inverse(), spin_half_index], data=data)
    data[0, 0] = 7.0
    assert a[0, 0] == 1.0
    c = a.copy()
    c[1, 1] = 3.0
    assert a[1, 1] == 1.0
