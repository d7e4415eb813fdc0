import pytest
import numpy as np
from ...symmetry import QN, QNSector, Index, QNTensor
from .op_repr import OpRepr, SparOpReprMat


@pytest.fixture
def site_index() -> Index:
    return Index([QNSector(QN([('Sz', 1)]), 1), QNSector(QN([('Sz', -1)]), 1)])


def make_op(site_index: Index, matrix) -> QNTensor:
    return QNTensor([site_index.inverse(), site_index], data=np.asarray(matrix, dtype=float).T)


def test_op_repr_equality_and_sum():
    a = OpRepr(3, 1)
    b = OpRepr(3, 2)
    assert a == OpRepr(3, 1)
    assert a != b
    assert a + b == b + a
    assert (a + b).op_label_list() == [3, 3]
    assert (a + b).coef_label_list() == [1, 2]
    assert (a + b).strip_coef() == (3,)
    assert OpRepr(5).has_trivial_coef()
    assert not a.has_trivial_coef()
    assert len({OpRepr(1), OpRepr(1), OpRepr(2)}) == 2


def test_op_repr_realize(site_index):
    identity = make_op(site_index, np.eye(2))
    s_z = make_op(site_index, np.diag([0.5, -0.5]))
    coefs = [1.0, 2.0, -4.0]
    ops = [identity, s_z]
    realized = (OpRepr(1, 1) + OpRepr(1, 2) + OpRepr(0)).realize(coefs, ops)
    expected = -2.0 * s_z + identity
    assert np.allclose(realized.data, expected.data)


def test_spar_op_repr_mat_transpose():
    mat = SparOpReprMat(2, 3)
    mat[0, 0] = OpRepr(1)
    mat[0, 2] = OpRepr(2)
    mat[1, 1] = OpRepr(3)
    assert mat(1, 0) is None
    assert mat.nonzero_count() == 3

    mat.transpose_cols([2, 0, 1])
    assert mat(0, 0) == OpRepr(2)
    assert mat(0, 1) == OpRepr(1)
    assert mat(1, 2) == OpRepr(3)

    mat.transpose_rows([1])
    assert mat.rows == 1
    assert mat(0, 2) == OpRepr(3)
    assert mat.nonzero_count() == 1
    assert mat.to_symbolic() == [['0', '0', 'c0*O3']]


def test_spar_op_repr_mat_add_elem():
    mat = SparOpReprMat(1, 1)
    mat.add_elem(0, 0, OpRepr(1, 1))
    mat.add_elem(0, 0, OpRepr(1, 2))
    assert mat(0, 0) == OpRepr.from_terms([(1, 1), (2, 1)])
    with pytest.raises(AssertionError):
        mat[1, 0] = OpRepr(1)
