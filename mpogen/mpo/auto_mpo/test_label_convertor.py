import pytest
import numpy as np
from ...symmetry import QN, QNSector, Index, QNTensor
from .label_convertor import LabelConvertor


@pytest.fixture
def site_index() -> Index:
    return Index([QNSector(QN([('Sz', 1)]), 1), QNSector(QN([('Sz', -1)]), 1)])

def make_op(site_index: Index, matrix) -> QNTensor:
    return QNTensor([site_index.inverse(), site_index], data=np.asarray(matrix, dtype=float).T)

def test_labels_are_dense_and_idempotent():
    convertor = LabelConvertor()
    assert convertor.convert('a') == 0
    assert convertor.convert('b') == 1
    assert convertor.convert('a') == 0
    assert convertor.convert('c') == 2
    assert convertor.get_label_obj_mapping() == ['a', 'b', 'c']
    assert len(convertor) == 3

def test_first_object_takes_label_zero():
    convertor = LabelConvertor(np.float64(1.0))
    assert convertor.convert(1) == 0
    assert convertor.convert(1.0) == 0
    assert convertor.convert(-0.5) == 1
    assert convertor.convert(2 + 0j) == 2
    assert convertor.convert(2.0) == 2

def test_tensors_intern_by_value(site_index):
    convertor = LabelConvertor(make_op(site_index, np.eye(2)))
    s_z = make_op(site_index, np.diag([0.5, -0.5]))
    assert convertor.convert(s_z) == 1
    assert convertor.convert(make_op(site_index, np.diag([0.5, -0.5]))) == 1
    assert convertor.convert(make_op(site_index, np.eye(2))) == 0
    # Same elements on different legs are different operators.
    other_index = Index([QNSector(QN([('Sz', 0)]), 2)])
    assert convertor.convert(make_op(other_index, np.eye(2))) == 2

def test_mapping_is_a_copy():
    convertor = LabelConvertor('x')
    mapping = convertor.get_label_obj_mapping()
    mapping.append('y')
    assert len(convertor) == 1



def test_stored_objects_do_not_follow_caller_changes(site_index):
    convertor = LabelConvertor()
    s_z = make_op(site_index, np.diag([0.5, -0.5]))
    assert convertor.convert(s_z) == 0
    s_z[0, 0] = 7.0
    assert convertor.get_label_obj_mapping()[0] == make_op(site_index, np.diag([0.5, -0.5]))
    assert convertor.convert(s_z) == 1
