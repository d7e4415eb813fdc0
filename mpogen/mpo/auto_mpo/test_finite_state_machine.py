import logging
import pytest
from .finite_state_machine import FSM
from .op_repr import OpRepr

ID = 0


def nonzero_elems(mat):
    return [elem for _, elem in mat.items()]


@pytest.fixture
def fsm_two_sites() -> FSM:
    fsm = FSM(2)
    fsm.replace_id_op_labels([ID, ID])
    return fsm


def test_single_two_site_term(fsm_two_sites):
    fsm_two_sites.add_path(0, 1, [OpRepr(1, 1), OpRepr(2)])
    mats = fsm_two_sites.gen_compressed_mat_repr()
    assert fsm_two_sites.bond_dimensions() == [1, 1, 1]
    assert len(mats) == 2
    assert (mats[0].rows, mats[0].cols) == (1, 1)
    assert mats[0](0, 0) == OpRepr(1, 1)
    assert mats[1](0, 0) == OpRepr(2)


def test_distinct_terms_open_new_states(fsm_two_sites):
    fsm_two_sites.add_path(0, 1, [OpRepr(1, 1), OpRepr(2)])
    fsm_two_sites.add_path(0, 1, [OpRepr(3, 2), OpRepr(4)])
    mats = fsm_two_sites.gen_compressed_mat_repr()
    assert fsm_two_sites.bond_dimensions() == [1, 2, 1]
    assert sorted(nonzero_elems(mats[0]), key=repr) == [OpRepr(1, 1), OpRepr(3, 2)]
    assert sorted(nonzero_elems(mats[1]), key=repr) == [OpRepr(2), OpRepr(4)]


def test_like_terms_are_combined(caplog):
    fsm = FSM(3)
    fsm.replace_id_op_labels([ID, ID, ID])
    fsm.add_path(0, 1, [OpRepr(1, 1), OpRepr(2)])
    with caplog.at_level(logging.DEBUG):
        fsm.add_path(0, 1, [OpRepr(1, 2), OpRepr(2)])
    assert fsm.path_num == 1
    assert "like term" in caplog.text

    mats = fsm.gen_compressed_mat_repr()
    assert fsm.bond_dimensions() == [1, 1, 1, 1]
    assert mats[0](0, 0) == OpRepr.from_terms([(1, 1), (2, 1)])
    assert mats[1](0, 0) == OpRepr(2)
    assert mats[2](0, 0) == OpRepr(ID)


def test_identity_padding_outside_path():
    fsm = FSM(4)
    fsm.replace_id_op_labels([ID, ID, ID, ID])
    fsm.add_path(1, 2, [OpRepr(5, 1), OpRepr(6)])
    mats = fsm.gen_compressed_mat_repr()
    assert fsm.bond_dimensions() == [1, 1, 1, 1, 1]
    assert [mat(0, 0) for mat in mats] == [OpRepr(ID), OpRepr(5, 1), OpRepr(6), OpRepr(ID)]


def test_shared_tails_are_merged():
    # A_0 B_1 C_2 + D_0 B_1 C_2: the two paths share the edges on sites 1 and 2.
    fsm = FSM(3)
    fsm.replace_id_op_labels([ID, ID, ID])
    fsm.add_path(0, 2, [OpRepr(1, 1), OpRepr(2), OpRepr(3)])
    fsm.add_path(0, 2, [OpRepr(4, 1), OpRepr(2), OpRepr(3)])
    mats = fsm.gen_compressed_mat_repr()
    assert fsm.bond_dimensions() == [1, 2, 1, 1]
    assert mats[1].nonzero_count() == 2
    assert mats[2].nonzero_count() == 1


def test_symbolic_mpo(fsm_two_sites, capsys):
    fsm_two_sites.add_path(0, 0, [OpRepr(1, 1)])
    fsm_two_sites.add_path(1, 1, [OpRepr(1, 1)])
    with pytest.raises(AssertionError):
        fsm_two_sites.to_symbolic_mpo()
    fsm_two_sites.gen_compressed_mat_repr()
    symbols = fsm_two_sites.to_symbolic_mpo()
    assert len(symbols) == 2
    assert sum(s != '0' for row in symbols[0] for s in row) == 2
    fsm_two_sites.print_bond_dimensions()
    assert "Bond Dimensions" in capsys.readouterr().out


def test_contract_violations(fsm_two_sites):
    with pytest.raises(AssertionError):
        fsm_two_sites.add_path(0, 2, [OpRepr(1), OpRepr(1), OpRepr(1)])
    with pytest.raises(AssertionError):
        fsm_two_sites.add_path(0, 1, [OpRepr(1)])
    with pytest.raises(AssertionError):
        fsm_two_sites.add_path(0, 1, [OpRepr(1, 1), OpRepr(2, 3)])
    with pytest.raises(AssertionError):
        fsm_two_sites.gen_compressed_mat_repr()


def test_generate_once(fsm_two_sites):
    fsm_two_sites.add_path(0, 1, [OpRepr(1, 1), OpRepr(2)])
    fsm_two_sites.gen_compressed_mat_repr()
    with pytest.raises(AssertionError):
        fsm_two_sites.gen_compressed_mat_repr()
    with pytest.raises(AssertionError):
        fsm_two_sites.add_path(0, 1, [OpRepr(1, 1), OpRepr(2)])
