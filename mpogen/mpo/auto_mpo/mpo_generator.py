#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Quantum-number conserving MPO generation.

`MPOGenerator` collects the terms of an operator sum, e.g. a Hamiltonian
such as ``-t * c^dag_i F_{i+1} ... F_{j-1} c_j``, feeds them to a
Finite-State Machine, and turns the compressed machine into a chain of
`QNTensor` objects. The virtual bonds of the chain carry quantum-number
sectors: the states of each bond are grouped by quantum number so that
every MPO tensor has the fixed divergence ``zero_div``.

Generation runs site by site from left to right:

1. the columns of the site's label matrix are grouped by the quantum number
   they must carry (`sort_spar_op_repr_mat_cols_by_qn`), which defines the
   right virtual bond;
2. the same permutation is applied to the rows of the next site;
3. the labels are realized into numbers and written into the site tensor
   (`head_mpo_ten_repr_to_mpo_ten`, `cent_mpo_ten_repr_to_mpo_ten`,
   `tail_mpo_ten_repr_to_mpo_ten`).

Operator tensors follow the leg order ``(pb_in, pb_out)``: element
``(i, j)`` holds ``<j|O|i>``.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ...symmetry import Index, QN, QNSector, QNTensor, OUT, SUPPORTED_DTYPES
from .finite_state_machine import FSM
from .label_convertor import LabelConvertor
from .op_repr import OpRepr, SparOpReprMat

logger = logging.getLogger(__name__)


class SiteVec:
    """The local Hilbert spaces of all sites of a chain.

    Attributes:
        sites (list[Index]): The outgoing physical index of every site.
        size (int): The number of sites.
    """

    def __init__(self, sites: Sequence[Index]):
        self.sites = list(sites)
        self.size = len(self.sites)
        for site in self.sites:
            if site.direction != OUT:
                raise ValueError("Physical site indexes must have the OUT direction.")

    @classmethod
    def uniform(cls, site_num: int, site_index: Index):
        """Builds a chain of `site_num` identical sites."""
        return cls([site_index] * site_num)


class MPOGenerator:
    """Generates an MPO with quantum-number symmetric tensors.

    Usage::

        generator = MPOGenerator(SiteVec.uniform(n, pb_out), zero_div)
        for i in range(n - 1):
            generator.add_few_body_term(0.5, sp[i], i, sm[i + 1], i + 1)
        mpo = generator.gen()

    Attributes:
        N (int): The number of sites.
        zero_div (QN): The divergence of every MPO tensor.
        dtype (np.dtype): The element type of the MPO, float64 or complex128.
        fsm (FSM): The machine collecting the terms.
        pb_out_vector (list[Index]): Outgoing physical index per site.
        pb_in_vector (list[Index]): Incoming physical index per site.
        id_op_vector (list[QNTensor]): Identity operator per site.
        bond_dims (list[int] | None): Virtual bond dimensions, filled by `gen`.
    """

    def __init__(self, site_vec, zero_div: QN, dtype=np.float64):
        """Initializes the generator.

        Args:
            site_vec (SiteVec | Sequence[Index]): The local Hilbert spaces.
            zero_div (QN): The zero of the conserved quantity, used as the
                divergence of the MPO.
            dtype: ``np.float64`` or ``np.complex128``.
        """
        if not isinstance(site_vec, SiteVec):
            site_vec = SiteVec(site_vec)
        dtype = np.dtype(dtype)
        if dtype not in SUPPORTED_DTYPES:
            raise ValueError(f"Error: Unsupported MPO element type '{dtype}'!")
        assert site_vec.size >= 2, "Error: MPO generation needs at least two sites."

        self.N = site_vec.size
        self.zero_div = zero_div
        self.dtype = dtype
        self.fsm = FSM(self.N)

        self.pb_out_vector = list(site_vec.sites)
        self.pb_in_vector = [pb_out.inverse() for pb_out in self.pb_out_vector]
        self.id_op_vector = [self._gen_id_op_ten(pb_out) for pb_out in self.pb_out_vector]

        self.op_label_convertor = LabelConvertor(self.id_op_vector[0])
        id_op_label_vector = [self.op_label_convertor.convert(id_op) for id_op in self.id_op_vector]
        self.fsm.replace_id_op_labels(id_op_label_vector)

        self.coef_label_convertor = LabelConvertor(self.dtype.type(1))

        self.bond_dims = None
        self._generated = False

    def _gen_id_op_ten(self, pb_out: Index) -> QNTensor:
        id_op = QNTensor([pb_out.inverse(), pb_out], dtype=self.dtype)
        for i in range(pb_out.dim):
            id_op[i, i] = 1
        return id_op

    def _check_local_op(self, local_op: QNTensor, site: int):
        assert isinstance(local_op, QNTensor), "Error: Local operators must be QNTensor objects."
        assert local_op.indexes == [self.pb_in_vector[site], self.pb_out_vector[site]], \
            f"Error: Operator legs do not match the physical indexes of site {site}."
        assert np.can_cast(local_op.dtype, self.dtype), \
            f"Error: Operator of type {local_op.dtype} cannot be stored in a {self.dtype} MPO."

    def add_term(self, coef, local_ops: Sequence[QNTensor], local_ops_idxs: Sequence[int]):
        """Adds a many-body term given by its operators on every nontrivial site.

        This is the most generic way to add a term. Sites between the first
        and the last operator which are not listed act with identity.

        Args:
            coef: The coefficient of the term. A zero coefficient is ignored.
            local_ops (Sequence[QNTensor]): The local operators of the term.
            local_ops_idxs (Sequence[int]): Their site indexes, strictly
                ascending.
        """
        local_ops_idxs = list(local_ops_idxs)
        assert len(local_ops) == len(local_ops_idxs), \
            "Error: Unmatched length of local operators and site lists."
        assert len(local_ops) > 0, "Error: A term needs at least one operator."
        assert all(a < b for a, b in zip(local_ops_idxs, local_ops_idxs[1:])), \
            "Error: Site indexes must be strictly ascending."
        assert 0 <= local_ops_idxs[0] and local_ops_idxs[-1] < self.N, \
            f"Error: Site index {local_ops_idxs[-1]} exceeds system size {self.N}."
        for local_op, idx in zip(local_ops, local_ops_idxs):
            self._check_local_op(local_op, idx)
        assert np.can_cast(np.result_type(coef), self.dtype), \
            f"Error: Coefficient {coef} cannot be stored in a {self.dtype} MPO."
        if coef == 0:
            return

        coef_label = self.coef_label_convertor.convert(coef)
        ntrvl_ops_idxs_head = local_ops_idxs[0]
        ntrvl_ops_idxs_tail = local_ops_idxs[-1]
        site_ops = dict(zip(local_ops_idxs, local_ops))
        ntrvl_ops_reprs = []
        for i in range(ntrvl_ops_idxs_head, ntrvl_ops_idxs_tail + 1):
            local_op = site_ops.get(i)
            if local_op is None:
                ntrvl_ops_reprs.append(OpRepr(self.op_label_convertor.convert(self.id_op_vector[i])))
                continue
            op_label = self.op_label_convertor.convert(local_op)
            if i == ntrvl_ops_idxs_head:
                ntrvl_ops_reprs.append(OpRepr(op_label, coef_label))
            else:
                ntrvl_ops_reprs.append(OpRepr(op_label))
        assert len(ntrvl_ops_reprs) == ntrvl_ops_idxs_tail - ntrvl_ops_idxs_head + 1

        self.fsm.add_path(ntrvl_ops_idxs_head, ntrvl_ops_idxs_tail, ntrvl_ops_reprs)

    def add_term_with_insertions(
            self,
            coef,
            phys_ops: Sequence[QNTensor],
            phys_ops_idxs: Sequence[int],
            inst_ops: Sequence[QNTensor],
            inst_ops_idxs_set: Optional[Sequence[Sequence[int]]] = None):
        """Adds a term built from physical operators joined by insertion operators.

        `inst_ops[k]` fills the gap between `phys_ops[k]` and `phys_ops[k+1]`,
        e.g. a Jordan-Wigner string between a creation and an annihilation
        operator. An extra last insertion operator forms a tail string from
        the last physical operator to the end of the chain.

        Args:
            coef: The coefficient of the term.
            phys_ops (Sequence[QNTensor]): The physical operators.
            phys_ops_idxs (Sequence[int]): Their site indexes, strictly
                ascending.
            inst_ops (Sequence[QNTensor]): One insertion operator per gap,
                plus optionally one for the tail string.
            inst_ops_idxs_set (Sequence[Sequence[int]], optional): Explicit
                sites of each insertion operator. If None, every site of the
                gap (or tail) receives it.
        """
        assert len(phys_ops) >= 1, "Error: A term needs at least one physical operator."
        assert len(phys_ops) == len(phys_ops_idxs), \
            "Error: Unmatched length of physical operators and site lists."
        assert len(inst_ops) in (len(phys_ops) - 1, len(phys_ops)), \
            "Error: Unmatched length of inserted operators list."
        if inst_ops_idxs_set is not None:
            assert len(inst_ops_idxs_set) == len(inst_ops), \
                "Error: Unmatched length of inserted operators and their site lists."

        local_ops = []
        local_ops_idxs = []
        for i in range(len(phys_ops) - 1):
            local_ops.append(phys_ops[i])
            local_ops_idxs.append(phys_ops_idxs[i])
            if inst_ops_idxs_set is None:
                inst_sites = range(phys_ops_idxs[i] + 1, phys_ops_idxs[i + 1])
            else:
                inst_sites = inst_ops_idxs_set[i]
            for j in inst_sites:
                local_ops.append(inst_ops[i])
                local_ops_idxs.append(j)

        local_ops.append(phys_ops[-1])
        local_ops_idxs.append(phys_ops_idxs[-1])
        if len(inst_ops) == len(phys_ops):
            # The tail string starts on the last physical site, which is
            # already occupied by the physical operator.
            if inst_ops_idxs_set is None:
                inst_sites = range(phys_ops_idxs[-1] + 1, self.N)
            else:
                inst_sites = inst_ops_idxs_set[-1]
            for j in inst_sites:
                local_ops.append(inst_ops[-1])
                local_ops_idxs.append(j)

        self.add_term(coef, local_ops, local_ops_idxs)

    def add_few_body_term(
            self,
            coef,
            op1: QNTensor,
            op1_idx: int,
            op2: Optional[QNTensor] = None,
            op2_idx: Optional[int] = None,
            inst_op: Optional[QNTensor] = None,
            inst_op_idxs: Optional[Sequence[int]] = None):
        """Adds a one-body or two-body term.

        Args:
            coef: The coefficient of the term.
            op1 (QNTensor): The first operator.
            op1_idx (int): The site of the first operator.
            op2 (QNTensor, optional): The second operator. None for a
                one-body term.
            op2_idx (int, optional): The site of the second operator.
            inst_op (QNTensor, optional): An insertion operator between the
                two operators. None means identity.
            inst_op_idxs (Sequence[int], optional): Explicit sites of the
                insertion operator. None means the whole gap.
        """
        if op2 is None:
            assert op2_idx is None and inst_op is None and inst_op_idxs is None, \
                "Error: A one-body term takes neither a second site nor an insertion operator."
            self.add_term(coef, [op1], [op1_idx])
            return

        assert op2_idx is not None and op2_idx > op1_idx, \
            "Error: The second operator must sit to the right of the first one."
        if inst_op is None:
            assert inst_op_idxs is None, "Error: Insertion sites given without insertion operator."
            self.add_term(coef, [op1, op2], [op1_idx, op2_idx])
        elif inst_op_idxs is None:
            self.add_term_with_insertions(coef, [op1, op2], [op1_idx, op2_idx], [inst_op])
        else:
            self.add_term_with_insertions(
                coef, [op1, op2], [op1_idx, op2_idx], [inst_op], [list(inst_op_idxs)])

    def gen(self) -> List[QNTensor]:
        """Generates the MPO.

        Can only be called once per generator.

        Returns:
            list[QNTensor]: The site tensors. Site 0 has legs
                ``(pb_in, rvb, pb_out)``, the last site ``(pb_in, lvb, pb_out)``
                and every other site ``(lvb, pb_in, pb_out, rvb)``.
        """
        assert not self._generated, "Error: An MPOGenerator can only generate once."
        self._generated = True

        fsm_comp_mat_repr = self.fsm.gen_compressed_mat_repr()
        label_coef_mapping = self.coef_label_convertor.get_label_obj_mapping()
        label_op_mapping = self.op_label_convertor.get_label_obj_mapping()

        mpo = []
        bond_dims = [1]
        trans_vb = Index([QNSector(self.zero_div, 1)], OUT)
        transposed_idxs = None
        for i in range(self.N):
            op_repr_mat = fsm_comp_mat_repr[i]
            if i == 0:
                trans_vb, transposed_idxs = sort_spar_op_repr_mat_cols_by_qn(
                    op_repr_mat, trans_vb, label_op_mapping, self.zero_div, site=i)
                mpo.append(head_mpo_ten_repr_to_mpo_ten(
                    op_repr_mat, self.pb_in_vector[i], trans_vb, self.pb_out_vector[i],
                    label_coef_mapping, label_op_mapping, self.dtype))
                bond_dims.append(trans_vb.dim)
            elif i == self.N - 1:
                op_repr_mat.transpose_rows(transposed_idxs)
                lvb = trans_vb.inverse()
                mpo.append(tail_mpo_ten_repr_to_mpo_ten(
                    op_repr_mat, self.pb_in_vector[i], lvb, self.pb_out_vector[i],
                    label_coef_mapping, label_op_mapping, self.dtype))
            else:
                op_repr_mat.transpose_rows(transposed_idxs)
                lvb = trans_vb.inverse()
                trans_vb, transposed_idxs = sort_spar_op_repr_mat_cols_by_qn(
                    op_repr_mat, trans_vb, label_op_mapping, self.zero_div, site=i)
                mpo.append(cent_mpo_ten_repr_to_mpo_ten(
                    op_repr_mat, lvb, self.pb_in_vector[i], self.pb_out_vector[i], trans_vb,
                    label_coef_mapping, label_op_mapping, self.dtype))
                bond_dims.append(trans_vb.dim)
        bond_dims.append(1)

        self.bond_dims = bond_dims
        logger.info("MPO virtual bond dimensions: %s", ' '.join(map(str, bond_dims)))
        return mpo


def calc_tgt_rvb_qn(x: int, op_repr: OpRepr, op_div_of, lvb: Index, zero_div: QN) -> QN:
    """The right-bond quantum number an element at row `x` must lead to."""
    lvb_qn = lvb.qn_at(x)
    op0_div = op_div_of(op_repr.op_label_list()[0])
    return zero_div - op0_div + lvb_qn


def sort_spar_op_repr_mat_cols_by_qn(
        op_repr_mat: SparOpReprMat,
        trans_vb: Index,
        label_op_mapping: Sequence[QNTensor],
        zero_div: QN,
        site: Optional[int] = None) -> Tuple[Index, List[int]]:
    """Groups the columns of a label matrix by the quantum number they carry.

    Every nonzero element fixes the quantum number of its column through the
    divergence of its leading operator and the quantum number of its row.
    The sectors of the new bond are created in the order their quantum
    numbers first appear; a column joining an existing sector is placed
    right after the columns already in it. Empty columns are dropped.

    The columns of `op_repr_mat` are reordered in place.

    Args:
        op_repr_mat (SparOpReprMat): The label matrix of one site.
        trans_vb (Index): The right virtual bond of the previous site (a
            single `zero_div` state for the first site).
        label_op_mapping (Sequence[QNTensor]): Operators indexed by label.
        zero_div (QN): The divergence of the MPO tensors.
        site (int, optional): The site index, only used in error messages.

    Returns:
        tuple[Index, list[int]]: The new right virtual bond and the column
            permutation that was applied.

    Raises:
        ValueError: If two elements of one column require different quantum
            numbers, i.e. the terms do not conserve the quantum number.
    """
    lvb = trans_vb.inverse()

    op_divs = {}

    def op_div_of(op_label):
        if op_label not in op_divs:
            op_div = label_op_mapping[op_label].div()
            assert op_div is not None, f"Error: Operator with label {op_label} is zero."
            op_divs[op_label] = op_div
        return op_divs[op_label]

    cols_elems = [[] for _ in range(op_repr_mat.cols)]
    for (x, y), elem in op_repr_mat.items():
        cols_elems[y].append((x, elem))

    rvb_qnscts = []
    transposed_idxs = []
    for y, col_elems in enumerate(cols_elems):
        col_rvb_qn = None
        for x, elem in col_elems:
            rvb_qn = calc_tgt_rvb_qn(x, elem, op_div_of, lvb, zero_div)
            if col_rvb_qn is None:
                col_rvb_qn = rvb_qn
            elif rvb_qn != col_rvb_qn:
                raise ValueError(
                    f"Quantum number mismatch at site {site}, column {y}: {rvb_qn} != {col_rvb_qn}. "
                    f"The terms do not conserve the quantum number.")
        if col_rvb_qn is None:
            continue

        offset = 0
        for qnsct in rvb_qnscts:
            offset += qnsct.dim
            if qnsct.qn == col_rvb_qn:
                qnsct.dim += 1
                break
        else:
            rvb_qnscts.append(QNSector(col_rvb_qn, 1))
        transposed_idxs.insert(offset, y)

    op_repr_mat.transpose_cols(transposed_idxs)
    return Index(rvb_qnscts, OUT), transposed_idxs


def head_mpo_ten_repr_to_mpo_ten(
        op_repr_mat, pb_in, rvb, pb_out, label_coef_mapping, label_op_mapping, dtype) -> QNTensor:
    """Builds the first MPO tensor, legs ``(pb_in, rvb, pb_out)``, from row 0."""
    mpo_ten = QNTensor([pb_in, rvb, pb_out], dtype=dtype)
    for y in range(op_repr_mat.cols):
        elem = op_repr_mat(0, y)
        if elem is not None:
            op = elem.realize(label_coef_mapping, label_op_mapping)
            add_op_to_head_mpo_ten(mpo_ten, op, y)
    return mpo_ten


def tail_mpo_ten_repr_to_mpo_ten(
        op_repr_mat, pb_in, lvb, pb_out, label_coef_mapping, label_op_mapping, dtype) -> QNTensor:
    """Builds the last MPO tensor, legs ``(pb_in, lvb, pb_out)``, from column 0."""
    mpo_ten = QNTensor([pb_in, lvb, pb_out], dtype=dtype)
    for x in range(op_repr_mat.rows):
        elem = op_repr_mat(x, 0)
        if elem is not None:
            op = elem.realize(label_coef_mapping, label_op_mapping)
            add_op_to_tail_mpo_ten(mpo_ten, op, x)
    return mpo_ten


def cent_mpo_ten_repr_to_mpo_ten(
        op_repr_mat, lvb, pb_in, pb_out, rvb, label_coef_mapping, label_op_mapping, dtype) -> QNTensor:
    """Builds an interior MPO tensor, legs ``(lvb, pb_in, pb_out, rvb)``."""
    mpo_ten = QNTensor([lvb, pb_in, pb_out, rvb], dtype=dtype)
    for (x, y), elem in op_repr_mat.items():
        op = elem.realize(label_coef_mapping, label_op_mapping)
        add_op_to_cent_mpo_ten(mpo_ten, op, x, y)
    return mpo_ten


def add_op_to_head_mpo_ten(mpo_ten: QNTensor, rop: QNTensor, rvb_coor: int):
    for bpb_coor, tpb_coor in rop.nonzero_coors():
        mpo_ten[bpb_coor, rvb_coor, tpb_coor] = rop[bpb_coor, tpb_coor]


def add_op_to_tail_mpo_ten(mpo_ten: QNTensor, rop: QNTensor, lvb_coor: int):
    for bpb_coor, tpb_coor in rop.nonzero_coors():
        mpo_ten[bpb_coor, lvb_coor, tpb_coor] = rop[bpb_coor, tpb_coor]


def add_op_to_cent_mpo_ten(mpo_ten: QNTensor, rop: QNTensor, lvb_coor: int, rvb_coor: int):
    for bpb_coor, tpb_coor in rop.nonzero_coors():
        mpo_ten[lvb_coor, bpb_coor, tpb_coor, rvb_coor] = rop[bpb_coor, tpb_coor]
