from .finite_state_machine import FSM
from .label_convertor import LabelConvertor
from .op_repr import OpRepr, SparOpReprMat, ID_COEF_LABEL
from .mpo_generator import (
    MPOGenerator,
    SiteVec,
    calc_tgt_rvb_qn,
    sort_spar_op_repr_mat_cols_by_qn,
    head_mpo_ten_repr_to_mpo_ten,
    tail_mpo_ten_repr_to_mpo_ten,
    cent_mpo_ten_repr_to_mpo_ten,
)
from .operators_for_mpo import (
    generate_mpo_spin_operators,
    generate_mpo_hardcore_boson_operators,
    spin_site_index,
    hardcore_boson_site_index,
    build_site_operator,
)

__all__ = [
    'FSM',
    'LabelConvertor',
    'OpRepr',
    'SparOpReprMat',
    'ID_COEF_LABEL',
    'MPOGenerator',
    'SiteVec',
    'calc_tgt_rvb_qn',
    'sort_spar_op_repr_mat_cols_by_qn',
    'head_mpo_ten_repr_to_mpo_ten',
    'tail_mpo_ten_repr_to_mpo_ten',
    'cent_mpo_ten_repr_to_mpo_ten',
    'generate_mpo_spin_operators',
    'generate_mpo_hardcore_boson_operators',
    'spin_site_index',
    'hardcore_boson_site_index',
    'build_site_operator',
]
