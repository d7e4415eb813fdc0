from .heisenberg_1d_mpo_builder import Heisenberg1DMPOBuilder
from .tj_model_mpo_builder import TJModelMPOBuilder
from .mpo_to_torch import to_uniform_mpo_legs, build_mpo_torch, mpo_to_full_operator
from .auto_mpo import (
    FSM,
    MPOGenerator,
    SiteVec,
    generate_mpo_spin_operators,
    generate_mpo_hardcore_boson_operators,
    spin_site_index,
    hardcore_boson_site_index,
    build_site_operator,
)

__all__ = [
    'Heisenberg1DMPOBuilder',
    'TJModelMPOBuilder',
    'to_uniform_mpo_legs',
    'build_mpo_torch',
    'mpo_to_full_operator',
    'FSM',
    'MPOGenerator',
    'SiteVec',
    'generate_mpo_spin_operators',
    'generate_mpo_hardcore_boson_operators',
    'spin_site_index',
    'hardcore_boson_site_index',
    'build_site_operator',
]
