from .symmetry import (
    QN,
    QNSector,
    Index,
    IN,
    OUT,
    QNTensor,
)
from .mpo import (
    MPOGenerator,
    SiteVec,
    FSM,
    Heisenberg1DMPOBuilder,
    TJModelMPOBuilder,
    to_uniform_mpo_legs,
    build_mpo_torch,
    mpo_to_full_operator,
    generate_mpo_spin_operators,
    generate_mpo_hardcore_boson_operators,
    spin_site_index,
    hardcore_boson_site_index,
    build_site_operator,
)

__all__ = [
    # symmetry
    "QN",
    "QNSector",
    "Index",
    "IN",
    "OUT",
    "QNTensor",
    # generator
    "MPOGenerator",
    "SiteVec",
    "FSM",
    # builders
    "Heisenberg1DMPOBuilder",
    "TJModelMPOBuilder",
    # conversion
    "to_uniform_mpo_legs",
    "build_mpo_torch",
    "mpo_to_full_operator",
    # operators
    "generate_mpo_spin_operators",
    "generate_mpo_hardcore_boson_operators",
    "spin_site_index",
    "hardcore_boson_site_index",
    "build_site_operator",
]
