from functools import reduce
import pytest
import torch
import numpy as np
from ..symmetry import QN
from .auto_mpo import generate_mpo_spin_operators, generate_mpo_hardcore_boson_operators
from .heisenberg_1d_mpo_builder import Heisenberg1DMPOBuilder
from .tj_model_mpo_builder import TJModelMPOBuilder
from .mpo_to_torch import mpo_to_full_operator, to_uniform_mpo_legs, build_mpo_torch


def site_op(op: np.ndarray, site: int, n: int) -> np.ndarray:
    """Embeds a local matrix into the n-site product space."""
    identity = np.identity(op.shape[0])
    return reduce(np.kron, [op if i == site else identity for i in range(n)])


def brute_force_xxz(n: int, jxy: float, jz: float, h: float, spin_dim: int) -> np.ndarray:
    ops = generate_mpo_spin_operators(spin_dim)
    sp = [site_op(ops['Sp'], i, n) for i in range(n)]
    sm = [site_op(ops['Sm'], i, n) for i in range(n)]
    sz = [site_op(ops['Sz'], i, n) for i in range(n)]
    ham = sum(h * sz[i] for i in range(n))
    for i in range(n - 1):
        ham = ham + jxy / 2 * (sp[i] @ sm[i + 1] + sm[i] @ sp[i + 1]) + jz * sz[i] @ sz[i + 1]
    return ham


def brute_force_tj(n: int, bonds, t: float, j: float) -> np.ndarray:
    """The t-J Hamiltonian with fermion operators built by a full Jordan-Wigner transform."""
    ops = generate_mpo_hardcore_boson_operators()
    dim = 3 ** n
    fermi = [site_op(ops['F'], i, n) for i in range(n)]

    def fermion(name: str, i: int) -> np.ndarray:
        string = reduce(np.matmul, fermi[:i], np.identity(dim))
        return string @ site_op(ops[name], i, n)

    ham = np.zeros((dim, dim))
    for i, k in bonds:
        for spin in ('up', 'down'):
            hop = fermion(f'adag_{spin}', i) @ fermion(f'a_{spin}', k)
            ham += -t * (hop + hop.T)
        s_dot_s = (site_op(ops['Sz'], i, n) @ site_op(ops['Sz'], k, n)
                   + 0.5 * site_op(ops['Sp'], i, n) @ site_op(ops['Sm'], k, n)
                   + 0.5 * site_op(ops['Sm'], i, n) @ site_op(ops['Sp'], k, n))
        n_n = site_op(ops['n_tot'], i, n) @ site_op(ops['n_tot'], k, n)
        ham += j * (s_dot_s - 0.25 * n_n)
    return ham


@pytest.mark.parametrize("spin_dim", [2, 3])
def test_heisenberg_matches_brute_force(spin_dim):
    n = 4
    builder = Heisenberg1DMPOBuilder(n, j_coupling_xy=0.8, j_coupling_z=1.3, field_z=0.2, spin_dim=spin_dim)
    expected = brute_force_xxz(n, 0.8, 1.3, 0.2, spin_dim)
    assert np.allclose(mpo_to_full_operator(builder.mpo_qn), expected)


def test_heisenberg_conserves_sz():
    builder = Heisenberg1DMPOBuilder(6, j_coupling_xy=1.0, j_coupling_z=0.5)
    zero_div = QN([('Sz', 0)])
    assert all(mpo_ten.div() == zero_div for mpo_ten in builder.mpo_qn)
    bond_dims = builder.generator.bond_dims
    assert bond_dims[0] == 1 and bond_dims[-1] == 1
    assert max(bond_dims) <= 5


def test_heisenberg_torch_tensors():
    n = 5
    builder = Heisenberg1DMPOBuilder(n, j_coupling_xy=1.0, j_coupling_z=1.0, device='cpu')
    mpo = builder()
    bond_dims = builder.generator.bond_dims
    assert len(mpo) == n
    for i, tensor in enumerate(mpo):
        assert isinstance(tensor, torch.nn.Parameter)
        assert not tensor.requires_grad
        assert tensor.dtype == torch.complex128
        assert tuple(tensor.shape) == (bond_dims[i], 2, 2, bond_dims[i + 1])
    assert len(builder.get_mpo()) == n


def test_uniform_legs_match_torch():
    builder = Heisenberg1DMPOBuilder(3, j_coupling_xy=1.0, j_coupling_z=0.3, field_z=-0.1)
    mpo_np = to_uniform_mpo_legs(builder.mpo_qn)
    mpo_torch = build_mpo_torch(builder.mpo_qn, dtype=torch.float64)
    for array, tensor in zip(mpo_np, mpo_torch):
        assert array.ndim == 4
        assert torch.allclose(tensor, torch.from_numpy(array))


def test_display_bond_dimensions(capsys):
    builder = Heisenberg1DMPOBuilder(4, j_coupling_xy=1.0, j_coupling_z=1.0)
    builder.display_bond_dimensions()
    out = capsys.readouterr().out
    assert "Bond Dimensions" in out
    assert ' '.join(map(str, builder.generator.bond_dims)) in out


@pytest.mark.parametrize("nx, ny, periodic_y", [(2, 2, False), (1, 3, True)])
def test_tj_model_matches_brute_force(nx, ny, periodic_y):
    builder = TJModelMPOBuilder(nx, ny, t=1.0, j=0.4, periodic_y=periodic_y)
    bonds = builder.lattice_bonds()
    assert all(i < k for i, k in bonds)
    expected = brute_force_tj(nx * ny, bonds, 1.0, 0.4)
    assert np.allclose(mpo_to_full_operator(builder.mpo_qn), expected)


def test_tj_model_lattice_bonds():
    open_ladder = TJModelMPOBuilder(2, 2, t=1.0, j=0.5, periodic_y=False)
    assert sorted(open_ladder.lattice_bonds()) == [(0, 1), (0, 2), (1, 3), (2, 3)]
    ring = TJModelMPOBuilder(1, 3, t=1.0, j=0.5, periodic_y=True)
    assert sorted(ring.lattice_bonds()) == [(0, 1), (0, 2), (1, 2)]


def test_tj_model_conserves_n_and_sz():
    builder = TJModelMPOBuilder(3, 2, t=3.0, j=1.0, periodic_y=False)
    zero_div = QN([('N', 0), ('Sz', 0)])
    assert all(mpo_ten.div() == zero_div for mpo_ten in builder.mpo_qn)
    assert len(builder.forward()) == 6
