#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""A dedicated class for constructing the t-J model MPO with MPOGenerator.

This module provides the TJModelMPOBuilder class, which encapsulates the logic
for building the Matrix Product Operator (MPO) representation of the
two-dimensional t-J model Hamiltonian on a square lattice. The particle number
N and the magnetization S^z are conserved, and the fermionic signs enter
through Jordan-Wigner string operators inserted between the hopping sites.
"""

from typing import List, Optional, Any
import numpy as np
import torch
import torch.nn as nn
from ..symmetry import QN
from .auto_mpo import (
    MPOGenerator,
    SiteVec,
    generate_mpo_hardcore_boson_operators,
    hardcore_boson_site_index,
    build_site_operator,
)
from .mpo_to_torch import build_mpo_torch


class TJModelMPOBuilder(nn.Module):
    """Builds the MPO for the 2D t-J model as a PyTorch Module.

    Constructs the Hamiltonian for the t-J model on an Nx x Ny square lattice.
    It handles the 2D to 1D mapping, defines operators, and uses an
    `MPOGenerator` to produce the quantum-number symmetric MPO, which is
    stored as PyTorch tensors.

    Attributes:
        nx (int): The number of sites in the x-direction.
        ny (int): The number of sites in the y-direction.
        t (float): The hopping parameter coefficient.
        j (float): The Heisenberg exchange parameter coefficient.
        periodic_y (bool): If True, applies periodic boundary conditions in y.
        num_sites (int): The total number of lattice sites (nx * ny).
        generator (MPOGenerator): The generator holding the Hamiltonian terms.
        mpo_qn (list[QNTensor]): The generated tensors with their quantum numbers.
        mpo (nn.ParameterList): The list of MPO tensors as PyTorch Parameters.
    """

    def __init__(self,
                 nx: int,
                 ny: int,
                 t: float,
                 j: float,
                 periodic_y: bool = True,
                 device: Optional[Any] = None,
                 dtype: Optional[torch.dtype] = None):
        """Initializes the builder with model parameters and constructs the MPO.

        Args:
            nx (int): Number of sites along the x-dimension.
            ny (int): Number of sites along the y-dimension.
            t (float): Coefficient for the hopping terms.
            j (float): Coefficient for the Heisenberg exchange terms.
            periodic_y (bool): Specifies y-axis periodicity. Defaults to True.
            device (Optional[Any]): PyTorch device for the MPO tensors.
            dtype (Optional[torch.dtype]): PyTorch data type for the MPO tensors.
        """
        super().__init__()
        self.nx = nx
        self.ny = ny
        self.t = t
        self.j = j
        self.periodic_y = periodic_y
        self.num_sites = nx * ny
        self.generator: Optional[MPOGenerator] = None

        # Step 1: Initialize all required operators.
        self._initialize_operators()

        # Step 2: Add the terms. Subclasses may override 'build_generator'
        # to add more terms before the MPO is generated.
        self.build_generator()

        # Step 3: Generate the MPO.
        self.mpo_qn = self.generator.gen()

        # Step 4: Convert to PyTorch tensors and register as parameters.
        mpo_torch = build_mpo_torch(self.mpo_qn, dtype=dtype, device=device)
        self.mpo = nn.ParameterList([nn.Parameter(tensor, requires_grad=False) for tensor in mpo_torch])

    def _initialize_operators(self):
        """Generates and stores all necessary operators for the t-J model."""
        self.site_index = hardcore_boson_site_index()
        ops = generate_mpo_hardcore_boson_operators()
        self.adag_up = build_site_operator(ops['adag_up'], self.site_index)
        self.a_up = build_site_operator(ops['a_up'], self.site_index)
        self.adag_down = build_site_operator(ops['adag_down'], self.site_index)
        self.a_down = build_site_operator(ops['a_down'], self.site_index)
        self.fermi_string = build_site_operator(ops['F'], self.site_index)
        self.s_z = build_site_operator(ops['Sz'], self.site_index)
        self.s_plus = build_site_operator(ops['Sp'], self.site_index)
        self.s_minus = build_site_operator(ops['Sm'], self.site_index)
        self.n_tot = build_site_operator(ops['n_tot'], self.site_index)

    def lattice_bonds(self) -> List[tuple]:
        """Lists the nearest-neighbor bonds as (i, j) pairs with i < j."""
        bonds = []
        for x in range(self.nx):
            for y in range(self.ny):
                i = x * self.ny + y
                # Horizontal bonds
                if x < self.nx - 1:
                    bonds.append((i, (x + 1) * self.ny + y))
                # Vertical bonds
                if y < self.ny - 1:
                    bonds.append((i, i + 1))
                elif self.periodic_y and self.ny > 2:
                    bonds.append((x * self.ny, i))
        return bonds

    def build_generator(self):
        """Adds the nearest-neighbor t-J Hamiltonian to a new generator.

        This method can be extended by subclasses to add more terms.
        """
        zero_div = QN([('N', 0), ('Sz', 0)])
        self.generator = MPOGenerator(
            SiteVec.uniform(self.num_sites, self.site_index), zero_div, dtype=np.float64)
        for i, j in self.lattice_bonds():
            self._add_bond_terms(i, j)

    def _add_bond_terms(self, i: int, j: int):
        """Adds all Hamiltonian terms for a bond between sites i < j.

        Args:
            i (int): The index of the first site.
            j (int): The index of the second site.
        """
        # Hopping terms (t) with Fermi string
        gen = self.generator
        gen.add_few_body_term(-self.t, self.adag_up, i, self.a_up, j, inst_op=self.fermi_string)
        gen.add_few_body_term(-self.t, self.adag_down, i, self.a_down, j, inst_op=self.fermi_string)
        gen.add_few_body_term(-self.t, self.a_up, i, self.adag_up, j, inst_op=self.fermi_string)
        gen.add_few_body_term(-self.t, self.a_down, i, self.adag_down, j, inst_op=self.fermi_string)

        # Heisenberg exchange terms (J)
        gen.add_few_body_term(self.j, self.s_z, i, self.s_z, j)
        gen.add_few_body_term(self.j / 2, self.s_plus, i, self.s_minus, j)
        gen.add_few_body_term(self.j / 2, self.s_minus, i, self.s_plus, j)
        gen.add_few_body_term(-self.j / 4, self.n_tot, i, self.n_tot, j)

    def forward(self) -> List[torch.Tensor]:
        """Returns the constructed MPO as a list of PyTorch tensors."""
        return list(self.mpo)

    def get_mpo(self) -> List[torch.Tensor]:
        """Returns MPO tensors. Kept for API compatibility."""
        return self.forward()

    def display_bond_dimensions(self):
        """Prints the bond dimension of the MPO at each virtual bond."""
        print("=" * 50)
        print("MPO Bond Dimensions")
        print("=" * 50)
        if self.generator is not None and self.generator.bond_dims is not None:
            print("Bond Dimensions: ", ' '.join(map(str, self.generator.bond_dims)))


if __name__ == '__main__':
    tj_builder = TJModelMPOBuilder(nx=3, ny=2, t=3.0, j=1.0, periodic_y=False, device='cpu')
    print(f"{len(tj_builder.lattice_bonds())} bonds on a 3x2 t-J ladder")
    tj_builder.display_bond_dimensions()
    head_rvb = tj_builder.mpo_qn[0].indexes[1]
    print(f"Sectors of the first virtual bond: {head_rvb.qnscts}")
