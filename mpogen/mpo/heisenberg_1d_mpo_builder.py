#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""A class to construct the S^z conserving MPO for the 1D XXZ Heisenberg model.

The Hamiltonian is defined as:
H = Jxy/2 * Σ_{i} (S^+_i S^-_{i+1} + S^-_i S^+_{i+1}) + Jz * Σ_{i} S^z_i S^z_{i+1} + h * Σ_{i} S^z_i
"""

from typing import List, Optional, Any
import numpy as np
import torch
import torch.nn as nn
from ..symmetry import QN
from .auto_mpo import MPOGenerator, SiteVec, generate_mpo_spin_operators, spin_site_index, build_site_operator
from .mpo_to_torch import build_mpo_torch


class Heisenberg1DMPOBuilder(nn.Module):
    """Builds the MPO for the 1D XXZ chain as a PyTorch Module.

    This class uses the 'auto_mpo' `MPOGenerator` to construct the Matrix
    Product Operator (MPO) of the chain with the total S^z as conserved
    quantity. The resulting MPO tensors are stored as a
    `torch.nn.ParameterList`, making them part of the PyTorch module.

    Attributes:
        num_sites (int): The number of sites in the chain.
        j_coupling_xy (float): Nearest-neighbor coupling strength for SxSx + SySy.
        j_coupling_z (float): Nearest-neighbor coupling strength for SzSz.
        field_z (float): Uniform field coupling to S^z.
        spin_dim (int): The local Hilbert space dimension (2 for spin-1/2).
        generator (MPOGenerator): The generator used for the MPO construction.
        mpo_qn (list[QNTensor]): The generated tensors with their quantum numbers.
        mpo (nn.ParameterList): The list of MPO tensors as PyTorch Parameters,
            legs ``(left, in, out, right)``.
    """

    def __init__(self,
                 num_sites: int,
                 j_coupling_xy: float,
                 j_coupling_z: float,
                 field_z: float = 0.0,
                 spin_dim: int = 2,
                 device: Optional[Any] = None,
                 dtype: Optional[torch.dtype] = None):
        """Initializes the builder with model parameters and constructs the MPO.

        Args:
            num_sites (int): The length of the spin chain.
            j_coupling_xy (float): The nearest-neighbor coupling strength for
                the S^x S^x + S^y S^y interaction.
            j_coupling_z (float): The nearest-neighbor coupling strength for
                the S^z S^z interaction.
            field_z (float): The field strength h of the h * S^z term.
            spin_dim (int): The local Hilbert space dimension.
            device (Optional[Any]): The PyTorch device to store the MPO tensors
                on (e.g., 'cpu', 'cuda:0').
            dtype (Optional[torch.dtype]): The PyTorch data type for the MPO
                tensors (e.g., torch.complex128).
        """
        super().__init__()

        self.num_sites = num_sites
        self.j_coupling_xy = j_coupling_xy
        self.j_coupling_z = j_coupling_z
        self.field_z = field_z
        self.spin_dim = spin_dim

        # Step 1: Initialize the spin operators as symmetric tensors.
        self._initialize_operators()

        # Step 2: Add the terms of the Hamiltonian to the generator.
        self.generator = self._build_generator()

        # Step 3: Generate the MPO as a list of QNTensors.
        self.mpo_qn = self.generator.gen()

        # Step 4: Convert to PyTorch tensors and register them.
        mpo_torch = build_mpo_torch(self.mpo_qn, dtype=dtype, device=device)
        self.mpo = nn.ParameterList([nn.Parameter(tensor, requires_grad=False) for tensor in mpo_torch])

    def _initialize_operators(self):
        """Generates and stores the required spin operators as QNTensors."""
        self.site_index = spin_site_index(self.spin_dim)
        ops = generate_mpo_spin_operators(spin_dim=self.spin_dim)
        self.s_z = build_site_operator(ops['Sz'], self.site_index)
        self.s_plus = build_site_operator(ops['Sp'], self.site_index)
        self.s_minus = build_site_operator(ops['Sm'], self.site_index)

    def _build_generator(self) -> MPOGenerator:
        """Adds all terms of the Hamiltonian to a new generator.

        Returns:
            MPOGenerator: The populated generator.
        """
        zero_div = QN([('Sz', 0)])
        generator = MPOGenerator(SiteVec.uniform(self.num_sites, self.site_index), zero_div, dtype=np.float64)

        for i in range(self.num_sites - 1):
            generator.add_few_body_term(self.j_coupling_xy / 2, self.s_plus, i, self.s_minus, i + 1)
            generator.add_few_body_term(self.j_coupling_xy / 2, self.s_minus, i, self.s_plus, i + 1)
            generator.add_few_body_term(self.j_coupling_z, self.s_z, i, self.s_z, i + 1)
        for i in range(self.num_sites):
            generator.add_few_body_term(self.field_z, self.s_z, i)
        return generator

    def forward(self) -> List[torch.Tensor]:
        """Returns the constructed MPO as a list of PyTorch tensors.

        This is the standard way to retrieve the primary output of an nn.Module.

        Returns:
            List[torch.Tensor]: The list containing the MPO tensors.
        """
        return list(self.mpo)

    def get_mpo(self) -> List[torch.Tensor]:
        """Returns MPO tensors. Kept for API compatibility."""
        return self.forward()

    def display_bond_dimensions(self):
        """Prints the bond dimensions of the MPO."""
        print("=" * 50)
        print("1D XXZ Model MPO")
        print(f"N={self.num_sites}, Jxy={self.j_coupling_xy}, "
              f"Jz={self.j_coupling_z}, h={self.field_z}")
        print("=" * 50)
        print("Bond Dimensions: ", ' '.join(map(str, self.generator.bond_dims)))


if __name__ == '__main__':
    import logging
    logging.basicConfig(level=logging.INFO)

    # Spin-1 XXZ chain in a weak field; the S^z sectors show up on every bond.
    builder = Heisenberg1DMPOBuilder(num_sites=8, j_coupling_xy=1.0, j_coupling_z=0.5,
                                     field_z=0.1, spin_dim=3, device='cpu')
    builder.display_bond_dimensions()
    for site, mpo_ten in enumerate(builder.mpo_qn):
        print(f"site {site}: shape {mpo_ten.shape}, divergence {mpo_ten.div()}")
    print(f"torch tensor of site 1: {tuple(builder()[1].shape)}, {builder()[1].dtype}")
