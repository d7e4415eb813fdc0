#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Local operators and quantum-number labelled sites for `MPOGenerator`.

Two kinds of sites are provided:

* spin-S sites, basis ``m = S, S-1, ..., -S``, conserving ``2 * S^z``;
* hard-core boson (t-J) sites, basis ``{|↑⟩, |↓⟩, |empty⟩}``, conserving
  the particle number ``N`` and ``2 * S^z``.

The ``generate_*`` functions return plain matrices in the usual convention
``matrix[j, i] = <j|O|i>``; `build_site_operator` turns such a matrix into a
`QNTensor` on a site index.
"""

import numpy as np

from ...symmetry import QN, QNSector, Index, QNTensor, OUT


def _pick(operators, operator_name):
    if operator_name:
        return operators.get(operator_name)
    return operators


def generate_mpo_spin_operators(spin_dim=2, operator_name=None):
    """Spin-S operator matrices for a site of dimension ``2 * S + 1``.

    Args:
        spin_dim (int): The local dimension, 2 for spin-1/2, 3 for spin-1.
        operator_name (str, optional): One of 'Sp', 'Sm', 'Sz', 'Sx', 'Sy',
            'Id'. If None, all of them are returned in a dictionary.

    Returns:
        np.ndarray | dict[str, np.ndarray]
    """
    if spin_dim < 2:
        raise ValueError("Spin dimension must be 2 or greater.")

    spin = (spin_dim - 1) / 2.0
    m_values = spin - np.arange(spin_dim)
    # S^+ |m> = sqrt(S(S+1) - m(m+1)) |m+1>, and |m+1> sits one row above |m>.
    raising = np.sqrt(spin * (spin + 1) - m_values[1:] * (m_values[1:] + 1))
    s_plus = np.diag(raising, k=1)
    s_minus = s_plus.T.copy()

    operators = {
        'Sp': s_plus,
        'Sm': s_minus,
        'Sz': np.diag(m_values),
        'Sx': (s_plus + s_minus) / 2,
        'Sy': (s_plus - s_minus) / 2j,
        'Id': np.identity(spin_dim),
    }
    return _pick(operators, operator_name)


def spin_site_index(spin_dim=2, qn_name='Sz'):
    """The physical index of a spin site with conserved S^z.

    Quantum numbers are stored as ``2 * m`` so they stay integral; the basis
    order matches `generate_mpo_spin_operators`.

    Args:
        spin_dim (int): The local Hilbert space dimension.
        qn_name (str): The name of the conserved quantity.

    Returns:
        Index: An outgoing index with one sector per basis state.
    """
    if spin_dim < 2:
        raise ValueError("Spin dimension must be 2 or greater.")
    two_m_values = range(spin_dim - 1, -spin_dim, -2)
    return Index([QNSector(QN([(qn_name, two_m)]), 1) for two_m in two_m_values], OUT)


def generate_mpo_hardcore_boson_operators(operator_name=None):
    """Operator matrices of a hard-core boson site without double occupancy.

    The fermionic signs of a t-J model are not part of these operators; they
    enter through the Jordan-Wigner string 'F' used as insertion operator.

    Args:
        operator_name (str, optional): One of 'adag_up', 'adag_down', 'a_up',
            'a_down', 'n_up', 'n_down', 'n_tot', 'F', 'Id', 'Sz', 'Sp', 'Sm'.
            If None, all of them are returned in a dictionary.

    Returns:
        np.ndarray | dict[str, np.ndarray]
    """
    up, down, empty = 0, 1, 2

    def ket_bra(j, i):
        op = np.zeros((3, 3))
        op[j, i] = 1.0
        return op

    adag_up = ket_bra(up, empty)
    adag_down = ket_bra(down, empty)
    n_up = ket_bra(up, up)
    n_down = ket_bra(down, down)
    n_tot = n_up + n_down

    operators = {
        'adag_up': adag_up,
        'adag_down': adag_down,
        'a_up': adag_up.T.copy(),
        'a_down': adag_down.T.copy(),
        'n_up': n_up,
        'n_down': n_down,
        'n_tot': n_tot,
        'F': np.identity(3) - 2 * n_tot,
        'Id': np.identity(3),
        'Sz': (n_up - n_down) / 2,
        'Sp': ket_bra(up, down),
        'Sm': ket_bra(down, up),
    }
    return _pick(operators, operator_name)


def hardcore_boson_site_index():
    """The physical index of a hard-core boson site with conserved (N, 2*Sz).

    Returns:
        Index: An outgoing index for the basis `{|↑⟩, |↓⟩, |empty⟩}`.
    """
    return Index([
        QNSector(QN([('N', 1), ('Sz', 1)]), 1),
        QNSector(QN([('N', 1), ('Sz', -1)]), 1),
        QNSector(QN([('N', 0), ('Sz', 0)]), 1),
    ], OUT)


def build_site_operator(matrix, site_index, dtype=None):
    """Wraps an operator matrix into a `QNTensor` acting on `site_index`.

    The tensor has the legs ``(pb_in, pb_out)`` and stores the transpose of
    `matrix`, so that element ``(i, j)`` is ``<j|O|i>``.

    Args:
        matrix (np.ndarray): A square matrix of size `site_index.dim`.
        site_index (Index): The outgoing physical index of the site.
        dtype (optional): The element type. Defaults to float64 for real
            matrices and complex128 otherwise.

    Returns:
        QNTensor: The operator tensor.
    """
    matrix = np.asarray(matrix)
    if dtype is None:
        dtype = np.complex128 if np.iscomplexobj(matrix) else np.float64
    return QNTensor([site_index.inverse(), site_index], dtype=dtype, data=matrix.T)
