from typing import List, Optional, Any
import numpy as np
import torch

from ..symmetry import QNTensor


def to_uniform_mpo_legs(mpo: List[QNTensor]) -> List[np.ndarray]:
    """Strips the quantum numbers and brings every site tensor to one leg order.

    The generated tensors use ``(pb_in, rvb, pb_out)`` on the first site,
    ``(pb_in, lvb, pb_out)`` on the last site and ``(lvb, pb_in, pb_out, rvb)``
    in between. The returned arrays all have the legs
    ``(left, in, out, right)``, the boundary bonds having dimension 1.

    Args:
        mpo (List[QNTensor]): The tensors returned by `MPOGenerator.gen`.

    Returns:
        List[np.ndarray]: Rank-4 NumPy arrays.
    """
    mpo_np = []
    last = len(mpo) - 1
    for i, mpo_ten in enumerate(mpo):
        data = mpo_ten.data
        if i == 0:
            mpo_np.append(np.ascontiguousarray(np.transpose(data, (0, 2, 1))[np.newaxis]))
        elif i == last:
            mpo_np.append(np.ascontiguousarray(np.transpose(data, (1, 0, 2))[..., np.newaxis]))
        else:
            mpo_np.append(data.copy())
    return mpo_np


def build_mpo_torch(
    mpo: List[QNTensor],
    dtype: Optional[torch.dtype] = None,
    device: Optional[Any] = None
) -> List[torch.Tensor]:
    """Converts a generated MPO to a list of PyTorch tensors.

    Args:
        mpo (List[QNTensor]): The tensors returned by `MPOGenerator.gen`.
        dtype (Optional[torch.dtype]): The desired data type of the output
            tensors. Defaults to torch.complex128 if None.
        device (Optional[Any]): The desired device of the output tensors.
            Defaults to the current device if None.

    Returns:
        List[torch.Tensor]: Rank-4 tensors with legs ``(left, in, out, right)``.
    """
    if dtype is None:
        dtype = torch.complex128
    return [torch.from_numpy(M).to(device=device, dtype=dtype) for M in to_uniform_mpo_legs(mpo)]


def mpo_to_full_operator(mpo: List[QNTensor]) -> np.ndarray:
    """Contracts the virtual bonds and returns the operator as a dense matrix.

    Only meant for checks on small systems: the result has size
    ``prod(d_i) x prod(d_i)``.

    Args:
        mpo (List[QNTensor]): The tensors returned by `MPOGenerator.gen`.

    Returns:
        np.ndarray: The matrix ``M[out, in] = <out|O|in>`` in the product
            basis, site 0 being the most significant.
    """
    mpo_np = to_uniform_mpo_legs(mpo)
    full = mpo_np[0][0]
    for M in mpo_np[1:]:
        full = np.tensordot(full, M, axes=([-1], [0]))
    full = full[..., 0]

    num_sites = len(mpo_np)
    in_axes = [2 * i for i in range(num_sites)]
    out_axes = [2 * i + 1 for i in range(num_sites)]
    full = np.transpose(full, out_axes + in_axes)
    dim = int(np.prod([M.shape[1] for M in mpo_np]))
    return full.reshape(dim, dim)
