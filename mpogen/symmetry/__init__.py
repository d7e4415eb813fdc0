from .qn import QN, QNSector
from .index import Index, IN, OUT
from .tensor import QNTensor, SUPPORTED_DTYPES

__all__ = [
    "QN",
    "QNSector",
    "Index",
    "IN",
    "OUT",
    "QNTensor",
    "SUPPORTED_DTYPES",
]
