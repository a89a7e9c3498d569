## vectors.py

import numpy as np
from scipy.sparse import coo_matrix
from typing import Iterator, Tuple

from .errors import ContractViolation, DimensionMismatch


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


class HashedVector:
    """
    Sparse vector in the fixed d-dimensional hashed space.

    Entries are kept sorted by index with no duplicates, and every index
    satisfies 0 <= index < dim. The backing arrays are read-only, so a vector
    handed out by a cursor can be kept for as long as the caller likes.
    """

    def __init__(self, indices, values, dim: int):
        if dim <= 0:
            raise DimensionMismatch(f"Hashed dimension must be positive, got {dim}")

        indices = np.array(indices, dtype=np.int64).reshape(-1)
        values = np.array(values).reshape(-1)
        if indices.shape != values.shape:
            raise ContractViolation(
                f"indices ({indices.shape[0]}) and values ({values.shape[0]}) differ in length"
            )

        if indices.size:
            if indices.min() < 0 or indices.max() >= dim:
                raise DimensionMismatch(f"Index out of range [0, {dim})")
            order = np.argsort(indices, kind='stable')
            indices = indices[order]
            values = values[order]
            if np.any(indices[1:] == indices[:-1]):
                raise ContractViolation("Hashed vector indices must be unique")

        self.indices = _frozen(indices)
        self.values = _frozen(values)
        self.dim = int(dim)

    # --- 1. CONTAINER PROTOCOL ---
    @property
    def nnz(self) -> int:
        return int(self.indices.shape[0])

    @property
    def dtype(self) -> np.dtype:
        return self.values.dtype

    def __len__(self) -> int:
        return self.nnz

    def __iter__(self) -> Iterator[Tuple[int, object]]:
        for idx, val in zip(self.indices.tolist(), self.values.tolist()):
            yield idx, val

    def __eq__(self, other) -> bool:
        if not isinstance(other, HashedVector):
            return NotImplemented
        return (
            self.dim == other.dim
            and np.array_equal(self.indices, other.indices)
            and np.array_equal(self.values, other.values)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"HashedVector(dim={self.dim}, nnz={self.nnz}, dtype={self.dtype})"

    # --- 2. CONVERSIONS ---
    def to_dense(self) -> np.ndarray:
        out = np.zeros(self.dim, dtype=self.dtype)
        out[self.indices] = self.values
        return out

    def to_scipy(self):
        """Returns the vector as a 1 x dim CSR matrix."""
        rows = np.zeros(self.nnz, dtype=np.int64)
        return coo_matrix((self.values, (rows, self.indices)), shape=(1, self.dim)).tocsr()

    # --- 3. NUMERIC PRIMITIVES ---
    def sparse_dot(self, other: 'HashedVector') -> float:
        """
        Sum of products over indices present in both vectors.
        Both operands live in the same hashed space, so indices match directly.
        """
        if other.dim != self.dim:
            raise DimensionMismatch(f"Cannot dot dim {self.dim} with dim {other.dim}")

        _, mine, theirs = np.intersect1d(
            self.indices, other.indices, assume_unique=True, return_indices=True
        )
        a = self.values[mine].astype(np.float64)
        b = other.values[theirs].astype(np.float64)
        return float(np.dot(a, b))

    def dense_dot(self, dense) -> float:
        dense = np.asarray(dense)
        if dense.ndim != 1 or dense.shape[0] != self.dim:
            raise DimensionMismatch(
                f"Dense vector has shape {dense.shape}, expected ({self.dim},)"
            )
        picked = dense[self.indices].astype(np.float64)
        return float(np.dot(picked, self.values.astype(np.float64)))

    def add_to_dense(self, alpha, dense: np.ndarray, use_abs: bool = False) -> None:
        """dense[i] += alpha * v for every entry (i, v); |alpha| when use_abs is set."""
        if not isinstance(dense, np.ndarray) or not dense.flags.writeable:
            raise ContractViolation("add_to_dense needs a writable numpy array")
        if dense.ndim != 1 or dense.shape[0] != self.dim:
            raise DimensionMismatch(
                f"Dense vector has shape {dense.shape}, expected ({self.dim},)"
            )

        alpha = np.float64(alpha)
        if use_abs:
            alpha = abs(alpha)

        # Scale in float64 so small integer types cannot wrap
        scaled = alpha * self.values.astype(np.float64)
        # Indices are unique, so plain fancy-index assignment is safe
        dense[self.indices] += scaled
