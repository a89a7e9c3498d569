## hashing.py

import numpy as np
from sklearn.utils import murmurhash3_32
from typing import Callable, Optional, Tuple

from .config import HASHING_PARAMS
from .errors import ConfigError, ContractViolation
from .vectors import HashedVector

# hash_fn(key, seed) -> unsigned 32-bit hash
HashFn = Callable[[int, int], int]

_INT32_MAX = 2**31 - 1
_UINT32_MASK = 0xFFFFFFFF
_UINT64_MASK = 0xFFFFFFFFFFFFFFFF


def murmur_hash(key: int, seed: int) -> int:
    """
    MurmurHash3 (x86, 32 bit) of an integer feature index.
    Keys that fit in int32 are hashed as a 4-byte int, wider keys as 8 bytes.
    """
    key = int(key)
    seed = int(seed) & _UINT32_MASK
    if 0 <= key <= _INT32_MAX:
        return int(murmurhash3_32(key, seed=seed, positive=True))
    raw = (key & _UINT64_MASK).to_bytes(8, 'little')
    return int(murmurhash3_32(raw, seed=seed, positive=True))


def linear_hashes(indices: np.ndarray, hash_fn: HashFn = murmur_hash) -> np.ndarray:
    """Hash of every raw index, seeded with the index itself."""
    return np.array([hash_fn(i, i) for i in indices.tolist()], dtype=np.uint64)


def quadratic_terms(
    indices: np.ndarray,
    values: np.ndarray,
    hash_fn: HashFn = murmur_hash,
    hashes: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pairwise interaction terms of a raw vector, before folding into slots.

    Pairs run over raw positions p <= q in row-major order, so k entries give
    exactly k*(k+1)/2 (hash, product) events. A self pair hashes the doubled
    index; a cross pair combines the two linear hashes with XOR.
    """
    idx_list = indices.tolist()
    if hashes is None:
        hashes = linear_hashes(indices, hash_fn)

    rows, cols = np.triu_indices(len(idx_list))
    pair_hashes = hashes[rows] ^ hashes[cols]
    pair_hashes[rows == cols] = np.array(
        [hash_fn(i + i, i) for i in idx_list], dtype=np.uint64
    )
    products = values[rows] * values[cols]
    return pair_hashes, products


def hash_vector(
    indices,
    values,
    dim: int,
    use_quadratic: bool = HASHING_PARAMS['USE_QUADRATIC'],
    keep_linear_terms: bool = HASHING_PARAMS['KEEP_LINEAR_TERMS'],
    hash_fn: HashFn = murmur_hash,
    dtype=None,
) -> HashedVector:
    """
    Projects a raw sparse vector of unbounded index range into dim slots.

    Contributions landing in the same slot are summed, slots that fold to
    exactly zero are dropped. keep_linear_terms only has an effect when
    use_quadratic is set.
    Complexity: O(k) linear, O(k^2) with quadratic expansion.
    """
    if dim <= 0:
        raise ConfigError(f"Target dimension must be positive, got {dim}")

    indices = np.asarray(indices, dtype=np.int64).reshape(-1)
    values = np.asarray(values, dtype=dtype).reshape(-1)
    if indices.shape != values.shape:
        raise ContractViolation(
            f"Raw vector has {indices.shape[0]} indices but {values.shape[0]} values"
        )

    hashes = linear_hashes(indices, hash_fn)

    # 1. Collect (hash, value) contributions
    hash_parts, value_parts = [], []
    if not use_quadratic or keep_linear_terms:
        hash_parts.append(hashes)
        value_parts.append(values)
    if use_quadratic:
        pair_hashes, products = quadratic_terms(indices, values, hash_fn, hashes)
        hash_parts.append(pair_hashes)
        value_parts.append(products.astype(values.dtype, copy=False))

    all_hashes = np.concatenate(hash_parts)
    all_values = np.concatenate(value_parts)

    # 2. Fold into slots, summing collisions in contribution order
    slots = (all_hashes % np.uint64(dim)).astype(np.int64)
    touched, inverse = np.unique(slots, return_inverse=True)
    folded = np.zeros(touched.shape[0], dtype=values.dtype)
    np.add.at(folded, inverse.reshape(-1), all_values)

    # 3. Drop slots that cancelled out
    keep = folded != 0
    return HashedVector(touched[keep], folded[keep], dim)
