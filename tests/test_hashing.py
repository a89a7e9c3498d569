"""Tests for the feature hashing function and its quadratic expansion."""

from __future__ import annotations

import numpy as np
import pytest

from streamhash.errors import ConfigError, ContractViolation
from streamhash.hashing import hash_vector, murmur_hash, quadratic_terms


def _identity_hash(key: int, seed: int) -> int:
    return key


def _as_dict(vec) -> dict:
    return dict(vec)


@pytest.mark.parametrize(
    "use_quadratic, keep_linear_terms",
    [(False, True), (True, True), (True, False)],
)
def test_hash_vector_is_deterministic(use_quadratic: bool, keep_linear_terms: bool) -> None:
    indices = [3, 17, 17, 90210, 2**35 + 11]
    values = [0.25, -1.5, 2.0, 3.125, 1e-3]

    first = hash_vector(indices, values, 97, use_quadratic, keep_linear_terms)
    second = hash_vector(indices, values, 97, use_quadratic, keep_linear_terms)

    assert first == second
    assert first.indices.tobytes() == second.indices.tobytes()
    assert first.values.tobytes() == second.values.tobytes()


@pytest.mark.parametrize("dim", [1, 7, 64, 2**20])
@pytest.mark.parametrize("use_quadratic", [False, True])
def test_hashed_indices_stay_in_range(dim: int, use_quadratic: bool) -> None:
    rng = np.random.default_rng(7)
    indices = rng.integers(0, 2**40, size=25)
    values = rng.normal(size=25)

    vec = hash_vector(indices, values, dim, use_quadratic=use_quadratic)

    assert vec.dim == dim
    assert np.all(vec.indices >= 0)
    assert np.all(vec.indices < dim)
    assert len(np.unique(vec.indices)) == vec.nnz
    assert vec.nnz <= dim


def test_colliding_indices_are_summed() -> None:
    vec = hash_vector([1, 9], [2.0, 3.5], 8, hash_fn=_identity_hash)

    assert _as_dict(vec) == {1: 5.5}


def test_linear_hashing_with_identity_hash_reproduces_input() -> None:
    indices = [5, 0, 3]
    values = [1.5, -2.0, 4.0]

    vec = hash_vector(indices, values, 8, hash_fn=_identity_hash)

    expected = np.zeros(8)
    expected[indices] = values
    np.testing.assert_array_equal(vec.to_dense(), expected)


@pytest.mark.parametrize("k", [0, 1, 2, 5, 12])
def test_quadratic_terms_cover_every_pair_including_self_pairs(k: int) -> None:
    indices = np.arange(k, dtype=np.int64) * 3
    values = np.ones(k)

    hashes, products = quadratic_terms(indices, values)

    assert hashes.shape[0] == k * (k + 1) // 2
    assert products.shape[0] == k * (k + 1) // 2


def test_quadratic_without_linear_terms_replaces_linear_signal() -> None:
    # identity hash: self pair i -> 2i, cross pair (i, j) -> i ^ j
    vec = hash_vector(
        [1, 2], [2.0, 3.0], 64,
        use_quadratic=True, keep_linear_terms=False, hash_fn=_identity_hash,
    )

    assert _as_dict(vec) == {2: 4.0, 3: 6.0, 4: 9.0}


def test_quadratic_with_linear_terms_keeps_both() -> None:
    vec = hash_vector(
        [1, 2], [2.0, 3.0], 64,
        use_quadratic=True, keep_linear_terms=True, hash_fn=_identity_hash,
    )

    assert _as_dict(vec) == {1: 2.0, 2: 7.0, 3: 6.0, 4: 9.0}


def test_keep_linear_terms_is_ignored_without_quadratic() -> None:
    kept = hash_vector([4, 11], [1.0, 2.0], 32, keep_linear_terms=True)
    dropped = hash_vector([4, 11], [1.0, 2.0], 32, keep_linear_terms=False)

    assert kept == dropped
    assert kept.nnz > 0


def test_cancelled_slots_are_dropped() -> None:
    vec = hash_vector([1, 5], [1.0, -1.0], 4, hash_fn=_identity_hash)

    assert vec.nnz == 0
    assert list(vec) == []


def test_empty_raw_vector_hashes_to_empty_vector() -> None:
    vec = hash_vector([], [], 16, use_quadratic=True)

    assert vec.nnz == 0
    assert vec.dim == 16


@pytest.mark.parametrize("dim", [0, -4])
def test_non_positive_dimension_is_rejected(dim: int) -> None:
    with pytest.raises(ConfigError):
        hash_vector([1], [1.0], dim)


def test_length_mismatch_is_a_contract_violation() -> None:
    with pytest.raises(ContractViolation):
        hash_vector([1, 2], [1.0], 8)


@pytest.mark.parametrize("dtype", [np.int32, np.uint8, np.float32, np.float64, np.longdouble])
def test_output_keeps_scalar_type(dtype) -> None:
    vec = hash_vector([1, 9, 3], np.array([2, 3, 4], dtype=dtype), 8, hash_fn=_identity_hash)

    assert vec.dtype == np.dtype(dtype)
    assert _as_dict(vec) == {1: 5, 3: 4}


def test_boolean_values_fold_with_logical_or() -> None:
    vec = hash_vector([1, 5, 2], [True, True, False], 4, dtype=bool, hash_fn=_identity_hash)

    assert vec.dtype == np.dtype(bool)
    assert _as_dict(vec) == {1: True}


def test_murmur_hash_is_stable_and_unsigned() -> None:
    for key in [0, 1, 12345, 2**31 - 1, 2**31, 2**50, 2**64 - 1]:
        h = murmur_hash(key, key)
        assert h == murmur_hash(key, key)
        assert 0 <= h < 2**32


def test_murmur_hash_depends_on_seed() -> None:
    assert murmur_hash(42, 0) != murmur_hash(42, 1)
