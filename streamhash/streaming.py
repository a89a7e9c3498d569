## streaming.py

import logging
import numpy as np
from enum import Enum
from typing import Iterator, Optional, Tuple

from .adapters import InMemoryAdapter, StreamAdapter
from .config import HASHING_PARAMS, STREAM_PARAMS
from .errors import (
    Closed,
    ConfigError,
    ContractViolation,
    NoCurrentExample,
    NotInitialized,
    NotStarted,
    StreamReadError,
)
from .hashing import HashFn, hash_vector, murmur_hash
from .vectors import HashedVector

logger = logging.getLogger(__name__)


class StreamState(Enum):
    NOT_STARTED = 'not_started'
    RUNNING = 'running'
    EXHAUSTED = 'exhausted'
    CLOSED = 'closed'


class StreamingHashedSparseFeatures:
    """
    Streams sparse examples from an adapter and hashes each one into a fixed
    dim-dimensional sparse vector, optionally with quadratic interactions.

    Protocol: start(), then advance() / current_vector() / release_current()
    per example, then stop(). With an owning adapter (a file reader) the
    current example must be released before the raw buffer ring runs dry.

    Not safe for concurrent advance() calls; stop() must not race an
    outstanding advance().
    """

    def __init__(
        self,
        adapter: Optional[StreamAdapter],
        dim: int,
        use_quadratic: bool = HASHING_PARAMS['USE_QUADRATIC'],
        keep_linear_terms: bool = HASHING_PARAMS['KEEP_LINEAR_TERMS'],
        has_labels: bool = STREAM_PARAMS['HAS_LABELS'],
        buffer_capacity: int = STREAM_PARAMS['BUFFER_CAPACITY'],
        dtype=HASHING_PARAMS['DTYPE'],
        hash_fn: HashFn = murmur_hash,
    ):
        if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)) or dim <= 0:
            raise ConfigError(f"Target dimension must be a positive integer, got {dim!r}")
        if buffer_capacity <= 0:
            raise ConfigError(f"Buffer capacity must be positive, got {buffer_capacity}")
        try:
            dtype = np.dtype(dtype)
        except TypeError as exc:
            raise ConfigError(f"Unsupported scalar type {dtype!r}") from exc

        self._adapter = adapter
        self._dim = int(dim)
        self._use_quadratic = bool(use_quadratic)
        self._keep_linear_terms = bool(keep_linear_terms)
        self._has_labels = bool(has_labels)
        self._buffer_capacity = int(buffer_capacity)
        self._dtype = dtype
        self._hash_fn = hash_fn

        self._state = StreamState.NOT_STARTED
        self._current: Optional[HashedVector] = None
        self._current_label: Optional[float] = None
        self._pending_handle = None

    @classmethod
    def from_sparse(
        cls,
        data,
        dim: int,
        labels=None,
        use_quadratic: bool = HASHING_PARAMS['USE_QUADRATIC'],
        keep_linear_terms: bool = HASHING_PARAMS['KEEP_LINEAR_TERMS'],
        dtype=None,
        hash_fn: HashFn = murmur_hash,
    ) -> 'StreamingHashedSparseFeatures':
        """Replays an in-memory collection (scipy.sparse rows or (indices, values) pairs)."""
        adapter = InMemoryAdapter(data, labels)
        if dtype is None:
            dtype = adapter.dtype if adapter.dtype is not None else HASHING_PARAMS['DTYPE']
        return cls(
            adapter,
            dim,
            use_quadratic=use_quadratic,
            keep_linear_terms=keep_linear_terms,
            has_labels=labels is not None,
            dtype=dtype,
            hash_fn=hash_fn,
        )

    # --- 1. CONFIGURATION ---
    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def has_labels(self) -> bool:
        return self._has_labels

    @property
    def is_seekable(self) -> bool:
        return self._adapter is not None and self._adapter.is_seekable

    def dim(self) -> int:
        return self._dim

    def num_features(self) -> int:
        # Post-hash feature count is always the target dimension
        return self._dim

    def get_config(self) -> dict:
        return {
            'dim': self._dim,
            'use_quadratic': self._use_quadratic,
            'keep_linear_terms': self._keep_linear_terms,
            'has_labels': self._has_labels,
            'buffer_capacity': self._buffer_capacity,
            'dtype': self._dtype,
        }

    # --- 2. STREAM LIFECYCLE ---
    def start(self) -> None:
        if self._state is StreamState.CLOSED:
            raise Closed("Stream was stopped")
        if self._adapter is None:
            raise NotInitialized("No stream adapter bound")
        if self._state is not StreamState.NOT_STARTED:
            return

        try:
            self._adapter.open(self._has_labels, self._buffer_capacity)
        except StreamReadError:
            raise
        except OSError as exc:
            raise StreamReadError(f"Could not open stream: {exc}") from exc

        self._state = StreamState.RUNNING
        logger.info(
            "Started hashed stream: dim=%d quadratic=%s keep_linear=%s labels=%s",
            self._dim, self._use_quadratic, self._keep_linear_terms, self._has_labels,
        )

    def advance(self) -> bool:
        """
        Fetches and hashes the next example.
        Returns False exactly when the adapter reports end of stream.
        """
        if self._state is StreamState.CLOSED:
            raise Closed("Stream was stopped")
        if self._state is StreamState.NOT_STARTED:
            raise NotStarted("Call start() before advance()")
        if self._state is StreamState.EXHAUSTED:
            return False
        if self._adapter.owns_buffers and self._pending_handle is not None:
            raise ContractViolation("Call release_current() before advancing an owning stream")

        try:
            raw = self._adapter.read_next()
        except StreamReadError:
            raise
        except OSError as exc:
            raise StreamReadError(f"Reading the next example failed: {exc}") from exc

        if raw is None:
            self._state = StreamState.EXHAUSTED
            logger.debug("Hashed stream exhausted")
            return False

        self._pending_handle = raw.handle
        self._current = hash_vector(
            raw.indices,
            raw.values,
            self._dim,
            use_quadratic=self._use_quadratic,
            keep_linear_terms=self._keep_linear_terms,
            hash_fn=self._hash_fn,
            dtype=self._dtype,
        )
        self._current_label = raw.label if self._has_labels else None
        return True

    def release_current(self) -> None:
        """Lets the adapter recycle the raw buffer of the current example."""
        if self._pending_handle is None:
            return
        handle, self._pending_handle = self._pending_handle, None
        if self._state is not StreamState.CLOSED:
            self._adapter.notify_release(handle)

    def stop(self) -> None:
        if self._state is StreamState.CLOSED:
            return
        try:
            if self._state is not StreamState.NOT_STARTED:
                self._adapter.close()
        finally:
            self._pending_handle = None
            self._state = StreamState.CLOSED
            logger.info("Stopped hashed stream")

    def reset(self) -> None:
        """Rewinds a seekable stream to its first example."""
        if self._state is StreamState.CLOSED:
            raise Closed("Stream was stopped")
        if self._adapter is None:
            raise NotInitialized("No stream adapter bound")
        if not self._adapter.is_seekable:
            raise ContractViolation(f"{type(self._adapter).__name__} cannot be rewound")

        self.release_current()
        self._adapter.rewind()
        self._current = None
        self._current_label = None
        if self._state is StreamState.EXHAUSTED:
            self._state = StreamState.RUNNING

    # --- 3. CURRENT EXAMPLE ---
    def current_vector(self) -> HashedVector:
        if self._current is None:
            raise NoCurrentExample("No example has been read yet")
        return self._current

    def current_label(self) -> Optional[float]:
        if not self._has_labels:
            return None
        if self._current is None:
            raise NoCurrentExample("No example has been read yet")
        return self._current_label

    # --- 4. NUMERIC PRIMITIVES ---
    def sparse_dot(self, other) -> float:
        """Dot product with a HashedVector or with another cursor's current example."""
        if isinstance(other, StreamingHashedSparseFeatures):
            other = other.current_vector()
        return self.current_vector().sparse_dot(other)

    def dense_dot(self, dense) -> float:
        return self.current_vector().dense_dot(dense)

    def accumulate_scaled(self, alpha, dense: np.ndarray, use_abs: bool = False) -> None:
        self.current_vector().add_to_dense(alpha, dense, use_abs)

    # --- 5. PYTHON PROTOCOLS ---
    def __iter__(self) -> Iterator[Tuple[HashedVector, Optional[float]]]:
        """Yields (vector, label) pairs, releasing each example once the consumer moves on."""
        self.start()
        while self.advance():
            try:
                yield self.current_vector(), self.current_label()
            finally:
                self.release_current()

    def __enter__(self) -> 'StreamingHashedSparseFeatures':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


# --- EXAMPLE USAGE ---
if __name__ == '__main__':
    examples = [
        ([3, 17, 1_000_003], [1.0, 0.5, -2.0]),
        {42: 1.0, 7: 3.0},
        ([5], [4.0]),
    ]
    cursor = StreamingHashedSparseFeatures.from_sparse(
        examples, dim=16, labels=[1.0, -1.0, 1.0], use_quadratic=True
    )
    weights = np.zeros(cursor.dim())

    with cursor:
        for vec, label in cursor:
            print(f"label={label:+.1f} nnz={vec.nnz} entries={list(vec)}")
            cursor.accumulate_scaled(label, weights)

    print(f"Accumulated weights: {weights}")
