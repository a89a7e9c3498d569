"""Feature hashing for sparse vectors streamed one example at a time."""

from .adapters import InMemoryAdapter, RawExample, StreamAdapter
from .errors import (
    BufferExhausted,
    Closed,
    ConfigError,
    ContractViolation,
    DimensionMismatch,
    NoCurrentExample,
    NotInitialized,
    NotStarted,
    StreamHashError,
    StreamReadError,
)
from .file_reader import SVMLightReader
from .hashing import hash_vector, murmur_hash, quadratic_terms
from .streaming import StreamState, StreamingHashedSparseFeatures
from .vectors import HashedVector

__all__ = [
    'BufferExhausted',
    'Closed',
    'ConfigError',
    'ContractViolation',
    'DimensionMismatch',
    'HashedVector',
    'InMemoryAdapter',
    'NoCurrentExample',
    'NotInitialized',
    'NotStarted',
    'RawExample',
    'StreamAdapter',
    'StreamHashError',
    'StreamReadError',
    'StreamState',
    'StreamingHashedSparseFeatures',
    'SVMLightReader',
    'hash_vector',
    'murmur_hash',
    'quadratic_terms',
]
