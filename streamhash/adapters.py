## adapters.py

import logging
import numpy as np
from abc import ABC, abstractmethod
from scipy.sparse import csr_matrix, issparse
from typing import Any, NamedTuple, Optional

from .errors import ConfigError, ContractViolation

logger = logging.getLogger(__name__)


class RawExample(NamedTuple):
    indices: np.ndarray
    values: np.ndarray
    label: Optional[float]
    handle: Any


# --- 1. ABSTRACT INTERFACE ---
class StreamAdapter(ABC):
    """
    Interface for sources of raw sparse examples feeding a streaming cursor.
    All implementations MUST conform to this contract.

    owns_buffers tells the cursor who owns the raw arrays of a RawExample:
    an owning adapter recycles them once notify_release() is called for the
    example's handle, a non-owning adapter hands out arrays that belong to
    the caller and ignores notify_release().
    """

    owns_buffers = False
    is_seekable = False

    @abstractmethod
    def open(self, has_labels: bool, buffer_capacity: int) -> None:
        """Prepares the source for reading."""
        pass

    @abstractmethod
    def read_next(self) -> Optional[RawExample]:
        """Returns the next raw example, or None at end of stream."""
        pass

    @abstractmethod
    def notify_release(self, handle: Any) -> None:
        """The example behind handle is no longer read by the consumer."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def rewind(self) -> None:
        raise ContractViolation(f"{type(self).__name__} is not seekable")


# --- 2. IN-MEMORY REPLAY ---
def _row_arrays(row):
    if isinstance(row, dict):
        return np.fromiter(row.keys(), dtype=np.int64, count=len(row)), np.array(list(row.values()))
    indices, values = row
    return np.asarray(indices, dtype=np.int64), np.asarray(values)


class InMemoryAdapter(StreamAdapter):
    """
    Replays an existing collection of sparse vectors as a stream.

    data is either a scipy.sparse matrix (one row per example) or a sequence
    whose items are (indices, values) pairs or {index: value} dicts. Arrays
    stay owned by the caller.
    """

    owns_buffers = False
    is_seekable = True

    def __init__(self, data, labels=None):
        if issparse(data):
            self.data = csr_matrix(data)
            self.num_examples = self.data.shape[0]
        else:
            self.data = list(data)
            self.num_examples = len(self.data)

        self.labels = None
        if labels is not None:
            self.labels = np.asarray(labels, dtype=np.float64).reshape(-1)
            if self.labels.shape[0] != self.num_examples:
                raise ConfigError(
                    f"Got {self.labels.shape[0]} labels for {self.num_examples} examples"
                )

        self.has_labels = False
        self.position = None

    @property
    def dtype(self):
        """Scalar type of the wrapped matrix, None for plain sequences."""
        return self.data.dtype if issparse(self.data) else None

    def open(self, has_labels: bool, buffer_capacity: int) -> None:
        if has_labels and self.labels is None:
            raise ConfigError("Stream is configured with labels but none were given")
        self.has_labels = has_labels
        self.position = 0
        logger.debug("Replaying %d in-memory examples", self.num_examples)

    def read_next(self) -> Optional[RawExample]:
        if self.position is None:
            raise ContractViolation("InMemoryAdapter read before open()")
        if self.position >= self.num_examples:
            return None

        pos = self.position
        if issparse(self.data):
            start, end = self.data.indptr[pos], self.data.indptr[pos + 1]
            indices = self.data.indices[start:end]
            values = self.data.data[start:end]
        else:
            indices, values = _row_arrays(self.data[pos])

        label = float(self.labels[pos]) if self.has_labels else None
        self.position += 1
        return RawExample(indices, values, label, pos)

    def notify_release(self, handle: Any) -> None:
        # Buffers belong to the caller in replay mode
        pass

    def close(self) -> None:
        self.position = None

    def rewind(self) -> None:
        if self.position is not None:
            self.position = 0
