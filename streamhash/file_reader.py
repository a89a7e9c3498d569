## file_reader.py

import io
import logging
import numpy as np
from collections import deque
from pathlib import Path
from typing import Any, List, Optional

from .adapters import RawExample, StreamAdapter
from .errors import BufferExhausted, ContractViolation, StreamReadError

logger = logging.getLogger(__name__)

_INITIAL_SLOT_SIZE = 16


class SVMLightReader(StreamAdapter):
    """
    Sequential reader for sparse text records, one example per line:

        [label] index:value index:value ...   # optional comment

    Raw vectors are parsed into a ring of buffer_capacity recyclable slots.
    A slot is only reused after notify_release() for its handle, so the
    arrays of an example stay valid until the consumer releases it.
    """

    owns_buffers = True
    is_seekable = False

    def __init__(self, source, dtype=np.float64, comment: str = '#'):
        """
        source: A path, or an already open text stream (left open on close()).
        dtype: Scalar type the values are parsed into.
        """
        self.source = source
        self.dtype = np.dtype(dtype)
        self.comment = comment

        if self.dtype.kind == 'b':
            self._convert = lambda tok: bool(int(tok))
        else:
            self._convert = self.dtype.type

        self._stream = None
        self._owns_stream = False
        self._has_labels = False
        self._line_no = 0
        self._slots: List[List[np.ndarray]] = []
        self._free: deque = deque()
        self._held = set()

    # --- 1. LIFECYCLE ---
    def open(self, has_labels: bool, buffer_capacity: int) -> None:
        if isinstance(self.source, (str, Path)):
            self._stream = open(self.source, 'r', encoding='utf-8')
            self._owns_stream = True
        elif isinstance(self.source, io.IOBase) or hasattr(self.source, 'readline'):
            self._stream = self.source
            self._owns_stream = False
        else:
            raise StreamReadError(f"Cannot read records from {type(self.source).__name__}")

        self._has_labels = has_labels
        self._line_no = 0
        self._slots = [
            [np.empty(_INITIAL_SLOT_SIZE, dtype=np.int64), np.empty(_INITIAL_SLOT_SIZE, dtype=self.dtype)]
            for _ in range(buffer_capacity)
        ]
        self._free = deque(range(buffer_capacity))
        self._held = set()
        logger.debug("Opened %s with %d buffer slots", self.source, buffer_capacity)

    def close(self) -> None:
        if self._stream is not None and self._owns_stream:
            self._stream.close()
        self._stream = None
        self._slots = []
        self._free.clear()
        self._held.clear()

    # --- 2. READING ---
    def read_next(self) -> Optional[RawExample]:
        if self._stream is None:
            raise ContractViolation("SVMLightReader read before open()")
        if not self._free:
            raise BufferExhausted(
                f"All {len(self._slots)} raw buffers are held; release examples before reading more"
            )

        for line in iter(self._stream.readline, ''):
            self._line_no += 1
            record = line.split(self.comment, 1)[0].strip()
            if not record:
                continue
            return self._parse_into_slot(record)

        logger.debug("End of stream after %d lines", self._line_no)
        return None

    def _parse_into_slot(self, record: str) -> RawExample:
        tokens = record.split()
        try:
            label = None
            if self._has_labels:
                label = float(tokens[0])
                tokens = tokens[1:]

            indices = []
            values = []
            for tok in tokens:
                idx, sep, val = tok.partition(':')
                if not sep:
                    raise ValueError(f"missing ':' in {tok!r}")
                idx = int(idx)
                if idx < 0:
                    raise ValueError(f"negative index {idx}")
                indices.append(idx)
                values.append(self._convert(val))
            idx_arr = np.array(indices, dtype=np.int64)
            val_arr = np.array(values, dtype=self.dtype)
        except (ValueError, OverflowError) as exc:
            raise StreamReadError(f"Line {self._line_no}: malformed record ({exc})") from exc

        slot = self._free.popleft()
        n = len(indices)
        idx_buf, val_buf = self._slots[slot]
        if idx_buf.shape[0] < n:
            size = max(n, 2 * idx_buf.shape[0])
            idx_buf = np.empty(size, dtype=np.int64)
            val_buf = np.empty(size, dtype=self.dtype)
            self._slots[slot] = [idx_buf, val_buf]

        idx_buf[:n] = idx_arr
        val_buf[:n] = val_arr
        self._held.add(slot)
        return RawExample(idx_buf[:n], val_buf[:n], label, slot)

    def notify_release(self, handle: Any) -> None:
        if handle not in self._held:
            raise ContractViolation(f"Buffer slot {handle!r} is not held")
        self._held.remove(handle)
        self._free.append(handle)
