## torch_data.py

import numpy as np
import torch
from torch.utils.data import IterableDataset

from .streaming import StreamState, StreamingHashedSparseFeatures


class HashedStreamDataset(IterableDataset):
    """
    Exposes a hashed stream to torch consumers.

    Yields one tensor of shape (dim,) per example, or (tensor, label) pairs
    when the stream carries labels. Seekable streams are rewound at the start
    of every pass, so the dataset can serve several epochs; a file stream is
    single pass. Use with DataLoader(num_workers=0), the cursor is not
    shareable across workers.

    sparse=True yields torch sparse COO tensors instead of dense ones.
    """

    def __init__(
        self,
        cursor: StreamingHashedSparseFeatures,
        sparse: bool = False,
        dtype: torch.dtype = torch.float32,
    ):
        self.cursor = cursor
        self.sparse = sparse
        self.dtype = dtype

    def _to_tensor(self, vec) -> torch.Tensor:
        if self.sparse:
            indices = torch.tensor(vec.indices.copy(), dtype=torch.long).unsqueeze(0)
            values = torch.tensor(vec.values.astype(np.float64), dtype=self.dtype)
            return torch.sparse_coo_tensor(indices, values, size=(vec.dim,)).coalesce()
        return torch.tensor(vec.to_dense().astype(np.float64), dtype=self.dtype)

    def __iter__(self):
        if self.cursor.state is not StreamState.NOT_STARTED and self.cursor.is_seekable:
            self.cursor.reset()

        for vec, label in self.cursor:
            x = self._to_tensor(vec)
            if label is None:
                yield x
            else:
                yield x, torch.tensor(label, dtype=self.dtype)
