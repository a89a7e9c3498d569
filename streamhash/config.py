## config.py

import numpy as np

# --- 1. HASHING PARAMETERS ---
HASHING_PARAMS = {
    'USE_QUADRATIC': False,       # Add pairwise (quadratic) interaction terms
    'KEEP_LINEAR_TERMS': True,    # Keep linear terms when quadratic expansion is on
    'DTYPE': np.float64,          # Scalar type of the hashed values
}

# --- 2. STREAM PARAMETERS ---
STREAM_PARAMS = {
    'HAS_LABELS': False,          # Each record carries a leading label
    'BUFFER_CAPACITY': 1024,      # Raw example slots held by an owning reader
}
