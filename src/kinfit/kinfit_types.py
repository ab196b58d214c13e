"""Core type definitions in `kinfit`."""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

# Array types
ArrayF = NDArray[np.float64]  # Generic float64 array
ArrayMask = NDArray[np.bool_]

# Anything numpy can turn into a 1-D float array
ArrayLike = ArrayF | Sequence[float]
