"""
Package-wide test fixtures for kinfit.

Read more about conftest.py under:
- https://docs.pytest.org/en/stable/fixture.html
"""

import numpy as np
import pytest
from _reference import CONC, KOFF, KON, RMAX, T0

from kinfit.fitting.data_structures import Trace
from kinfit.fitting.models import binding_1to1


@pytest.fixture
def t() -> np.ndarray:
    """Time grid 0..1000 s."""
    return np.arange(0.0, 1001.0)


@pytest.fixture
def trace(t: np.ndarray) -> Trace:
    """Create a noiseless 1:1 trace."""
    y = binding_1to1(t, T0, CONC, KON, KOFF, RMAX)
    return Trace(t, y, t0=T0, conc=CONC)


@pytest.fixture
def noisy_trace(t: np.ndarray) -> Trace:
    """Create a 1:1 trace with gaussian noise (sd 0.002)."""
    rng = np.random.default_rng(42)
    y = binding_1to1(t, T0, CONC, KON, KOFF, RMAX) + rng.normal(0, 0.002, t.size)
    return Trace(t, y, t0=T0, conc=CONC)
