r"""Kinetic model functions for biosensor binding traces.

This module provides the closed-form response models used to simulate and fit
association/dissociation sensorgrams recorded by Biolayer Interferometry (BLI)
or Surface Plasmon Resonance (SPR) instruments. All functions are pure and keep
no state between calls, so they can be used directly as the model inside a
least-squares objective (see :mod:`kinfit.fitting.core`).

Mathematical Background
-----------------------

**1:1 Binding Model**

Analyte at concentration C is in contact with the sensor during the
association phase :math:`0 \le t \le t_0` and is washed away afterwards:

.. math::

    R(t) = \\frac{C R_{max}}{C + K_D} \\left(1 - e^{-(k_{on} C + k_{off}) t}\\right)
           + d\\,t \\qquad t \\le t_0

    R(t) = R(t_0)\\, e^{-k_{off} (t - t_0)} \\qquad t > t_0

where :math:`K_D = k_{off}/k_{on}` and d is an optional linear baseline
drift. Drift accrues only during association; the offset accumulated at
:math:`t_0` decays together with the bound analyte.

**2:1 Heterogeneous Binding Model**

Two independent, non-interacting sites, each following 1:1 kinetics:

.. math::

    R(t) = R_1(t; k_{on,1}, k_{off,1}, R_{max,1}) + R_2(t; k_{on,2}, k_{off,2}, R_{max,2})

**Time to Equilibrium**

Inverting the association-phase occupancy
:math:`f(t) = 1 - e^{-(k_{on} C + k_{off}) t}` gives

.. math::

    t_{eq} = \\frac{-\\ln(1 - f)}{k_{on} C + k_{off}}
"""

import math
import typing

import numpy as np

from kinfit.fitting.errors import InvalidParameterError, ShapeMismatchError
from kinfit.kinfit_types import ArrayF, ArrayLike

#: Default fraction of equilibrium used by :func:`tteq`.
DEFAULT_THRESHOLD = 0.95


def _as_float(name: str, value: float) -> float:
    try:
        val = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "a real number") from None
    if not math.isfinite(val):
        raise InvalidParameterError(name, value, "finite")
    return val


def _positive(name: str, value: float) -> float:
    val = _as_float(name, value)
    if val <= 0:
        raise InvalidParameterError(name, value, "> 0")
    return val


def _non_negative(name: str, value: float) -> float:
    val = _as_float(name, value)
    if val < 0:
        raise InvalidParameterError(name, value, ">= 0")
    return val


def _as_array(name: str, values: float | ArrayLike) -> ArrayF:
    """Convert `values` to a finite float64 array of at most one dimension."""
    try:
        arr = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        msg = f"'{name}' must be a numeric sequence: {e}"
        raise ShapeMismatchError(msg) from e
    if arr.ndim > 1:
        msg = f"'{name}' must be one-dimensional, got shape {arr.shape}."
        raise ShapeMismatchError(msg)
    if not np.all(np.isfinite(arr)):
        msg = f"'{name}' contains non-finite values."
        raise ShapeMismatchError(msg)
    return arr


def _as_times(values: float | ArrayLike) -> ArrayF:
    """Convert sample times to an array; times before injection are rejected."""
    tt = _as_array("t", values)
    if tt.size and tt.min() < 0:
        raise InvalidParameterError("t", float(tt.min()), ">= 0")
    return tt


def _validate_site(
    kon: float, koff: float, rmax: float, suffix: str = ""
) -> tuple[float, float, float]:
    return (
        _positive(f"kon{suffix}", kon),
        _positive(f"koff{suffix}", koff),
        _positive(f"rmax{suffix}", rmax),
    )


def _response_1to1(  # noqa: PLR0913
    t: ArrayF, t0: float, conc: float, kon: float, koff: float, rmax: float, drift: float
) -> ArrayF:
    """Evaluate the 1:1 response on already validated inputs."""
    r_eq = conc * rmax / (conc + koff / kon)
    k_obs = kon * conc + koff
    association = r_eq * -np.expm1(-k_obs * t) + drift * t
    r_t0 = r_eq * -math.expm1(-k_obs * t0) + drift * t0
    # clip keeps exp() bounded on the association samples discarded by where()
    dissociation = r_t0 * np.exp(-koff * np.maximum(t - t0, 0.0))
    return np.where(t <= t0, association, dissociation)


# fmt: off
@typing.overload
def binding_1to1(
    t: float, t0: float, conc: float, kon: float, koff: float, rmax: float,
    drift: float = 0.0,
) -> float: ...

@typing.overload
def binding_1to1(
    t: ArrayLike, t0: float, conc: float, kon: float, koff: float, rmax: float,
    drift: float = 0.0,
) -> ArrayF: ...
# fmt: on


def binding_1to1(  # noqa: PLR0913
    t: float | ArrayLike,
    t0: float,
    conc: float,
    kon: float,
    koff: float,
    rmax: float,
    drift: float = 0.0,
) -> float | ArrayF:
    r"""Single site (1:1) association/dissociation response.

    Parameters
    ----------
    t : float | ArrayLike
        Time point(s) in s since injection, all `>= 0`. Samples are classified
        independently against `t0`, so the sequence does not need to be sorted.
    t0 : float
        Dissociation onset (s); association for ``t <= t0``, dissociation after.
    conc : float
        Analyte concentration (M). Zero gives a flat zero response.
    kon : float
        Association rate constant (M⁻¹s⁻¹).
    koff : float
        Dissociation rate constant (s⁻¹).
    rmax : float
        Maximum response at full saturation (response units).
    drift : float, optional
        Linear baseline drift (response units/s) added during association.
        Default 0.

    Returns
    -------
    float | ArrayF
        Response value(s) in the order of `t`. A scalar `t` returns a float.

    Raises
    ------
    InvalidParameterError
        If `kon`, `koff` or `rmax` is not strictly positive, `conc`, `t0` or
        any time point is negative, or any scalar is not finite.
    ShapeMismatchError
        If `t` is not a finite numeric scalar or 1-D sequence.

    Examples
    --------
    Half of the sites are occupied at equilibrium when ``conc == KD``:

    >>> r = binding_1to1([0.0, 1e4], t0=1e4, conc=1e-6, kon=1e4, koff=0.01, rmax=1.0)
    >>> float(r[0]), round(float(r[1]), 6)
    (0.0, 0.5)

    Peak at the dissociation onset, decay afterwards:

    >>> import numpy as np
    >>> r = binding_1to1(np.array([0, 500, 1000]), 500, 6e-7, 1e4, 0.01, 0.8)
    >>> round(float(r[1]), 4), round(float(r[2]), 4)
    (0.2999, 0.002)

    Notes
    -----
    The dissociation seed is the association formula evaluated at `t0`
    (drift included), so the trace is continuous at `t0`. Drift does not keep
    accruing during dissociation.
    """
    tt = _as_times(t)
    t0_ = _non_negative("t0", t0)
    conc_ = _non_negative("conc", conc)
    kon_, koff_, rmax_ = _validate_site(kon, koff, rmax)
    drift_ = _as_float("drift", drift)
    response = _response_1to1(tt, t0_, conc_, kon_, koff_, rmax_, drift_)
    if tt.ndim == 0:
        return float(response)
    return response


# fmt: off
@typing.overload
def binding_2to1(
    t: float, t0: float, conc: float, kon1: float, koff1: float, rmax1: float,
    kon2: float, koff2: float, rmax2: float,
) -> float: ...

@typing.overload
def binding_2to1(
    t: ArrayLike, t0: float, conc: float, kon1: float, koff1: float, rmax1: float,
    kon2: float, koff2: float, rmax2: float,
) -> ArrayF: ...
# fmt: on


def binding_2to1(  # noqa: PLR0913
    t: float | ArrayLike,
    t0: float,
    conc: float,
    kon1: float,
    koff1: float,
    rmax1: float,
    kon2: float,
    koff2: float,
    rmax2: float,
) -> float | ArrayF:
    """Heterogeneous (2:1) response of two independent binding sites.

    The observed response is the sum of two 1:1 responses that share `t`,
    `t0` and `conc`, each with its own rate pair and capacity and no drift.
    Both sites are validated before anything is computed; parameter names in
    error messages carry the site index (``kon1``, ``koff2``, ...).

    Parameters
    ----------
    t : float | ArrayLike
        Time point(s) in s, all `>= 0`.
    t0 : float
        Dissociation onset (s).
    conc : float
        Analyte concentration (M).
    kon1, koff1, rmax1 : float
        Rate constants and capacity of the first site.
    kon2, koff2, rmax2 : float
        Rate constants and capacity of the second site.

    Returns
    -------
    float | ArrayF
        Summed response in the order of `t`.

    Examples
    --------
    >>> r1 = binding_1to1([100.0], 50, 1e-6, 1e4, 0.01, 1.0)
    >>> r2 = binding_1to1([100.0], 50, 1e-6, 1e5, 0.001, 0.5)
    >>> bool(binding_2to1([100.0], 50, 1e-6, 1e4, 0.01, 1.0, 1e5, 0.001, 0.5) == r1 + r2)
    True
    """
    tt = _as_times(t)
    t0_ = _non_negative("t0", t0)
    conc_ = _non_negative("conc", conc)
    site1 = _validate_site(kon1, koff1, rmax1, suffix="1")
    site2 = _validate_site(kon2, koff2, rmax2, suffix="2")
    response = _response_1to1(tt, t0_, conc_, *site1, 0.0) + _response_1to1(
        tt, t0_, conc_, *site2, 0.0
    )
    if tt.ndim == 0:
        return float(response)
    return response


# fmt: off
@typing.overload
def tteq(
    conc: float, kon: float, koff: float, threshold: float = DEFAULT_THRESHOLD
) -> float: ...

@typing.overload
def tteq(
    conc: ArrayLike, kon: float, koff: float, threshold: float = DEFAULT_THRESHOLD
) -> ArrayF: ...
# fmt: on


def tteq(
    conc: float | ArrayLike,
    kon: float,
    koff: float,
    threshold: float = DEFAULT_THRESHOLD,
) -> float | ArrayF:
    r"""Time for the association phase to reach a fraction of equilibrium.

    Parameters
    ----------
    conc : float | ArrayLike
        Analyte concentration(s) (M), all strictly positive.
    kon : float
        Association rate constant (M⁻¹s⁻¹).
    koff : float
        Dissociation rate constant (s⁻¹).
    threshold : float, optional
        Target fraction of the equilibrium response, ``0 < threshold < 1``.
        Default 0.95.

    Returns
    -------
    float | ArrayF
        Time(s) in s, elementwise matching `conc`.

    Raises
    ------
    InvalidParameterError
        If any concentration, `kon` or `koff` is not strictly positive, or
        `threshold` is outside the open interval (0, 1).
    ShapeMismatchError
        If `conc` is not a finite numeric scalar or 1-D sequence.

    Examples
    --------
    >>> round(tteq(6e-7, kon=1e4, koff=0.01), 1)
    187.2

    >>> import numpy as np
    >>> np.round(tteq([6e-7, 2.916e-8], 1e4, 0.01), 1).tolist()
    [187.2, 291.1]

    Notes
    -----
    Single-exponential kinetics make the inversion exact:
    :math:`t_{eq} = -\\ln(1 - f) / (k_{on} C + k_{off})`.
    """
    cc = _as_array("conc", conc)
    kon_ = _positive("kon", kon)
    koff_ = _positive("koff", koff)
    thr = _as_float("threshold", threshold)
    if not 0 < thr < 1:
        raise InvalidParameterError("threshold", threshold, "in the open interval (0, 1)")
    if np.any(cc <= 0):
        raise InvalidParameterError("conc", conc, "> 0")
    times = -math.log1p(-thr) / (kon_ * cc + koff_)
    if cc.ndim == 0:
        return float(times)
    return times


def kd(kon: float, koff: float) -> float:
    """Equilibrium dissociation constant ``KD = koff / kon`` (M).

    >>> round(kd(1e4, 0.01), 12)
    1e-06
    """
    return _positive("koff", koff) / _positive("kon", kon)
