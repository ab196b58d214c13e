"""
Kinfit: least-squares fitting of biosensor binding traces.

The kinetic models in :mod:`kinfit.fitting.models` are wired into `lmfit` here.
The regression itself is entirely lmfit's; this module only provides:

1.  **Parameter construction**: `lmfit.Parameters` with positivity bounds and
    initial guesses estimated from the trace (dissociation log-slope for
    `koff`, association half-rise time for `kon`, plateau for `rmax`).

2.  **Residuals**: weighted residuals ``(y - model) / y_err`` computed by the
    pure model functions, safe to call thousands of times per fit.

3.  **Fitting**: `fit_binding` runs an lmfit `Minimizer` (Levenberg-Marquardt,
    or `least_squares` with Huber loss when robust) and returns a `FitResult`.
"""

from __future__ import annotations

import copy
import logging
from sys import float_info

import lmfit  # type: ignore[import-untyped]
import numpy as np
from lmfit import Parameters
from lmfit.minimizer import Minimizer  # type: ignore[import-untyped]

from kinfit.fitting.data_structures import FitResult, Trace
from kinfit.fitting.errors import InsufficientDataError
from kinfit.fitting.models import binding_1to1, binding_2to1
from kinfit.kinfit_types import ArrayF, ArrayLike

# --- Globals ---
#: Parameter names of each kinetic model.
MODELS: dict[str, tuple[str, ...]] = {
    "1to1": ("kon", "koff", "rmax", "drift"),
    "2to1": ("kon1", "koff1", "rmax1", "kon2", "koff2", "rmax2"),
}
KON_DEFAULT = 1e5  # M⁻¹s⁻¹, used when the association phase gives no estimate
KOFF_DEFAULT = 1e-3  # s⁻¹, used when the dissociation phase gives no estimate
SITE_SPLIT = 3.0  # 2:1 guesses place the two koff this factor apart
DECAY_FLOOR = 0.05  # fraction of the peak below which decay samples are ignored

logger = logging.getLogger(__name__)


def _check_model(model: str) -> None:
    if model not in MODELS:
        msg = f"Unknown model '{model}'. Choose one of: {', '.join(MODELS)}."
        raise ValueError(msg)


def _guess_koff(trace: Trace) -> float:
    """Estimate koff from the log-linear decay of the dissociation phase."""
    # baseline-level samples carry no decay information
    floor = DECAY_FLOOR * np.max(trace.y, initial=0.0)
    diss = ~trace.association & (trace.y > max(floor, 0.0))
    if np.count_nonzero(diss) < 2:  # noqa: PLR2004
        return KOFF_DEFAULT
    slope = np.polyfit(trace.t[diss] - trace.t0, np.log(trace.y[diss]), 1)[0]
    return float(-slope) if slope < 0 else KOFF_DEFAULT


def _guess_kobs(trace: Trace) -> tuple[float, float]:
    """Estimate k_obs and the response at t0 from the association half-rise time."""
    t, y = trace.t[trace.association], trace.y[trace.association]
    if t.size < 2 or np.max(y) <= 0:  # noqa: PLR2004
        return 0.0, float(np.max(trace.y, initial=0.0))
    order = np.argsort(t)
    t, y = t[order], y[order]
    r_end = float(y[-1])
    above = np.flatnonzero(y >= 0.5 * r_end)
    t_half = float(t[above[0]] - t[0]) if above.size else float(t[-1] - t[0])
    if t_half <= 0:
        return 0.0, r_end
    return np.log(2) / t_half, r_end


def _initial_site(trace: Trace) -> tuple[float, float, float]:
    """Return (kon, koff, rmax) starting values for a single site."""
    koff = _guess_koff(trace)
    k_obs, r_end = _guess_kobs(trace)
    conc = trace.conc
    if k_obs > 0 and conc > 0:
        kon = max(k_obs - koff, 0.1 * k_obs) / conc
    else:
        kon = KON_DEFAULT
    r_end = r_end if r_end > 0 else 1.0
    if conc > 0:
        saturation = -np.expm1(-(kon * conc + koff) * trace.t0)
        rmax = r_end / max(saturation, 1e-3) * (conc + koff / kon) / conc
    else:
        rmax = r_end
    return float(kon), float(koff), float(rmax)


def build_params_1to1(trace: Trace, *, fit_drift: bool = False) -> Parameters:
    """Initialize lmfit Parameters for the 1:1 model from a Trace.

    Parameters
    ----------
    trace : Trace
        The measured sensorgram.
    fit_drift : bool
        Whether the baseline drift is a free parameter (fixed at 0 otherwise).

    Returns
    -------
    Parameters
    """
    kon, koff, rmax = _initial_site(trace)
    params = Parameters()
    # epsilon keeps the model inside its domain during minimization
    params.add("kon", value=kon, min=float_info.epsilon)
    params.add("koff", value=koff, min=float_info.epsilon)
    params.add("rmax", value=rmax, min=float_info.epsilon)
    params.add("drift", value=0.0, vary=fit_drift)
    logger.debug("1to1 initial guesses: kon=%g koff=%g rmax=%g", kon, koff, rmax)
    return params


def build_params_2to1(trace: Trace) -> Parameters:
    """Initialize lmfit Parameters for the 2:1 model from a Trace.

    Both sites start from the 1:1 estimate with the dissociation rates split
    by `SITE_SPLIT` (site 1 fast, site 2 slow) and the capacity halved.
    """
    kon, koff, rmax = _initial_site(trace)
    params = Parameters()
    for site, factor in (("1", SITE_SPLIT), ("2", 1 / SITE_SPLIT)):
        params.add(f"kon{site}", value=kon * factor, min=float_info.epsilon)
        params.add(f"koff{site}", value=koff * factor, min=float_info.epsilon)
        params.add(f"rmax{site}", value=rmax / 2, min=float_info.epsilon)
    return params


def evaluate(
    params: Parameters, t: ArrayLike, t0: float, conc: float, model: str = "1to1"
) -> ArrayF:
    """Evaluate the named kinetic model for a set of lmfit Parameters."""
    _check_model(model)
    p = params.valuesdict()
    if model == "1to1":
        return binding_1to1(
            np.asarray(t, dtype=np.float64),
            t0,
            conc,
            p["kon"],
            p["koff"],
            p["rmax"],
            p.get("drift", 0.0),
        )
    return binding_2to1(
        np.asarray(t, dtype=np.float64),
        t0,
        conc,
        *(p[name] for name in MODELS["2to1"]),
    )


def binding_residuals(params: Parameters, trace: Trace, model: str = "1to1") -> ArrayF:
    """Compute weighted residuals of `trace` against the kinetic model for lmfit."""
    y_model = evaluate(params, trace.t, trace.t0, trace.conc, model)
    return (trace.y - y_model) / trace.y_err


def fit_binding(
    trace: Trace,
    model: str = "1to1",
    *,
    params: Parameters | None = None,
    robust: bool = False,
    fit_drift: bool = False,
) -> FitResult:
    """Fit a binding trace with the 1:1 or 2:1 kinetic model.

    Parameters
    ----------
    trace : Trace
        Input sensorgram with t, y, optional y_err, t0 and conc.
    model : str
        "1to1" or "2to1".
    params : Parameters | None
        Starting parameters; estimated from the trace when None.
    robust : bool
        If True, use Huber loss for robust fitting (reduces outlier influence).
    fit_drift : bool
        Let the 1:1 baseline drift vary. Ignored when `params` is given.

    Returns
    -------
    FitResult

    Raises
    ------
    InsufficientDataError
        If there are not enough data points for the number of free parameters.
    ValueError
        If `model` is unknown.
    """
    _check_model(model)
    if params is None:
        params = (
            build_params_1to1(trace, fit_drift=fit_drift)
            if model == "1to1"
            else build_params_2to1(trace)
        )
    n_free = sum(p.vary for p in params.values())
    if n_free > len(trace.y):
        msg = (
            f"Not enough data points ({len(trace.y)}) for the number of "
            f"free parameters ({n_free})."
        )
        raise InsufficientDataError(msg)
    logger.debug("Fitting %s model on %d points.", model, len(trace.y))
    mini = Minimizer(
        binding_residuals, params, fcn_args=(trace, model), scale_covar=True
    )
    if robust:
        result = mini.minimize(method="least_squares", loss="huber")
    else:
        result = mini.minimize()
    if not result.success:
        logger.warning("%s fit did not converge: %s", model, result.message)
    else:
        logger.info("%s fit: redchi=%.3g nfev=%d", model, result.redchi, result.nfev)
    return FitResult(result, mini, copy.deepcopy(trace), model)


def weight_trace(trace: Trace, model: str = "1to1") -> bool:
    """Estimate `y_err` of a trace from the residuals of an unweighted fit.

    The standard deviation of the residuals is used as a uniform uncertainty
    for subsequent weighted fits.

    Returns
    -------
    bool
        True if the weighting fit was successful, False otherwise.
    """
    trace.y_errc = np.array([])
    try:
        fr = fit_binding(trace, model)
    except InsufficientDataError:
        trace.y_err = np.ones_like(trace.tc)
        return False
    sd = np.std(fr.result.residual, ddof=1) if fr.result else np.nan
    trace.y_err = np.array(sd if np.isfinite(sd) and sd > 0 else 1.0)
    return True


def report(fr: FitResult, min_correl: float = 0.5) -> str:
    """Return the lmfit fit report of a FitResult."""
    if fr.result is None:
        return "No fit result."
    return str(lmfit.fit_report(fr.result, min_correl=min_correl))
