"""Core data structures in `kinfit`.

Classes:
--------
- Trace: A measured sensorgram, matched `t`, `y` and optional `y_err` arrays
  together with the assay conditions (`t0`, `conc`).
- FitResult: Container of an lmfit fit of a `Trace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from lmfit import Parameter, Parameters  # type: ignore[import-untyped]
from lmfit.minimizer import Minimizer, MinimizerResult  # type: ignore[import-untyped]
from uncertainties import correlated_values, ufloat  # type: ignore[import-untyped]

from kinfit.fitting.errors import FileFormatError
from kinfit.fitting.models import kd
from kinfit.kinfit_types import ArrayF, ArrayMask


@dataclass
class Trace:
    """Represent a sensorgram: matched `t`, `y`, and optional `y_err` arrays."""

    #: t at creation
    tc: ArrayF
    #: y at creation
    yc: ArrayF
    #: dissociation onset (s)
    t0: float
    #: analyte concentration (M)
    conc: float
    #: y_err at creation
    y_errc: ArrayF = field(init=True, default_factory=lambda: np.array([]))
    _mask: ArrayMask = field(init=False)

    def __post_init__(self) -> None:
        """Coerce arrays to float and check lengths."""
        self.tc = np.asarray(self.tc, dtype=np.float64)
        self.yc = np.asarray(self.yc, dtype=np.float64)
        self.y_errc = np.asarray(self.y_errc, dtype=np.float64)
        if len(self.tc) != len(self.yc):
            msg = "Length of 'tc' and 'yc' must be equal."
            raise ValueError(msg)
        self._validate_yerrc_lengths()
        self._mask = ~np.isnan(self.yc)

    def _validate_yerrc_lengths(self) -> None:
        if self.y_errc.size > 0 and len(self.tc) != len(self.y_errc):
            msg = "Length of 'tc' and 'y_errc' must be equal."
            raise ValueError(msg)

    @property
    def mask(self) -> ArrayMask:
        """Mask."""
        return self._mask

    @mask.setter
    def mask(self, mask: ArrayMask) -> None:
        """Only boolean where yc is not nan are considered."""
        self._mask = mask & ~np.isnan(self.yc)

    @property
    def t(self) -> ArrayF:
        """Masked t."""
        return self.tc[self.mask]

    @property
    def y(self) -> ArrayF:
        """Masked y."""
        return self.yc[self.mask]

    @property
    def y_err(self) -> ArrayF:
        """Masked y_err; unit errors when none were given."""
        if self.y_errc.size == 0:
            return np.ones_like(self.t)
        return self.y_errc[self.mask]

    @y_err.setter
    def y_err(self, y_errc: ArrayF) -> None:
        """Set y_err and validate its length."""
        y_errc = np.asarray(y_errc, dtype=np.float64)
        if y_errc.ndim == 0:
            y_errc = np.ones_like(self.tc) * y_errc
        self.y_errc = y_errc
        self._validate_yerrc_lengths()

    @property
    def association(self) -> ArrayMask:
        """Masked samples belonging to the association phase."""
        return self.t <= self.t0

    @classmethod
    def from_frame(cls, df: pd.DataFrame, t0: float, conc: float) -> Trace:
        """Build a Trace from a DataFrame with `t`, `y` and optional `y_err` columns.

        Parameters
        ----------
        df : pd.DataFrame
            Table of the measured trace.
        t0 : float
            Dissociation onset (s).
        conc : float
            Analyte concentration (M).

        Returns
        -------
        Trace

        Raises
        ------
        FileFormatError
            If required columns are missing or hold non-numeric values.
        """
        source = str(df.attrs.get("source", "<DataFrame>"))
        expected = "CSV with columns: t, y[, y_err]"
        missing = {"t", "y"} - set(df.columns)
        if missing:
            raise FileFormatError(
                filepath=source,
                expected_format=expected,
                details=f"Missing column(s): {', '.join(sorted(missing))}",
            )
        columns = [c for c in ("t", "y", "y_err") if c in df]
        try:
            arrays = {c: df[c].to_numpy(dtype=float) for c in columns}
        except (TypeError, ValueError) as e:
            raise FileFormatError(
                filepath=source,
                expected_format=expected,
                details=f"Non-numeric value: {e}",
            ) from e
        y_err = arrays.get("y_err", np.array([]))
        return cls(arrays["t"], arrays["y"], t0, conc, y_err)


@dataclass
class FitResult:
    """Result container of a fitting procedure.

    Attributes
    ----------
    result : MinimizerResult | None
        lmfit result exposing `.params`, `.residual`, `.redchi` and `.success`.
    mini : Minimizer | None
        The lmfit Minimizer, kept for confidence intervals or emcee sampling.
    trace : Trace | None
        Trace used for the fit (a deep copy of the input trace).
    model : str
        Name of the kinetic model, "1to1" or "2to1".
    """

    result: MinimizerResult | None = None
    mini: Minimizer | None = None
    trace: Trace | None = None
    model: str = "1to1"

    @property
    def params(self) -> Parameters:
        """Best fit parameters (empty when the fit is invalid)."""
        return self.result.params if self.result else Parameters()

    def pprint(self) -> str:
        """Summarize fitted rate constants, capacities and the derived KD.

        KD carries the uncertainty propagated from the `kon`/`koff` covariance,
        and a fitted baseline drift is reported on its own line.
        """
        names = ("kon",) if self.model == "1to1" else ("kon1", "kon2")
        if not self.result or any(n not in self.result.params for n in names):
            return "Fit result is invalid or does not contain kinetic parameters."
        params = self.result.params
        sites = [""] if self.model == "1to1" else ["1", "2"]
        lines = []
        for s in sites:
            values = {
                name: _fmt(params[f"{name}{s}"]) for name in ("kon", "koff", "rmax")
            }
            lines.append(", ".join(f"{k}{s} = {v}" for k, v in values.items()))
            lines.append(f"KD{s} = {self._kd(s)}")
        if "drift" in params and params["drift"].vary:
            lines.append(f"drift = {_fmt(params['drift'])}")
        return "\n".join(lines)

    def _kd(self, site: str) -> str:
        """Format KD of a site, with its standard error when available."""
        params = self.result.params  # type: ignore[union-attr]
        kon, koff = params[f"kon{site}"], params[f"koff{site}"]
        value = kd(kon.value, koff.value)
        if not (kon.stderr and koff.stderr):
            return f"{value:.3g}"
        var_names = list(self.result.var_names)  # type: ignore[union-attr]
        covar = getattr(self.result, "covar", None)
        if covar is not None and {kon.name, koff.name} <= set(var_names):
            idx = [var_names.index(kon.name), var_names.index(koff.name)]
            u_kon, u_koff = correlated_values(
                [kon.value, koff.value], covar[np.ix_(idx, idx)]
            )
        else:
            u_kon = ufloat(kon.value, kon.stderr)
            u_koff = ufloat(koff.value, koff.stderr)
        return f"{ufloat(value, (u_koff / u_kon).std_dev):.2u}"

    def is_valid(self) -> bool:
        """Whether result, minimizer and trace exist."""
        return self.result is not None and self.mini is not None and self.trace is not None


def _fmt(par: Parameter) -> str:
    if par.stderr:
        return f"{ufloat(par.value, par.stderr):.2u}"
    return f"{par.value:.3g}"
