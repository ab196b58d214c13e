"""Command-line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import click
import numpy as np
import pandas as pd
from click import Context, Path as cPath

from kinfit import configure_logging
from kinfit.fitting import core, models
from kinfit.fitting.data_structures import Trace
from kinfit.fitting.errors import FileFormatError, KinfitError

FLOAT_FMT = "%.6g"

logger = logging.getLogger("kinfit.cli")


@click.group()
@click.pass_context
@click.version_option(message="%(version)s")
@click.option("--verbose", "-v", count=True, help="Increase verbosity: -v for INFO, -vv for DEBUG. Default is WARNING.")  # fmt: skip
@click.option("--quiet", "-q", is_flag=True, help="Silence terminal output; show only ERROR messages.")  # fmt: skip
@click.option("--log", "log_file", type=cPath(dir_okay=False), default="", help="Also write DEBUG messages to this file.")  # fmt: skip
def kinfit(ctx: Context, verbose: int, quiet: bool, log_file: str) -> None:
    """Simulate and fit biosensor binding kinetics."""
    ctx.ensure_object(dict)
    configure_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    logger.debug("CLI started")


def _time_grid(t0: float, tmax: float | None, step: float) -> np.ndarray:
    tmax = 2 * t0 if tmax is None else tmax
    return np.arange(0.0, tmax + step / 2, step)


def _echo_table(data: dict[str, np.ndarray]) -> None:
    click.echo(pd.DataFrame(data).to_csv(index=False, float_format=FLOAT_FMT), nl=False)


@kinfit.command()
@click.argument("t0", type=float)
@click.argument("conc", type=float)
@click.argument("kon", type=float)
@click.argument("koff", type=float)
@click.argument("rmax", type=float)
@click.option("--drift", type=float, default=0.0, show_default=True, help="Baseline drift during association (response/s).")  # fmt: skip
@click.option("--tmax", type=float, default=None, help="Last time point (s). Default 2*T0.")  # fmt: skip
@click.option("--step", type=click.FloatRange(min=0, min_open=True), default=1.0, show_default=True, help="Sampling interval (s).")  # fmt: skip
def sim1(  # noqa: PLR0913
    t0: float,
    conc: float,
    kon: float,
    koff: float,
    rmax: float,
    drift: float,
    tmax: float | None,
    step: float,
) -> None:
    """Simulate a 1:1 binding trace as CSV (t,response).

    T0 is the dissociation onset (s) and CONC the analyte concentration (M).
    """
    t = _time_grid(t0, tmax, step)
    try:
        response = models.binding_1to1(t, t0, conc, kon, koff, rmax, drift=drift)
    except KinfitError as e:
        raise click.ClickException(str(e)) from e
    _echo_table({"t": t, "response": response})


@kinfit.command()
@click.argument("t0", type=float)
@click.argument("conc", type=float)
@click.argument("kon1", type=float)
@click.argument("koff1", type=float)
@click.argument("rmax1", type=float)
@click.argument("kon2", type=float)
@click.argument("koff2", type=float)
@click.argument("rmax2", type=float)
@click.option("--tmax", type=float, default=None, help="Last time point (s). Default 2*T0.")  # fmt: skip
@click.option("--step", type=click.FloatRange(min=0, min_open=True), default=1.0, show_default=True, help="Sampling interval (s).")  # fmt: skip
def sim2(  # noqa: PLR0913
    t0: float,
    conc: float,
    kon1: float,
    koff1: float,
    rmax1: float,
    kon2: float,
    koff2: float,
    rmax2: float,
    tmax: float | None,
    step: float,
) -> None:
    """Simulate a 2:1 heterogeneous binding trace as CSV (t,response)."""
    t = _time_grid(t0, tmax, step)
    try:
        response = models.binding_2to1(
            t, t0, conc, kon1, koff1, rmax1, kon2, koff2, rmax2
        )
    except KinfitError as e:
        raise click.ClickException(str(e)) from e
    _echo_table({"t": t, "response": response})


@kinfit.command()
@click.argument("kon", type=float)
@click.argument("koff", type=float)
@click.argument("conc", type=float, nargs=-1, required=True)
@click.option("--threshold", "-f", type=float, default=models.DEFAULT_THRESHOLD, show_default=True, help="Fraction of equilibrium.")  # fmt: skip
def tteq(kon: float, koff: float, conc: tuple[float, ...], threshold: float) -> None:
    """Time (s) for the association phase to reach a fraction of equilibrium."""
    try:
        times = models.tteq(list(conc), kon, koff, threshold=threshold)
    except KinfitError as e:
        raise click.ClickException(str(e)) from e
    _echo_table({"conc": np.array(conc), "tteq": times})


@kinfit.command()
@click.argument("csv_f", type=cPath(exists=True, dir_okay=False))
@click.option("--t0", type=float, required=True, help="Dissociation onset (s).")
@click.option("--conc", type=float, required=True, help="Analyte concentration (M).")
@click.option("--model", "-m", type=click.Choice(list(core.MODELS)), default="1to1", show_default=True, help="Kinetic model.")  # fmt: skip
@click.option("--robust", is_flag=True, help="Use Huber loss to reduce outlier influence.")  # fmt: skip
@click.option("--drift", "fit_drift", is_flag=True, help="Fit a baseline drift (1to1 only).")  # fmt: skip
@click.option("--weight/--no-weight", default=False, show_default=True, help="Estimate y_err from a first fit when the CSV has none.")  # fmt: skip
def fit(  # noqa: PLR0913
    csv_f: str,
    t0: float,
    conc: float,
    model: str,
    robust: bool,
    fit_drift: bool,
    weight: bool,
) -> None:
    """Fit a measured trace (CSV with columns t, y[, y_err])."""
    fp = Path(csv_f)
    logger.info("Fitting %s with %s model.", fp, model)
    try:
        df = pd.read_csv(fp)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        msg = (
            f"Error parsing trace file: {fp}\n"
            f"Expected format: CSV with columns t, y[, y_err].\n"
            f"Details: {e}"
        )
        raise click.ClickException(msg) from e
    df.attrs["source"] = str(fp)
    try:
        trace = Trace.from_frame(df, t0=t0, conc=conc)
        if weight and trace.y_errc.size == 0:
            core.weight_trace(trace, model)
        f_res = core.fit_binding(trace, model, robust=robust, fit_drift=fit_drift)
    except FileFormatError as e:
        raise click.ClickException(str(e)) from e
    except KinfitError as e:
        msg = f"Fit failed: {e}"
        raise click.ClickException(msg) from e
    click.echo(core.report(f_res))
    click.echo()
    click.echo(f_res.pprint())
