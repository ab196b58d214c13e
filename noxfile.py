"""Nox sessions."""
import sys
from pathlib import Path

import nox
from nox import Session


package = "kinfit"
locations = "src", "tests", "./noxfile.py", "docs/conf.py"
python_versions = ["3.11", "3.12", "3.13"]
nox.options.sessions = ("mypy", "tests", "xdoctest", "docs")
nox.options.force_venv_backend = "venv"


@nox.session(python=python_versions)
def mypy(session: Session) -> None:
    """Type-check using mypy."""
    args = session.posargs or ["src", "tests", "docs/conf.py"]
    session.install("mypy", "pytest", "pandas-stubs", ".")
    session.run("mypy", *args)
    if not session.posargs:
        session.run("mypy", f"--python-executable={sys.executable}", "./noxfile.py")


@nox.session(python=python_versions)
def tests(session: Session) -> None:
    """Run the test suite."""
    session.install(".[tests]")
    try:
        session.run("coverage", "run", "--parallel", "-m", "pytest", *session.posargs)
    finally:
        if session.interactive:
            session.notify("coverage", posargs=[])


@nox.session(python=python_versions[-1])
def coverage(session: Session) -> None:
    """Produce the coverage report."""
    args = session.posargs or ["report"]
    session.install("coverage[toml]")
    if not session.posargs and any(Path().glob(".coverage.*")):
        session.run("coverage", "combine")
    session.run("coverage", *args)


@nox.session(python=python_versions)
def xdoctest(session: Session) -> None:
    """Run examples with xdoctest."""
    args = session.posargs or ["all"]
    session.install("xdoctest", "pygments", ".")
    session.run("python", "-m", "xdoctest", package, *args)


@nox.session(python=python_versions[-1])
def docs(session: Session) -> None:
    """Build the docs. Pass "serve" to serve."""
    session.install(".[docs]")
    session.run("sphinx-build", "docs", "docs/_build")
    if session.posargs:
        if "serve" in session.posargs:
            print("Launching docs at http://localhost:8000/ - use Ctrl-C to quit")
            session.run("python", "-m", "http.server", "8000", "-d", "docs/_build")
        else:
            session.warn("Unsupported argument to docs")


@nox.session
def clean(session: Session) -> None:
    """Clean local repository."""
    session.run(
        "rm",
        "-rf",
        ".coverage",
        "./__pycache__",
        "./.nox",
        "./.mypy_cache",
        "./.pytest_cache",
        "./docs/_build",
        "./src/" + package + "/__pycache__",
        "./tests/__pycache__",
        "./dist",
        external=True,
    )
