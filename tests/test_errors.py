"""Test cases for custom error classes."""

import pytest

from kinfit.fitting.errors import (
    CLIError,
    FileFormatError,
    FitError,
    InsufficientDataError,
    InvalidParameterError,
    KinfitError,
    ModelError,
    ShapeMismatchError,
)


def test_kinfit_error_base_class() -> None:
    """Test that KinfitError is the base class."""
    error = KinfitError("Base error")
    assert isinstance(error, Exception)
    assert str(error) == "Base error"


@pytest.mark.parametrize(
    ("cls", "parents"),
    [
        (ModelError, (KinfitError,)),
        (ShapeMismatchError, (ModelError, ValueError)),
        (FitError, (KinfitError,)),
        (InsufficientDataError, (FitError, KinfitError)),
        (CLIError, (KinfitError,)),
    ],
)
def test_error_hierarchy(cls: type[Exception], parents: tuple[type, ...]) -> None:
    """Each error can be caught by its base classes."""
    error = cls("message")
    for parent in parents:
        assert isinstance(error, parent)


def test_invalid_parameter_error() -> None:
    """It carries the parameter name, value and constraint."""
    error = InvalidParameterError("kon", -1, "> 0")
    assert error.name == "kon"
    assert error.value == -1
    assert error.constraint == "> 0"
    assert str(error) == "Invalid parameter kon=-1: must be > 0."
    assert isinstance(error, ModelError)
    assert isinstance(error, ValueError)


def test_file_format_error() -> None:
    """Test FileFormatError with various parameters."""
    error = FileFormatError(
        filepath="/path/to/trace.csv",
        expected_format="CSV with columns: t, y",
    )
    assert "Invalid file format" in str(error)
    assert "/path/to/trace.csv" in str(error)
    assert "CSV with columns" in str(error)

    error_with_details = FileFormatError(
        filepath="/path/to/trace.csv",
        expected_format="CSV format",
        details="Missing column(s): y",
    )
    assert "Missing column(s): y" in str(error_with_details)
    assert error_with_details.filepath == "/path/to/trace.csv"
    assert error_with_details.expected_format == "CSV format"


def test_error_can_be_caught_by_inheritance() -> None:
    """Test that FileFormatError can be caught as KinfitError."""
    msg = "trace.csv"
    with pytest.raises(KinfitError):
        raise FileFormatError(msg, "Expected format")
