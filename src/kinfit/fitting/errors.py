"""Error classes for kinfit.

This module defines custom exceptions used throughout the kinfit package.
Model functions raise before producing any numeric output, so invalid inputs
never show up downstream as NaN or Inf.
"""


class KinfitError(Exception):
    """Base class for all kinfit errors."""


class ModelError(KinfitError):
    """Base class for errors raised by the kinetic model functions."""


class InvalidParameterError(ModelError, ValueError):
    """Raised when a scalar argument falls outside its physical domain.

    Parameters
    ----------
    name : str
        Name of the offending argument (e.g. ``"kon2"``).
    value : object
        The rejected value.
    constraint : str
        Human readable domain, e.g. ``"> 0"``.
    """

    def __init__(self, name: str, value: object, constraint: str) -> None:
        self.name = name
        self.value = value
        self.constraint = constraint
        super().__init__(f"Invalid parameter {name}={value!r}: must be {constraint}.")


class ShapeMismatchError(ModelError, ValueError):
    """Raised when a time or concentration input is not a usable 1-D sequence."""


class FitError(KinfitError):
    """Base class for fitting errors."""


class InsufficientDataError(FitError):
    """Raised to prevent fitting failure for too few data points."""


# CLI-specific errors
class CLIError(KinfitError):
    """Base class for CLI-related errors."""


class FileFormatError(CLIError):
    """Raised when an input file has invalid format.

    Parameters
    ----------
    filepath : str
        Path to the problematic file.
    expected_format : str
        Description of expected file format.
    details : str, optional
        Additional details about the error.
    """

    def __init__(self, filepath: str, expected_format: str, details: str = "") -> None:
        self.filepath = filepath
        self.expected_format = expected_format
        message = f"Invalid file format: {filepath}\nExpected: {expected_format}"
        if details:
            message += f"\nDetails: {details}"
        super().__init__(message)
