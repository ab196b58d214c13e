"""Kinetic models, data containers, and lmfit fitting utilities.

Re-export key submodules for convenient access.
"""

from . import core, data_structures, errors, models

__all__ = [
    "core",
    "data_structures",
    "errors",
    "models",
]
