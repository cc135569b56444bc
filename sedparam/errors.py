"""Custom exceptions for the :mod:`sedparam` package."""
from __future__ import annotations


class SedParamError(Exception):
    """Base exception for parameter-file authoring errors."""


class MissingRequiredFieldError(SedParamError, ValueError):
    """A mandatory input (prefix, filter list, redshift grid) was not supplied."""


class ValidationError(SedParamError, ValueError):
    """A parameter has the wrong shape, an unsupported value or conflicts with another."""


class NotFoundError(SedParamError, FileNotFoundError):
    """A parameter file that must already exist could not be found."""


class ParFileFormatError(SedParamError, ValueError):
    """A Yanny parameter file could not be parsed."""


__all__ = [
    "SedParamError",
    "MissingRequiredFieldError",
    "ValidationError",
    "NotFoundError",
    "ParFileFormatError",
]
