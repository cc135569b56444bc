"""Authoring of iSEDfit SED-fitting parameter files."""
from . import constants
from .errors import SedParamError
from .paramfile import read_paramfile, write_paramfile
from .schema import ParameterRecord

__all__ = ["constants", "ParameterRecord", "SedParamError", "read_paramfile", "write_paramfile"]
