"""Defaults and fixed names shared across :mod:`sedparam`.

The literal defaults below describe the fiducial iSEDfit priors: an FSPS
(v2.4, MILES library) population with a Chabrier IMF, a Calzetti attenuation
curve and exponentially declining star-formation histories with stochastic
bursts.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

TABLE_NAME = "ISEDFITPARAMS"
PARAMFILE_SUFFIX = "_paramfile.par"
GENERATOR_NAME = "sedparam.write_paramfile"

# Sentinel carried by freshly built records until a grid number is assigned.
UNASSIGNED_SFHGRID = -1

REDCURVES: Tuple[str, ...] = ("none", "calzetti", "charlot", "odonnell", "smc")

RANGE_FIELDS: Tuple[str, ...] = (
    "age",
    "tau",
    "Zmetal",
    "AV",
    "mu",
    "tburst",
    "fburst",
    "dtburst",
    "trunctau",
    "oiiihb",
)

COUNT_FIELDS: Tuple[str, ...] = ("nmodel", "ndraw", "nminphot", "galchunksize")

BOOL_FIELDS: Tuple[str, ...] = (
    "igm",
    "nebular",
    "oneovertau",
    "delayed",
    "flatAV",
    "flatmu",
    "flatfburst",
    "flatdtburst",
    "use_redshift",
    "zlog",
)

DEFAULT_COSMOLOGY: Dict[str, float] = {"h100": 0.7, "omega0": 0.3, "omegal": 0.7}

DEFAULT_SCALARS: Dict[str, object] = {
    "spsmodels": "fsps_v2.4_miles",
    "imf": "chab",
    "redcurve": "calzetti",
    "igm": True,
    "sfhgrid": UNASSIGNED_SFHGRID,
    "nmodel": 10000,
    "ndraw": 2000,
    "nminphot": 3,
    "galchunksize": 5000,
    "pburst": 0.0,
    "interval_pburst": 2.0,
    "fractrunc": 0.0,
    "bursttype": 1,
}

DEFAULT_RANGES: Dict[str, List[float]] = {
    "age": [0.1, 13.0],
    "tau": [0.01, 1.0],
    "Zmetal": [0.004, 0.04],
    "AV": [0.35, 2.0],
    "mu": [0.1, 4.0],
    "tburst": [0.1, 13.0],
    "fburst": [0.03, 4.0],
    "dtburst": [0.03, 0.3],
    "trunctau": [-1.0, -1.0],
    "oiiihb": [-1.0, 1.0],
}
