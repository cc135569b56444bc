"""Default parameter record (the fiducial iSEDfit priors)."""
from __future__ import annotations

from typing import Sequence

from . import constants
from .schema import ParameterRecord


def default_record(
    filterlist: Sequence[str],
    prefix: str,
    redshift: Sequence[float],
    *,
    use_redshift: bool = False,
    zlog: bool = False,
) -> ParameterRecord:
    """Return a record populated with the documented default priors.

    No validation is performed; the caller validates after applying
    overrides.  ``sfhgrid`` carries the unassigned sentinel.
    """

    values = {"prefix": prefix}
    values.update(constants.DEFAULT_COSMOLOGY)
    values.update(constants.DEFAULT_SCALARS)
    for name, bounds in constants.DEFAULT_RANGES.items():
        values[name] = list(bounds)
    for name in constants.BOOL_FIELDS:
        values.setdefault(name, False)
    values["use_redshift"] = bool(use_redshift)
    values["zlog"] = bool(zlog)
    values["redshift"] = [float(z) for z in redshift]
    values["filterlist"] = [str(name) for name in filterlist]
    return ParameterRecord.model_construct(**values)


__all__ = ["default_record"]
