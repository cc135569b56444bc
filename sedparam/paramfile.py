"""Create, append to and read iSEDfit parameter files.

:func:`write_paramfile` is the main entry point.  It resolves the redshift
grid, layers the caller's overrides on the default priors, validates the
result, assigns a unique ``sfhgrid`` number and writes
``<paramfile_dir>/<prefix>_paramfile.par``.  Appending never edits the file
in place: the existing records are read, the new record is added and the
whole table is rewritten.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from . import constants
from .defaults import default_record
from .errors import MissingRequiredFieldError, NotFoundError, ParFileFormatError, ValidationError
from .io import yanny
from .provenance import header_comments
from .redshift import resolve_redshift
from .schema import ParameterRecord, parse_overrides, validate_record

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def paramfile_path(prefix: str, paramfile_dir: Optional[PathLike] = None) -> Path:
    """Return ``<paramfile_dir>/<prefix>_paramfile.par``.

    ``paramfile_dir`` defaults to the current working directory at call time.
    """

    directory = Path.cwd() if paramfile_dir is None else Path(paramfile_dir).expanduser()
    return directory / f"{prefix}{constants.PARAMFILE_SUFFIX}"


def apply_overrides(record: ParameterRecord, overrides: Mapping[str, Any]) -> ParameterRecord:
    """Overlay ``overrides`` on ``record`` and validate the merged result.

    ``tburst`` follows ``age`` unless it is overridden explicitly.
    """

    data = record.model_dump()
    for name, value in overrides.items():
        if value is None:
            continue
        data[name] = list(value) if name in constants.RANGE_FIELDS else value
    if overrides.get("tburst") is None:
        data["tburst"] = list(data["age"])
    return validate_record(data)


def next_sfhgrid(records: Sequence[ParameterRecord]) -> int:
    """Return the next free grid number (``1`` for an empty file)."""

    if not records:
        return 1
    return max(rec.sfhgrid for rec in records) + 1


def check_unique_sfhgrid(records: Sequence[ParameterRecord]) -> None:
    seen = set()
    duplicates = set()
    for rec in records:
        if rec.sfhgrid in seen:
            duplicates.add(rec.sfhgrid)
        seen.add(rec.sfhgrid)
    if duplicates:
        dupes = ", ".join(str(value) for value in sorted(duplicates))
        raise ValidationError(f"SFHGRID numbers must be unique (duplicated: {dupes})")


def select_sfhgrid(records: Sequence[ParameterRecord], sfhgrid: int) -> List[ParameterRecord]:
    """Return the records with grid number ``sfhgrid``."""

    chosen = [rec for rec in records if rec.sfhgrid == int(sfhgrid)]
    if not chosen:
        available = ", ".join(str(rec.sfhgrid) for rec in records) or "none"
        raise ValidationError(f"SFHGRID {sfhgrid} not found (available: {available})")
    return chosen


def read_paramfile(path: PathLike, *, sfhgrid: Optional[int] = None) -> List[ParameterRecord]:
    """Load the records stored in a parameter file.

    Parameters
    ----------
    path:
        Parameter file written by :func:`write_paramfile`.
    sfhgrid:
        When given, only the matching record(s) are returned.
    """

    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Parameter file {path} not found")
    parfile = yanny.read_par(path)
    rows = parfile.tables.get(constants.TABLE_NAME)
    if rows is None:
        raise ParFileFormatError(f"{path} has no {constants.TABLE_NAME} table")
    records = [validate_record(row) for row in rows]
    if sfhgrid is not None:
        return select_sfhgrid(records, sfhgrid)
    return records


def write_records(path: PathLike, records: Sequence[ParameterRecord], *, comments: Sequence[str] = ()) -> Path:
    """Serialise ``records`` as the ``ISEDFITPARAMS`` table of ``path``."""

    rows: List[Dict[str, Any]] = [rec.model_dump() for rec in records]
    return yanny.write_par(
        Path(path),
        {constants.TABLE_NAME: rows},
        comments=header_comments(extra=comments),
    )


def write_paramfile(
    filterlist: Optional[Sequence[str]] = None,
    *,
    prefix: Optional[str] = None,
    paramfile_dir: Optional[PathLike] = None,
    zminmax: Optional[Sequence[float]] = None,
    nzz: Optional[int] = None,
    zlog: bool = False,
    use_redshift: Optional[Sequence[float]] = None,
    append: bool = False,
    clobber: bool = False,
    comments: Sequence[str] = (),
    **overrides: Any,
) -> Optional[Path]:
    """Build a parameter record and write it to ``<prefix>_paramfile.par``.

    Parameters
    ----------
    filterlist:
        Bandpass file names; required.
    prefix:
        Project prefix; required.
    paramfile_dir:
        Output directory; defaults to the current working directory.
    zminmax, nzz, zlog:
        Redshift grid of ``nzz`` points over ``[zmin, zmax]``, spaced in
        ``log10(z)`` when ``zlog`` is set.
    use_redshift:
        Explicit redshift array; takes precedence over ``zminmax``/``nzz``.
    append:
        Add a record to an existing file instead of creating a new one.
    clobber:
        Overwrite an existing file.
    comments:
        Extra header comment lines.
    **overrides:
        Any other :class:`~sedparam.schema.ParameterRecord` field.

    Returns
    -------
    pathlib.Path or None
        The written file, or ``None`` when the file exists and neither
        ``clobber`` nor ``append`` was requested.
    """

    if prefix is None or not str(prefix).strip():
        raise MissingRequiredFieldError("PREFIX input required")
    if filterlist is None:
        raise MissingRequiredFieldError("FILTERLIST input required")
    if isinstance(filterlist, str):
        filterlist = [filterlist]
    if len(filterlist) == 0:
        raise MissingRequiredFieldError("FILTERLIST input required")
    prefix = str(prefix).strip()

    redshift, redshift_given = resolve_redshift(
        zminmax=zminmax, nzz=nzz, zlog=zlog, use_redshift=use_redshift
    )
    supplied = parse_overrides(overrides).supplied()
    base = default_record(filterlist, prefix, redshift, use_redshift=redshift_given, zlog=zlog)
    record = apply_overrides(base, supplied)

    path = paramfile_path(prefix, paramfile_dir)
    requested = supplied.get("sfhgrid")
    if append:
        if not path.is_file():
            raise NotFoundError(f"Parameter file {path} not found; cannot append")
        existing = read_paramfile(path)
        sfhgrid = requested if requested is not None else next_sfhgrid(existing)
        records = existing + [record.model_copy(update={"sfhgrid": sfhgrid})]
        logger.info("Appending SFHGRID %d to %s (%d existing)", sfhgrid, path, len(existing))
    else:
        sfhgrid = requested if requested is not None else 1
        records = [record.model_copy(update={"sfhgrid": sfhgrid})]
    check_unique_sfhgrid(records)

    if path.exists() and not (clobber or append):
        logger.warning("Parameter file %s exists; use clobber=True to overwrite or append=True", path)
        return None

    logger.info("Writing parameter file %s", path)
    return write_records(path, records, comments=comments)


__all__ = [
    "apply_overrides",
    "check_unique_sfhgrid",
    "next_sfhgrid",
    "paramfile_path",
    "read_paramfile",
    "select_sfhgrid",
    "write_paramfile",
    "write_records",
]
