"""Parameter-record schema for iSEDfit-style parameter files.

A :class:`ParameterRecord` is a single flat row of the ``ISEDFITPARAMS``
table.  Field order follows the column order of the persisted table.  The
:class:`ParamOverrides` model accepts the same fields, all optional, and is
used to collect user overrides before they are merged onto the defaults.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from . import constants
from .errors import ValidationError


def _check_range(name: str, value: Any) -> Any:
    if value is None:
        return value
    try:
        size = len(value)
    except TypeError:
        raise ValidationError(f"{name} must be a two-element [min, max] range, got {value!r}") from None
    if size != 2:
        raise ValidationError(f"{name} must have exactly 2 elements, got {size}")
    return list(value)


class ParameterRecord(BaseModel):
    """One set of SFH-grid priors plus the cosmology and population choices."""

    prefix: str = Field(..., description="Project prefix; also names the output file")
    h100: float = Field(..., description="Hubble constant in units of 100 km/s/Mpc")
    omega0: float = Field(..., description="Matter density parameter")
    omegal: float = Field(..., description="Vacuum energy density parameter")
    spsmodels: str = Field(..., description="Stellar population synthesis model identifier")
    imf: str = Field(..., description="Initial mass function identifier")
    redcurve: str = Field(..., description="Dust attenuation curve")
    igm: bool = Field(..., description="Include IGM attenuation")
    sfhgrid: int = Field(..., description="SFH grid number, unique within a file")
    nmodel: int = Field(..., description="Number of Monte Carlo models")
    ndraw: int = Field(..., description="Number of posterior draws")
    nminphot: int = Field(..., description="Minimum number of photometric bands per galaxy")
    galchunksize: int = Field(..., description="Galaxies processed per chunk")
    age: List[float] = Field(..., description="Age prior [Gyr]")
    tau: List[float] = Field(..., description="SFH e-folding time prior [Gyr]")
    Zmetal: List[float] = Field(..., description="Stellar metallicity prior")
    AV: List[float] = Field(..., description="V-band attenuation prior [mag]")
    mu: List[float] = Field(..., description="Birth-cloud to diffuse ISM attenuation ratio prior")
    pburst: float = Field(..., description="Probability of a burst per interval")
    interval_pburst: float = Field(..., description="Burst interval [Gyr]")
    tburst: List[float] = Field(..., description="Burst epoch prior [Gyr]")
    fburst: List[float] = Field(..., description="Burst mass fraction prior")
    dtburst: List[float] = Field(..., description="Burst duration prior [Gyr]")
    trunctau: List[float] = Field(..., description="Truncation e-folding prior [Gyr]")
    fractrunc: float = Field(..., description="Fraction of truncated bursts")
    oiiihb: List[float] = Field(..., description="log [OIII]/Hbeta prior")
    nebular: bool
    oneovertau: bool
    delayed: bool
    flatAV: bool
    flatmu: bool
    flatfburst: bool
    flatdtburst: bool
    bursttype: int
    use_redshift: bool
    zlog: bool
    redshift: List[float] = Field(..., description="Redshift grid")
    filterlist: List[str] = Field(..., description="Bandpass file names")

    @field_validator("prefix")
    def _validate_prefix(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValidationError("prefix must be a non-empty string")
        return value.strip()

    @field_validator("redcurve", mode="before")
    def _normalise_redcurve(cls, value: Any) -> Any:
        """Lower-case and trim the curve name before checking it."""

        text = str(value).strip().lower()
        if text not in constants.REDCURVES:
            allowed = ", ".join(constants.REDCURVES)
            raise ValidationError(f"Unsupported reddening curve {value!r}; expected one of: {allowed}")
        return text

    @field_validator(*constants.RANGE_FIELDS, mode="before")
    def _validate_range(cls, value: Any, info: ValidationInfo) -> Any:
        return _check_range(info.field_name, value)

    @field_validator(*constants.COUNT_FIELDS)
    def _validate_count(cls, value: int, info: ValidationInfo) -> int:
        if value <= 0:
            raise ValidationError(f"{info.field_name} must be positive, got {value}")
        return value

    @field_validator("redshift", "filterlist")
    def _validate_nonempty(cls, value: List[Any], info: ValidationInfo) -> List[Any]:
        if len(value) == 0:
            raise ValidationError(f"{info.field_name} must contain at least one entry")
        return value

    @model_validator(mode="after")
    def _check_sfh_flags(self) -> "ParameterRecord":
        if self.delayed and self.oneovertau:
            raise ValidationError("DELAYED and ONEOVERTAU may not both be set")
        if self.oneovertau and self.tau[0] <= 0.0:
            raise ValidationError(f"ONEOVERTAU requires tau > 0, got tau={self.tau}")
        return self


class ParamOverrides(BaseModel):
    """User-supplied values layered onto a default :class:`ParameterRecord`.

    ``None`` means "not supplied".  Unknown names are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    h100: Optional[float] = None
    omega0: Optional[float] = None
    omegal: Optional[float] = None
    spsmodels: Optional[str] = None
    imf: Optional[str] = None
    redcurve: Optional[str] = None
    igm: Optional[bool] = None
    sfhgrid: Optional[int] = None
    nmodel: Optional[int] = None
    ndraw: Optional[int] = None
    nminphot: Optional[int] = None
    galchunksize: Optional[int] = None
    age: Optional[List[float]] = None
    tau: Optional[List[float]] = None
    Zmetal: Optional[List[float]] = None
    AV: Optional[List[float]] = None
    mu: Optional[List[float]] = None
    pburst: Optional[float] = None
    interval_pburst: Optional[float] = None
    tburst: Optional[List[float]] = None
    fburst: Optional[List[float]] = None
    dtburst: Optional[List[float]] = None
    trunctau: Optional[List[float]] = None
    fractrunc: Optional[float] = None
    oiiihb: Optional[List[float]] = None
    nebular: Optional[bool] = None
    oneovertau: Optional[bool] = None
    delayed: Optional[bool] = None
    flatAV: Optional[bool] = None
    flatmu: Optional[bool] = None
    flatfburst: Optional[bool] = None
    flatdtburst: Optional[bool] = None
    bursttype: Optional[int] = None

    @field_validator(*constants.RANGE_FIELDS, mode="before")
    def _validate_range(cls, value: Any, info: ValidationInfo) -> Any:
        return _check_range(info.field_name, value)

    def supplied(self) -> Dict[str, Any]:
        """Return only the fields the caller actually set."""

        return self.model_dump(exclude_none=True)


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(item) for item in err.get("loc", ()))
        msg = str(err.get("msg", "")).removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def validate_record(data: Mapping[str, Any]) -> ParameterRecord:
    """Build a :class:`ParameterRecord` from ``data`` raising :class:`ValidationError` on failure."""

    try:
        return ParameterRecord.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc


def parse_overrides(values: Mapping[str, Any]) -> ParamOverrides:
    """Collect keyword overrides, rejecting unknown names and malformed ranges."""

    try:
        return ParamOverrides.model_validate(dict(values))
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc


FIELD_NAMES = tuple(ParameterRecord.model_fields)

__all__ = [
    "FIELD_NAMES",
    "ParameterRecord",
    "ParamOverrides",
    "parse_overrides",
    "validate_record",
]
