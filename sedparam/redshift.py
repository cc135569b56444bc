"""Redshift grid construction."""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import MissingRequiredFieldError, ValidationError

logger = logging.getLogger(__name__)


def build_redshift_grid(zminmax: Sequence[float], nzz: int, *, zlog: bool = False) -> List[float]:
    r"""Return ``nzz`` redshifts spanning ``zminmax`` inclusive.

    Parameters
    ----------
    zminmax:
        Two-element ``[zmin, zmax]`` range with ``zmin <= zmax``.
    nzz:
        Number of grid points; must be positive.  Ignored when
        ``zmin == zmax``, in which case a single redshift is returned.
    zlog:
        Space the points evenly in :math:`\log_{10} z` rather than in ``z``.

    Returns
    -------
    list of float
    """
    try:
        size = len(zminmax)
    except TypeError:
        raise ValidationError(f"zminmax must be a two-element [zmin, zmax] range, got {zminmax!r}") from None
    if size != 2:
        raise ValidationError(f"zminmax must have exactly 2 elements, got {size}")
    zmin, zmax = float(zminmax[0]), float(zminmax[1])
    if not (math.isfinite(zmin) and math.isfinite(zmax)):
        raise ValidationError(f"zminmax must be finite, got {list(zminmax)}")
    if zmin > zmax:
        raise ValidationError(f"zminmax must satisfy zmin <= zmax, got [{zmin}, {zmax}]")
    nzz_int = int(nzz)
    if nzz_int != nzz or nzz_int <= 0:
        raise ValidationError(f"nzz must be a positive integer, got {nzz!r}")

    if zmin == zmax:
        return [zmin]
    if zlog:
        if zmin <= 0.0:
            raise ValidationError(f"Logarithmic redshift spacing requires zmin > 0, got {zmin}")
        grid = np.logspace(np.log10(zmin), np.log10(zmax), nzz_int)
        # pin the end points against round-off from the log/exp round trip
        grid[0], grid[-1] = zmin, zmax
    else:
        grid = np.linspace(zmin, zmax, nzz_int)
    return [float(z) for z in grid]


def resolve_redshift(
    *,
    zminmax: Optional[Sequence[float]] = None,
    nzz: Optional[int] = None,
    zlog: bool = False,
    use_redshift: Optional[Sequence[float]] = None,
) -> Tuple[List[float], bool]:
    """Return ``(redshift, use_redshift_flag)`` from either input form.

    An explicit ``use_redshift`` array takes precedence and is used verbatim.
    """

    if use_redshift is not None:
        values = [float(z) for z in np.atleast_1d(np.asarray(use_redshift, dtype=float))]
        if not values:
            raise ValidationError("use_redshift must contain at least one redshift")
        if any(b < a for a, b in zip(values, values[1:])):
            raise ValidationError("use_redshift must be sorted in non-decreasing order")
        if zminmax is not None or nzz is not None:
            logger.debug("use_redshift supplied; ignoring zminmax=%s nzz=%s", zminmax, nzz)
        return values, True

    if zminmax is None or nzz is None:
        raise MissingRequiredFieldError("ZMINMAX and NZZ inputs required (or supply use_redshift)")
    return build_redshift_grid(zminmax, nzz, zlog=zlog), False


__all__ = ["build_redshift_grid", "resolve_redshift"]
