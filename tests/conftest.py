from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SDSS_FILTERS = ["sdss_u0.par", "sdss_g0.par", "sdss_r0.par", "sdss_i0.par", "sdss_z0.par"]


@pytest.fixture()
def filters() -> list[str]:
    return list(SDSS_FILTERS)


@pytest.fixture()
def write_kwargs(tmp_path: Path, filters: list[str]) -> dict:
    """Minimal valid writer inputs targeting ``tmp_path``."""

    return {
        "filterlist": filters,
        "prefix": "sdss",
        "paramfile_dir": tmp_path,
        "zminmax": [0.05, 0.4],
        "nzz": 8,
    }
