"""Provenance stamp written at the top of every parameter file.

Collectors are exception-safe: failures fall back to ``None`` or
``"unknown"`` instead of raising, so a missing git checkout or an uninstalled
distribution never blocks a write.
"""

from __future__ import annotations

import datetime as dt
import getpass
import platform
import subprocess
from importlib import metadata
from pathlib import Path
from typing import Any, List, Sequence

from . import constants

_DIST_NAME = "sedparam"


def _utc_timestamp_iso(now: dt.datetime | None = None) -> str:
    stamp = (now or dt.datetime.now(dt.timezone.utc)).astimezone(dt.timezone.utc)
    return stamp.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _safe_package_version(dist_name: str) -> str | None:
    try:
        return metadata.version(dist_name)
    except metadata.PackageNotFoundError:
        return None
    except Exception:
        return None


def _safe_git_commit(repo_root: Path | None = None) -> str | None:
    root = repo_root
    if root is None:
        root = Path(__file__).resolve().parents[1]
    try:
        commit = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=root,
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
    except Exception:
        return None
    return commit or None


def _safe_user() -> str | None:
    try:
        return getpass.getuser()
    except Exception:
        return None


def gather_write_provenance(generator: str = constants.GENERATOR_NAME) -> dict[str, Any]:
    """Return the metadata recorded in a parameter-file header."""

    try:
        host = platform.node() or None
    except Exception:
        host = None
    return {
        "generator": generator,
        "version": _safe_package_version(_DIST_NAME) or "unknown",
        "timestamp_utc": _utc_timestamp_iso(),
        "user": _safe_user(),
        "host": host,
        "git_commit": _safe_git_commit(),
    }


def header_comments(
    generator: str = constants.GENERATOR_NAME,
    *,
    extra: Sequence[str] = (),
) -> List[str]:
    """Return the comment lines that open a parameter file.

    The first line names the generating tool and the creation date; a second
    line records who wrote the file and where.  ``extra`` lines are appended
    verbatim.
    """

    info = gather_write_provenance(generator)
    lines = [f"Generated by {info['generator']} v{info['version']} on {info['timestamp_utc']}"]
    origin = [f"{key}={info[key]}" for key in ("user", "host", "git_commit") if info[key]]
    if origin:
        lines.append(" ".join(origin))
    lines.extend(str(line) for line in extra)
    return lines


__all__ = ["gather_write_provenance", "header_comments"]
