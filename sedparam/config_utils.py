"""Helper utilities for loading and normalising writer inputs."""
from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def parse_override_value(raw: str) -> Any:
    """Parse a CLI override value into a Python object.

    Comma separated values and ``[a, b]`` brackets become lists.
    """

    text = raw.strip()
    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1].strip()
        if not inner:
            return []
        return [parse_override_value(item) for item in inner.split(",")]
    if "," in text and not (text.startswith(("'", '"'))):
        return [parse_override_value(item) for item in text.split(",") if item.strip()]
    lower = text.lower()
    if lower in {"true", "false", "yes", "no"}:
        return lower in {"true", "yes"}
    if lower in {"none", "null"}:
        return None
    if lower in {"nan"}:
        return float("nan")
    if lower in {"inf", "+inf", "+infinity", "infinity"}:
        return float("inf")
    if lower in {"-inf", "-infinity"}:
        return float("-inf")
    try:
        return int(text)
    except ValueError:
        try:
            return float(text)
        except ValueError:
            pass
    if (text.startswith('"') and text.endswith('"')) or (text.startswith("'") and text.endswith("'")):
        return text[1:-1]
    return text


def apply_overrides_dict(payload: Dict[str, Any], overrides: Sequence[str]) -> Dict[str, Any]:
    """Apply ``name=value`` overrides to a flat keyword dictionary."""

    if not overrides:
        return payload
    for item in overrides:
        key, sep, value_str = item.partition("=")
        if not sep:
            raise ValidationError(f"Invalid override '{item}'; expected name=value")
        name = key.strip()
        if not name:
            raise ValidationError(f"Invalid override '{item}'; empty name")
        if name in payload:
            logger.debug("override %s replaces %r", name, payload[name])
        payload[name] = parse_override_value(value_str)
    return payload


def read_overrides_file(path: Path) -> List[str]:
    """Return the ``name=value`` lines of an overrides file (``#`` comments skipped)."""

    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Overrides file {path} not found")
    entries: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        entries.append(text)
    return entries


def load_config(path: Path, overrides: Sequence[str] | None = None) -> Dict[str, Any]:
    """Load a YAML mapping of :func:`~sedparam.paramfile.write_paramfile` keywords."""

    from ruamel.yaml import YAML

    yaml = YAML(typ="safe")
    source_path = Path(path).resolve()
    if not source_path.is_file():
        raise NotFoundError(f"Configuration file {source_path} not found")
    with source_path.open("r", encoding="utf-8") as fh:
        data = yaml.load(fh)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError(f"{source_path}: the YAML root must be a mapping")
    if overrides:
        data = apply_overrides_dict(data, overrides)
    return data


def split_writer_kwargs(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalise a loaded configuration into ``write_paramfile`` keywords.

    Record fields are passed through untouched; the writer validates them.
    """

    kwargs = dict(payload)
    filters = kwargs.get("filterlist")
    if isinstance(filters, str):
        kwargs["filterlist"] = [item for item in filters.replace(",", " ").split() if item]
    comments = kwargs.get("comments")
    if isinstance(comments, str):
        kwargs["comments"] = [comments]
    return kwargs


def configure_logging(level: int, suppress_warnings: bool = False) -> None:
    """Configure root logging and optionally silence Python warnings."""

    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    root = logging.getLogger()
    root.setLevel(level)
    if suppress_warnings:
        warnings.filterwarnings("ignore")
    logging.captureWarnings(True)


__all__ = [
    "apply_overrides_dict",
    "configure_logging",
    "load_config",
    "parse_override_value",
    "read_overrides_file",
    "split_writer_kwargs",
]
