"""Reader and writer for Yanny parameter (``.par``) files.

A Yanny file holds ``#`` comment lines, optional ``keyword value`` pairs and
one or more tables.  Each table is declared by a C-like ``typedef struct``
block followed by one row per line, the first token of a row naming the
table::

    # Generated by ...
    typedef struct {
      char prefix[8];
      float h100;
      float age[2];
      float redshift[<>];
      char filterlist[3][24];
    } ISEDFITPARAMS;

    ISEDFITPARAMS sdss 0.7 { 0.1 13.0 } { 0.05 0.1 } { "a.par" "b.par" "c.par" }

Arrays are enclosed in braces; ``<>`` marks a variable-length dimension.
Strings containing whitespace, braces, quotes or ``#`` are double quoted.
Only ``struct`` typedefs with ``char``, integer and floating point members are
supported, which covers everything the parameter files need.
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import ParFileFormatError

logger = logging.getLogger(__name__)

_FLOAT_TYPES = {"float", "double"}
_INT_TYPES = {"int", "short", "long"}
_MEMBER_RE = re.compile(r"^(?P<ctype>\w+)\s+(?P<name>\w+)\s*(?P<dims>(?:\[[^\]]*\]\s*)*)$")
_TYPEDEF_END_RE = re.compile(r"^\}\s*(?P<name>\w+)\s*;?$")
_NEEDS_QUOTES_RE = re.compile(r'[\s{}"#\\]')


class _Quoted(str):
    """A token that was double quoted in the source and is never a brace."""


@dataclass
class Column:
    """One member of a ``typedef struct`` block.

    ``length`` is ``None`` for scalars, ``-1`` for variable-length arrays and
    the declared element count otherwise.
    """

    name: str
    ctype: str
    length: Optional[int] = None

    @property
    def is_array(self) -> bool:
        return self.length is not None


@dataclass
class ParFile:
    """In-memory content of a Yanny file."""

    tables: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    columns: Dict[str, List[Column]] = field(default_factory=dict)
    comments: List[str] = field(default_factory=list)
    keywords: Dict[str, str] = field(default_factory=dict)


# --------------------------------------------------------------------------- #
# reading
# --------------------------------------------------------------------------- #


def _tokenize(line: str) -> List[str]:
    tokens: List[str] = []
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch.isspace():
            i += 1
            continue
        if ch == "#":
            break
        if ch in "{}":
            tokens.append(ch)
            i += 1
            continue
        if ch == '"':
            i += 1
            buf = []
            while i < n and line[i] != '"':
                if line[i] == "\\" and i + 1 < n:
                    i += 1
                buf.append(line[i])
                i += 1
            if i >= n:
                raise ParFileFormatError(f"Unterminated string in line: {line!r}")
            tokens.append(_Quoted("".join(buf)))
            i += 1
            continue
        j = i
        while j < n and not line[j].isspace() and line[j] not in '{}"#':
            j += 1
        tokens.append(line[i:j])
        i = j
    return tokens


def _is_brace(token: str, brace: str) -> bool:
    return token == brace and not isinstance(token, _Quoted)


def _logical_lines(text: str) -> Iterable[Tuple[int, str]]:
    """Yield ``(line_number, line)`` with backslash continuations joined."""

    pending = ""
    start = 0
    for lineno, raw in enumerate(text.splitlines(), start=1):
        if not pending:
            start = lineno
        stripped = raw.rstrip()
        if stripped.endswith("\\"):
            pending += stripped[:-1] + " "
            continue
        yield start, pending + stripped
        pending = ""
    if pending:
        yield start, pending


def _parse_member(text: str) -> Column:
    match = _MEMBER_RE.match(" ".join(text.split()))
    if match is None:
        raise ParFileFormatError(f"Cannot parse typedef member {text!r}")
    ctype = match.group("ctype").lower()
    if ctype not in _FLOAT_TYPES | _INT_TYPES | {"char"}:
        raise ParFileFormatError(f"Unsupported member type {ctype!r} in {text!r}")
    dims = re.findall(r"\[([^\]]*)\]", match.group("dims"))
    if ctype == "char":
        # the last dimension of a char member is the string width
        dims = dims[:-1]
    if len(dims) > 1:
        raise ParFileFormatError(f"Multi-dimensional arrays are not supported: {text!r}")
    length: Optional[int] = None
    if dims:
        size = dims[0].strip()
        if size == "<>":
            length = -1
        else:
            try:
                length = int(size)
            except ValueError:
                raise ParFileFormatError(f"Bad array dimension {size!r} in {text!r}") from None
    return Column(name=match.group("name"), ctype=ctype, length=length)


def _parse_typedef(body: str) -> List[Column]:
    members = [chunk.strip() for chunk in body.split(";")]
    return [_parse_member(chunk) for chunk in members if chunk]


def _convert(token: str, column: Column) -> Any:
    if column.ctype == "char":
        return str(token)
    try:
        if column.ctype in _FLOAT_TYPES:
            return float(token)
        return int(token)
    except ValueError:
        raise ParFileFormatError(
            f"Column {column.name!r}: cannot convert {token!r} to {column.ctype}"
        ) from None


def _parse_row(tokens: Sequence[str], columns: Sequence[Column], lineno: int) -> Dict[str, Any]:
    row: Dict[str, Any] = {}
    pos = 1
    for column in columns:
        if pos >= len(tokens):
            raise ParFileFormatError(f"Line {lineno}: missing value for column {column.name!r}")
        if not column.is_array:
            if _is_brace(tokens[pos], "{") or _is_brace(tokens[pos], "}"):
                raise ParFileFormatError(f"Line {lineno}: column {column.name!r} expects a scalar")
            row[column.name] = _convert(tokens[pos], column)
            pos += 1
            continue
        if not _is_brace(tokens[pos], "{"):
            raise ParFileFormatError(f"Line {lineno}: column {column.name!r} expects a {{...}} array")
        pos += 1
        values = []
        while pos < len(tokens) and not _is_brace(tokens[pos], "}"):
            if _is_brace(tokens[pos], "{"):
                raise ParFileFormatError(f"Line {lineno}: nested braces in column {column.name!r}")
            values.append(_convert(tokens[pos], column))
            pos += 1
        if pos >= len(tokens):
            raise ParFileFormatError(f"Line {lineno}: unterminated array in column {column.name!r}")
        pos += 1
        if column.length is not None and column.length >= 0 and len(values) != column.length:
            raise ParFileFormatError(
                f"Line {lineno}: column {column.name!r} declares {column.length} elements, found {len(values)}"
            )
        row[column.name] = values
    if pos != len(tokens):
        raise ParFileFormatError(f"Line {lineno}: {len(tokens) - pos} unexpected trailing value(s)")
    return row


def parse_par(text: str) -> ParFile:
    """Parse the text of a Yanny file."""

    result = ParFile()
    typedef_lines: Optional[List[str]] = None
    lookup: Dict[str, str] = {}
    for lineno, line in _logical_lines(text):
        stripped = line.strip()
        if typedef_lines is not None:
            end = _TYPEDEF_END_RE.match(stripped)
            if end is None:
                typedef_lines.append(stripped)
                continue
            name = end.group("name")
            result.columns[name] = _parse_typedef(" ".join(typedef_lines))
            result.tables[name] = []
            lookup[name.upper()] = name
            typedef_lines = None
            continue
        if not stripped:
            continue
        if stripped.startswith("#"):
            result.comments.append(stripped[1:].strip())
            continue
        if stripped.lower().startswith("typedef"):
            head = stripped[len("typedef"):].strip()
            if not head.lower().startswith("struct"):
                raise ParFileFormatError(f"Line {lineno}: only 'typedef struct' is supported")
            brace = head.find("{")
            if brace < 0:
                raise ParFileFormatError(f"Line {lineno}: expected '{{' after 'typedef struct'")
            typedef_lines = [head[brace + 1:].strip()]
            continue
        tokens = _tokenize(stripped)
        if not tokens:
            continue
        table = lookup.get(tokens[0].upper())
        if table is not None:
            result.tables[table].append(_parse_row(tokens, result.columns[table], lineno))
        else:
            result.keywords[tokens[0]] = " ".join(tokens[1:])
    if typedef_lines is not None:
        raise ParFileFormatError("Unterminated typedef struct block")
    return result


def read_par(path: Path) -> ParFile:
    """Read a Yanny file from ``path``."""

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    parfile = parse_par(text)
    logger.debug(
        "Read %s: %s",
        path,
        ", ".join(f"{name}[{len(rows)}]" for name, rows in parfile.tables.items()) or "no tables",
    )
    return parfile


# --------------------------------------------------------------------------- #
# writing
# --------------------------------------------------------------------------- #


def _format_token(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, int):
        return str(value)
    text = str(value)
    if text and _NEEDS_QUOTES_RE.search(text) is None:
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _scalar_ctype(values: Iterable[Any]) -> str:
    kinds = set()
    for value in values:
        if isinstance(value, str):
            kinds.add("char")
        elif isinstance(value, float):
            kinds.add("float")
        elif isinstance(value, (bool, int)):
            kinds.add("int")
        else:
            raise ParFileFormatError(f"Cannot serialise value {value!r} of type {type(value).__name__}")
    if "char" in kinds:
        if len(kinds) > 1:
            raise ParFileFormatError("Column mixes strings and numbers")
        return "char"
    if "float" in kinds:
        return "float"
    return "int"


def infer_columns(rows: Sequence[Mapping[str, Any]]) -> List[Column]:
    """Derive a typedef from the values of ``rows`` (column order of the first row)."""

    if not rows:
        raise ParFileFormatError("Cannot infer a typedef from an empty table")
    names = list(rows[0].keys())
    columns: List[Column] = []
    for name in names:
        values = []
        for row in rows:
            if name not in row:
                raise ParFileFormatError(f"Row is missing column {name!r}")
            values.append(row[name])
        if all(isinstance(v, (list, tuple)) for v in values):
            lengths = {len(v) for v in values}
            length = lengths.pop() if len(lengths) == 1 else -1
            flat = [item for v in values for item in v]
            ctype = _scalar_ctype(flat) if flat else "float"
            columns.append(Column(name=name, ctype=ctype, length=length))
        elif any(isinstance(v, (list, tuple)) for v in values):
            raise ParFileFormatError(f"Column {name!r} mixes arrays and scalars")
        else:
            columns.append(Column(name=name, ctype=_scalar_ctype(values)))
    return columns


def _declaration(column: Column, rows: Sequence[Mapping[str, Any]]) -> str:
    dims = ""
    if column.is_array:
        dims = "[<>]" if column.length == -1 else f"[{column.length}]"
    if column.ctype == "char":
        width = 1
        for row in rows:
            value = row[column.name]
            items = value if column.is_array else [value]
            for item in items:
                width = max(width, len(str(item)))
        dims += f"[{width}]"
    return f"  {column.ctype} {column.name}{dims};"


def format_par(
    tables: Mapping[str, Sequence[Mapping[str, Any]]],
    *,
    comments: Sequence[str] = (),
    keywords: Optional[Mapping[str, Any]] = None,
) -> str:
    """Render ``tables`` as Yanny text."""

    lines: List[str] = [f"# {comment}" if comment else "#" for comment in comments]
    if lines:
        lines.append("")
    for key, value in (keywords or {}).items():
        lines.append(f"{key} {_format_token(value)}")
    if keywords:
        lines.append("")
    for name, rows in tables.items():
        columns = infer_columns(rows)
        lines.append("typedef struct {")
        lines.extend(_declaration(column, rows) for column in columns)
        lines.append(f"}} {name};")
        lines.append("")
        for row in rows:
            parts = [name]
            for column in columns:
                value = row[column.name]
                if column.is_array:
                    inner = " ".join(_format_token(item) for item in value)
                    parts.append(f"{{ {inner} }}" if inner else "{ }")
                else:
                    parts.append(_format_token(value))
            lines.append(" ".join(parts))
        lines.append("")
    return "\n".join(lines)


def write_par(
    path: Path,
    tables: Mapping[str, Sequence[Mapping[str, Any]]],
    *,
    comments: Sequence[str] = (),
    keywords: Optional[Mapping[str, Any]] = None,
) -> Path:
    """Write ``tables`` to ``path`` in one step.

    The text is rendered in memory, written to a temporary file next to the
    destination and moved into place, so readers never see a partial file.
    """

    path = Path(path)
    text = format_par(tables, comments=comments, keywords=keywords)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


__all__ = [
    "Column",
    "ParFile",
    "format_par",
    "infer_columns",
    "parse_par",
    "read_par",
    "write_par",
]
