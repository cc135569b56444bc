"""Command line interface for writing and inspecting parameter files.

Usage::

    sedparam write --prefix sdss --filterlist sdss_u0.par sdss_g0.par \\
        --zminmax 0.05 0.4 --nzz 50
    sedparam write --config priors.yml --append --override nebular=true
    sedparam show sdss_paramfile.par --sfhgrid 2
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config_utils, constants
from .errors import SedParamError
from .io import yanny
from .paramfile import read_paramfile, write_paramfile

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sedparam",
        description="Write or inspect iSEDfit parameter files",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    write = sub.add_parser("write", help="Create or append to <prefix>_paramfile.par")
    write.add_argument("--config", type=Path, help="YAML mapping of writer keywords")
    write.add_argument("--prefix", help="Project prefix")
    write.add_argument("--filterlist", nargs="+", metavar="FILTER", help="Bandpass file names")
    write.add_argument("--paramfile-dir", type=Path, help="Output directory (default: cwd)")
    write.add_argument("--zminmax", nargs=2, type=float, metavar=("ZMIN", "ZMAX"))
    write.add_argument("--nzz", type=int, help="Number of redshift grid points")
    write.add_argument(
        "--zlog",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Space the redshift grid logarithmically",
    )
    write.add_argument("--use-redshift", nargs="+", type=float, metavar="Z", help="Explicit redshift grid")
    write.add_argument("--append", action="store_true", help="Append a new SFH grid to an existing file")
    write.add_argument("--clobber", action="store_true", help="Overwrite an existing file")
    write.add_argument(
        "--override",
        action="append",
        nargs="+",
        metavar="NAME=VALUE",
        help="Set any record field, e.g. --override redcurve=charlot age=0.5,10",
    )
    write.add_argument(
        "--overrides-file",
        action="append",
        type=Path,
        help="Load overrides from a file (one NAME=VALUE per line).",
    )

    show = sub.add_parser("show", help="Print the records of a parameter file")
    show.add_argument("path", type=Path)
    show.add_argument("--sfhgrid", type=int, help="Only show this SFH grid")
    return parser


def _collect_overrides(args: argparse.Namespace) -> List[str]:
    override_list: List[str] = []
    if args.overrides_file:
        for override_path in args.overrides_file:
            override_list.extend(config_utils.read_overrides_file(override_path))
    if args.override:
        for group in args.override:
            override_list.extend(group)
    return override_list


def _writer_kwargs(args: argparse.Namespace) -> Dict[str, Any]:
    override_list = _collect_overrides(args)
    if args.config is not None:
        payload = config_utils.load_config(args.config, overrides=override_list)
    else:
        payload = config_utils.apply_overrides_dict({}, override_list)
    cli_values = {
        "prefix": args.prefix,
        "filterlist": args.filterlist,
        "paramfile_dir": args.paramfile_dir,
        "zminmax": args.zminmax,
        "nzz": args.nzz,
        "zlog": args.zlog,
        "use_redshift": args.use_redshift,
    }
    for key, value in cli_values.items():
        if value is not None:
            payload[key] = value
    if args.append:
        payload["append"] = True
    if args.clobber:
        payload["clobber"] = True
    return config_utils.split_writer_kwargs(payload)


def _run_write(args: argparse.Namespace) -> int:
    kwargs = _writer_kwargs(args)
    path = write_paramfile(**kwargs)
    if path is None:
        return 0
    print(path)
    return 0


def _run_show(args: argparse.Namespace) -> int:
    records = read_paramfile(args.path, sfhgrid=args.sfhgrid)
    rows = [rec.model_dump() for rec in records]
    print(yanny.format_par({constants.TABLE_NAME: rows}), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    config_utils.configure_logging(logging.WARNING if args.quiet else logging.INFO)
    try:
        if args.command == "write":
            return _run_write(args)
        return _run_show(args)
    except SedParamError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - standard CLI entrypoint
    raise SystemExit(main())
