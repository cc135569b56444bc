import logging
import math

import pytest

from sedparam import cli, config_utils
from sedparam.errors import NotFoundError, ValidationError
from sedparam.paramfile import read_paramfile


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", True),
        ("No", False),
        ("none", None),
        ("42", 42),
        ("0.35", 0.35),
        ("charlot", "charlot"),
        ("'quoted'", "quoted"),
        ("0.5,10", [0.5, 10]),
        ("[0.1, 13.0]", [0.1, 13.0]),
        ("[]", []),
    ],
)
def test_parse_override_value(raw, expected):
    assert config_utils.parse_override_value(raw) == expected


def test_parse_override_value_nan():
    assert math.isnan(config_utils.parse_override_value("nan"))


def test_apply_overrides_dict():
    payload = config_utils.apply_overrides_dict({"h100": 0.7}, ["h100=0.68", "age = 0.5,10"])
    assert payload == {"h100": 0.68, "age": [0.5, 10]}


@pytest.mark.parametrize("item", ["h100", "=3"])
def test_apply_overrides_dict_rejects_malformed(item):
    with pytest.raises(ValidationError):
        config_utils.apply_overrides_dict({}, [item])


def test_read_overrides_file(tmp_path):
    path = tmp_path / "overrides.txt"
    path.write_text("# priors\nnebular=true\n\n redcurve=smc \n", encoding="utf-8")
    assert config_utils.read_overrides_file(path) == ["nebular=true", "redcurve=smc"]
    with pytest.raises(NotFoundError):
        config_utils.read_overrides_file(tmp_path / "missing.txt")


def test_load_config_applies_overrides(tmp_path):
    path = tmp_path / "priors.yml"
    path.write_text(
        "prefix: deep2\n"
        "filterlist: [deep2_B.par, deep2_R.par]\n"
        "zminmax: [0.7, 1.4]\n"
        "nzz: 4\n"
        "age: [0.5, 7.0]\n",
        encoding="utf-8",
    )
    data = config_utils.load_config(path, overrides=["nzz=6"])
    assert data["prefix"] == "deep2"
    assert data["filterlist"] == ["deep2_B.par", "deep2_R.par"]
    assert data["nzz"] == 6
    assert data["age"] == [0.5, 7.0]


def test_load_config_requires_mapping(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValidationError, match="mapping"):
        config_utils.load_config(path)


def test_split_writer_kwargs_splits_filter_string():
    kwargs = config_utils.split_writer_kwargs({"filterlist": "a.par, b.par c.par", "comments": "note"})
    assert kwargs["filterlist"] == ["a.par", "b.par", "c.par"]
    assert kwargs["comments"] == ["note"]


def test_configure_logging_sets_level():
    root = logging.getLogger()
    previous = root.level
    try:
        config_utils.configure_logging(logging.WARNING)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
        logging.captureWarnings(False)


def _write_args(tmp_path, *extra):
    return [
        "--quiet",
        "write",
        "--prefix",
        "sdss",
        "--filterlist",
        "sdss_g0.par",
        "sdss_r0.par",
        "--zminmax",
        "0.05",
        "0.4",
        "--nzz",
        "5",
        "--paramfile-dir",
        str(tmp_path),
        *extra,
    ]


def test_cli_write_then_append(tmp_path, capsys):
    assert cli.main(_write_args(tmp_path)) == 0
    out = capsys.readouterr().out.strip()
    assert out.endswith("sdss_paramfile.par")
    assert cli.main(_write_args(tmp_path, "--append", "--override", "redcurve=Charlot", "age=0.5,10")) == 0
    records = read_paramfile(tmp_path / "sdss_paramfile.par")
    assert [rec.sfhgrid for rec in records] == [1, 2]
    assert records[1].redcurve == "charlot"
    assert records[1].age == [0.5, 10.0]
    assert records[1].tburst == [0.5, 10.0]


def test_cli_config_and_overrides_file(tmp_path):
    config = tmp_path / "priors.yml"
    config.write_text(
        f"prefix: cfg\nfilterlist: a.par b.par\nuse_redshift: [0.1, 0.2]\nparamfile_dir: {tmp_path}\n",
        encoding="utf-8",
    )
    overrides = tmp_path / "overrides.txt"
    overrides.write_text("nebular=true\nnmodel=500\n", encoding="utf-8")
    code = cli.main(["--quiet", "write", "--config", str(config), "--overrides-file", str(overrides)])
    assert code == 0
    (rec,) = read_paramfile(tmp_path / "cfg_paramfile.par")
    assert rec.filterlist == ["a.par", "b.par"]
    assert rec.redshift == [0.1, 0.2]
    assert rec.use_redshift is True
    assert rec.nebular is True
    assert rec.nmodel == 500


def test_cli_reports_validation_errors(tmp_path):
    code = cli.main(_write_args(tmp_path, "--override", "redcurve=bogus"))
    assert code == 1
    assert not (tmp_path / "sdss_paramfile.par").exists()


def test_cli_append_without_file_fails(tmp_path):
    assert cli.main(_write_args(tmp_path, "--append")) == 1
    assert not (tmp_path / "sdss_paramfile.par").exists()


def test_cli_show(tmp_path, capsys):
    cli.main(_write_args(tmp_path))
    cli.main(_write_args(tmp_path, "--append", "--override", "AV=0.0,1.0"))
    capsys.readouterr()
    assert cli.main(["--quiet", "show", str(tmp_path / "sdss_paramfile.par"), "--sfhgrid", "2"]) == 0
    out = capsys.readouterr().out
    assert "typedef struct {" in out
    rows = [line for line in out.splitlines() if line.startswith("ISEDFITPARAMS ")]
    assert len(rows) == 1
    assert "{ 0.0 1.0 }" in rows[0]


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    previous = root.level
    yield
    root.setLevel(previous)
    logging.captureWarnings(False)
