import datetime as dt
import re

from sedparam import provenance


def test_timestamp_is_utc_iso():
    stamp = provenance._utc_timestamp_iso(dt.datetime(2024, 3, 1, 12, 30, 5, 123456, tzinfo=dt.timezone.utc))
    assert stamp == "2024-03-01T12:30:05Z"


def test_header_first_line_names_tool_and_date():
    lines = provenance.header_comments("mytool", extra=["note one"])
    assert re.match(r"^Generated by mytool v\S+ on \d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$", lines[0])
    assert lines[-1] == "note one"


def test_gather_write_provenance_never_raises(monkeypatch):
    def boom():
        raise OSError("no user")

    monkeypatch.setattr(provenance.getpass, "getuser", boom)
    info = provenance.gather_write_provenance()
    assert info["user"] is None
    assert info["generator"] == "sedparam.write_paramfile"
    assert info["version"]
