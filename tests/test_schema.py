import pytest

from sedparam import constants
from sedparam.defaults import default_record
from sedparam.errors import ValidationError
from sedparam.schema import FIELD_NAMES, parse_overrides, validate_record


def _payload(**changes):
    data = default_record(["a.par"], "test", [0.1]).model_dump()
    data["sfhgrid"] = 1
    data.update(changes)
    return data


def test_field_order_matches_table_layout():
    assert FIELD_NAMES[0] == "prefix"
    assert FIELD_NAMES[-2:] == ("redshift", "filterlist")
    assert FIELD_NAMES.index("age") < FIELD_NAMES.index("tburst") < FIELD_NAMES.index("oiiihb")
    for name in constants.RANGE_FIELDS + constants.BOOL_FIELDS + constants.COUNT_FIELDS:
        assert name in FIELD_NAMES


def test_defaults_validate():
    rec = validate_record(_payload())
    assert rec.redcurve == "calzetti"


@pytest.mark.parametrize("raw", ["Calzetti", "  CHARLOT ", "smc", "None", "odonnell"])
def test_redcurve_normalised(raw):
    rec = validate_record(_payload(redcurve=raw))
    assert rec.redcurve == raw.strip().lower()


def test_redcurve_unknown_rejected():
    with pytest.raises(ValidationError, match="Unsupported reddening curve"):
        validate_record(_payload(redcurve="bogus"))


@pytest.mark.parametrize("name", constants.RANGE_FIELDS)
def test_range_fields_need_two_elements(name):
    with pytest.raises(ValidationError, match=f"{name} must have exactly 2 elements"):
        validate_record(_payload(**{name: [1.0, 2.0, 3.0]}))


def test_range_field_rejects_scalar():
    with pytest.raises(ValidationError, match="two-element"):
        validate_record(_payload(age=5.0))


def test_oneovertau_requires_positive_tau():
    with pytest.raises(ValidationError, match="ONEOVERTAU requires tau > 0"):
        validate_record(_payload(oneovertau=True, tau=[0.0, 1.0]))
    rec = validate_record(_payload(oneovertau=True, tau=[0.1, 1.0]))
    assert rec.oneovertau is True


def test_delayed_and_oneovertau_exclusive():
    with pytest.raises(ValidationError, match="DELAYED and ONEOVERTAU"):
        validate_record(_payload(delayed=True, oneovertau=True))


@pytest.mark.parametrize("name", constants.COUNT_FIELDS)
def test_counts_must_be_positive(name):
    with pytest.raises(ValidationError, match=f"{name} must be positive"):
        validate_record(_payload(**{name: 0}))


def test_empty_filterlist_rejected():
    with pytest.raises(ValidationError, match="filterlist"):
        validate_record(_payload(filterlist=[]))


def test_integer_flags_read_back_as_bool():
    rec = validate_record(_payload(nebular=1, igm=0))
    assert rec.nebular is True
    assert rec.igm is False


def test_overrides_reject_unknown_names():
    with pytest.raises(ValidationError, match="not_a_field"):
        parse_overrides({"not_a_field": 1})


def test_overrides_keep_only_supplied_values():
    supplied = parse_overrides({"h100": 0.68, "age": (0.5, 10), "tau": None}).supplied()
    assert supplied == {"h100": 0.68, "age": [0.5, 10.0]}


def test_overrides_check_range_shape():
    with pytest.raises(ValidationError, match="AV must have exactly 2 elements"):
        parse_overrides({"AV": [0.1]})
