import pytest

from camp_watch.common.datetime_utils import format_db_timestamp, parse_db_timestamp
from camp_watch.common.validators import decode_methodology, decode_rank, require_int, require_non_empty
from camp_watch.core.enums import Methodology, RankLevel
from camp_watch.core.exceptions import ValidationError


def test_decode_known_codes():
    assert decode_rank(0) is RankLevel.NONE
    assert decode_rank("10") is RankLevel.SIXTH
    assert decode_methodology(1) is Methodology.SCOUT


@pytest.mark.parametrize("code", [-1, 11, None, "x", True, 2.5])
def test_decode_rank_rejects_unknown(code):
    with pytest.raises(ValidationError):
        decode_rank(code)


@pytest.mark.parametrize("code", [4, -1, None])
def test_decode_methodology_rejects_unknown(code):
    with pytest.raises(ValidationError):
        decode_methodology(code)


def test_require_helpers():
    assert require_non_empty("  Kasia ", "Name") == "Kasia"
    assert require_int("7", "Group id") == 7
    with pytest.raises(ValidationError):
        require_non_empty("   ", "Name")


def test_methodology_maps_to_reserved_group_ids():
    assert [m.group_id for m in Methodology] == [2, 3, 4, 5]
    assert Methodology.VENTURE_SCOUT.label == "Venture Scout"
    assert RankLevel.FIRST_FEMALE.label == "RANK_FIRST_FEMALE"
    assert RankLevel.NONE.label == ""


def test_timestamps_are_stored_and_read_as_utc():
    ts = parse_db_timestamp("2026-07-10 10:00:05")
    assert ts.utcoffset().total_seconds() == 0
    assert format_db_timestamp(ts) == "2026-07-10 10:00:05"
