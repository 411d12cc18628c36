from datetime import datetime, timedelta, timezone

import pytest

from todo_api.utils import to_iso_utc


def test_aware_datetime_is_converted_to_utc():
    value = datetime(2025, 1, 25, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_iso_utc(value) == "2025-01-25T10:00:00.000+00:00"


def test_naive_datetime_is_taken_as_utc():
    assert to_iso_utc(datetime(2025, 1, 25, 10, 0, 0, 987654)) == "2025-01-25T10:00:00.987+00:00"


@pytest.mark.parametrize(
    "raw",
    [
        "2025-01-25T10:00:00Z",
        "2025-01-25T10:00:00+00:00",
        "2025-01-25 11:00:00+01:00",
        "2025-01-25T10:00:00",
    ],
)
def test_strings_are_normalized(raw):
    assert to_iso_utc(raw) == "2025-01-25T10:00:00.000+00:00"


def test_output_round_trips_through_fromisoformat():
    out = to_iso_utc(datetime.now(timezone.utc))
    assert datetime.fromisoformat(out).utcoffset() == timedelta(0)


def test_rejects_other_types():
    with pytest.raises(TypeError):
        to_iso_utc(1700000000)  # type: ignore[arg-type]
