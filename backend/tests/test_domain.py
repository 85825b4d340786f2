from datetime import date

import pytest

from backend.app.services.domain import DateRange, require_capacity
from backend.app.services.errors import (
    ConflictError,
    InvalidCapacityError,
    InvalidRangeError,
    NoRoomAvailableError,
)


def stay(checkin: str, checkout: str) -> DateRange:
    return DateRange.of(date.fromisoformat(checkin), date.fromisoformat(checkout))


@pytest.mark.parametrize(
    "first, second, expected",
    [
        (("2024-07-01", "2024-07-05"), ("2024-07-03", "2024-07-06"), True),
        (("2024-07-01", "2024-07-05"), ("2024-07-02", "2024-07-03"), True),
        (("2024-07-01", "2024-07-05"), ("2024-06-28", "2024-07-02"), True),
        (("2024-07-01", "2024-07-05"), ("2024-07-01", "2024-07-05"), True),
        # same-day turnover on either side
        (("2024-07-01", "2024-07-05"), ("2024-07-05", "2024-07-07"), False),
        (("2024-07-01", "2024-07-05"), ("2024-06-28", "2024-07-01"), False),
        (("2024-07-01", "2024-07-05"), ("2024-07-10", "2024-07-12"), False),
    ],
)
def test_overlap_is_half_open(first, second, expected):
    a, b = stay(*first), stay(*second)
    assert a.overlaps(b) is expected
    assert b.overlaps(a) is expected


def test_inverted_and_empty_ranges_rejected():
    with pytest.raises(InvalidRangeError):
        stay("2024-07-05", "2024-07-01")
    with pytest.raises(InvalidRangeError):
        stay("2024-07-05", "2024-07-05")


@pytest.mark.parametrize("capacity", [0, -1])
def test_non_positive_capacity_rejected(capacity):
    with pytest.raises(InvalidCapacityError):
        require_capacity(capacity)


def test_conflict_is_a_kind_of_no_room_available():
    err = ConflictError()
    assert isinstance(err, NoRoomAvailableError)
    assert err.code == "conflict"
    assert err.message == "Room was taken by a concurrent booking."
