from datetime import date

import pytest

from apps.analytics.periods import DateRange, date_range_for_period, period_for_range


TODAY = date(2024, 3, 31)


@pytest.mark.parametrize(
    "period,start",
    [
        ("day", date(2024, 3, 30)),
        ("week", date(2024, 3, 24)),
        ("month", date(2024, 2, 29)),
        ("quarter", date(2023, 12, 31)),
        ("half", date(2023, 9, 30)),
        ("year", date(2023, 3, 31)),
    ],
)
def test_period_windows(period, start):
    window = date_range_for_period(period, today=TODAY)
    assert window == DateRange(start, TODAY)


def test_iso_bounds():
    window = date_range_for_period("week", today=date(2024, 1, 3))
    assert window.start_iso == "2023-12-27"
    assert window.end_iso == "2024-01-03"


def test_unknown_period_raises():
    with pytest.raises(ValueError):
        date_range_for_period("decade", today=TODAY)


def test_range_labels():
    assert period_for_range("7days") == "week"
    assert period_for_range("30days") == "month"
    assert period_for_range("3months") == "quarter"
    assert period_for_range("6months") == "half"
    assert period_for_range("year") == "year"


def test_unknown_range_label_lists_choices():
    with pytest.raises(ValueError) as excinfo:
        period_for_range("90days")
    assert "7days" in str(excinfo.value)
