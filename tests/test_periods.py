from datetime import datetime, timedelta

from moneywise.periods import resolve_range, normalize_period


END = (23, 59, 59, 999000)


def test_daily_range_covers_whole_day():
    start, end = resolve_range("daily", datetime(2024, 3, 15, 13, 45))
    assert start == datetime(2024, 3, 15)
    assert end == datetime(2024, 3, 15, *END)


def test_weekly_range_starts_monday():
    start, end = resolve_range("weekly", datetime(2024, 3, 13, 9, 0))  # Wednesday
    assert start == datetime(2024, 3, 11)
    assert end == datetime(2024, 3, 17, *END)


def test_weekly_sunday_belongs_to_previous_monday():
    start, end = resolve_range("weekly", datetime(2024, 3, 17, 22, 0))  # Sunday
    assert start == datetime(2024, 3, 11)
    assert end == datetime(2024, 3, 17, *END)


def test_weekly_monday_starts_its_own_week():
    start, _ = resolve_range("weekly", datetime(2024, 3, 11, 0, 0))
    assert start == datetime(2024, 3, 11)


def test_weekly_range_crosses_month_boundary():
    start, end = resolve_range("weekly", datetime(2024, 3, 3, 12, 0))  # Sunday
    assert start == datetime(2024, 2, 26)
    assert end == datetime(2024, 3, 3, *END)


def test_monthly_range_same_for_every_day_of_month():
    expected = (datetime(2024, 2, 1), datetime(2024, 2, 29, *END))
    day = datetime(2024, 2, 1, 7, 30)
    while day.month == 2:
        assert resolve_range("monthly", day) == expected
        day += timedelta(days=1)


def test_monthly_range_december():
    start, end = resolve_range("monthly", datetime(2023, 12, 31, 23, 0))
    assert start == datetime(2023, 12, 1)
    assert end == datetime(2023, 12, 31, *END)


def test_yearly_range():
    start, end = resolve_range("yearly", datetime(2024, 7, 4))
    assert start == datetime(2024, 1, 1)
    assert end == datetime(2024, 12, 31, *END)


def test_unknown_period_falls_back_to_monthly():
    ref = datetime(2024, 4, 10)
    assert resolve_range("quarterly", ref) == resolve_range("monthly", ref)
    assert normalize_period("") == "monthly"
    assert normalize_period("weekly") == "weekly"
