from datetime import date

import pytest

from golf_league import months


def test_month_bounds():
    assert months.month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 3, 1))
    assert months.month_bounds("2024-12") == (date(2024, 12, 1), date(2025, 1, 1))


def test_previous_month_wraps_the_year():
    assert months.previous_month(date(2025, 1, 3)) == "2024-12"
    assert months.previous_month(date(2025, 6, 30)) == "2025-05"


def test_current_month():
    assert months.current_month(date(2025, 3, 9)) == "2025-03"


@pytest.mark.parametrize("value", ["2024-13", "2024-00", "24-01", "2024/01", "2024-12\n", " 2024-12", "", None])
def test_parse_month_rejects_garbage(value):
    with pytest.raises(ValueError):
        months.parse_month(value)


def test_month_label():
    assert months.month_label("2024-12") == "December 2024"
