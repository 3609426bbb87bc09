from datetime import date

import pytest

from admin_app.date_range_modal import parse_date_range

TODAY = date(2024, 5, 10)


def test_parse_valid_range():
    assert parse_date_range("2024-05-01", " 2024-05-02 ", TODAY) == (date(2024, 5, 1), date(2024, 5, 2))
    assert parse_date_range("2024-05-03", "2024-05-03", TODAY) == (date(2024, 5, 3), date(2024, 5, 3))


@pytest.mark.parametrize(
    "start,end,message",
    [
        ("05/01/2024", "2024-05-02", "YYYY-MM-DD"),
        ("2024-05-03", "2024-05-02", "before start"),
        ("2024-05-01", "2024-05-11", "between"),
        ("2022-12-31", "2024-05-01", "between"),
    ],
)
def test_parse_rejects_bad_ranges(start, end, message):
    with pytest.raises(ValueError, match=message):
        parse_date_range(start, end, TODAY)
