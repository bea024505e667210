from datetime import datetime, timezone

from app.utils.numbering import ORDER_PREFIX, QUOTE_PREFIX, next_number, year_prefix

WHEN = datetime(2026, 3, 1, tzinfo=timezone.utc)


def test_year_prefix():
    assert year_prefix(ORDER_PREFIX, WHEN) == "SORD-26"
    assert year_prefix(QUOTE_PREFIX, datetime(2030, 1, 1)) == "SQTE-30"


def test_first_number_of_the_year():
    assert next_number(ORDER_PREFIX, None, WHEN) == "SORD-26001"


def test_sequence_continues():
    assert next_number(ORDER_PREFIX, "SORD-26041", WHEN) == "SORD-26042"


def test_sequence_grows_past_three_digits():
    assert next_number(QUOTE_PREFIX, "SQTE-26999", WHEN) == "SQTE-261000"


def test_previous_year_restarts_sequence():
    assert next_number(ORDER_PREFIX, "SORD-25317", WHEN) == "SORD-26001"
