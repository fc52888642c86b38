from datetime import date, datetime

from resourcio.services.weeks import (
    iso_week_key,
    parse_week_key,
    to_date,
    week_bounds,
    week_start,
)


def test_iso_week_key_mid_year():
    assert iso_week_key(date(2025, 8, 18)) == "2025-W34"
    assert iso_week_key(date(2025, 8, 24)) == "2025-W34"


def test_iso_week_key_year_boundaries():
    # Thursday-anchored: these days belong to the neighbouring ISO year
    assert iso_week_key(date(2024, 12, 30)) == "2025-W01"
    assert iso_week_key(date(2021, 1, 3)) == "2020-W53"
    assert iso_week_key(date(2026, 1, 1)) == "2026-W01"


def test_week_start_is_monday():
    assert week_start(date(2025, 8, 21)) == date(2025, 8, 18)
    assert week_start(date(2025, 8, 18)) == date(2025, 8, 18)
    assert week_start(date(2025, 8, 24)) == date(2025, 8, 18)


def test_parse_week_key():
    assert parse_week_key("2025-W34") == date(2025, 8, 18)
    assert parse_week_key("2020-W53") == date(2020, 12, 28)
    assert parse_week_key("2025-W53") is None  # 2025 has 52 ISO weeks
    assert parse_week_key("2025-34") is None
    assert parse_week_key("") is None
    assert parse_week_key(None) is None


def test_week_bounds():
    assert week_bounds("2025-W01") == (date(2024, 12, 30), date(2025, 1, 5))
    assert week_bounds("garbage") is None


def test_to_date():
    assert to_date("2025-08-18") == date(2025, 8, 18)
    assert to_date("2025-08-18T10:30:00Z") == date(2025, 8, 18)
    assert to_date(datetime(2025, 8, 18, 9, 0)) == date(2025, 8, 18)
    assert to_date("18/08/2025") is None
    assert to_date(None) is None
