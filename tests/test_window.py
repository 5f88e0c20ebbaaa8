"""Window selection tests: forecast clamping and historical proxy shifting."""

from __future__ import annotations

from datetime import date

import pytest

from trip_weather.exceptions import EmptyWindowError, InvalidProxyDateError
from trip_weather.models import QueryMode
from trip_weather.window import select_window, shift_back_one_year

TODAY = date(2025, 1, 1)


def test_trip_within_horizon_selects_forecast() -> None:
    window = select_window(date(2025, 1, 10), date(2025, 1, 15), TODAY)

    assert window.mode is QueryMode.FORECAST
    assert window.start == date(2025, 1, 10)
    assert window.end == date(2025, 1, 15)
    assert window.label == "Forecast 2025-01-10 → 2025-01-15"


def test_trip_beyond_horizon_selects_shifted_proxy() -> None:
    window = select_window(date(2026, 6, 1), date(2026, 6, 5), TODAY)

    assert window.mode is QueryMode.HISTORICAL_PROXY
    assert window.start == date(2025, 6, 1)
    assert window.end == date(2025, 6, 5)
    assert window.label == "Historic (proxy) 2025-06-01 → 2025-06-05"


def test_reversed_dates_are_normalized() -> None:
    window = select_window(date(2025, 1, 15), date(2025, 1, 10), TODAY)
    assert (window.start, window.end) == (date(2025, 1, 10), date(2025, 1, 15))


def test_trip_already_started_is_clamped_to_today() -> None:
    window = select_window(date(2024, 12, 28), date(2025, 1, 3), TODAY)
    assert window.mode is QueryMode.FORECAST
    assert window.start == TODAY
    assert window.end == date(2025, 1, 3)


def test_trip_crossing_horizon_is_clamped_to_horizon() -> None:
    window = select_window(date(2025, 1, 10), date(2025, 1, 30), TODAY)
    assert window.mode is QueryMode.FORECAST
    assert window.end == date(2025, 1, 17)


def test_start_exactly_on_horizon_is_forecast() -> None:
    window = select_window(date(2025, 1, 17), date(2025, 1, 20), TODAY)
    assert window.mode is QueryMode.FORECAST
    assert (window.start, window.end) == (date(2025, 1, 17), date(2025, 1, 17))


def test_start_one_day_past_horizon_is_proxy() -> None:
    window = select_window(date(2025, 1, 18), date(2025, 1, 20), TODAY)
    assert window.mode is QueryMode.HISTORICAL_PROXY
    assert (window.start, window.end) == (date(2024, 1, 18), date(2024, 1, 20))


def test_custom_horizon_is_respected() -> None:
    window = select_window(date(2025, 1, 10), date(2025, 1, 12), TODAY, horizon_days=5)
    assert window.mode is QueryMode.HISTORICAL_PROXY


def test_finished_trip_has_no_window() -> None:
    with pytest.raises(EmptyWindowError):
        select_window(date(2024, 12, 1), date(2024, 12, 5), TODAY)


def test_leap_day_proxy_raises() -> None:
    with pytest.raises(InvalidProxyDateError) as exc_info:
        select_window(date(2028, 2, 29), date(2028, 3, 2), TODAY)
    assert exc_info.value.field == "start"
    assert exc_info.value.day == date(2028, 2, 29)


def test_leap_day_end_raises_for_end_field() -> None:
    with pytest.raises(InvalidProxyDateError) as exc_info:
        select_window(date(2028, 2, 25), date(2028, 2, 29), TODAY)
    assert exc_info.value.field == "end"


def test_shift_back_one_year_into_leap_year() -> None:
    assert shift_back_one_year(date(2025, 2, 28), "start") == date(2024, 2, 28)
