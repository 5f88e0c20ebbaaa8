"""Choose between a live forecast and last year's weather for a trip."""

from __future__ import annotations

from datetime import date, timedelta

from .exceptions import EmptyWindowError, InvalidProxyDateError
from .models import QueryMode, QueryWindow

# Open-Meteo serves live forecasts at most 16 days ahead.
FORECAST_HORIZON_DAYS = 16


def select_window(
    arrival: date,
    departure: date,
    today: date,
    horizon_days: int = FORECAST_HORIZON_DAYS,
) -> QueryWindow:
    """Compute the date range to request for a trip.

    Trips starting within the forecast horizon get a live forecast clamped to
    ``[today, today + horizon_days]``. Trips starting later are approximated
    by the same calendar dates one year earlier, fetched from the archive.
    """
    start = min(arrival, departure)
    end = max(arrival, departure)
    horizon = today + timedelta(days=horizon_days)

    if start <= horizon:
        clamped_start = max(start, today)
        clamped_end = min(end, horizon)
        if clamped_start > clamped_end:
            raise EmptyWindowError(start, end, today)
        return QueryWindow(
            mode=QueryMode.FORECAST,
            start=clamped_start,
            end=clamped_end,
            label=f"Forecast {clamped_start.isoformat()} → {clamped_end.isoformat()}",
        )

    proxy_start = shift_back_one_year(start, "start")
    proxy_end = shift_back_one_year(end, "end")
    return QueryWindow(
        mode=QueryMode.HISTORICAL_PROXY,
        start=proxy_start,
        end=proxy_end,
        label=f"Historic (proxy) {proxy_start.isoformat()} → {proxy_end.isoformat()}",
    )


def shift_back_one_year(day: date, field: str) -> date:
    """Return the same month/day one year earlier.

    Feb 29 has no counterpart in a non-leap year; that is an error, not a
    clamp to Feb 28.
    """
    try:
        return day.replace(year=day.year - 1)
    except ValueError as exc:
        raise InvalidProxyDateError(field, day) from exc
