"""Date-time helpers for page metadata and template contexts.

Month and weekday names follow the site locale (``locale`` in the global
context file) using the CLDR data shipped with Babel.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from email.utils import format_datetime
from functools import lru_cache
from typing import NamedTuple

from babel import Locale, UnknownLocaleError
from babel.dates import get_day_names, get_month_names

DEFAULT_LOCALE = "en_US"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class DateNames(NamedTuple):
    """Localized names; months are indexed 1-12, weekdays 0 (Monday) to 6."""

    short_months: dict[int, str]
    long_months: dict[int, str]
    short_days: dict[int, str]
    long_days: dict[int, str]


@lru_cache(maxsize=16)
def date_names(locale: str = DEFAULT_LOCALE) -> DateNames:
    """Month and weekday names for a locale identifier such as ``fr`` or ``pt-BR``.

    Raises:
        ValueError: If Babel does not know the locale.

    """
    try:
        parsed = Locale.parse(locale.replace("-", "_"))
    except (ValueError, UnknownLocaleError) as exc:
        msg = f"unknown locale {locale!r}"
        raise ValueError(msg) from exc
    return DateNames(
        short_months=dict(get_month_names("abbreviated", locale=parsed).items()),
        long_months=dict(get_month_names("wide", locale=parsed).items()),
        short_days=dict(get_day_names("abbreviated", locale=parsed).items()),
        long_days=dict(get_day_names("wide", locale=parsed).items()),
    )


def coerce_datetime(value: object) -> datetime:
    """Turn a frontmatter ``date`` value into an aware datetime.

    Accepts datetimes, plain dates (midnight), and ISO 8601 strings.
    Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not a recognizable date-time.

    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, time())
    elif isinstance(value, str):
        result = datetime.fromisoformat(value.strip())
    else:
        msg = f"expected a date-time, got {type(value).__name__}"
        raise ValueError(msg)
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def sort_key(value: datetime | None) -> datetime:
    """Comparable key for optional dates; missing dates sort as the epoch."""
    return value if value is not None else _EPOCH


def date_context(value: datetime, locale: str = DEFAULT_LOCALE) -> dict[str, str]:
    """Expose a date-time to templates as a mapping of formatted fields."""
    names = date_names(locale)
    iso_year, iso_week, iso_weekday = value.isocalendar()
    return {
        "year": value.strftime("%Y"),
        "short_year": value.strftime("%y"),
        "month": value.strftime("%m"),
        "i_month": str(value.month),
        "short_month": names.short_months[value.month],
        "long_month": names.long_months[value.month],
        "day": value.strftime("%d"),
        "i_day": str(value.day),
        "y_day": value.strftime("%j"),
        "w_year": str(iso_year),
        "week": f"{iso_week:02d}",
        "w_day": str(iso_weekday),
        "short_day": names.short_days[value.weekday()],
        "long_day": names.long_days[value.weekday()],
        "hour": value.strftime("%H"),
        "minute": value.strftime("%M"),
        "second": value.strftime("%S"),
        "rfc_3339": value.isoformat(),
        "rfc_2822": format_datetime(value),
    }
