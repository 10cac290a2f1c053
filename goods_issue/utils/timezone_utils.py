from __future__ import annotations

from datetime import datetime, timezone as dt_timezone

import pytz

DEFAULT_TIMEZONE = "UTC"


class TimezoneUtils:
    """Timestamp helpers: store in UTC, present in the configured display zone."""

    @staticmethod
    def validate_timezone(tz_name: str | None) -> bool:
        """Return True when the timezone string exists in pytz."""
        return bool(tz_name) and tz_name in pytz.all_timezones_set

    @staticmethod
    def _get_timezone(tz_name: str):
        if not TimezoneUtils.validate_timezone(tz_name):
            raise ValueError(f"Invalid timezone: {tz_name}")
        return pytz.timezone(tz_name)

    @staticmethod
    def utc_now() -> datetime:
        """Return the current UTC timestamp (timezone aware)."""
        return datetime.now(dt_timezone.utc)

    @staticmethod
    def ensure_timezone_aware(dt: datetime | None, assume_utc: bool = True) -> datetime | None:
        if dt is None:
            return None
        if dt.tzinfo is not None:
            return dt
        return dt.replace(tzinfo=dt_timezone.utc) if assume_utc else dt

    @staticmethod
    def convert_to_timezone(dt: datetime | None, to_timezone: str) -> datetime | None:
        """Convert a datetime into the target timezone, assuming UTC for naive values."""
        if dt is None:
            return None
        target_name = to_timezone if TimezoneUtils.validate_timezone(to_timezone) else DEFAULT_TIMEZONE
        aware = TimezoneUtils.ensure_timezone_aware(dt)
        return aware.astimezone(TimezoneUtils._get_timezone(target_name))

    @staticmethod
    def format_for_display(
        dt: datetime | None, tz_name: str | None = None, format_string: str = "%A, %d %B %Y"
    ) -> str:
        localized = TimezoneUtils.convert_to_timezone(dt, tz_name or DEFAULT_TIMEZONE)
        return localized.strftime(format_string) if localized else ""

    @staticmethod
    def parse_iso(value: object) -> datetime | None:
        """Parse an ISO-8601 string from a form payload; blank or malformed yields None."""
        if not value or not isinstance(value, str):
            return None
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return TimezoneUtils.ensure_timezone_aware(parsed)
