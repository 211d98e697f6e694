from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from scorehub.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def format_datetime(value: datetime | None, *, tz_name: str | None = None) -> str:
    """Render ``YYYY年MM月DD日 HH:MM`` in the display timezone ("" for None)."""
    if value is None:
        return ""
    local = ensure_aware(value).astimezone(_zone(tz_name or settings.DISPLAY_TIMEZONE))
    return f"{local.year:04d}年{local.month:02d}月{local.day:02d}日 {local.hour:02d}:{local.minute:02d}"


