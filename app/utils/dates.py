# app/utils/dates.py

from datetime import datetime, UTC
from typing import Optional


def as_utc(value: datetime) -> datetime:
    """
    타임존 정보가 없는 datetime 은 UTC 로 간주합니다.
    (SQLite 등 일부 드라이버는 TIMESTAMP WITH TIME ZONE 을 naive 값으로 돌려줍니다)
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def days_since(value: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """
    주어진 시각부터 현재까지 경과한 '일' 수(내림)를 반환합니다. 값이 없으면 None.
    """
    if value is None:
        return None
    now = as_utc(now) if now else datetime.now(UTC)
    return (now - as_utc(value)).days
