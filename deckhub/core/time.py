from datetime import datetime, timezone, timedelta


def now_utc():
    """返回 UTC 当前时间"""
    return datetime.now(timezone.utc)


def days_ago(days: int, now: datetime | None = None) -> datetime:
    """返回 now 往前推 days 天的时间点"""
    return (now or now_utc()) - timedelta(days=days)
