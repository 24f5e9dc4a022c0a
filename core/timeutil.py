# core/timeutil.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    """DB と揃えるため UTC naive で現在時刻を返す"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

