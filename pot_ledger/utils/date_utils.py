"""Date manipulation utilities"""

from datetime import date, datetime, timezone
from typing import Iterable, Optional


def utc_now() -> datetime:
    """Timezone-aware current time, used for settlement timestamps"""
    return datetime.now(timezone.utc)


def span_days(dates: Iterable[Optional[date]]) -> int:
    """Inclusive number of days between the earliest and latest date (0 if none)"""
    known = [d for d in dates if d is not None]
    if not known:
        return 0
    return (max(known) - min(known)).days + 1
