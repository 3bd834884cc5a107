"""
Helper Functions

This module contains utility functions used throughout the application.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from dateutil import parser as dtparser
from dateutil import tz

# day/Mon/Year:HH:MM:SS +ZZZZ
CLF_DATE_SEPARATOR = ":"

# u64 counters never need more
MAX_INT_DIGITS = 20


def _numeric_offset_only(name: Optional[str], offset: Optional[int]) -> Optional[tz.tzoffset]:
    """tzinfos hook: honour +ZZZZ offsets, treat zone names as unknown (naive)"""
    if offset is None:
        return None
    return tz.tzoffset(name, offset)


def parse_ts(x: Any) -> Optional[datetime]:
    """Parse timestamp from CLF (10/Oct/2000:13:55:36 -0700) or ISO 8601"""
    if not x:
        return None
    s = str(x).strip()
    try:
        if "/" in s and CLF_DATE_SEPARATOR in s:
            # dateutil wants whitespace between the date and the time
            date_part, _, time_part = s.partition(CLF_DATE_SEPARATOR)
            dt = dtparser.parse(f"{date_part} {time_part}", tzinfos=_numeric_offset_only)
        else:
            dt = dtparser.isoparse(s)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def safe_int(x: Any) -> Optional[int]:
    """Convert to int, accepting only ints and plain ASCII digit strings of at most MAX_INT_DIGITS"""
    if isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x if abs(x) < 10 ** MAX_INT_DIGITS else None
    if isinstance(x, str) and x.isascii() and x.isdigit() and len(x) <= MAX_INT_DIGITS:
        return int(x)
    return None


def strip_query(path: str) -> str:
    """Drop any ?query and #fragment suffix from a request target"""
    for sep in ("?", "#"):
        path = path.split(sep, 1)[0]
    return path


def median(sorted_vals: List[int]) -> float:
    """Median of sorted values; average of the two middle ones for even counts"""
    n = len(sorted_vals)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2:
        return float(sorted_vals[mid])
    return (sorted_vals[mid - 1] + sorted_vals[mid]) / 2.0


def nearest_rank(sorted_vals: List[int], pct: int) -> float:
    """
    Nearest-rank percentile on a sorted list.
    index = ceil(pct / 100 * n) - 1, clamped to [0, n - 1].
    Integer arithmetic keeps the rank exact for any n.
    """
    n = len(sorted_vals)
    if n == 0:
        return 0.0
    rank = -(-pct * n // 100)
    idx = min(max(rank - 1, 0), n - 1)
    return float(sorted_vals[idx])
