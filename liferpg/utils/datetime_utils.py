from datetime import date, datetime, timedelta
from typing import List, Optional, Union
import pytz

from liferpg.config import config

DATE_FORMAT = "%Y-%m-%d"

DateLike = Union[str, date, datetime]

def get_timezone(name: Optional[str] = None):
    return pytz.timezone(name or config.timezone)

def now_local(tz_name: Optional[str] = None) -> datetime:
    return datetime.now(get_timezone(tz_name))

def today_str(tz_name: Optional[str] = None) -> str:
    return now_local(tz_name).strftime(DATE_FORMAT)

def parse_date(date_str: str, fmt: str = DATE_FORMAT) -> datetime:
    return datetime.strptime(date_str, fmt)

def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value).date()

def format_date(value: DateLike, fmt: str = DATE_FORMAT) -> str:
    return to_date(value).strftime(fmt)

def add_days(value: DateLike, days: int) -> str:
    return format_date(to_date(value) + timedelta(days=days))

def date_range(start: DateLike, end: DateLike) -> List[str]:
    """Даты от start до end включительно; пустой список, если start > end"""
    first, last = to_date(start), to_date(end)
    return [format_date(first + timedelta(days=i)) for i in range((last - first).days + 1)]
