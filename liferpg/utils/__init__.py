# utils/__init__.py
"""Вспомогательные функции: даты, логирование"""

from .datetime_utils import (
    now_local, today_str, parse_date, to_date, format_date, add_days, date_range
)
from .logger import setup_logger, configure_logging

__all__ = [
    'now_local', 'today_str', 'parse_date', 'to_date', 'format_date', 'add_days', 'date_range',
    'setup_logger', 'configure_logging'
]
