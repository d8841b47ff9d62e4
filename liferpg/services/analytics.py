#!/usr/bin/env python3
"""
Аналитика прогресса LifeRPG
Данные для графиков: история характеристик и активность по кампаниям
"""

import logging
from collections import defaultdict
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Union

from liferpg.core.catalog import CatalogIndex, build_index
from liferpg.core.models import Category, DayLog, ItemKind, Task
from liferpg.utils.datetime_utils import DateLike, add_days, date_range, format_date, to_date, today_str

logger = logging.getLogger(__name__)

Catalog = Union[Sequence[Task], CatalogIndex]

def _index(catalog: Catalog) -> CatalogIndex:
    return catalog if isinstance(catalog, CatalogIndex) else build_index(catalog)

def _ids_by_date(log: Sequence[DayLog]) -> Dict[str, set]:
    by_date = defaultdict(set)
    for entry in log:
        by_date[entry.date].update(entry.completed_task_ids)
    return by_date

def category_history(catalog: Catalog, log: Sequence[DayLog], today: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Накопленный опыт по категориям на каждый день от первой записи журнала
    до сегодняшнего дня.

    Каждое выполнение добавляет свой опыт всем категориям задачи.
    Срывы (Negative) на график не влияют.
    """
    if not log:
        return []

    index = _index(catalog)
    by_date = _ids_by_date(log)
    today = today or today_str()

    accumulated = {category: 0 for category in Category}
    history = []

    for day in date_range(min(by_date), today):
        for item_id in sorted(by_date.get(day, ())):
            item = index.resolve(item_id)
            if item is None or item.is_penalty:
                continue
            for category in item.categories:
                accumulated[category] += item.reward_xp

        point = {"date": day, "label": format_date(day, "%d.%m")}
        point.update({category.value: value for category, value in accumulated.items()})
        history.append(point)

    return history

def campaign_activity(catalog: Catalog, log: Sequence[DayLog], today: Optional[str] = None,
                      days: int = 14) -> Dict[str, Any]:
    """Число выполненных кампаний и этапов за последние дни"""
    index = _index(catalog)
    by_date = _ids_by_date(log)
    today = today or today_str()

    series = []
    for day in date_range(add_days(today, -(days - 1)), today):
        count = 0
        for item_id in by_date.get(day, ()):
            item = index.resolve(item_id)
            if item is None:
                continue
            if item.kind == ItemKind.STAGE or item.task.is_campaign:
                count += 1
        series.append({"date": day, "label": format_date(day, "%d.%m"), "count": count})

    return {
        "days": series,
        "total": sum(point["count"] for point in series)
    }

def week_dates(reference: DateLike) -> List[str]:
    """Неделя (с понедельника) для указанной даты"""
    day = to_date(reference)
    monday = day - timedelta(days=day.weekday())
    return [format_date(monday + timedelta(days=i)) for i in range(7)]
