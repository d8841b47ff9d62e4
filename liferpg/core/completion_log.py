# core/completion_log.py
"""
Журнал выполнения: операции над списком DayLog.
Все функции возвращают новый список и не меняют входной.
"""

from typing import Dict, List, Optional, Sequence, Set
import logging

from liferpg.core.models import DayLog, validate_date

logger = logging.getLogger(__name__)

def entry_for(log: Sequence[DayLog], day: str) -> Optional[DayLog]:
    """Запись журнала за дату"""
    return next((entry for entry in log if entry.date == day), None)

def completed_on(log: Sequence[DayLog], day: str) -> Set[str]:
    """Множество id, выполненных в указанную дату"""
    ids = set()
    for entry in log:
        if entry.date == day:
            ids.update(entry.completed_task_ids)
    return ids

def completed_ids(log: Sequence[DayLog]) -> Set[str]:
    """Объединение выполненных id по всему журналу"""
    ids = set()
    for entry in log:
        ids.update(entry.completed_task_ids)
    return ids

def set_completion(log: Sequence[DayLog], day: str, item_id: str, completed: bool = True) -> List[DayLog]:
    """Явно отметить (или снять отметку) выполнение за дату"""
    validate_date(day)
    new_log = list(log)

    for index, entry in enumerate(new_log):
        if entry.date != day:
            continue
        ids = [i for i in entry.completed_task_ids if i != item_id]
        if completed:
            ids.append(item_id)
        new_log[index] = DayLog(date=day, completed_task_ids=ids)
        return new_log

    if completed:
        new_log.append(DayLog(date=day, completed_task_ids=[item_id]))
    return new_log

def toggle_completion(log: Sequence[DayLog], day: str, item_id: str) -> List[DayLog]:
    """Переключить выполнение: снять отметку, если она есть, иначе поставить"""
    entry = entry_for(log, day)
    if entry is None:
        return set_completion(log, day, item_id, True)

    # пустая запись за дату остается в журнале
    return set_completion(log, day, item_id, not entry.contains(item_id))

def same_log(left: Sequence[DayLog], right: Sequence[DayLog]) -> bool:
    """Журналы эквивалентны: те же выполнения по тем же датам"""
    return normalize_log(left) == normalize_log(right)

def normalize_log(log: Sequence[DayLog]) -> List[DayLog]:
    """Склеить записи с одинаковой датой и убрать пустые, отсортировать по дате"""
    by_date: Dict[str, List[str]] = {}
    for entry in log:
        by_date.setdefault(entry.date, []).extend(entry.completed_task_ids)

    normalized = [
        DayLog(date=day, completed_task_ids=ids)
        for day, ids in sorted(by_date.items())
        if ids
    ]
    if len(normalized) != len(log):
        logger.debug(f"Журнал нормализован: {len(log)} -> {len(normalized)} записей")
    return normalized
