#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Stats Engine
Свертка журнала выполнения в опыт, уровень и характеристики

Версия: 1.0.0
Дата: 2026-10-19
"""

from typing import Dict, Iterable, Sequence, Union
import logging

from liferpg.core.catalog import (
    CatalogIndex, build_index, CATEGORY_POINTS, XP_TO_LEVEL_UP
)
from liferpg.core.models import (
    Category, ChallengeStatus, Challenge, DayLog, Task, UserStats
)

logger = logging.getLogger(__name__)

Catalog = Union[Sequence[Task], CatalogIndex]

def level_for_xp(xp: int, xp_to_level_up: int = XP_TO_LEVEL_UP) -> int:
    """Уровень по опыту; отрицательный опыт не опускает ниже первого уровня"""
    return max(1, 1 + max(0, xp) // xp_to_level_up)

def _ordered_events(log: Sequence[DayLog]) -> Iterable[str]:
    """Id событий в каноническом порядке: даты по возрастанию, id по алфавиту"""
    by_date: Dict[str, set] = {}
    for entry in log:
        by_date.setdefault(entry.date, set()).update(entry.completed_task_ids)

    for day in sorted(by_date):
        for item_id in sorted(by_date[day]):
            yield item_id

def compute_stats(catalog: Catalog, log: Sequence[DayLog],
                  challenges: Sequence[Challenge] = ()) -> UserStats:
    """
    Пересчитать статистику пользователя.

    Negative-задачи снимают штраф опыта и по 5 очков с каждой своей
    категории (не ниже нуля). Остальные задачи и этапы дают опыт по
    сложности (или XP_PER_TASK) и по 5 очков каждой категории родительской
    задачи. Неизвестные id пропускаются. Полученные награды испытаний
    добавляются к опыту.

    Порядок записей журнала и id внутри записи на результат не влияет.
    """
    index = catalog if isinstance(catalog, CatalogIndex) else build_index(catalog)

    xp = 0
    scores = {category: 0 for category in Category}
    skipped = 0

    for item_id in _ordered_events(log):
        item = index.resolve(item_id)
        if item is None:
            skipped += 1
            continue

        if item.is_penalty:
            xp -= item.penalty
            for category in item.categories:
                scores[category] = max(0, scores[category] - CATEGORY_POINTS)
        else:
            xp += item.reward_xp
            for category in item.categories:
                scores[category] += CATEGORY_POINTS

    for challenge in challenges:
        if challenge.status == ChallengeStatus.COMPLETED:
            xp += challenge.reward_xp

    if skipped:
        logger.debug(f"Пропущено {skipped} неизвестных id в журнале")

    return UserStats(
        xp=xp,
        level=level_for_xp(xp),
        physical=scores[Category.PHYSICAL],
        intellect=scores[Category.INTELLECT],
        health=scores[Category.HEALTH],
        professional=scores[Category.PROFESSIONAL],
        xp_to_level_up=XP_TO_LEVEL_UP
    )
