#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Challenge Tracker
Испытания на серию и воздержание: прогресс всегда пересчитывается из журнала

Версия: 1.0.0
Дата: 2026-10-19
"""

from dataclasses import replace
from typing import Dict, Optional, Sequence, Set
import logging

from liferpg.core.models import Challenge, ChallengeStatus, ChallengeType, DayLog, validate_date
from liferpg.utils.datetime_utils import add_days, date_range, today_str

logger = logging.getLogger(__name__)

def _by_date(log: Sequence[DayLog]) -> Dict[str, Set[str]]:
    index: Dict[str, Set[str]] = {}
    for entry in log:
        index.setdefault(entry.date, set()).update(entry.completed_task_ids)
    return index

# ===== TRANSITIONS =====

def accept_challenge(challenge: Challenge, on_date: Optional[str] = None) -> Challenge:
    """Принять испытание: available -> active, отсчет с on_date (по умолчанию сегодня)"""
    if challenge.status != ChallengeStatus.AVAILABLE:
        logger.info(f"ℹ️ Испытание {challenge.id} уже в статусе {challenge.status.value}")
        return challenge

    start = validate_date(on_date, "on_date") if on_date else today_str()
    logger.info(f"⚔️ Испытание {challenge.id} принято, старт {start}")
    return replace(challenge, status=ChallengeStatus.ACTIVE, start_date=start, progress=0)

def evaluate_challenge(challenge: Challenge, log: Sequence[DayLog], as_of: Optional[str] = None) -> int:
    """
    Пересчитать прогресс активного испытания по журналу.

    Серия: подряд идущие дни с даты старта, в которые цель выполнена;
    счет обрывается на первом пропуске или на дате as_of.
    Воздержание: дни со старта по as_of включительно; день с нарушением
    обнуляет счетчик.
    """
    if challenge.status != ChallengeStatus.ACTIVE or not challenge.start_date:
        return challenge.progress

    as_of = as_of or today_str()
    days = _by_date(log)
    target = challenge.target_task_id

    if challenge.type == ChallengeType.STREAK:
        count = 0
        for day in date_range(challenge.start_date, as_of):
            if target not in days.get(day, ()):
                break
            count += 1
        return count

    count = 0
    for day in date_range(challenge.start_date, as_of):
        if target in days.get(day, ()):
            count = 0
        else:
            count += 1
    return count

def refresh_challenge(challenge: Challenge, log: Sequence[DayLog], as_of: Optional[str] = None) -> Challenge:
    progress = evaluate_challenge(challenge, log, as_of)
    if progress == challenge.progress:
        return challenge
    return replace(challenge, progress=progress)

def is_claimable(challenge: Challenge, log: Sequence[DayLog], as_of: Optional[str] = None) -> bool:
    if challenge.status != ChallengeStatus.ACTIVE:
        return False
    return evaluate_challenge(challenge, log, as_of) >= challenge.duration_days

def claim_challenge(challenge: Challenge, log: Sequence[DayLog], as_of: Optional[str] = None) -> Challenge:
    """Забрать награду: active -> completed, если набрано нужное число дней"""
    if not is_claimable(challenge, log, as_of):
        logger.info(f"ℹ️ Испытание {challenge.id} пока нельзя завершить")
        return challenge

    progress = evaluate_challenge(challenge, log, as_of)
    logger.info(f"🏆 Испытание {challenge.id} завершено, награда {challenge.reward_xp} XP")
    return replace(challenge, status=ChallengeStatus.COMPLETED, progress=progress)

def is_streak_broken(challenge: Challenge, log: Sequence[DayLog], as_of: Optional[str] = None) -> bool:
    """
    Серия прервана: первый пропущенный день уже прошел, а цель не набрана.
    Сегодняшний день пропуском не считается, пока он не закончился.
    """
    if (challenge.type != ChallengeType.STREAK
            or challenge.status != ChallengeStatus.ACTIVE
            or not challenge.start_date):
        return False

    as_of = as_of or today_str()
    progress = evaluate_challenge(challenge, log, as_of)
    if progress >= challenge.duration_days:
        return False
    return add_days(challenge.start_date, progress) < as_of

# ===== SUMMARY =====

def claimed_reward_xp(challenges: Sequence[Challenge]) -> int:
    return sum(c.reward_xp for c in challenges if c.status == ChallengeStatus.COMPLETED)

def challenge_summary(challenges: Sequence[Challenge]) -> Dict[str, int]:
    """Журнал подвигов: счетчики по статусам и заработанный опыт"""
    summary = {status.value: 0 for status in ChallengeStatus}
    for challenge in challenges:
        summary[challenge.status.value] += 1
    summary["earned_xp"] = claimed_reward_xp(challenges)
    return summary
