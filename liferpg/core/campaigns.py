#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Campaign Scheduler
Этапы кампаний: зависимости, расписание, прогресс

Версия: 1.0.0
Дата: 2026-10-19
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Set
import logging

from liferpg.core.completion_log import completed_ids
from liferpg.core.models import (
    DayLog, Difficulty, StageState, Task, TaskStage,
    ValidationError, validate_date, validate_text
)
from liferpg.utils.datetime_utils import today_str

logger = logging.getLogger(__name__)

# ===== DATA CLASSES =====

@dataclass(frozen=True)
class StageProgress:
    """Прогресс кампании по этапам"""
    completed: int
    total: int
    percent: int

    def to_dict(self) -> Dict[str, int]:
        return {"completed": self.completed, "total": self.total, "percent": self.percent}

@dataclass(frozen=True)
class StageStatus:
    stage: TaskStage
    state: StageState
    unlocked: bool

@dataclass
class CampaignOverview:
    """Сводка по кампании для отображения"""
    task: Task
    progress: StageProgress
    stages: List[StageStatus] = field(default_factory=list)

    def stages_in(self, state: StageState) -> List[TaskStage]:
        return [s.stage for s in self.stages if s.state == state]

    def to_dict(self) -> Dict[str, Any]:
        stages = []
        for status in self.stages:
            item = status.stage.to_dict()
            item.update({"state": status.state.value, "unlocked": status.unlocked})
            stages.append(item)

        data = self.task.to_dict()
        data.update({"progress": self.progress.to_dict(), "stages": stages})
        return data

# ===== DEPENDENCY GRAPH =====

def _reaches_cycle(by_id: Dict[str, TaskStage], start_id: str) -> bool:
    """Идет по цепочке dependsOn от этапа; True, если цепочка зацикливается"""
    visited: Set[str] = set()
    current = by_id.get(start_id)
    while current is not None:
        if current.id in visited:
            return True
        visited.add(current.id)
        if not current.depends_on:
            return False
        current = by_id.get(current.depends_on)
    return False

def has_dependency_cycle(stages: Sequence[TaskStage], start_id: Optional[str] = None) -> bool:
    """
    Проверка графа зависимостей на циклы.

    С start_id проверяется только цепочка, начинающаяся с этого этапа
    (включая самоссылку), без него проверяется весь граф.
    """
    by_id = {s.id: s for s in stages}
    if start_id is not None:
        return _reaches_cycle(by_id, start_id)
    return any(_reaches_cycle(by_id, s.id) for s in stages)

def is_stage_unlocked(stage: TaskStage, log: Sequence[DayLog], task: Optional[Task] = None,
                      done: Optional[Set[str]] = None) -> bool:
    """
    Этап доступен, если у него нет зависимости или зависимость выполнена
    в любую дату журнала.

    Если передана родительская задача, дополнительно проверяется, что
    предшественник существует и цепочка не зацикливается.
    """
    if not stage.depends_on:
        return True
    if stage.depends_on == stage.id:
        return False

    if task is not None:
        if task.get_stage(stage.depends_on) is None:
            return False
        if has_dependency_cycle(task.stages, stage.id):
            return False

    if done is None:
        done = completed_ids(log)
    return stage.depends_on in done

# ===== SCHEDULE & PROGRESS =====

def stage_scheduled_for(task: Task, day: str) -> Optional[TaskStage]:
    """Этап, назначенный на дату (ожидается не больше одного)"""
    return next((s for s in task.stages if s.date == day), None)

def _round_percent(part: int, total: int) -> int:
    # округление половины вверх
    return (part * 200 + total) // (2 * total)

def stage_progress(task: Task, log: Sequence[DayLog]) -> StageProgress:
    total = len(task.stages)
    if total == 0:
        return StageProgress(completed=0, total=0, percent=0)

    done = completed_ids(log)
    completed = sum(1 for s in task.stages if s.id in done)
    return StageProgress(completed=completed, total=total, percent=_round_percent(completed, total))

def stage_state(stage: TaskStage, task: Task, log: Sequence[DayLog], today: Optional[str] = None,
                done: Optional[Set[str]] = None) -> StageState:
    """Состояние этапа: выполнен, заблокирован, просрочен, сегодня или впереди"""
    if done is None:
        done = completed_ids(log)
    today = today or today_str()

    if stage.id in done:
        return StageState.COMPLETED
    if not is_stage_unlocked(stage, log, task, done):
        return StageState.LOCKED
    if stage.date < today:
        return StageState.OVERDUE
    if stage.date == today:
        return StageState.DUE
    return StageState.SCHEDULED

def campaign_overview(task: Task, log: Sequence[DayLog], today: Optional[str] = None) -> CampaignOverview:
    done = completed_ids(log)
    today = today or today_str()

    statuses = []
    for stage in sorted(task.stages, key=lambda s: s.date):
        statuses.append(StageStatus(
            stage=stage,
            state=stage_state(stage, task, log, today, done),
            unlocked=is_stage_unlocked(stage, log, task, done)
        ))

    return CampaignOverview(task=task, progress=stage_progress(task, log), stages=statuses)

# ===== STAGE EDITING =====

STAGE_FIELDS = {"name", "date", "difficulty", "depends_on"}

def _validate_stages(task: Task, stage: TaskStage, stages: List[TaskStage]) -> None:
    validate_text(stage.name, min_length=1, max_length=100, field_name="stage.name")
    validate_date(stage.date, "stage.date")

    if stage.depends_on:
        if stage.depends_on == stage.id:
            raise ValidationError("Этап не может зависеть сам от себя")
        if not any(s.id == stage.depends_on for s in stages):
            raise ValidationError(f"Этап {stage.depends_on} не найден в кампании {task.id}")
        if has_dependency_cycle(stages, stage.id):
            raise ValidationError(f"Зависимость этапа {stage.id} образует цикл")

def add_stage(task: Task, name: str, date: str, difficulty: Optional[Difficulty] = Difficulty.MEDIUM,
              depends_on: Optional[str] = None, stage_id: Optional[str] = None) -> Task:
    """Добавить этап в кампанию (возвращает новую задачу)"""
    if not task.is_campaign:
        raise ValidationError(f"Этапы есть только у временных задач: {task.id} имеет тип {task.type.value}")

    stage = TaskStage(
        id=stage_id or f"stage_{uuid.uuid4().hex[:12]}",
        name=(name or "").strip(),
        date=date,
        difficulty=difficulty,
        depends_on=depends_on
    )
    if task.get_stage(stage.id) is not None:
        raise ValidationError(f"Этап {stage.id} уже существует")

    stages = list(task.stages) + [stage]
    _validate_stages(task, stage, stages)

    logger.info(f"🗺️ Новый этап {stage.id} в кампании {task.id} на {stage.date}")
    return task.with_stages(stages)

def update_stage(task: Task, stage_id: str, **changes) -> Task:
    """Изменить этап; допустимые поля: name, date, difficulty, depends_on"""
    unknown = set(changes) - STAGE_FIELDS
    if unknown:
        raise ValidationError(f"Недопустимые поля этапа: {sorted(unknown)}")

    current = task.get_stage(stage_id)
    if current is None:
        raise ValidationError(f"Этап {stage_id} не найден в кампании {task.id}")

    if isinstance(changes.get("name"), str):
        changes["name"] = changes["name"].strip()
    updated = replace(current, **changes)
    stages = [updated if s.id == stage_id else s for s in task.stages]
    _validate_stages(task, updated, stages)
    return task.with_stages(stages)

def delete_stage(task: Task, stage_id: str) -> Task:
    """
    Удалить этап. Зависимые этапы не удаляются и остаются навсегда
    заблокированными.
    """
    if task.get_stage(stage_id) is None:
        return task

    dependents = [s.id for s in task.stages if s.depends_on == stage_id]
    if dependents:
        logger.info(f"🔒 После удаления {stage_id} заблокированы этапы: {', '.join(dependents)}")
    return task.with_stages([s for s in task.stages if s.id != stage_id])
