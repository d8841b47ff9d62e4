#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Task Catalog
Встроенный каталог задач и испытаний, слияние с пользовательскими данными
и индекс для разрешения id из журнала

Версия: 1.0.0
Дата: 2026-10-19
"""

import uuid
from collections import Counter
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from liferpg.core.models import (
    Category, TaskType, Difficulty, ChallengeType, ItemKind,
    Task, TaskStage, Challenge, ValidationError, validate_text
)

logger = logging.getLogger(__name__)

# ===== XP CONSTANTS =====

XP_PER_TASK = 10  # если у задачи нет сложности
XP_TO_LEVEL_UP = 100
CATEGORY_POINTS = 5  # очков характеристики за одно событие

TASK_PENALTIES: Dict[str, int] = {
    'neg_sugar': 30,
    'neg_fastfood': 20,
    'neg_doomscrolling': 20
}
DEFAULT_PENALTY = 15

XP_RATES: Dict[Difficulty, int] = {
    Difficulty.EASY: 5,
    Difficulty.MEDIUM: 10,
    Difficulty.HARD: 25,
    Difficulty.EPIC: 50
}

# длительность фокус-сессии в секундах
TASK_DURATIONS: Dict[str, int] = {
    'basic_charge': 20 * 60,
    'const_run': 60 * 60,
    'const_strength': 60 * 60,
    'const_read': 25 * 60
}

# ===== TITLES =====

@dataclass(frozen=True)
class LevelRank:
    min_level: int
    title: str

LEVEL_RANKS: List[LevelRank] = [
    LevelRank(1, "Новобранец"),
    LevelRank(3, "Оруженосец"),
    LevelRank(5, "Странствующий"),
    LevelRank(8, "Рыцарь"),
    LevelRank(12, "Ветеран"),
    LevelRank(16, "Паладин"),
    LevelRank(20, "Лорд"),
    LevelRank(30, "Легендарный"),
]

BALANCED = "balanced"

SPECIALIZATIONS: Dict[str, str] = {
    Category.PHYSICAL.value: "Воитель",
    Category.INTELLECT.value: "Мудрец",
    Category.HEALTH.value: "Целитель",
    Category.PROFESSIONAL.value: "Мастер",
    BALANCED: "Странник Равновесия",
}

SPECIALIZATION_TOLERANCE = 15

CHARACTER_CLASSES: Dict[str, Dict[str, str]] = {
    'warrior': {'name': 'Поборник', 'category': Category.PHYSICAL.value},
    'scholar': {'name': 'Мастер Свитков', 'category': Category.INTELLECT.value},
    'stoic': {'name': 'Хранитель Жизни', 'category': Category.HEALTH.value},
    'artisan': {'name': 'Артефактор', 'category': Category.PROFESSIONAL.value},
}

# ===== BUILT-IN CATALOG =====

PREDEFINED_TASKS: List[Task] = [
    # Basic
    Task('basic_charge', 'Утренняя зарядка', TaskType.BASIC, [Category.PHYSICAL]),
    Task('basic_food', 'Здоровое питание', TaskType.BASIC, [Category.HEALTH]),
    Task('basic_sleep', 'Полноценный сон', TaskType.BASIC, [Category.INTELLECT, Category.HEALTH]),
    Task('basic_calm', 'Успокоение / Медитация', TaskType.BASIC, [Category.HEALTH]),

    # Constant
    Task('const_run', 'Бег', TaskType.CONSTANT, [Category.PHYSICAL]),
    Task('const_strength', 'Силовая тренировка', TaskType.CONSTANT, [Category.PHYSICAL]),
    Task('const_read', 'Чтение', TaskType.CONSTANT, [Category.INTELLECT]),
    Task('const_aikido', 'Айкидо', TaskType.CONSTANT, [Category.PHYSICAL]),
    Task('const_lang', 'Иностранные языки', TaskType.CONSTANT, [Category.INTELLECT]),

    # Negative
    Task('neg_sugar', 'Сахар / Сладкое', TaskType.NEGATIVE,
         [Category.PHYSICAL, Category.INTELLECT, Category.HEALTH], penalty=TASK_PENALTIES['neg_sugar']),
    Task('neg_fastfood', 'Фастфуд', TaskType.NEGATIVE,
         [Category.HEALTH], penalty=TASK_PENALTIES['neg_fastfood']),
    Task('neg_doomscrolling', 'Думскроллинг', TaskType.NEGATIVE,
         [Category.INTELLECT], penalty=TASK_PENALTIES['neg_doomscrolling']),
]

PREDEFINED_CHALLENGES: List[Challenge] = [
    Challenge('ch_run_7', 'Неделя бега', 'Бегайте каждый день в течение недели',
              ChallengeType.STREAK, 'const_run', 7, 100),
    Challenge('ch_read_14', 'Книжный червь', 'Читайте каждый день две недели подряд',
              ChallengeType.STREAK, 'const_read', 14, 150),
    Challenge('ch_charge_30', 'Утренний ритуал', 'Зарядка каждое утро в течение месяца',
              ChallengeType.STREAK, 'basic_charge', 30, 300),
    Challenge('ch_no_sugar_7', 'Неделя без сладкого', 'Ни одного срыва на сладкое за семь дней',
              ChallengeType.AVOIDANCE, 'neg_sugar', 7, 120),
    Challenge('ch_no_doom_14', 'Чистый разум', 'Две недели без думскроллинга',
              ChallengeType.AVOIDANCE, 'neg_doomscrolling', 14, 200),
    Challenge('ch_no_fastfood_30', 'Месяц без фастфуда', 'Тридцать дней без фастфуда',
              ChallengeType.AVOIDANCE, 'neg_fastfood', 30, 300),
]

# ===== EXCEPTIONS =====

class CatalogIntegrityError(ValidationError):
    """В каталоге нарушена глобальная уникальность id"""

    def __init__(self, duplicates: Iterable[str]):
        self.duplicates = sorted(duplicates)
        super().__init__(f"Повторяющиеся id в каталоге: {', '.join(self.duplicates)}")

# ===== MERGE =====

def find_duplicate_ids(tasks: Sequence[Task]) -> List[str]:
    """Все id, встречающиеся больше одного раза среди задач и этапов"""
    counter = Counter()
    for task in tasks:
        counter[task.id] += 1
        for stage in task.stages:
            counter[stage.id] += 1
    return sorted(item_id for item_id, count in counter.items() if count > 1)

def merge_tasks(builtin: Sequence[Task], stored: Sequence[Task]) -> List[Task]:
    """
    Слияние встроенного каталога с сохраненным.

    Встроенные задачи берутся из кода; из сохраненных остаются только
    пользовательские с id, не занятым встроенными. Новые встроенные
    задачи появляются автоматически.
    """
    builtin_ids = {t.id for t in builtin}
    custom = []
    for task in stored:
        if not task.is_custom:
            continue
        if task.id in builtin_ids:
            logger.warning(f"⚠️ Пользовательская задача {task.id} совпадает со встроенной и пропущена")
            continue
        custom.append(task)

    merged = list(builtin) + custom
    duplicates = find_duplicate_ids(merged)
    if duplicates:
        raise CatalogIntegrityError(duplicates)
    return merged

def merge_challenges(builtin: Sequence[Challenge], stored: Sequence[Challenge]) -> List[Challenge]:
    """
    Слияние встроенных испытаний с сохраненными.

    Для известных id описание берется из кода, а статус, дата старта и
    прогресс берутся из сохранения. Неизвестные сохраненные испытания остаются
    как есть, отсутствующие встроенные добавляются в конец.
    """
    by_id = {c.id: c for c in builtin}
    stored_ids = set()
    merged = []

    for challenge in stored:
        stored_ids.add(challenge.id)
        definition = by_id.get(challenge.id)
        if definition is None:
            merged.append(challenge)
        else:
            merged.append(replace(
                definition,
                status=challenge.status,
                start_date=challenge.start_date,
                progress=challenge.progress
            ))

    merged.extend(c for c in builtin if c.id not in stored_ids)
    return merged

# ===== INDEX =====

@dataclass(frozen=True)
class ResolvedItem:
    """Результат разрешения id из журнала"""
    kind: ItemKind
    task: Task
    stage: Optional[TaskStage] = None

    @property
    def difficulty(self) -> Optional[Difficulty]:
        if self.kind == ItemKind.STAGE:
            return self.stage.difficulty
        return self.task.difficulty

    @property
    def categories(self) -> List[Category]:
        return self.task.affected_categories

    @property
    def is_penalty(self) -> bool:
        return self.task.is_negative

    @property
    def penalty(self) -> int:
        return self.task.penalty if self.task.penalty is not None else DEFAULT_PENALTY

    @property
    def reward_xp(self) -> int:
        difficulty = self.difficulty
        return XP_RATES[difficulty] if difficulty else XP_PER_TASK

class CatalogIndex:
    """Таблица id -> ResolvedItem, строится один раз на снимок каталога"""

    def __init__(self, tasks: Sequence[Task]):
        self.tasks = list(tasks)
        self._items: Dict[str, ResolvedItem] = {}

        # прямые id задач имеют приоритет над id этапов
        for task in self.tasks:
            self._items.setdefault(task.id, ResolvedItem(ItemKind.TASK, task))

        for task in self.tasks:
            if not task.is_campaign:
                continue
            for stage in task.stages:
                self._items.setdefault(stage.id, ResolvedItem(ItemKind.STAGE, task, stage))

    def resolve(self, item_id: str) -> Optional[ResolvedItem]:
        return self._items.get(item_id)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

def build_index(tasks: Sequence[Task]) -> CatalogIndex:
    return CatalogIndex(tasks)

# ===== EDITING =====

def get_task(tasks: Sequence[Task], task_id: str) -> Optional[Task]:
    """Получить задачу по ID"""
    return next((t for t in tasks if t.id == task_id), None)

def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"

def create_task(name: str, task_type: TaskType, categories: Sequence[Category],
                difficulty: Optional[Difficulty] = None, task_id: Optional[str] = None) -> Task:
    """Создание пользовательской задачи"""
    name = validate_text(name, min_length=1, max_length=100, field_name="name")
    if not categories:
        raise ValidationError("Задача должна влиять хотя бы на одну категорию")

    return Task(
        id=task_id or _new_id("task"),
        name=name,
        type=task_type,
        affected_categories=list(categories),
        difficulty=difficulty,
        is_custom=True
    )

def create_project(name: str, project_id: Optional[str] = None) -> Task:
    """Создание новой кампании без этапов"""
    return Task(
        id=project_id or _new_id("proj"),
        name=validate_text(name, min_length=1, max_length=100, field_name="name"),
        type=TaskType.TEMPORARY,
        affected_categories=[Category.PROFESSIONAL],
        difficulty=Difficulty.MEDIUM,
        stages=[],
        is_custom=True
    )

def add_task(tasks: Sequence[Task], task: Task) -> List[Task]:
    """Добавить задачу, сохранив уникальность id"""
    duplicates = find_duplicate_ids(list(tasks) + [task])
    if duplicates:
        raise CatalogIntegrityError(duplicates)
    return list(tasks) + [task]

def update_task(tasks: Sequence[Task], task_id: str, **changes) -> List[Task]:
    """Обновить поля задачи (возвращает новый список)"""
    return [replace(t, **changes) if t.id == task_id else t for t in tasks]

def delete_task(tasks: Sequence[Task], task_id: str) -> List[Task]:
    """Удалить пользовательскую задачу; встроенные не удаляются"""
    task = get_task(tasks, task_id)
    if task is None:
        return list(tasks)
    if not task.is_custom:
        logger.warning(f"⚠️ Попытка удалить встроенную задачу {task_id}")
        return list(tasks)
    return [t for t in tasks if t.id != task_id]
