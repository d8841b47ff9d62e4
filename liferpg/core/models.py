#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Core Data Models
Модели каталога задач, журнала выполнения и испытаний

Версия: 1.0.0
Дата: 2026-10-19
"""

import re
from datetime import date
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, replace
from enum import Enum
import logging

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class Category(Enum):
    """Категории характеристик (порядок объявления = приоритет при равенстве)"""
    PHYSICAL = "Physical"
    INTELLECT = "Intellect"
    HEALTH = "Health"
    PROFESSIONAL = "Professional"

class TaskType(Enum):
    """Типы задач"""
    BASIC = "Basic"
    CONSTANT = "Constant"
    TEMPORARY = "Temporary"
    NEGATIVE = "Negative"

class Difficulty(Enum):
    """Сложность задачи или этапа"""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    EPIC = "Epic"

class ChallengeType(Enum):
    """Типы испытаний"""
    STREAK = "streak"
    AVOIDANCE = "avoidance"

class ChallengeStatus(Enum):
    """Статусы испытаний"""
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"

class StageState(Enum):
    """Состояние этапа кампании"""
    COMPLETED = "completed"
    LOCKED = "locked"
    OVERDUE = "overdue"
    DUE = "due"
    SCHEDULED = "scheduled"

class ItemKind(Enum):
    """Что именно нашлось по id из журнала"""
    TASK = "task"
    STAGE = "stage"

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

def validate_text(text: str, min_length: int = 1, max_length: int = 200, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text

def validate_date(value: str, field_name: str = "date") -> str:
    """Валидация календарной даты в формате YYYY-MM-DD"""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValidationError(f"{field_name} должен быть в формате YYYY-MM-DD: {value!r}")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Неверная дата в поле {field_name}: {value}")
    return value

def coerce_enum(value: Any, enum_class: type, field_name: str = "value"):
    """Приведение строки к значению enum"""
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} должен быть одним из: {valid_values}")

# ===== CATALOG MODELS =====

@dataclass
class TaskStage:
    """Этап временной задачи (кампании)"""
    id: str
    name: str
    date: str
    difficulty: Optional[Difficulty] = Difficulty.MEDIUM
    depends_on: Optional[str] = None

    def __post_init__(self):
        if self.difficulty is not None:
            self.difficulty = coerce_enum(self.difficulty, Difficulty, "difficulty")
        if self.depends_on == "":
            self.depends_on = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "difficulty": self.difficulty.value if self.difficulty else None,
        }
        if self.depends_on:
            data["dependsOn"] = self.depends_on
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskStage":
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                date=validate_date(data["date"], "stage.date"),
                difficulty=data.get("difficulty"),
                depends_on=data.get("dependsOn")
            )
        except KeyError as e:
            raise ValidationError(f"У этапа нет обязательного поля {e}")

@dataclass
class Task:
    """Определение отслеживаемой активности или кампании"""
    id: str
    name: str
    type: TaskType
    affected_categories: List[Category] = field(default_factory=list)
    difficulty: Optional[Difficulty] = None
    stages: List[TaskStage] = field(default_factory=list)
    is_custom: bool = False
    penalty: Optional[int] = None  # переопределение штрафа для Negative

    def __post_init__(self):
        self.type = coerce_enum(self.type, TaskType, "type")
        self.affected_categories = [
            coerce_enum(c, Category, "affectedCategories") for c in self.affected_categories
        ]
        if self.difficulty is not None:
            self.difficulty = coerce_enum(self.difficulty, Difficulty, "difficulty")

    @property
    def is_negative(self) -> bool:
        return self.type == TaskType.NEGATIVE

    @property
    def is_campaign(self) -> bool:
        return self.type == TaskType.TEMPORARY

    def get_stage(self, stage_id: str) -> Optional[TaskStage]:
        """Получить этап по ID"""
        return next((s for s in self.stages if s.id == stage_id), None)

    def with_stages(self, stages: List[TaskStage]) -> "Task":
        return replace(self, stages=list(stages))

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь"""
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "affectedCategories": [c.value for c in self.affected_categories],
            "isCustom": self.is_custom,
        }
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty.value
        if self.stages or self.is_campaign:
            data["stages"] = [s.to_dict() for s in self.stages]
        if self.penalty is not None:
            data["penalty"] = self.penalty
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Десериализация из словаря"""
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                type=data["type"],
                affected_categories=list(data.get("affectedCategories", [])),
                difficulty=data.get("difficulty"),
                stages=[TaskStage.from_dict(s) for s in data.get("stages") or []],
                is_custom=bool(data.get("isCustom", False)),
                penalty=data.get("penalty")
            )
        except KeyError as e:
            raise ValidationError(f"У задачи нет обязательного поля {e}")

# ===== COMPLETION LOG =====

@dataclass(eq=False)
class DayLog:
    """Выполненные за один календарный день задачи и этапы"""
    date: str
    completed_task_ids: List[str] = field(default_factory=list)

    def __eq__(self, other):
        if not isinstance(other, DayLog):
            return NotImplemented
        return self.date == other.date and set(self.completed_task_ids) == set(other.completed_task_ids)

    def __post_init__(self):
        # порядок не важен, дубликаты не имеют смысла
        seen = []
        for item_id in self.completed_task_ids:
            if item_id not in seen:
                seen.append(item_id)
        self.completed_task_ids = seen

    @property
    def is_empty(self) -> bool:
        return not self.completed_task_ids

    def contains(self, item_id: str) -> bool:
        return item_id in self.completed_task_ids

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "completedTaskIds": list(self.completed_task_ids)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DayLog":
        try:
            return cls(
                date=validate_date(data["date"]),
                completed_task_ids=[str(i) for i in data.get("completedTaskIds", [])]
            )
        except KeyError as e:
            raise ValidationError(f"У записи журнала нет обязательного поля {e}")

# ===== CHALLENGES =====

@dataclass
class Challenge:
    """Испытание (квест) на серию или воздержание"""
    id: str
    title: str
    description: str
    type: ChallengeType
    target_task_id: str
    duration_days: int
    reward_xp: int
    status: ChallengeStatus = ChallengeStatus.AVAILABLE
    start_date: Optional[str] = None
    progress: int = 0

    def __post_init__(self):
        self.type = coerce_enum(self.type, ChallengeType, "type")
        self.status = coerce_enum(self.status, ChallengeStatus, "status")
        if not isinstance(self.duration_days, int) or self.duration_days <= 0:
            raise ValidationError("durationDays должен быть положительным числом")
        # в старых сохранениях startDate хранился как полный ISO timestamp
        if self.start_date and len(self.start_date) > 10:
            self.start_date = self.start_date[:10]
        if self.start_date:
            validate_date(self.start_date, "startDate")

    @property
    def progress_percent(self) -> int:
        """Процент выполнения для шкалы прогресса"""
        return min(100, round(self.progress / self.duration_days * 100))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "targetTaskId": self.target_task_id,
            "durationDays": self.duration_days,
            "rewardXP": self.reward_xp,
            "status": self.status.value,
            "startDate": self.start_date,
            "progress": self.progress,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Challenge":
        try:
            return cls(
                id=data["id"],
                title=data["title"],
                description=data.get("description", ""),
                type=data["type"],
                target_task_id=data["targetTaskId"],
                duration_days=int(data["durationDays"]),
                reward_xp=int(data.get("rewardXP", 0)),
                status=data.get("status", ChallengeStatus.AVAILABLE.value),
                start_date=data.get("startDate"),
                progress=int(data.get("progress", 0))
            )
        except KeyError as e:
            raise ValidationError(f"У испытания нет обязательного поля {e}")

# ===== USER =====

@dataclass
class UserProfile:
    """Профиль героя, заполняется при первом запуске"""
    name: str
    age: int
    character_class_id: str
    character_class_name: str = "Герой"

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=50, field_name="name")
        if not isinstance(self.age, int) or not 1 <= self.age <= 120:
            raise ValidationError("age должен быть от 1 до 120")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "age": self.age,
            "characterClassId": self.character_class_id,
            "characterClassName": self.character_class_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        try:
            return cls(
                name=data["name"],
                age=int(data["age"]),
                character_class_id=data["characterClassId"],
                character_class_name=data.get("characterClassName", "Герой")
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Не удалось загрузить профиль: {e}")

@dataclass
class UserStats:
    """Производная статистика; пересчитывается из каталога и журнала"""
    xp: int = 0
    level: int = 1
    physical: int = 0
    intellect: int = 0
    health: int = 0
    professional: int = 0
    xp_to_level_up: int = 100

    @property
    def categories(self) -> Dict[Category, int]:
        return {
            Category.PHYSICAL: self.physical,
            Category.INTELLECT: self.intellect,
            Category.HEALTH: self.health,
            Category.PROFESSIONAL: self.professional,
        }

    def get(self, category: Category) -> int:
        return self.categories[category]

    @property
    def level_progress(self) -> float:
        """Заполненность шкалы текущего уровня (0..1)"""
        return (max(0, self.xp) % self.xp_to_level_up) / self.xp_to_level_up

    @property
    def xp_to_next_level(self) -> int:
        return self.level * self.xp_to_level_up - max(0, self.xp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "xp": self.xp,
            Category.PHYSICAL.value: self.physical,
            Category.INTELLECT.value: self.intellect,
            Category.HEALTH.value: self.health,
            Category.PROFESSIONAL.value: self.professional,
        }

# ===== EXPORT =====

__all__ = [
    # Enums
    'Category', 'TaskType', 'Difficulty', 'ChallengeType', 'ChallengeStatus', 'StageState', 'ItemKind',

    # Exceptions
    'ValidationError',

    # Validation functions
    'validate_text', 'validate_date', 'coerce_enum',

    # Models
    'TaskStage', 'Task', 'DayLog', 'Challenge', 'UserProfile', 'UserStats'
]
