#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - State Store
Хранение каталога, журнала, испытаний и профиля в JSON файлах

Версия: 1.0.0
Дата: 2026-10-19
"""

import json
import shutil
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

from liferpg.config import config
from liferpg.core import campaigns, catalog, challenges as tracker
from liferpg.core.catalog import (
    CHARACTER_CLASSES, PREDEFINED_CHALLENGES, PREDEFINED_TASKS,
    CatalogIndex, CatalogIntegrityError, build_index, find_duplicate_ids,
    merge_challenges, merge_tasks
)
from liferpg.core.completion_log import normalize_log, set_completion, toggle_completion
from liferpg.core.models import (
    Category, Challenge, DayLog, Difficulty, Task, TaskStage, TaskType,
    UserProfile, UserStats, ValidationError
)
from liferpg.core.stats_engine import compute_stats
from liferpg.core.titles import TitleInfo, resolve_title

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StorageError(Exception):
    """Базовое исключение для ошибок хранилища"""
    pass

class NotFoundError(StorageError):
    """Запрошенная задача, этап или испытание не найдены"""
    pass

# ===== STORE =====

class StateStore:
    """
    Состояние героя: четыре независимо сохраняемые коллекции.

    При загрузке встроенные задачи и испытания объединяются с сохраненными,
    журнал нормализуется. Каждая мутация сначала записывается на диск
    и только затем принимается в памяти.
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None, autoload: bool = True):
        self.data_dir = Path(data_dir) if data_dir else config.storage.data_dir
        self.tasks_file = self.data_dir / config.storage.tasks_file
        self.logs_file = self.data_dir / config.storage.logs_file
        self.challenges_file = self.data_dir / config.storage.challenges_file
        self.profile_file = self.data_dir / config.storage.profile_file

        self.tasks: List[Task] = list(PREDEFINED_TASKS)
        self.logs: List[DayLog] = []
        self.challenges: List[Challenge] = list(PREDEFINED_CHALLENGES)
        self.profile: Optional[UserProfile] = None

        self._index: Optional[CatalogIndex] = None
        self._lock = threading.RLock()

        if autoload:
            self.load()

    # ===== LOAD / SAVE =====

    def load(self) -> None:
        """Загрузить все коллекции с диска"""
        with self._lock:
            self.data_dir.mkdir(parents=True, exist_ok=True)

            stored_tasks = self._parse_records(self._read_json(self.tasks_file), Task, "задача")
            stored_logs = self._parse_records(self._read_json(self.logs_file), DayLog, "запись журнала")
            stored_challenges = self._parse_records(
                self._read_json(self.challenges_file), Challenge, "испытание"
            )

            try:
                self.tasks = merge_tasks(PREDEFINED_TASKS, stored_tasks)
            except CatalogIntegrityError as e:
                logger.error(f"❌ Каталог поврежден: {e}")
                raise StorageError(f"Не удалось загрузить каталог: {e}")

            self.logs = normalize_log(stored_logs)
            self.challenges = merge_challenges(PREDEFINED_CHALLENGES, stored_challenges)

            raw_profile = self._read_json(self.profile_file)
            self.profile = None
            if isinstance(raw_profile, dict):
                try:
                    self.profile = UserProfile.from_dict(raw_profile)
                except ValidationError as e:
                    logger.warning(f"⚠️ Профиль пропущен: {e}")

            self._index = None
            logger.info(
                f"📂 Загружено: {len(self.tasks)} задач, {len(self.logs)} дней журнала, "
                f"{len(self.challenges)} испытаний"
            )

    def save(self) -> None:
        """Сохранить все коллекции на диск"""
        with self._lock:
            self._commit(tasks=self.tasks, logs=self.logs, challenges=self.challenges, profile=self.profile)

    def _commit(self, **state) -> None:
        """
        Записать новые значения коллекций на диск и только после успешной
        записи принять их в памяти.
        """
        files = {
            'tasks': self.tasks_file,
            'logs': self.logs_file,
            'challenges': self.challenges_file,
            'profile': self.profile_file
        }
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name, value in state.items():
            if name == 'profile':
                data = value.to_dict() if value else None
            else:
                data = [item.to_dict() for item in value]
            self._write_json(files[name], data)

        for name, value in state.items():
            setattr(self, name, value)
        if 'tasks' in state:
            self._index = None

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Файл {path.name} поврежден: {e}")
            self._quarantine(path)
            return None
        except OSError as e:
            logger.error(f"❌ Не удалось прочитать {path}: {e}")
            raise StorageError(f"Не удалось прочитать {path}: {e}")

    def _quarantine(self, path: Path) -> None:
        corrupt_file = path.with_suffix(path.suffix + '.corrupt')
        try:
            shutil.copy2(path, corrupt_file)
            logger.warning(f"⚠️ Поврежденный файл сохранен как {corrupt_file.name}")
        except OSError as e:
            logger.error(f"❌ Не удалось сохранить копию поврежденного файла: {e}")

    @staticmethod
    def _parse_records(raw: Any, model: type, label: str) -> list:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"⚠️ Ожидался список ({label}), получено {type(raw).__name__}")
            return []

        records = []
        for item in raw:
            try:
                records.append(model.from_dict(item))
            except (ValidationError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"⚠️ Пропущена запись ({label}): {e}")
        return records

    def _write_json(self, path: Path, data: Any) -> None:
        # атомарное сохранение через временный файл
        temp_file = path.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            shutil.move(str(temp_file), str(path))
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            logger.error(f"❌ Не удалось сохранить {path.name}: {e}")
            raise StorageError(f"Не удалось сохранить {path}: {e}")

    # ===== CATALOG =====

    @property
    def index(self) -> CatalogIndex:
        if self._index is None:
            self._index = build_index(self.tasks)
        return self._index

    def _set_tasks(self, tasks: List[Task]) -> None:
        duplicates = find_duplicate_ids(tasks)
        if duplicates:
            raise CatalogIntegrityError(duplicates)
        self._commit(tasks=tasks)

    def get_task(self, task_id: str) -> Task:
        task = catalog.get_task(self.tasks, task_id)
        if task is None:
            raise NotFoundError(f"Задача {task_id} не найдена")
        return task

    def get_campaign(self, task_id: str) -> Task:
        task = self.get_task(task_id)
        if not task.is_campaign:
            raise NotFoundError(f"Кампания {task_id} не найдена")
        return task

    def list_campaigns(self) -> List[Task]:
        return [t for t in self.tasks if t.is_campaign]

    def add_task(self, name: str, task_type: TaskType, categories: Sequence[Category],
                 difficulty: Optional[Difficulty] = None) -> Task:
        with self._lock:
            task = catalog.create_task(name, task_type, categories, difficulty)
            self._set_tasks(catalog.add_task(self.tasks, task))
            logger.info(f"➕ Новая задача {task.id}: {task.name}")
            return task

    def add_project(self, name: str) -> Task:
        with self._lock:
            project = catalog.create_project(name)
            self._set_tasks(catalog.add_task(self.tasks, project))
            logger.info(f"🗺️ Новая кампания {project.id}: {project.name}")
            return project

    def delete_task(self, task_id: str) -> bool:
        """Удалить пользовательскую задачу; False, если она встроенная"""
        with self._lock:
            self.get_task(task_id)
            tasks = catalog.delete_task(self.tasks, task_id)
            if len(tasks) == len(self.tasks):
                return False
            self._set_tasks(tasks)
            return True

    def _replace_task(self, updated: Task) -> None:
        self._set_tasks([updated if t.id == updated.id else t for t in self.tasks])

    def add_stage(self, project_id: str, name: str, date: str,
                  difficulty: Optional[Difficulty] = Difficulty.MEDIUM,
                  depends_on: Optional[str] = None, stage_id: Optional[str] = None) -> TaskStage:
        with self._lock:
            project = self.get_campaign(project_id)
            updated = campaigns.add_stage(project, name, date, difficulty, depends_on, stage_id)
            self._replace_task(updated)
            return updated.stages[-1]

    def update_stage(self, project_id: str, stage_id: str, **changes) -> TaskStage:
        with self._lock:
            project = self.get_campaign(project_id)
            if project.get_stage(stage_id) is None:
                raise NotFoundError(f"Этап {stage_id} не найден")
            updated = campaigns.update_stage(project, stage_id, **changes)
            self._replace_task(updated)
            return updated.get_stage(stage_id)

    def delete_stage(self, project_id: str, stage_id: str) -> bool:
        with self._lock:
            project = self.get_campaign(project_id)
            if project.get_stage(stage_id) is None:
                return False
            self._replace_task(campaigns.delete_stage(project, stage_id))
            return True

    # ===== LOG =====

    def toggle(self, day: str, item_id: str) -> List[DayLog]:
        with self._lock:
            self._commit(logs=toggle_completion(self.logs, day, item_id))
            return self.logs

    def mark_completed(self, day: str, item_id: str) -> List[DayLog]:
        with self._lock:
            self._commit(logs=set_completion(self.logs, day, item_id, True))
            return self.logs

    # ===== CHALLENGES =====

    def get_challenge(self, challenge_id: str) -> Challenge:
        challenge = next((c for c in self.challenges if c.id == challenge_id), None)
        if challenge is None:
            raise NotFoundError(f"Испытание {challenge_id} не найдено")
        return challenge

    def _replace_challenge(self, updated: Challenge) -> None:
        self._commit(challenges=[updated if c.id == updated.id else c for c in self.challenges])

    def accept_challenge(self, challenge_id: str, on_date: Optional[str] = None) -> Challenge:
        with self._lock:
            updated = tracker.accept_challenge(self.get_challenge(challenge_id), on_date)
            self._replace_challenge(updated)
            return updated

    def claim_challenge(self, challenge_id: str, as_of: Optional[str] = None) -> Challenge:
        with self._lock:
            updated = tracker.claim_challenge(self.get_challenge(challenge_id), self.logs, as_of)
            self._replace_challenge(updated)
            return updated

    def challenges_view(self, as_of: Optional[str] = None) -> List[Challenge]:
        """Испытания с прогрессом, пересчитанным на дату"""
        return [tracker.refresh_challenge(c, self.logs, as_of) for c in self.challenges]

    # ===== PROFILE =====

    def set_profile(self, name: str, age: int, character_class_id: str) -> UserProfile:
        character_class = CHARACTER_CLASSES.get(character_class_id)
        if character_class is None:
            raise ValidationError(f"Неизвестный класс персонажа: {character_class_id}")

        with self._lock:
            profile = UserProfile(
                name=name,
                age=age,
                character_class_id=character_class_id,
                character_class_name=character_class['name']
            )
            self._commit(profile=profile)
            logger.info(f"🧙 Профиль героя {self.profile.name} сохранен")
            return self.profile

    # ===== DERIVED =====

    def stats(self) -> UserStats:
        return compute_stats(self.index, self.logs, self.challenges)

    def title(self) -> TitleInfo:
        return resolve_title(self.stats())

    def get_health_status(self) -> Dict[str, Any]:
        return {
            'data_dir': str(self.data_dir),
            'tasks': len(self.tasks),
            'log_days': len(self.logs),
            'challenges': len(self.challenges),
            'has_profile': self.profile is not None
        }

__all__ = ['StateStore', 'StorageError', 'NotFoundError']
