"""
Сервис фокус-таймера (помодоро) для задач и этапов кампаний
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from liferpg.config import config
from liferpg.core.catalog import TASK_DURATIONS, XP_PER_TASK, XP_RATES
from liferpg.core.completion_log import set_completion
from liferpg.core.models import DayLog, Task, TaskStage, ValidationError
from liferpg.utils.datetime_utils import today_str

logger = logging.getLogger(__name__)

FOCUS_TASK_IDS = ('basic_charge', 'const_run', 'const_strength', 'const_read')
DEFAULT_FOCUS_SECONDS = 25 * 60

class TimerPhase(Enum):
    IDLE = "idle"
    WORK = "work"
    BREAK = "break"
    COMPLETED = "completed"

@dataclass(frozen=True)
class FocusCompletion:
    """Что отметить в журнале по окончании квеста"""
    item_id: str
    date: str
    reward_xp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"itemId": self.item_id, "date": self.date, "rewardXP": self.reward_xp}

def is_focus_eligible(task: Task) -> bool:
    return task.id in FOCUS_TASK_IDS or task.is_campaign

def eligible_focus_tasks(tasks: Sequence[Task]) -> List[Task]:
    """Задачи, доступные для фокус-квеста"""
    return [t for t in tasks if is_focus_eligible(t)]

def apply_completion(log: Sequence[DayLog], completion: FocusCompletion) -> List[DayLog]:
    """Отметить выполнение; повторная отметка ничего не меняет"""
    return set_completion(log, completion.date, completion.item_id, True)

class FocusSession:
    """
    Один фокус-квест.

    Обычная задача: одна рабочая фаза длиной TASK_DURATIONS (или 25 минут),
    после которой квест завершен. Кампания: выбранный этап, чередование
    работы и отдыха до явного finish().
    """

    def __init__(self, task: Task, stage_id: Optional[str] = None,
                 work_minutes: Optional[int] = None, break_minutes: Optional[int] = None,
                 today: Optional[str] = None):
        if not is_focus_eligible(task):
            raise ValidationError(f"Задача {task.id} недоступна для фокус-таймера")

        self.task = task
        self.stage: Optional[TaskStage] = None
        if task.is_campaign:
            self.stage = task.get_stage(stage_id) if stage_id else None
            if self.stage is None:
                raise ValidationError(f"Для кампании {task.id} нужно выбрать существующий этап")

        self.work_seconds = (work_minutes or config.timer.work_minutes) * 60
        self.break_seconds = (break_minutes or config.timer.break_minutes) * 60
        self.today = today

        self.phase = TimerPhase.IDLE
        self.time_left = 0
        self.is_running = False
        self.cycles_completed = 0
        self.completion: Optional[FocusCompletion] = None

        self.start()

    @property
    def is_project(self) -> bool:
        return self.stage is not None

    def start(self) -> None:
        self.phase = TimerPhase.WORK
        if self.is_project:
            self.time_left = self.work_seconds
        else:
            self.time_left = TASK_DURATIONS.get(self.task.id, DEFAULT_FOCUS_SECONDS)
        self.is_running = True
        self.cycles_completed = 0
        self.completion = None

    def pause(self) -> None:
        self.is_running = False

    def resume(self) -> None:
        if self.phase in (TimerPhase.WORK, TimerPhase.BREAK):
            self.is_running = True

    def reset(self) -> None:
        self.phase = TimerPhase.IDLE
        self.time_left = 0
        self.is_running = False
        self.cycles_completed = 0
        self.completion = None

    def tick(self, seconds: int = 1) -> Optional[FocusCompletion]:
        """Продвинуть таймер; возвращает FocusCompletion, если квест только что завершен"""
        if not self.is_running or self.phase not in (TimerPhase.WORK, TimerPhase.BREAK):
            return None

        self.time_left -= seconds
        while self.time_left <= 0 and self.is_running:
            overflow = -self.time_left
            completion = self._phase_complete()
            if completion is not None:
                return completion
            self.time_left -= overflow
        return None

    def _phase_complete(self) -> Optional[FocusCompletion]:
        if self.is_project:
            if self.phase == TimerPhase.WORK:
                self.cycles_completed += 1
                self.phase = TimerPhase.BREAK
                self.time_left = self.break_seconds
            else:
                self.phase = TimerPhase.WORK
                self.time_left = self.work_seconds
            return None

        self.phase = TimerPhase.COMPLETED
        self.time_left = 0
        self.is_running = False
        self.completion = FocusCompletion(
            item_id=self.task.id,
            date=self.today or today_str(),
            reward_xp=XP_PER_TASK
        )
        return self.completion

    def finish(self) -> Optional[FocusCompletion]:
        """Завершить квест по этапу кампании досрочно"""
        if not self.is_project or self.phase == TimerPhase.IDLE:
            return None
        if self.phase == TimerPhase.COMPLETED:
            return self.completion

        self.phase = TimerPhase.COMPLETED
        self.is_running = False
        self.completion = FocusCompletion(
            item_id=self.stage.id,
            date=self.stage.date,
            reward_xp=XP_RATES[self.stage.difficulty] if self.stage.difficulty else XP_PER_TASK
        )
        return self.completion

    def format_time(self) -> str:
        seconds = max(0, self.time_left)
        return f"{seconds // 60:02d}:{seconds % 60:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task.id,
            "stage_id": self.stage.id if self.stage else None,
            "phase": self.phase.value,
            "time_left": self.format_time(),
            "is_running": self.is_running,
            "cycles_completed": self.cycles_completed,
        }

CompletionCallback = Callable[[str, FocusCompletion], Any]

class TimerService:
    """Сервис для управления фокус-таймерами"""

    def __init__(self, on_complete: Optional[CompletionCallback] = None,
                 tick_interval: float = 1.0, tick_seconds: int = 1):
        self.on_complete = on_complete
        self.tick_interval = tick_interval
        self.tick_seconds = tick_seconds
        self.sessions: Dict[str, FocusSession] = {}
        self.active_timers: Dict[str, asyncio.Task] = {}

    async def start(self, key: str, session: FocusSession) -> bool:
        """Запуск таймера; предыдущий таймер с тем же ключом останавливается"""
        await self.stop(key)

        self.sessions[key] = session
        self.active_timers[key] = asyncio.create_task(self._timer_worker(key, session))

        logger.info(f"⏰ Запущен фокус-квест {key}: {session.task.name} ({session.format_time()})")
        return True

    async def stop(self, key: str) -> bool:
        """Остановка таймера"""
        timer_task = self.active_timers.pop(key, None)
        if timer_task is None:
            return False

        if not timer_task.done():
            timer_task.cancel()
            try:
                await timer_task
            except asyncio.CancelledError:
                pass

        logger.info(f"⏹️ Остановлен таймер {key}")
        return True

    async def finish(self, key: str) -> Optional[FocusCompletion]:
        """Завершить квест по этапу и выдать награду"""
        session = self.sessions.get(key)
        if session is None:
            return None

        completion = session.finish()
        await self.stop(key)
        if completion is not None:
            await self._notify(key, completion)
        return completion

    def is_active(self, key: str) -> bool:
        return key in self.active_timers and not self.active_timers[key].done()

    def get_session(self, key: str) -> Optional[FocusSession]:
        return self.sessions.get(key)

    async def _timer_worker(self, key: str, session: FocusSession):
        """Рабочий процесс таймера"""
        try:
            while session.phase in (TimerPhase.WORK, TimerPhase.BREAK):
                await asyncio.sleep(self.tick_interval)
                completion = session.tick(self.tick_seconds)
                if completion is not None:
                    await self._notify(key, completion)
                    break
        except asyncio.CancelledError:
            logger.debug(f"⏹️ Таймер {key} отменен")
            raise
        except Exception as e:
            logger.error(f"❌ Ошибка в таймере: {e}")
        finally:
            if self.active_timers.get(key) is asyncio.current_task():
                del self.active_timers[key]

    async def _notify(self, key: str, completion: FocusCompletion) -> None:
        logger.info(f"🏆 Квест {key} завершен: {completion.item_id} +{completion.reward_xp} XP")
        if self.on_complete is None:
            return
        try:
            result = self.on_complete(key, completion)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"❌ Ошибка обработчика завершения квеста: {e}")

    async def cleanup_all(self):
        """Очистка всех активных таймеров при остановке"""
        for key in list(self.active_timers.keys()):
            await self.stop(key)

        logger.info("🧹 Все таймеры очищены")
