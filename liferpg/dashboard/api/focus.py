from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict, List

from liferpg.core.database import StateStore
from liferpg.services.timer_service import FocusSession, TimerService, eligible_focus_tasks
from ..dependencies import get_store, get_timer_service
from ..schemas import FocusStart

router = APIRouter(prefix="/api/focus", tags=["focus"])

# приложение однопользовательское: один квест одновременно
FOCUS_KEY = "hero"

def _current(timer: TimerService) -> FocusSession:
    session = timer.get_session(FOCUS_KEY)
    if session is None:
        raise HTTPException(status_code=404, detail="Фокус-квест не запущен")
    return session

@router.get("/tasks", response_model=List[Dict[str, Any]])
async def focus_tasks(store: StateStore = Depends(get_store)):
    """Задачи и кампании, доступные для фокус-квеста"""
    return [task.to_dict() for task in eligible_focus_tasks(store.tasks)]

@router.get("", response_model=Dict[str, Any])
async def focus_state(timer: TimerService = Depends(get_timer_service)):
    return _current(timer).to_dict()

@router.post("/start", response_model=Dict[str, Any], status_code=201)
async def start_focus(payload: FocusStart, store: StateStore = Depends(get_store),
                      timer: TimerService = Depends(get_timer_service)):
    """Начать фокус-квест; предыдущий квест останавливается"""
    session = FocusSession(
        store.get_task(payload.task_id),
        stage_id=payload.stage_id,
        work_minutes=payload.work_minutes,
        break_minutes=payload.break_minutes
    )
    await timer.start(FOCUS_KEY, session)
    return session.to_dict()

@router.post("/pause", response_model=Dict[str, Any])
async def pause_focus(timer: TimerService = Depends(get_timer_service)):
    session = _current(timer)
    session.pause()
    return session.to_dict()

@router.post("/resume", response_model=Dict[str, Any])
async def resume_focus(timer: TimerService = Depends(get_timer_service)):
    session = _current(timer)
    session.resume()
    return session.to_dict()

@router.post("/finish", response_model=Dict[str, Any])
async def finish_focus(timer: TimerService = Depends(get_timer_service)):
    """Завершить квест по этапу кампании и записать этап в журнал"""
    session = _current(timer)
    if not session.is_project:
        raise HTTPException(status_code=400, detail="Вручную завершается только квест по этапу кампании")

    completion = await timer.finish(FOCUS_KEY)
    return {
        "completion": completion.to_dict() if completion else None,
        "session": session.to_dict()
    }

@router.delete("", response_model=Dict[str, Any])
async def stop_focus(timer: TimerService = Depends(get_timer_service)):
    """Прервать квест без награды"""
    session = _current(timer)
    await timer.stop(FOCUS_KEY)
    session.reset()
    return session.to_dict()
