from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict

from liferpg.core.completion_log import completed_on
from liferpg.core.database import StateStore
from ..dependencies import get_store
from ..schemas import ToggleRequest

router = APIRouter(prefix="/api/logs", tags=["logs"])

@router.get("", response_model=Dict[str, Any])
async def get_logs(store: StateStore = Depends(get_store)):
    """Журнал выполнения"""
    return {"logs": [entry.to_dict() for entry in store.logs]}

@router.post("/toggle", response_model=Dict[str, Any])
async def toggle(payload: ToggleRequest, store: StateStore = Depends(get_store)):
    """Отметить или снять отметку о выполнении задачи или этапа"""
    if payload.id not in store.index:
        raise HTTPException(status_code=404, detail=f"Задача или этап {payload.id} не найдены")

    store.toggle(payload.date, payload.id)
    return {
        "date": payload.date,
        "id": payload.id,
        "completed": payload.id in completed_on(store.logs, payload.date),
        "stats": store.stats().to_dict()
    }
