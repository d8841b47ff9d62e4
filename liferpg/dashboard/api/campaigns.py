from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Any, Dict, List, Optional

from liferpg.core.campaigns import campaign_overview
from liferpg.core.database import StateStore
from ..dependencies import checked_date, get_store
from ..schemas import ProjectCreate, StageCreate

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])

@router.get("", response_model=List[Dict[str, Any]])
async def list_campaigns(
    today: Optional[str] = Query(None, description="Дата отсчета YYYY-MM-DD"),
    store: StateStore = Depends(get_store)
):
    """Все кампании с состоянием этапов и прогрессом"""
    today = checked_date(today, "today")
    return [campaign_overview(task, store.logs, today).to_dict() for task in store.list_campaigns()]

@router.get("/{campaign_id}", response_model=Dict[str, Any])
async def get_campaign(
    campaign_id: str,
    today: Optional[str] = Query(None, description="Дата отсчета YYYY-MM-DD"),
    store: StateStore = Depends(get_store)
):
    today = checked_date(today, "today")
    return campaign_overview(store.get_campaign(campaign_id), store.logs, today).to_dict()

@router.post("", response_model=Dict[str, Any], status_code=201)
async def create_campaign(payload: ProjectCreate, store: StateStore = Depends(get_store)):
    """Новая кампания без этапов"""
    return store.add_project(payload.name).to_dict()

@router.post("/{campaign_id}/stages", response_model=Dict[str, Any], status_code=201)
async def create_stage(campaign_id: str, payload: StageCreate, store: StateStore = Depends(get_store)):
    stage = store.add_stage(campaign_id, payload.name, payload.date, payload.difficulty, payload.depends_on)
    return stage.to_dict()

@router.delete("/{campaign_id}/stages/{stage_id}", response_model=Dict[str, Any])
async def delete_stage(campaign_id: str, stage_id: str, store: StateStore = Depends(get_store)):
    if not store.delete_stage(campaign_id, stage_id):
        raise HTTPException(status_code=404, detail=f"Этап {stage_id} не найден")
    return {"deleted": stage_id}
