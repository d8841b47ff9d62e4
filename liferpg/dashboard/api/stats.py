from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional

from liferpg.core.database import StateStore
from liferpg.services.analytics import campaign_activity, category_history
from ..dependencies import checked_date, get_store
from ..schemas import StatsResponse

router = APIRouter(prefix="/api/stats", tags=["statistics"])

@router.get("", response_model=StatsResponse)
async def get_stats(store: StateStore = Depends(get_store)):
    """
    Текущая статистика героя и его звание
    """
    stats = store.stats()
    title = store.title()
    return StatsResponse(
        xp=stats.xp,
        level=stats.level,
        level_progress=stats.level_progress,
        xp_to_next_level=stats.xp_to_next_level,
        categories={category.value: value for category, value in stats.categories.items()},
        title=title.to_dict()
    )

@router.get("/history", response_model=Dict[str, Any])
async def get_history(
    today: Optional[str] = Query(None, description="Дата отсчета YYYY-MM-DD"),
    days: int = Query(14, ge=1, le=90),
    store: StateStore = Depends(get_store)
):
    """
    Данные для графиков: накопленные характеристики и активность кампаний
    """
    today = checked_date(today, "today")
    return {
        "history": category_history(store.index, store.logs, today),
        "campaign_activity": campaign_activity(store.index, store.logs, today, days)
    }
