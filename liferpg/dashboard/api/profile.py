from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict

from liferpg.core.catalog import CHARACTER_CLASSES
from liferpg.core.database import StateStore
from liferpg.services.ai_service import welcome_message
from ..dependencies import get_store
from ..schemas import ProfileCreate

router = APIRouter(prefix="/api/profile", tags=["profile"])

@router.get("", response_model=Dict[str, Any])
async def get_profile(store: StateStore = Depends(get_store)):
    if store.profile is None:
        raise HTTPException(status_code=404, detail="Герой еще не создан")
    return store.profile.to_dict()

@router.post("", response_model=Dict[str, Any])
async def create_profile(payload: ProfileCreate, store: StateStore = Depends(get_store)):
    """Создать героя и выбрать класс"""
    profile = store.set_profile(payload.name, payload.age, payload.character_class_id)
    data = profile.to_dict()
    data["greeting"] = welcome_message(profile)
    return data

@router.get("/classes", response_model=Dict[str, Any])
async def list_classes():
    return CHARACTER_CLASSES
