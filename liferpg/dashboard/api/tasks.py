from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict, List

from liferpg.core.database import StateStore
from ..dependencies import get_store
from ..schemas import TaskCreate

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

@router.get("", response_model=List[Dict[str, Any]])
async def list_tasks(store: StateStore = Depends(get_store)):
    """Каталог задач: встроенные и пользовательские"""
    return [task.to_dict() for task in store.tasks]

@router.post("", response_model=Dict[str, Any], status_code=201)
async def create_task(payload: TaskCreate, store: StateStore = Depends(get_store)):
    """Создать пользовательскую задачу"""
    task = store.add_task(payload.name, payload.type, payload.categories, payload.difficulty)
    return task.to_dict()

@router.delete("/{task_id}", response_model=Dict[str, Any])
async def delete_task(task_id: str, store: StateStore = Depends(get_store)):
    """Удалить пользовательскую задачу"""
    if not store.delete_task(task_id):
        raise HTTPException(status_code=400, detail=f"Встроенную задачу {task_id} удалить нельзя")
    return {"deleted": task_id}
