from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict, Any

from liferpg.core.models import Category, Difficulty, TaskType, ValidationError, validate_date

# Запросы

class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: TaskType
    categories: List[Category] = Field(..., min_length=1)
    difficulty: Optional[Difficulty] = None

class ToggleRequest(BaseModel):
    date: str
    id: str = Field(..., min_length=1)

    @field_validator('date')
    @classmethod
    def validate_log_date(cls, v):
        try:
            return validate_date(v)
        except ValidationError as e:
            raise ValueError(str(e))

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

class StageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    date: str
    difficulty: Optional[Difficulty] = Difficulty.MEDIUM
    depends_on: Optional[str] = Field(None, alias="dependsOn")

    model_config = {"populate_by_name": True}

class ChallengeAction(BaseModel):
    date: Optional[str] = None

    @field_validator('date')
    @classmethod
    def validate_action_date(cls, v):
        if v is None:
            return v
        try:
            return validate_date(v)
        except ValidationError as e:
            raise ValueError(str(e))

class ProfileCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    age: int = Field(..., ge=1, le=120)
    character_class_id: str = Field(..., alias="characterClassId")

    model_config = {"populate_by_name": True}

class FocusStart(BaseModel):
    task_id: str = Field(..., alias="taskId", min_length=1)
    stage_id: Optional[str] = Field(None, alias="stageId")
    work_minutes: Optional[int] = Field(None, alias="workMinutes", ge=1, le=120)
    break_minutes: Optional[int] = Field(None, alias="breakMinutes", ge=1, le=60)

    model_config = {"populate_by_name": True}

# Ответы

class TitleSchema(BaseModel):
    rank: str
    specialization: str
    full: str
    dominant: Optional[str] = None

class StatsResponse(BaseModel):
    xp: int
    level: int
    level_progress: float
    xp_to_next_level: int
    categories: Dict[str, int]
    title: TitleSchema

class OracleResponse(BaseModel):
    message: str
    busy: bool = False

class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    data: Optional[Dict[str, Any]] = None
