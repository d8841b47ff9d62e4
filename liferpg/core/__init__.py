# core/__init__.py
"""
Ядро LifeRPG: чистые функции над каталогом задач и журналом выполнения.
"""

from .models import (
    Category, TaskType, Difficulty, ChallengeType, ChallengeStatus, StageState,
    Task, TaskStage, DayLog, Challenge, UserProfile, UserStats, ValidationError
)
from .catalog import CatalogIndex, CatalogIntegrityError, build_index, merge_tasks, merge_challenges
from .completion_log import toggle_completion, set_completion, completed_ids
from .stats_engine import compute_stats, level_for_xp
from .titles import TitleInfo, resolve_title
from .campaigns import StageProgress, stage_progress, is_stage_unlocked, stage_state
from .challenges import accept_challenge, claim_challenge, evaluate_challenge

__all__ = [
    'Category', 'TaskType', 'Difficulty', 'ChallengeType', 'ChallengeStatus', 'StageState',
    'Task', 'TaskStage', 'DayLog', 'Challenge', 'UserProfile', 'UserStats', 'ValidationError',
    'CatalogIndex', 'CatalogIntegrityError', 'build_index', 'merge_tasks', 'merge_challenges',
    'toggle_completion', 'set_completion', 'completed_ids',
    'compute_stats', 'level_for_xp',
    'TitleInfo', 'resolve_title',
    'StageProgress', 'stage_progress', 'is_stage_unlocked', 'stage_state',
    'accept_challenge', 'claim_challenge', 'evaluate_challenge',
]
