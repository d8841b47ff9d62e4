# services/__init__.py

"""
Сервисы LifeRPG: Оракул, фокус-таймер и аналитика прогресса.
"""

from .ai_service import AdviceService, AdviceServiceError
from .analytics import campaign_activity, category_history, week_dates
from .timer_service import FocusCompletion, FocusSession, TimerPhase, TimerService, apply_completion

__all__ = [
    'AdviceService', 'AdviceServiceError',
    'campaign_activity', 'category_history', 'week_dates',
    'FocusCompletion', 'FocusSession', 'TimerPhase', 'TimerService', 'apply_completion'
]
