#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Dashboard Dependencies
Провайдеры хранилища и Оракула для FastAPI маршрутов

Версия: 1.0.0
Дата: 2026-10-19
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status

from liferpg.core.database import StateStore
from liferpg.core.models import validate_date
from liferpg.services.ai_service import AdviceService
from liferpg.services.timer_service import TimerService

logger = logging.getLogger(__name__)

def get_store(request: Request) -> StateStore:
    """Получить хранилище состояния героя"""
    store = getattr(request.app.state, "store", None)
    if store is None:
        logger.error("❌ Хранилище не инициализировано")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Хранилище недоступно"
        )
    return store

def get_advice_service(request: Request) -> AdviceService:
    """Получить сервис Оракула (создается лениво)"""
    advice = getattr(request.app.state, "advice", None)
    if advice is None:
        advice = AdviceService()
        request.app.state.advice = advice
    return advice

def checked_date(value: Optional[str], field_name: str = "date") -> Optional[str]:
    """Проверить необязательную дату из запроса (YYYY-MM-DD)"""
    return validate_date(value, field_name) if value else None

def get_timer_service(request: Request) -> TimerService:
    """Фокус-таймер; завершенные квесты записываются в журнал хранилища"""
    timer = getattr(request.app.state, "timer", None)
    if timer is None:
        store = get_store(request)

        def record_completion(key, completion):
            store.mark_completed(completion.date, completion.item_id)

        timer = TimerService(on_complete=record_completion)
        request.app.state.timer = timer
    return timer
