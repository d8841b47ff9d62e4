#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Oracle Advice Service
Советы Оракула по характеристикам героя через OpenAI

Версия: 1.0.0
Дата: 2026-10-19
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import openai
from openai import AsyncOpenAI

from liferpg.config import config
from liferpg.core.models import UserProfile, UserStats

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class AdviceServiceError(Exception):
    """Базовое исключение для сервиса советов"""
    pass

class EmptyAdviceError(AdviceServiceError):
    """Модель вернула пустой ответ"""
    pass

# ===== FALLBACK RESPONSES =====

GREETING = "Приветствую, герой. Твой путь начинается."
MIST_FALLBACK = "Туман скрывает будущее, герой..."
CONNECTION_LOST = "Связь с астральным планом прервана. Храни свою дисциплину сам."
BUSY_MESSAGE = "Оракул уже вглядывается в туман. Дождись его ответа."

PROMPT_TEMPLATE = """
You are a wise RPG Oracle and Mentor in a medieval setting.
The hero's name is {name} (age {age}), who belongs to the {class_name} class.

Here are their current life stats (0-100 range usually):
- Physical/Body: {physical}
- Intellect: {intellect}
- Vitality/Health: {health}
- Mastery/Professional: {professional}
- Current Level: {level}

Analyze their strongest and weakest areas based on these numbers.
Provide a short, immersive, fantasy-themed piece of advice (max 2 sentences) in Russian.
Address them directly by name and acknowledge their chosen path ({class_name}).
Encourage them to work on their weakest stat or praise their highest achievement.
Do not use markdown formatting like bold or italics. Keep it raw text.
Speak with gravity and ancient wisdom.
Language: Russian.
"""

def welcome_message(profile: UserProfile) -> str:
    """Приветствие после создания героя"""
    return (
        f"Приветствую тебя, {profile.name} из касты {profile.character_class_name}! "
        f"Твоя история в мире Дисциплины начинается сегодня."
    )

# ===== STATS =====

@dataclass
class AdviceStats:
    """Статистика обращений к Оракулу"""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    fallback_responses: int = 0
    busy_rejections: int = 0
    total_tokens_used: int = 0
    last_response_time_ms: int = 0

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_requests': self.total_requests,
            'successful_requests': self.successful_requests,
            'failed_requests': self.failed_requests,
            'fallback_responses': self.fallback_responses,
            'busy_rejections': self.busy_rejections,
            'total_tokens_used': self.total_tokens_used,
            'last_response_time_ms': self.last_response_time_ms,
            'success_rate': round(self.success_rate, 2)
        }

# ===== SERVICE =====

class AdviceService:
    """
    Оракул: один запрос к модели одновременно.

    generate_advice никогда не бросает исключений: при любой ошибке
    возвращается одна из заготовленных фраз.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 client: Optional[Any] = None, enabled: Optional[bool] = None):
        self.model = model or config.ai.openai_model
        self.max_tokens = config.ai.openai_max_tokens
        self.timeout = config.ai.request_timeout
        self.enabled = config.ai.advice_enabled if enabled is None else enabled

        self.client = client
        if self.client is None:
            self.client = self._initialize_openai(api_key or config.ai.openai_api_key)

        self.stats = AdviceStats()
        self._busy = False

        logger.info(f"Oracle service initialized - OpenAI: {'✅' if self.is_available else '❌'}")

    def _initialize_openai(self, api_key: Optional[str]) -> Optional[AsyncOpenAI]:
        if not api_key:
            logger.warning("OpenAI API key not configured")
            return None

        try:
            return AsyncOpenAI(api_key=api_key, timeout=self.timeout)
        except openai.OpenAIError as e:
            logger.error(f"Failed to initialize OpenAI client: {e}")
            return None

    @property
    def is_available(self) -> bool:
        return self.enabled and self.client is not None

    @property
    def is_busy(self) -> bool:
        return self._busy

    @staticmethod
    def build_prompt(stats: UserStats, profile: UserProfile) -> str:
        return PROMPT_TEMPLATE.format(
            name=profile.name,
            age=profile.age,
            class_name=profile.character_class_name,
            physical=stats.physical,
            intellect=stats.intellect,
            health=stats.health,
            professional=stats.professional,
            level=stats.level
        ).strip()

    async def generate_advice(self, stats: UserStats, profile: Optional[UserProfile]) -> str:
        """Получить совет Оракула"""
        if self._busy:
            self.stats.busy_rejections += 1
            return BUSY_MESSAGE

        if not self.is_available or profile is None:
            self.stats.fallback_responses += 1
            return GREETING

        self._busy = True
        self.stats.total_requests += 1
        start_time = time.time()
        try:
            advice = await self._request_advice(self.build_prompt(stats, profile))
            self.stats.successful_requests += 1
            return advice

        except EmptyAdviceError:
            logger.warning("⚠️ Оракул вернул пустой ответ")
            self.stats.fallback_responses += 1
            return MIST_FALLBACK

        except openai.APITimeoutError:
            logger.warning("⚠️ OpenAI timeout")
            self.stats.failed_requests += 1
            return CONNECTION_LOST

        except openai.OpenAIError as e:
            logger.error(f"❌ OpenAI API error: {e}")
            self.stats.failed_requests += 1
            return CONNECTION_LOST

        except Exception as e:
            logger.error(f"❌ Oracle service error: {e}")
            self.stats.failed_requests += 1
            return CONNECTION_LOST

        finally:
            self.stats.last_response_time_ms = int((time.time() - start_time) * 1000)
            self._busy = False

    async def _request_advice(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
            temperature=0.8
        )

        usage = getattr(response, "usage", None)
        if usage is not None:
            self.stats.total_tokens_used += getattr(usage, "total_tokens", 0) or 0

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise EmptyAdviceError("empty completion")
        return content.strip()

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.to_dict()

__all__ = [
    'AdviceService', 'AdviceStats', 'AdviceServiceError', 'EmptyAdviceError',
    'GREETING', 'MIST_FALLBACK', 'CONNECTION_LOST', 'BUSY_MESSAGE', 'welcome_message'
]
