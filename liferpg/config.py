#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG - Configuration
Централизованная конфигурация с валидацией

Версия: 1.0.0
Дата: 2026-10-19
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Файлы состояния героя"""
    data_dir: Path
    tasks_file: str = "tasks.json"
    logs_file: str = "logs.json"
    challenges_file: str = "challenges.json"
    profile_file: str = "profile.json"

@dataclass
class AIConfig:
    """Конфигурация Оракула"""
    openai_api_key: Optional[str]
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 300
    request_timeout: int = 30
    advice_enabled: bool = True

@dataclass
class ServerConfig:
    """Конфигурация сервера"""
    host: str = "0.0.0.0"
    port: int = 8080
    debug_mode: bool = False

@dataclass
class TimerConfig:
    """Длительности фокус-таймера в минутах"""
    work_minutes: int = 25
    break_minutes: int = 5

def _env_flag(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() == 'true'

class AppConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        self.storage = StorageConfig(data_dir=self.data_dir)

        self.ai = AIConfig(
            openai_api_key=os.getenv('OPENAI_API_KEY') or None,
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            openai_max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', 300)),
            request_timeout=int(os.getenv('AI_TIMEOUT', 30)),
            advice_enabled=_env_flag('ADVICE_ENABLED', 'true')
        )

        self.server = ServerConfig(
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', 8080)),
            debug_mode=_env_flag('DEBUG_MODE', 'false')
        )

        self.timer = TimerConfig(
            work_minutes=int(os.getenv('POMODORO_WORK', 25)),
            break_minutes=int(os.getenv('POMODORO_BREAK', 5))
        )

        self.timezone = os.getenv('TIMEZONE', 'Europe/Moscow')

        # Логирование
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        self.log_to_file = _env_flag('LOG_TO_FILE', 'false')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if not 1024 <= self.server.port <= 65535:
            errors.append(f"Порт {self.server.port} вне допустимого диапазона (1024-65535)")

        if not 1 <= self.timer.work_minutes <= 120:
            errors.append("POMODORO_WORK должен быть от 1 до 120 минут")

        if not 1 <= self.timer.break_minutes <= 60:
            errors.append("POMODORO_BREAK должен быть от 1 до 60 минут")

        if self.ai.openai_max_tokens <= 0:
            errors.append("OPENAI_MAX_TOKENS должен быть положительным числом")

        if self.ai.advice_enabled and not self.ai.openai_api_key:
            logging.info("ℹ️ OPENAI_API_KEY не задан - Оракул будет отвечать заготовками")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    # сторонние библиотеки шумят на INFO
    QUIET_LOGGERS = ('httpx', 'openai', 'uvicorn.access')

    def get_logging_config(self) -> Dict[str, Any]:
        """dictConfig для logging.config: консоль и, по флагу, файл с ротацией"""
        level = self.log_level.value
        handlers: Dict[str, Dict[str, Any]] = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': level,
                'formatter': 'default',
                'stream': sys.stdout
            }
        }
        if self.log_to_file:
            handlers['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': level,
                'formatter': 'default',
                'filename': str(self.log_dir / f"liferpg_{self.environment.value}.log"),
                'maxBytes': 10 * 1024 * 1024,
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        names = list(handlers)
        loggers = {'': {'level': level, 'handlers': names, 'propagate': False}}
        for name in self.QUIET_LOGGERS:
            loggers[name] = {'level': 'WARNING', 'handlers': names, 'propagate': False}

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'default': {'format': self.log_format, 'datefmt': '%Y-%m-%d %H:%M:%S'}},
            'handlers': handlers,
            'loggers': loggers
        }

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь (без секретов)"""
        return {
            'environment': self.environment.value,
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug_mode': self.server.debug_mode
            },
            'timer': {
                'work_minutes': self.timer.work_minutes,
                'break_minutes': self.timer.break_minutes
            },
            'ai_enabled': bool(self.ai.openai_api_key) and self.ai.advice_enabled,
            'data_dir': str(self.data_dir),
            'timezone': self.timezone,
            'log_level': self.log_level.value
        }

# Глобальный экземпляр конфигурации
config = AppConfig()

__all__ = [
    'config',
    'AppConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'AIConfig',
    'ServerConfig',
    'TimerConfig'
]
