"""Модуль конфигурации приложения."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ROOT_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = ROOT_DIR / ".env"

# Загружаем переменные только если файл существует, чтобы избежать лишних предупреждений
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=False)


class Settings(BaseSettings):
    """Основные настройки приложения."""

    model_config = SettingsConfigDict(
        env_prefix="EXPRESSION_SERVICE_",
        env_file=ENV_PATH,
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="expression-service", description="Название сервиса")
    api_prefix: str = Field(default="/api/v1", description="Префикс для HTTP API")
    host: str = Field(default="127.0.0.1", description="Хост для запуска приложения")
    port: int = Field(default=8000, description="Порт для запуска приложения")
    log_level: str = Field(default="INFO", description="Уровень логирования")

    expression_cache_size: int = Field(
        default=256, description="Сколько скомпилированных выражений держать в памяти"
    )
    fuzzy_match_threshold: float = Field(
        default=0.5, description="Порог сходства для статуса fuzzy при сопоставлении шагов"
    )
    default_language: str | None = Field(
        default=None, description="Язык ключевых слов Gherkin по умолчанию (например, ru)"
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"log_level must be a logging level name, got {value!r}")
        return normalized

    @field_validator("expression_cache_size")
    @classmethod
    def _validate_cache_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("expression_cache_size must be >= 1")
        return value

    @field_validator("fuzzy_match_threshold")
    @classmethod
    def _validate_threshold(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("fuzzy_match_threshold must be between 0 and 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Получить настройки приложения с кешированием."""

    settings = Settings()
    logging.getLogger(__name__).debug("Config loaded: %s", settings.model_dump())
    return settings
