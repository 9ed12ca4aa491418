"""Настройка логирования для приложения."""
from __future__ import annotations

import logging
from logging import Logger

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_LEVEL = logging.INFO


def init_logging(level: str | int = LOG_LEVEL) -> None:
    """Инициализировать логирование для приложения и Uvicorn."""

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])
    logging.getLogger().setLevel(level)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> Logger:
    """Получить настроенный логгер по имени."""

    return logging.getLogger(name)
