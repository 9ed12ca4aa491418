"""Точка входа в приложение expression-service."""
from __future__ import annotations

from fastapi import FastAPI

from app.config import Settings, get_settings
from app.logging_config import get_logger, init_logging
from app.observability import metrics
from api import router as api_router
from infrastructure.expression_cache import ExpressionCache
from infrastructure.parameter_type_registry import ParameterTypeRegistry
from tools.expression_factory import ExpressionFactory
from tools.step_matcher import StepMatcher

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, registry: ParameterTypeRegistry | None = None) -> FastAPI:
    """Собрать приложение: реестр типов, кеш выражений, матчер шагов и роуты."""

    settings = settings or get_settings()
    init_logging(settings.log_level)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.registry = registry or ParameterTypeRegistry()
    app.state.expression_cache = ExpressionCache(
        ExpressionFactory(app.state.registry), max_entries=settings.expression_cache_size
    )
    app.state.step_matcher = StepMatcher(
        app.state.expression_cache, fuzzy_threshold=settings.fuzzy_match_threshold
    )
    app.state.default_language = settings.default_language
    logger.info(
        "[Startup] Зарегистрировано типов параметров: %s, размер кеша выражений: %s",
        len(app.state.registry.parameter_types),
        settings.expression_cache_size,
    )

    @app.get("/health", summary="Проверка доступности сервиса")
    async def healthcheck() -> dict[str, str]:
        """Простой health-endpoint."""

        return {"status": "ok", "service": settings.app_name}

    @app.get("/metrics", summary="Счётчики компиляции и сопоставления")
    async def metrics_snapshot() -> dict[str, int]:
        return metrics.snapshot().values

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()


def main() -> None:
    """Запустить backend-сервис."""

    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
