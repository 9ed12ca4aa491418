"""Маршруты HTTP API."""
from fastapi import APIRouter

from .routes_expressions import router as expressions_router
from .routes_steps import router as steps_router

router = APIRouter()
router.include_router(expressions_router)
router.include_router(steps_router)

__all__ = ["router"]
