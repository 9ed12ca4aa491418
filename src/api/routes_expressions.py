"""Роуты компиляции и сопоставления выражений шагов."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from api.schemas import (
    ArgumentDto,
    CompileExpressionRequest,
    CompileExpressionResponse,
    ExpressionErrorDto,
    GroupDto,
    MatchExpressionRequest,
    MatchExpressionResponse,
    ParameterTypeDto,
)
from domain.errors import (
    CucumberExpressionError,
    GrammarError,
    ParameterTransformError,
)
from infrastructure.expression_cache import ExpressionCache
from infrastructure.parameter_type_registry import ParameterTypeRegistry
from tools.cucumber_expression import CucumberExpression
from tools.expression_factory import Expression, expression_type_of

router = APIRouter(tags=["expressions"])
logger = logging.getLogger(__name__)

_UNPROCESSABLE = 422


def _get_expression_cache(request: Request) -> ExpressionCache:
    cache: ExpressionCache | None = getattr(request.app.state, "expression_cache", None)
    if cache is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Expression cache is not initialized",
        )
    return cache


def _get_registry(request: Request) -> ParameterTypeRegistry:
    registry: ParameterTypeRegistry | None = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Parameter type registry is not initialized",
        )
    return registry


def _error_detail(error: CucumberExpressionError) -> dict:
    kind = error.kind.value if isinstance(error, GrammarError) else type(error).__name__
    return ExpressionErrorDto(message=str(error), kind=kind, expression=error.expression).model_dump(
        by_alias=True
    )


def _compile(request: Request, source: str) -> Expression:
    try:
        return _get_expression_cache(request).get(source)
    except CucumberExpressionError as exc:
        logger.info("Выражение не скомпилировано: %s", exc)
        raise HTTPException(
            status_code=_UNPROCESSABLE, detail=_error_detail(exc)
        ) from exc


@router.post("/expressions/compile", response_model=CompileExpressionResponse)
async def compile_expression(payload: CompileExpressionRequest, request: Request) -> CompileExpressionResponse:
    expression = _compile(request, payload.expression)
    parameter_types = (
        [parameter_type.name for parameter_type in expression.parameter_types]
        if isinstance(expression, CucumberExpression)
        else []
    )
    return CompileExpressionResponse(
        source=expression.source,
        regex=expression.regexp.pattern,
        expression_type=expression_type_of(expression),
        parameter_types=parameter_types,
    )


@router.post("/expressions/match", response_model=MatchExpressionResponse)
async def match_expression(payload: MatchExpressionRequest, request: Request) -> MatchExpressionResponse:
    expression = _compile(request, payload.expression)
    type_hints = [hint.python_type if hint else str for hint in payload.type_hints]

    try:
        arguments = expression.match(payload.text, *type_hints)
    except ParameterTransformError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_error_detail(exc)) from exc
    except CucumberExpressionError as exc:
        raise HTTPException(
            status_code=_UNPROCESSABLE, detail=_error_detail(exc)
        ) from exc

    if arguments is None:
        return MatchExpressionResponse(matched=False)

    return MatchExpressionResponse(
        matched=True,
        arguments=[
            ArgumentDto(
                parameter_type=argument.parameter_type.name,
                value=argument.value,
                group=GroupDto(value=argument.group.value, start=argument.group.start, end=argument.group.end),
            )
            for argument in arguments
        ],
    )


@router.get("/parameter-types", response_model=list[ParameterTypeDto])
async def list_parameter_types(request: Request) -> list[ParameterTypeDto]:
    registry = _get_registry(request)
    return [
        ParameterTypeDto(
            name=parameter_type.name,
            regexps=list(parameter_type.regexps),
            type=parameter_type.type.__name__ if parameter_type.type else None,
            use_for_snippets=parameter_type.use_for_snippets,
            prefer_for_regexp_match=parameter_type.prefer_for_regexp_match,
        )
        for parameter_type in registry.parameter_types
    ]
