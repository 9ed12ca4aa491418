"""Роуты сопоставления шагов тесткейса с определениями шагов."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from api.schemas import MatchedStepDto, MatchStepsRequest, MatchStepsResponse, TestStepDto
from domain.enums import MatchStatus
from domain.models import StepDefinition, StepParameter, TestStep
from tools.step_matcher import StepMatcher

router = APIRouter(prefix="/steps", tags=["steps"])
logger = logging.getLogger(__name__)


def _get_step_matcher(request: Request) -> StepMatcher:
    matcher: StepMatcher | None = getattr(request.app.state, "step_matcher", None)
    if matcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Step matcher is not initialized",
        )
    return matcher


@router.post("/match", response_model=MatchStepsResponse)
async def match_steps(payload: MatchStepsRequest, request: Request) -> MatchStepsResponse:
    matcher = _get_step_matcher(request)
    definitions = [
        StepDefinition(
            id=dto.id,
            keyword=dto.keyword,
            pattern=dto.pattern,
            regex=dto.regex,
            code_ref=dto.code_ref,
            pattern_type=dto.pattern_type,
            parameters=[StepParameter(**param.model_dump()) for param in dto.parameters],
            tags=list(dto.tags),
            language=dto.language,
        )
        for dto in payload.step_definitions
    ]
    test_steps = [TestStep(order=step.order, text=step.text, section=step.section) for step in payload.steps]
    language = payload.language or getattr(request.app.state, "default_language", None)

    matches = matcher.match_steps(test_steps, definitions, language=language)
    unmatched = sum(1 for match in matches if match.status is MatchStatus.UNMATCHED)
    logger.info("Сопоставлено шагов: %s, без совпадения: %s", len(matches), unmatched)

    return MatchStepsResponse(
        items=[
            MatchedStepDto(
                step=TestStepDto(
                    order=match.test_step.order, text=match.test_step.text, section=match.test_step.section
                ),
                status=match.status,
                step_definition_id=match.step_definition.id if match.step_definition else None,
                arguments=match.arguments,
                confidence=match.confidence,
                generated_gherkin_line=match.generated_gherkin_line,
                notes=match.notes,
            )
            for match in matches
        ],
        unmatched_count=unmatched,
    )
