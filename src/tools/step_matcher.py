"""Сопоставление шагов тесткейса с известными cucumber-определениями."""
from __future__ import annotations

import difflib
import logging
from typing import Iterable

from domain.enums import MatchStatus, StepKeyword, TypeHint
from domain.errors import CucumberExpressionError
from domain.models import MatchedStep, StepDefinition, TestStep
from infrastructure.expression_cache import ExpressionCache
from tools.argument import Argument
from tools.expression_factory import Expression

logger = logging.getLogger(__name__)


class StepMatcher:
    """Матчер шагов на основе Cucumber Expression с подсказкой ближайшего шага."""

    def __init__(self, expression_cache: ExpressionCache, fuzzy_threshold: float = 0.5) -> None:
        self.expression_cache = expression_cache
        self.fuzzy_threshold = fuzzy_threshold

    def match_steps(
        self,
        test_steps: list[TestStep],
        step_definitions: list[StepDefinition],
        language: str | None = None,
    ) -> list[MatchedStep]:
        """Сопоставляет список шагов тесткейса с существующими cucumber-шагами."""

        compiled = list(self._compile_definitions(step_definitions))
        return [self._match_step(test_step, compiled, step_definitions, language) for test_step in test_steps]

    def _compile_definitions(
        self, step_definitions: Iterable[StepDefinition]
    ) -> Iterable[tuple[StepDefinition, Expression, list[type]]]:
        for definition in step_definitions:
            try:
                expression = self.expression_cache.get(definition.expression_source)
                type_hints = [TypeHint.resolve(hint) for hint in definition.type_hints]
            except (CucumberExpressionError, ValueError) as exc:
                logger.warning("Шаг %s пропущен: %s", definition.id, exc)
                continue
            yield definition, expression, type_hints

    def _match_step(
        self,
        test_step: TestStep,
        compiled: list[tuple[StepDefinition, Expression, list[type]]],
        step_definitions: list[StepDefinition],
        language: str | None,
    ) -> MatchedStep:
        text = test_step.text.strip()
        matched: list[tuple[StepDefinition, list[Argument]]] = []
        errors: dict[str, str] = {}

        for definition, expression, type_hints in compiled:
            try:
                arguments = expression.match(text, *type_hints)
            except CucumberExpressionError as exc:
                errors[definition.id] = str(exc)
                continue
            if arguments is not None:
                matched.append((definition, arguments))

        if len(matched) == 1:
            definition, arguments = matched[0]
            return MatchedStep(
                test_step=test_step,
                status=MatchStatus.EXACT,
                step_definition=definition,
                arguments=[argument.value for argument in arguments],
                confidence=1.0,
                generated_gherkin_line=self._build_gherkin_line(definition, text, language),
                notes={"match_errors": errors} if errors else None,
            )

        if matched:
            return MatchedStep(
                test_step=test_step,
                status=MatchStatus.AMBIGUOUS,
                confidence=1.0,
                notes={
                    "reason": "ambiguous_step_definitions",
                    "candidates": [definition.id for definition, _ in matched],
                },
            )

        return self._closest_match(test_step, step_definitions, errors)

    def _closest_match(
        self,
        test_step: TestStep,
        step_definitions: Iterable[StepDefinition],
        errors: dict[str, str],
    ) -> MatchedStep:
        """Подбирает ближайшее по тексту определение для шага без точного совпадения."""

        normalized_test = self._normalize(test_step.text)
        best_def: StepDefinition | None = None
        best_score = 0.0
        for definition in step_definitions:
            score = difflib.SequenceMatcher(None, normalized_test, self._normalize(definition.pattern)).ratio()
            if score > best_score:
                best_score = score
                best_def = definition

        notes: dict[str, object] = {
            "reason": "no_definition_found",
            "original_text": test_step.text,
            "closest_pattern": best_def.pattern if best_def else None,
            "confidence": f"{best_score:.2f}",
        }
        if errors:
            notes["match_errors"] = errors

        status = MatchStatus.FUZZY if best_def and best_score >= self.fuzzy_threshold else MatchStatus.UNMATCHED
        return MatchedStep(
            test_step=test_step,
            status=status,
            step_definition=best_def if status is MatchStatus.FUZZY else None,
            confidence=best_score if best_def else None,
            notes=notes,
        )

    @staticmethod
    def _normalize(text: str) -> str:
        """Нормализует текст для сравнения."""

        return " ".join(text.lower().strip().split())

    @staticmethod
    def _build_gherkin_line(definition: StepDefinition, text: str, language: str | None) -> str:
        keyword = definition.keyword
        if isinstance(keyword, StepKeyword):
            return f"{keyword.as_text(language or definition.language)} {text}"
        return f"{keyword} {text}"
