"""Доменные модели для описания шагов и результатов их сопоставления."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from .enums import MatchStatus, StepKeyword, StepPatternType


@dataclass
class StepParameter:
    """Структурированное описание параметра шага."""

    name: str
    type: str | None = None
    placeholder: str | None = None


@dataclass
class StepDefinition:
    """Описание шага тестового фреймворка (Cucumber/BDD)."""

    id: str
    keyword: StepKeyword
    pattern: str
    regex: str | None
    code_ref: str
    pattern_type: StepPatternType = StepPatternType.CUCUMBER_EXPRESSION
    parameters: list[StepParameter] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    language: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.keyword, str) and not isinstance(self.keyword, StepKeyword):
            self.keyword = StepKeyword(self.keyword)
        if isinstance(self.pattern_type, str):
            self.pattern_type = StepPatternType(self.pattern_type)
        self.pattern_type = self.pattern_type or StepPatternType.CUCUMBER_EXPRESSION
        self.parameters = list(self._normalize_parameters(self.parameters))

    @property
    def expression_source(self) -> str:
        """Текст, из которого компилируется выражение шага."""

        if self.pattern_type is StepPatternType.REGULAR_EXPRESSION or self.regex:
            source = self.regex or self.pattern
            if source.startswith("^") or source.endswith("$"):
                return source
            return f"/{source}/"
        return self.pattern

    @property
    def type_hints(self) -> list[str | None]:
        """Подсказки типов параметров в порядке их объявления."""

        return [param.type for param in self.parameters]

    @staticmethod
    def _normalize_parameters(parameters: Iterable[StepParameter | str | dict]) -> Iterable[StepParameter]:
        for param in parameters:
            if isinstance(param, StepParameter):
                yield param
            elif isinstance(param, dict):
                yield StepParameter(**param)
            else:
                yield StepParameter(name=str(param))


@dataclass
class TestStep:
    """Шаг тесткейса, полученный из внешнего источника (Jira, ТЗ и т.п.)."""

    order: int
    text: str
    section: str | None = None


@dataclass
class MatchedStep:
    """Результат сопоставления шага тесткейса с известными cucumber-шагами."""

    test_step: TestStep
    status: MatchStatus
    step_definition: StepDefinition | None = None
    arguments: list[Any] = field(default_factory=list)
    confidence: float | None = None
    generated_gherkin_line: str | None = None
    notes: Dict[str, Any] | None = None
