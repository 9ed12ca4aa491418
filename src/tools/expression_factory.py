"""Создание выражения шага по его исходному тексту."""
from __future__ import annotations

import re
from typing import Protocol

from domain.enums import StepPatternType
from infrastructure.parameter_type_registry import ParameterTypeRegistry
from tools.argument import Argument
from tools.cucumber_expression import CucumberExpression
from tools.regular_expression import RegularExpression


class Expression(Protocol):
    """Общий интерфейс Cucumber Expression и регулярного выражения."""

    @property
    def source(self) -> str: ...

    @property
    def regexp(self) -> re.Pattern[str]: ...

    def match(self, text: str, *type_hints: type) -> list[Argument] | None: ...


def expression_type_of(expression: Expression) -> StepPatternType:
    if isinstance(expression, RegularExpression):
        return StepPatternType.REGULAR_EXPRESSION
    return StepPatternType.CUCUMBER_EXPRESSION


class ExpressionFactory:
    """Выбирает тип выражения: ``^...$`` и ``/.../`` считаются регулярными выражениями."""

    def __init__(self, registry: ParameterTypeRegistry) -> None:
        self.registry = registry

    def create_expression(self, value: str | re.Pattern[str]) -> Expression:
        if isinstance(value, re.Pattern):
            return RegularExpression(value, self.registry)
        if value.startswith("^") or value.endswith("$"):
            return RegularExpression(value, self.registry)
        if len(value) > 1 and value.startswith("/") and value.endswith("/"):
            return RegularExpression(value[1:-1], self.registry)
        return CucumberExpression(value, self.registry)
