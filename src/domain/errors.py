"""Исключения, возникающие при компиляции и сопоставлении выражений."""
from __future__ import annotations

from typing import Sequence

from .enums import GrammarErrorKind


class CucumberExpressionError(Exception):
    """Базовая ошибка при работе с Cucumber Expression."""

    def __init__(self, message: str, *, expression: str | None = None) -> None:
        super().__init__(message)
        self.expression = expression


class ExpressionSyntaxError(CucumberExpressionError):
    """Выражение не удалось разобрать (несбалансированные скобки, неверное экранирование)."""

    def __init__(
        self,
        expression: str,
        start: int,
        end: int,
        problem: str,
        solution: str,
    ) -> None:
        super().__init__(_format_with_pointer(expression, start, end, problem, solution), expression=expression)
        self.start = start
        self.end = end
        self.problem = problem
        self.solution = solution


class GrammarError(CucumberExpressionError):
    """Разобранное выражение нарушает правила грамматики."""

    def __init__(self, kind: GrammarErrorKind, expression: str) -> None:
        super().__init__(kind.format(expression), expression=expression)
        self.kind = kind


class UndefinedParameterTypeError(CucumberExpressionError):
    """Выражение ссылается на незарегистрированный тип параметра."""

    def __init__(self, type_name: str, *, expression: str | None = None) -> None:
        message = f"Undefined parameter type {{{type_name}}}"
        if expression is not None:
            message = f"{message} in expression: {expression}"
        super().__init__(message, expression=expression)
        self.undefined_parameter_type_name = type_name


class AmbiguousParameterTypeError(CucumberExpressionError):
    """Для группы регулярного выражения подходит несколько типов параметров."""

    def __init__(self, parameter_type_regexp: str, expression_regexp: str, type_names: Sequence[str]) -> None:
        names = ", ".join(f"{{{name}}}" for name in type_names)
        message = (
            f"Your Regular Expression {expression_regexp}\n"
            f"matches multiple parameter types with regexp {parameter_type_regexp}:\n   {names}\n\n"
            "I couldn't decide which one to use. You have two options:\n\n"
            "1) Use a Cucumber Expression instead of a Regular Expression.\n\n"
            "2) Make one of the parameter types preferential and continue to use a Regular Expression.\n"
        )
        super().__init__(message, expression=expression_regexp)
        self.parameter_type_regexp = parameter_type_regexp
        self.type_names = tuple(type_names)


class ParameterTransformError(CucumberExpressionError):
    """Совпавший текст не удалось преобразовать к целевому типу."""

    def __init__(self, type_name: str, values: Sequence[str | None], cause: Exception) -> None:
        shown = ", ".join(repr(value) for value in values)
        super().__init__(f"Can't transform [{shown}] with parameter type {{{type_name}}}: {cause}")
        self.type_name = type_name
        self.values = tuple(values)


def _format_with_pointer(expression: str, start: int, end: int, problem: str, solution: str) -> str:
    pointer = " " * start + ("^" if end - start <= 1 else "^" + "-" * (end - start - 2) + "^")
    return (
        f"This Cucumber Expression has a problem at column {start + 1}:\n\n"
        f"{expression}\n{pointer}\n{problem}.\n{solution}"
    )
