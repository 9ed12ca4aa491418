"""Тип параметра Cucumber Expression."""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Sequence

from .enums import GrammarErrorKind
from .errors import CucumberExpressionError, GrammarError, ParameterTransformError

Transformer = Callable[..., Any]

_ILLEGAL_PARAMETER_NAME = re.compile(r"[{}()\\/]")
_HAS_FLAG = re.compile(r"\(\?[aiLmsux-]+(?::.*)?\)")


def is_valid_parameter_type_name(type_name: str) -> bool:
    """Проверяет, что имя типа не содержит служебных символов выражения."""

    return _ILLEGAL_PARAMETER_NAME.search(type_name) is None


def _first_value(*values: str | None) -> str | None:
    return values[0] if values else None


@dataclass(frozen=True)
class ParameterType:
    """Именованное правило: какие regex-фрагменты захватывать и как преобразовать совпадение.

    Пустое имя означает анонимный тип ``{}``: его конкретный тип становится
    известен только в момент сопоставления (см. :meth:`deanonymize`).
    """

    name: str
    regexps: tuple[str, ...]
    type: type | None = None
    transformer: Transformer = field(default=_first_value, compare=False, repr=False)
    use_for_snippets: bool = True
    prefer_for_regexp_match: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.regexps, str):
            object.__setattr__(self, "regexps", (self.regexps,))
        else:
            object.__setattr__(self, "regexps", tuple(self.regexps))
        if not self.regexps:
            raise CucumberExpressionError(f"Parameter type {{{self.name}}} must declare at least one regexp")
        if not is_valid_parameter_type_name(self.name):
            raise GrammarError(GrammarErrorKind.INVALID_PARAMETER_TYPE_NAME, self.name)
        for regexp in self.regexps:
            if _HAS_FLAG.search(regexp):
                raise CucumberExpressionError(
                    f"ParameterType Regexps can't use flags: {regexp} in {{{self.name}}}"
                )

    @property
    def anonymous(self) -> bool:
        return self.name == ""

    def deanonymize(self, type_hint: type, transformer: Transformer) -> "ParameterType":
        """Возвращает конкретную копию анонимного типа, не изменяя исходный."""

        return replace(self, name="anonymous", type=type_hint, transformer=transformer)

    def transform(self, group_values: Sequence[str | None]) -> Any:
        """Преобразует значения захваченных групп в значение параметра."""

        try:
            return self.transformer(*group_values)
        except Exception as error:
            raise ParameterTransformError(self.name, group_values, error) from error
