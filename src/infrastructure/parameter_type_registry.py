"""Реестр типов параметров Cucumber Expression.

Реестр владеет встроенными типами (``{int}``, ``{float}``, ``{word}``,
``{string}``, анонимный ``{}`` и др.) и пользовательскими типами,
зарегистрированными через :meth:`ParameterTypeRegistry.define_parameter_type`.
Выражения получают реестр явно при компиляции и только читают его.
"""
from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Iterable

from domain.errors import AmbiguousParameterTypeError, CucumberExpressionError
from domain.parameter_type import ParameterType

logger = logging.getLogger(__name__)

INTEGER_REGEXPS = (r"-?\d+", r"\d+")
FLOAT_REGEXP = r"(?=.*\d.*)[-+]?\d*(?:\.(?=\d.*))?\d*(?:\d+[E][-+]?\d+)?"
WORD_REGEXP = r"[^\s]+"
STRING_REGEXPS = (r'"([^"\\]*(\\.[^"\\]*)*)"', r"'([^'\\]*(\\.[^'\\]*)*)'")
ANONYMOUS_REGEXP = r".*"

_ESCAPED_QUOTE = re.compile(r"\\([\"'])")


def _bounded_int(bits: int):
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def transform(value: str) -> int:
        number = int(value)
        if not low <= number <= high:
            raise ValueError(f"value {value} is out of range [{low}, {high}]")
        return number

    return transform


def _transform_string(double_quoted: str | None = None, single_quoted: str | None = None) -> str:
    value = double_quoted if double_quoted is not None else single_quoted
    return _ESCAPED_QUOTE.sub(r"\1", value or "")


def _transform_decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as error:
        raise ValueError(f"invalid decimal value: {value}") from error


class DefaultTransformer:
    """Преобразование строки к Python-типу для анонимных параметров."""

    _BOOLEANS = {"true": True, "1": True, "yes": True, "false": False, "0": False, "no": False}

    def transform(self, value: str | None, target_type: type) -> Any:
        if value is None:
            return None
        if target_type is str:
            return value
        if target_type is bool:
            try:
                return self._BOOLEANS[value.strip().casefold()]
            except KeyError as error:
                raise ValueError(f"Can't transform '{value}' to bool") from error
        if target_type is int:
            return int(value)
        if target_type is float:
            return float(value)
        if target_type is Decimal:
            return _transform_decimal(value)
        if isinstance(target_type, type) and issubclass(target_type, Enum):
            try:
                return target_type[value]
            except KeyError as error:
                raise ValueError(f"'{value}' is not a member of {target_type.__name__}") from error
        raise ValueError(
            f"Can't transform '{value}' to {getattr(target_type, '__name__', target_type)}. "
            "DefaultTransformer only supports a limited number of types. "
            "Consider registering a parameter type for it."
        )


class ParameterTypeRegistry:
    """Хранилище типов параметров с поиском по имени и по regex."""

    def __init__(self, default_transformer: DefaultTransformer | None = None) -> None:
        self.default_transformer = default_transformer or DefaultTransformer()
        self._by_name: dict[str, ParameterType] = {}
        self._by_regexp: dict[str, list[ParameterType]] = {}

        int32 = _bounded_int(32)
        for parameter_type in (
            ParameterType("int", INTEGER_REGEXPS, int, int32, True, True),
            ParameterType("float", (FLOAT_REGEXP,), float, float, True, True),
            ParameterType("word", (WORD_REGEXP,), str, str, False, False),
            ParameterType("string", STRING_REGEXPS, str, _transform_string, True, False),
            ParameterType("", (ANONYMOUS_REGEXP,), None, lambda *values: values[0], False, True),
            ParameterType("biginteger", INTEGER_REGEXPS, int, int, False, False),
            ParameterType("bigdecimal", (FLOAT_REGEXP,), Decimal, _transform_decimal, False, False),
            ParameterType("byte", INTEGER_REGEXPS, int, _bounded_int(8), False, False),
            ParameterType("short", INTEGER_REGEXPS, int, _bounded_int(16), False, False),
            ParameterType("long", INTEGER_REGEXPS, int, _bounded_int(64), False, False),
            ParameterType("double", (FLOAT_REGEXP,), float, float, False, False),
        ):
            self.define_parameter_type(parameter_type)

    @property
    def parameter_types(self) -> list[ParameterType]:
        return list(self._by_name.values())

    def lookup_by_type_name(self, type_name: str) -> ParameterType | None:
        return self._by_name.get(type_name)

    def lookup_by_regexp(
        self, parameter_type_regexp: str, expression_regexp: str, text: str
    ) -> ParameterType | None:
        """Находит тип по regex группы; при неоднозначности выбирает предпочтительный."""

        candidates = self._by_regexp.get(parameter_type_regexp)
        if not candidates:
            return None
        if len(candidates) > 1 and not candidates[0].prefer_for_regexp_match:
            logger.debug("Ambiguous parameter types for %s while matching %r", parameter_type_regexp, text)
            raise AmbiguousParameterTypeError(
                parameter_type_regexp, expression_regexp, [candidate.name for candidate in candidates]
            )
        return candidates[0]

    def define_parameter_type(self, parameter_type: ParameterType) -> None:
        """Регистрирует тип параметра.

        Имя должно быть уникальным; для каждого regex допускается не более
        одного предпочтительного типа.
        """

        if parameter_type.name in self._by_name:
            if parameter_type.anonymous:
                raise CucumberExpressionError("The anonymous parameter type has already been defined")
            raise CucumberExpressionError(
                f"There is already a parameter type with name {parameter_type.name}"
            )

        for regexp in parameter_type.regexps:
            candidates = self._by_regexp.setdefault(regexp, [])
            if candidates and candidates[0].prefer_for_regexp_match and parameter_type.prefer_for_regexp_match:
                raise CucumberExpressionError(
                    "There can only be one preferential parameter type per regexp. "
                    f"The regexp /{regexp}/ is used for two preferential parameter types, "
                    f"{{{candidates[0].name}}} and {{{parameter_type.name}}}"
                )

        self._by_name[parameter_type.name] = parameter_type
        for regexp in parameter_type.regexps:
            candidates = self._by_regexp[regexp]
            candidates.append(parameter_type)
            candidates.sort(key=lambda candidate: (not candidate.prefer_for_regexp_match, candidate.name))
        logger.debug("Registered parameter type {%s} for %s", parameter_type.name, parameter_type.regexps)

    def define_parameter_types(self, parameter_types: Iterable[ParameterType]) -> None:
        for parameter_type in parameter_types:
            self.define_parameter_type(parameter_type)

    def transformer_for(self, type_hint: type) -> Callable[..., Any]:
        """Преобразователь для анонимного параметра, делегирующий DefaultTransformer."""

        default_transformer = self.default_transformer

        def transform(*values: str | None) -> Any:
            return default_transformer.transform(values[0], type_hint)

        return transform
