"""Перечисления, описывающие основные типы доменной модели."""
from __future__ import annotations

from decimal import Decimal
from enum import Enum


class StepKeyword(str, Enum):
    """Ключевые слова Gherkin/Cucumber для шагов сценария."""

    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"
    AND = "And"
    BUT = "But"

    def as_text(self, language: str | None = None) -> str:
        """Возвращает строковое представление ключевого слова."""

        if language and language.casefold() == "ru":
            localized = {
                StepKeyword.GIVEN: "Дано",
                StepKeyword.WHEN: "Когда",
                StepKeyword.THEN: "Тогда",
                StepKeyword.AND: "И",
                StepKeyword.BUT: "Но",
            }
            return localized[self]
        return self.value


class MatchStatus(str, Enum):
    """Статусы сопоставления шага тесткейса с cucumber-описанием."""

    EXACT = "exact"
    AMBIGUOUS = "ambiguous"
    FUZZY = "fuzzy"
    UNMATCHED = "unmatched"

    @property
    def requires_manual_review(self) -> bool:
        """Показывает, требуется ли ручная проверка человека."""
        return self is not MatchStatus.EXACT


class StepPatternType(str, Enum):
    """Тип паттерна шага (регулярка или выражение Cucumber)."""

    CUCUMBER_EXPRESSION = "cucumberExpression"
    REGULAR_EXPRESSION = "regularExpression"


class TokenType(str, Enum):
    """Типы токенов Cucumber Expression."""

    START_OF_LINE = "startOfLine"
    END_OF_LINE = "endOfLine"
    WHITE_SPACE = "whiteSpace"
    BEGIN_OPTIONAL = "beginOptional"
    END_OPTIONAL = "endOptional"
    BEGIN_PARAMETER = "beginParameter"
    END_PARAMETER = "endParameter"
    ALTERNATION = "alternation"
    TEXT = "text"

    @property
    def symbol(self) -> str | None:
        """Символ, которым токен записывается в выражении."""

        return _TOKEN_SYMBOLS.get(self)


_TOKEN_SYMBOLS: dict[TokenType, str] = {
    TokenType.BEGIN_OPTIONAL: "(",
    TokenType.END_OPTIONAL: ")",
    TokenType.BEGIN_PARAMETER: "{",
    TokenType.END_PARAMETER: "}",
    TokenType.ALTERNATION: "/",
}


class NodeType(str, Enum):
    """Типы узлов дерева разбора Cucumber Expression."""

    TEXT = "text"
    OPTIONAL = "optional"
    ALTERNATION = "alternation"
    ALTERNATIVE = "alternative"
    PARAMETER = "parameter"
    EXPRESSION = "expression"


class GrammarErrorKind(str, Enum):
    """Виды грамматических ошибок, обнаруживаемых при переписывании выражения в regex."""

    ALTERNATIVES_MAY_NOT_BE_EMPTY = "alternativesMayNotBeEmpty"
    PARAMETER_TYPES_CANNOT_BE_ALTERNATIVE = "parameterTypesCannotBeAlternative"
    PARAMETER_TYPES_CANNOT_BE_OPTIONAL = "parameterTypesCannotBeOptional"
    ALTERNATIVE_MAY_NOT_EXCLUSIVELY_CONTAIN_OPTIONALS = "alternativeMayNotExclusivelyContainOptionals"
    OPTIONAL_MAY_NOT_BE_EMPTY = "optionalMayNotBeEmpty"
    INVALID_PARAMETER_TYPE_NAME = "invalidParameterTypeName"
    COULD_NOT_REWRITE = "couldNotRewrite"

    def format(self, expression: str) -> str:
        """Формирует сообщение об ошибке с исходным текстом выражения."""

        return _GRAMMAR_MESSAGES[self] % expression


_GRAMMAR_MESSAGES: dict[GrammarErrorKind, str] = {
    GrammarErrorKind.ALTERNATIVES_MAY_NOT_BE_EMPTY: "Alternative may not be empty: %s",
    GrammarErrorKind.PARAMETER_TYPES_CANNOT_BE_ALTERNATIVE: "Parameter types cannot be alternative: %s",
    GrammarErrorKind.PARAMETER_TYPES_CANNOT_BE_OPTIONAL: "Parameter types cannot be optional: %s",
    GrammarErrorKind.ALTERNATIVE_MAY_NOT_EXCLUSIVELY_CONTAIN_OPTIONALS: (
        "Alternative may not exclusively contain optionals: %s"
    ),
    GrammarErrorKind.OPTIONAL_MAY_NOT_BE_EMPTY: "Optional may not be empty: %s",
    GrammarErrorKind.INVALID_PARAMETER_TYPE_NAME: (
        "Illegal character in parameter name: %s. "
        "Parameter names may not contain '{', '}', '(', ')', '\\' or '/'"
    ),
    GrammarErrorKind.COULD_NOT_REWRITE: "Could not rewrite %s",
}


class TypeHint(str, Enum):
    """Подсказка о целевом типе для анонимных параметров ({})."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOL = "bool"

    @property
    def python_type(self) -> type:
        """Python-тип, в который будет преобразовано совпадение."""

        return _TYPE_HINT_TYPES[self]

    @classmethod
    def resolve(cls, value: str | None) -> type:
        """Преобразует строковое имя подсказки в Python-тип (по умолчанию str)."""

        if not value:
            return str
        normalized = value.strip().casefold()
        aliases = {"str": cls.STRING, "integer": cls.INT, "double": cls.FLOAT, "boolean": cls.BOOL}
        try:
            return (aliases.get(normalized) or cls(normalized)).python_type
        except ValueError as error:
            raise ValueError(f"Unsupported type hint: {value}") from error


_TYPE_HINT_TYPES: dict[TypeHint, type] = {
    TypeHint.STRING: str,
    TypeHint.INT: int,
    TypeHint.FLOAT: float,
    TypeHint.DECIMAL: Decimal,
    TypeHint.BOOL: bool,
}
