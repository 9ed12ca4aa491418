"""Pydantic-схемы запросов и ответов для HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from domain.enums import MatchStatus, StepKeyword, StepPatternType, TypeHint


def _to_camel(value: str) -> str:
    """Преобразует snake_case в camelCase для JSON."""

    parts = value.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class ApiBaseModel(BaseModel):
    """Базовая модель для API со стилем camelCase и populate_by_name."""

    model_config = ConfigDict(
        alias_generator=_to_camel, populate_by_name=True, from_attributes=True
    )


class CompileExpressionRequest(ApiBaseModel):
    """Запрос на компиляцию выражения."""

    expression: str = Field(..., description="Cucumber Expression или регулярное выражение")


class CompileExpressionResponse(ApiBaseModel):
    """Результат компиляции выражения."""

    source: str = Field(..., description="Исходный текст выражения")
    regex: str = Field(..., description="Скомпилированное регулярное выражение")
    expression_type: StepPatternType = Field(..., description="Тип выражения")
    parameter_types: list[str] = Field(
        default_factory=list,
        description="Имена типов параметров в порядке появления (для Cucumber Expression)",
    )


class MatchExpressionRequest(ApiBaseModel):
    """Запрос на сопоставление текста с выражением."""

    expression: str = Field(..., description="Cucumber Expression или регулярное выражение")
    text: str = Field(..., description="Текст шага")
    type_hints: list[TypeHint | None] = Field(
        default_factory=list,
        description="Целевые типы анонимных параметров по позициям",
    )


class GroupDto(ApiBaseModel):
    value: str | None = None
    start: int
    end: int


class ArgumentDto(ApiBaseModel):
    """Аргумент, извлечённый из текста шага."""

    parameter_type: str = Field(..., description="Имя типа параметра")
    value: Any = Field(default=None, description="Преобразованное значение")
    group: GroupDto


class MatchExpressionResponse(ApiBaseModel):
    matched: bool
    arguments: list[ArgumentDto] = Field(default_factory=list)


class ParameterTypeDto(ApiBaseModel):
    """Зарегистрированный тип параметра."""

    name: str
    regexps: list[str]
    type: str | None = None
    use_for_snippets: bool
    prefer_for_regexp_match: bool


class ExpressionErrorDto(ApiBaseModel):
    """Описание ошибки компиляции или сопоставления."""

    message: str
    kind: str
    expression: str | None = None


class StepParameterDto(ApiBaseModel):
    """Структурированное описание параметра шага."""

    name: str = Field(..., description="Имя параметра из сигнатуры шага")
    type: str | None = Field(
        default=None, description="Тип параметра (например, string/int/float)"
    )
    placeholder: str | None = Field(
        default=None,
        description="Исходный placeholder или регулярное выражение из паттерна",
    )


class StepDefinitionDto(ApiBaseModel):
    """Упрощённое представление StepDefinition для API."""

    id: str = Field(..., description="Уникальный идентификатор шага")
    keyword: StepKeyword = Field(
        ..., description="Ключевое слово шага (Given/When/Then/And/But)"
    )
    pattern: str = Field(..., description="Паттерн шага из аннотации")
    pattern_type: StepPatternType = Field(
        default=StepPatternType.CUCUMBER_EXPRESSION,
        description="Тип паттерна: cucumberExpression или regularExpression",
    )
    regex: str | None = Field(
        default=None,
        description="Регулярное выражение шага, если оно есть в исходнике",
    )
    code_ref: str = Field(default="", description="Ссылка на исходный код")
    parameters: list[StepParameterDto] = Field(
        default_factory=list,
        description="Список параметров шага с типами и плейсхолдерами",
    )
    tags: list[str] = Field(default_factory=list, description="Теги шага")
    language: str | None = Field(default=None, description="Язык шага (ru/en и т.д.)")


class TestStepDto(ApiBaseModel):
    """Шаг тесткейса."""

    order: int
    text: str
    section: str | None = None


class MatchStepsRequest(ApiBaseModel):
    steps: list[TestStepDto]
    step_definitions: list[StepDefinitionDto]
    language: str | None = None


class MatchedStepDto(ApiBaseModel):
    """Результат сопоставления одного шага."""

    step: TestStepDto
    status: MatchStatus
    step_definition_id: str | None = None
    arguments: list[Any] = Field(default_factory=list)
    confidence: float | None = None
    generated_gherkin_line: str | None = None
    notes: dict[str, Any] | None = None


class MatchStepsResponse(ApiBaseModel):
    items: list[MatchedStepDto]
    unmatched_count: int
