"""Построение типизированных аргументов из совпадения выражения."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from domain.errors import CucumberExpressionError
from domain.parameter_type import ParameterType
from tools.tree_regexp import Group, TreeRegexp


@dataclass(frozen=True)
class Argument:
    """Аргумент шага: захваченная группа, её тип и преобразованное значение."""

    group: Group
    parameter_type: ParameterType
    value: Any


def build_arguments(
    tree_regexp: TreeRegexp, text: str, parameter_types: Sequence[ParameterType]
) -> list[Argument] | None:
    """Сопоставляет текст и строит по аргументу на каждый тип параметра.

    Возвращает None, если текст не совпал. Ошибка преобразования значения
    (:class:`ParameterTransformError`) пробрасывается вызывающему коду.
    """

    group = tree_regexp.match(text)
    if group is None:
        return None

    arg_groups = group.children
    if len(arg_groups) != len(parameter_types):
        raise CucumberExpressionError(
            f"{tree_regexp.regexp.pattern} has {len(arg_groups)} capture groups, "
            f"but there were {len(parameter_types)} parameter types"
        )

    return [
        Argument(arg_group, parameter_type, _transform(arg_group, parameter_type))
        for arg_group, parameter_type in zip(arg_groups, parameter_types)
    ]


def _transform(group: Group, parameter_type: ParameterType) -> Any:
    # Необязательная группа, не участвовавшая в совпадении, даёт None
    if group.value is None:
        return None
    return parameter_type.transform(group.values)
