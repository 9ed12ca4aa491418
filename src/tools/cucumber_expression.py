"""Утилиты для работы с Cucumber Expression.

Выражение вида ``I have {int} cucumber(s) in my belly/stomach`` разбирается в
дерево, которое затем переписывается в якорное регулярное выражение::

    ^I have ((?:-?\\d+)|(?:\\d+)) cucumber(?:s)? in my (?:belly|stomach)$

При сопоставлении каждая группа параметра преобразуется своим типом
параметра в типизированный аргумент.
"""
from __future__ import annotations

import logging
import re
from typing import Callable

from app.observability import metrics, traced_span
from domain.enums import GrammarErrorKind, NodeType
from domain.errors import GrammarError, UndefinedParameterTypeError
from domain.parameter_type import ParameterType, is_valid_parameter_type_name
from infrastructure.parameter_type_registry import ParameterTypeRegistry
from tools.argument import Argument, build_arguments
from tools.expression_parser import Node, parse
from tools.tree_regexp import TreeRegexp

logger = logging.getLogger(__name__)

_ESCAPE_REGEXP = re.compile(r"([\\^\[({$.|?*+})\]])")


class ExpressionRewriter:
    """Переписывает дерево выражения в регулярное выражение.

    Попутно собирает типы параметров в порядке их появления слева направо.
    """

    def __init__(self, source: str, registry: ParameterTypeRegistry) -> None:
        self.source = source
        self.registry = registry
        self.parameter_types: list[ParameterType] = []
        self._handlers: dict[NodeType, Callable[[Node], str]] = {
            NodeType.TEXT: self._rewrite_text,
            NodeType.OPTIONAL: self._rewrite_optional,
            NodeType.ALTERNATION: self._rewrite_alternation,
            NodeType.ALTERNATIVE: self._rewrite_alternative,
            NodeType.PARAMETER: self._rewrite_parameter,
            NodeType.EXPRESSION: self._rewrite_expression,
        }

    def rewrite(self, node: Node) -> str:
        handler = self._handlers.get(node.type)
        if handler is None:
            raise GrammarError(GrammarErrorKind.COULD_NOT_REWRITE, self.source)
        return handler(node)

    def _rewrite_text(self, node: Node) -> str:
        return _ESCAPE_REGEXP.sub(r"\\\1", node.text())

    def _rewrite_optional(self, node: Node) -> str:
        self._assert_no_parameters(node, GrammarErrorKind.PARAMETER_TYPES_CANNOT_BE_OPTIONAL)
        self._assert_not_empty(node, GrammarErrorKind.OPTIONAL_MAY_NOT_BE_EMPTY)
        return self._rewrite_nodes(node.nodes, "", "(?:", ")?")

    def _rewrite_alternation(self, node: Node) -> str:
        for alternative in node.nodes:
            if not alternative.nodes:
                raise GrammarError(GrammarErrorKind.ALTERNATIVES_MAY_NOT_BE_EMPTY, self.source)
            self._assert_no_parameters(alternative, GrammarErrorKind.PARAMETER_TYPES_CANNOT_BE_ALTERNATIVE)
            self._assert_not_empty(alternative, GrammarErrorKind.ALTERNATIVE_MAY_NOT_EXCLUSIVELY_CONTAIN_OPTIONALS)
        return self._rewrite_nodes(node.nodes, "|", "(?:", ")")

    def _rewrite_alternative(self, node: Node) -> str:
        return self._rewrite_nodes(node.nodes, "", "", "")

    def _rewrite_parameter(self, node: Node) -> str:
        type_name = node.text()
        if not is_valid_parameter_type_name(type_name):
            raise GrammarError(GrammarErrorKind.INVALID_PARAMETER_TYPE_NAME, self.source)
        parameter_type = self.registry.lookup_by_type_name(type_name)
        if parameter_type is None:
            raise UndefinedParameterTypeError(type_name, expression=self.source)
        self.parameter_types.append(parameter_type)
        return _build_capture_regexp(parameter_type.regexps)

    def _rewrite_expression(self, node: Node) -> str:
        return self._rewrite_nodes(node.nodes, "", "^", "$")

    def _rewrite_nodes(self, nodes: tuple[Node, ...], delimiter: str, prefix: str, suffix: str) -> str:
        return prefix + delimiter.join(self.rewrite(node) for node in nodes) + suffix

    def _assert_not_empty(self, node: Node, kind: GrammarErrorKind) -> None:
        if not any(child.type is NodeType.TEXT for child in node.nodes):
            raise GrammarError(kind, self.source)

    def _assert_no_parameters(self, node: Node, kind: GrammarErrorKind) -> None:
        if any(child.type is NodeType.PARAMETER for child in node.nodes):
            raise GrammarError(kind, self.source)


def _build_capture_regexp(regexps: tuple[str, ...]) -> str:
    if len(regexps) == 1:
        return f"({regexps[0]})"
    return "(" + "|".join(f"(?:{regexp})" for regexp in regexps) + ")"


class CucumberExpression:
    """Скомпилированное Cucumber Expression.

    Компиляция (разбор, переписывание, компиляция regex) выполняется один раз
    в конструкторе. :meth:`match` не изменяет состояние объекта и может
    вызываться конкурентно.
    """

    def __init__(self, expression: str, registry: ParameterTypeRegistry) -> None:
        self._source = expression
        self._registry = registry

        with traced_span("expression.compile"):
            rewriter = ExpressionRewriter(expression, registry)
            pattern = rewriter.rewrite(parse(expression))
            self._parameter_types = tuple(rewriter.parameter_types)
            # \d и \s ограничены ASCII, как в RE2
            self._tree_regexp = TreeRegexp(pattern, flags=re.ASCII, full_match=True)
        logger.debug("Compiled cucumber expression %r into %s", expression, pattern)

    @property
    def source(self) -> str:
        return self._source

    @property
    def regexp(self) -> re.Pattern[str]:
        return self._tree_regexp.regexp

    @property
    def parameter_types(self) -> tuple[ParameterType, ...]:
        return self._parameter_types

    def match(self, text: str, *type_hints: type) -> list[Argument] | None:
        """Сопоставляет текст с выражением.

        ``type_hints`` задают целевые типы анонимных параметров ``{}`` по
        позициям; по умолчанию используется ``str``. Возвращает None, если
        текст не совпал.
        """

        parameter_types = list(self._parameter_types)
        for index, parameter_type in enumerate(parameter_types):
            if parameter_type.anonymous:
                type_hint = type_hints[index] if index < len(type_hints) else str
                parameter_types[index] = parameter_type.deanonymize(
                    type_hint, self._registry.transformer_for(type_hint)
                )

        with traced_span("expression.match"):
            arguments = build_arguments(self._tree_regexp, text, parameter_types)
        metrics.inc("expression.match.hit" if arguments is not None else "expression.match.miss")
        return arguments

    def __repr__(self) -> str:
        return f"CucumberExpression({self._source!r})"
