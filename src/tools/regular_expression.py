"""Шаги, описанные обычным регулярным выражением."""
from __future__ import annotations

import logging
import re

from domain.parameter_type import ParameterType
from infrastructure.parameter_type_registry import ParameterTypeRegistry
from tools.argument import Argument, build_arguments
from tools.tree_regexp import TreeRegexp

logger = logging.getLogger(__name__)


class RegularExpression:
    """Регулярное выражение, группы которого сопоставляются с типами параметров по regex."""

    def __init__(self, regexp: str | re.Pattern[str], registry: ParameterTypeRegistry) -> None:
        self._tree_regexp = TreeRegexp(regexp)
        self._registry = registry
        logger.debug("Compiled regular expression %s", self._tree_regexp.regexp.pattern)

    @property
    def source(self) -> str:
        return self._tree_regexp.regexp.pattern

    @property
    def regexp(self) -> re.Pattern[str]:
        return self._tree_regexp.regexp

    def match(self, text: str, *type_hints: type) -> list[Argument] | None:
        parameter_types: list[ParameterType] = []
        for index, group_builder in enumerate(self._tree_regexp.group_builder.children):
            type_hint = type_hints[index] if index < len(type_hints) else str
            parameter_type = self._registry.lookup_by_regexp(group_builder.source, self.source, text)
            if parameter_type is None:
                parameter_type = ParameterType("", (group_builder.source,), use_for_snippets=False)
            if parameter_type.anonymous:
                parameter_type = parameter_type.deanonymize(type_hint, self._registry.transformer_for(type_hint))
            parameter_types.append(parameter_type)

        return build_arguments(self._tree_regexp, text, parameter_types)

    def __repr__(self) -> str:
        return f"RegularExpression({self.source!r})"
