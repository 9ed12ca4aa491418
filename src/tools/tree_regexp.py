"""Дерево захватывающих групп регулярного выражения.

``re`` возвращает группы плоским списком. Здесь по исходному тексту паттерна
строится дерево групп (вложенность скобок), чтобы аргументы выражения
соответствовали только группам верхнего уровня, а вложенные группы
становились значениями этих аргументов.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class Group:
    """Совпавшая группа с дочерними группами."""

    value: str | None
    start: int
    end: int
    children: list["Group"] = field(default_factory=list)

    @property
    def values(self) -> list[str | None]:
        """Значения для преобразования: дочерние группы либо сама группа."""

        if not self.children:
            return [self.value]
        return [child.value for child in self.children]


@dataclass
class GroupBuilder:
    """Описание группы паттерна, по которому строится :class:`Group` из совпадения."""

    source: str = ""
    capturing: bool = True
    children: list["GroupBuilder"] = field(default_factory=list)

    def add(self, child: "GroupBuilder") -> None:
        self.children.append(child)

    def move_children_to(self, target: "GroupBuilder") -> None:
        for child in self.children:
            target.add(child)

    def build(self, match: re.Match[str], indices: Iterator[int]) -> Group:
        index = next(indices)
        children = [child.build(match, indices) for child in self.children]
        return Group(match.group(index), match.start(index), match.end(index), children)


def _is_non_capturing(source: str, index: int) -> bool:
    # (?:...), (?=...), (?!...), (?<=...), (?<!...), (?P=name) не захватывают
    if source[index + 1 : index + 2] != "?":
        return False
    marker = source[index + 2 : index + 3]
    if marker == "P":
        return source[index + 3 : index + 4] != "<"
    if marker != "<":
        return True
    return source[index + 3 : index + 4] in ("=", "!")


def create_group_builder(source: str) -> GroupBuilder:
    """Строит дерево групп по тексту регулярного выражения."""

    stack = [GroupBuilder()]
    group_starts: list[int] = []
    escaping = False
    char_class = False

    for index, char in enumerate(source):
        if char == "[" and not escaping:
            char_class = True
        elif char == "]" and not escaping:
            char_class = False
        elif char == "(" and not escaping and not char_class:
            group_starts.append(index)
            stack.append(GroupBuilder(capturing=not _is_non_capturing(source, index)))
        elif char == ")" and not escaping and not char_class:
            builder = stack.pop()
            group_start = group_starts.pop()
            if builder.capturing:
                builder.source = source[group_start + 1 : index]
                stack[-1].add(builder)
            else:
                builder.move_children_to(stack[-1])
        escaping = char == "\\" and not escaping

    return stack.pop()


class TreeRegexp:
    """Регулярное выражение вместе со структурой его захватывающих групп."""

    def __init__(
        self, regexp: str | re.Pattern[str], flags: int = 0, full_match: bool = False
    ) -> None:
        self.regexp = re.compile(regexp, flags) if isinstance(regexp, str) else regexp
        self.group_builder = create_group_builder(self.regexp.pattern)
        self.full_match = full_match

    def match(self, text: str) -> Group | None:
        """Возвращает дерево групп или None, если текст не совпал.

        При ``full_match`` совпадение должно покрывать весь текст: ``$`` в
        ``re`` совпадает и перед завершающим переводом строки.
        """

        match = self.regexp.fullmatch(text) if self.full_match else self.regexp.search(text)
        if match is None:
            return None
        return self.group_builder.build(match, iter(range(self.regexp.groups + 1)))
