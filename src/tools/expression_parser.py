"""Разбор текста Cucumber Expression в дерево узлов.

Разбор выполняется в два этапа: токенизация (с обработкой экранирования
через ``\\``) и рекурсивный спуск по грамматике::

    expression  := (alternation | optional | parameter | text)*
    alternation := (?<=left-boundary) alternative* ( '/' alternative* )+ (?=right-boundary)
    alternative := optional | parameter | text
    optional    := '(' (optional | parameter | text)* ')'
    parameter   := '{' name* '}'
    name        := whitespace | text
    text        := whitespace | text | ')' | '}'

Парсер проверяет только структуру (парность скобок, допустимые символы).
Семантические правила (пустые optional, параметры внутри альтернатив)
проверяются при переписывании дерева в регулярное выражение.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from domain.enums import NodeType, TokenType
from domain.errors import ExpressionSyntaxError

ESCAPE_CHARACTER = "\\"
_SPECIAL_CHARACTERS: dict[str, TokenType] = {
    "(": TokenType.BEGIN_OPTIONAL,
    ")": TokenType.END_OPTIONAL,
    "{": TokenType.BEGIN_PARAMETER,
    "}": TokenType.END_PARAMETER,
    "/": TokenType.ALTERNATION,
}


@dataclass(frozen=True)
class Token:
    """Лексема выражения с позицией в исходной строке."""

    text: str
    type: TokenType
    start: int
    end: int


@dataclass(frozen=True)
class Node:
    """Узел дерева разбора."""

    type: NodeType
    nodes: tuple["Node", ...] = ()
    token: str | None = None
    start: int = 0
    end: int = 0

    def text(self) -> str:
        if self.token is not None:
            return self.token
        return "".join(node.text() for node in self.nodes)


def _token_type_of(char: str) -> TokenType:
    if char.isspace():
        return TokenType.WHITE_SPACE
    return _SPECIAL_CHARACTERS.get(char, TokenType.TEXT)


def _can_escape(char: str) -> bool:
    return char.isspace() or char in _SPECIAL_CHARACTERS or char == ESCAPE_CHARACTER


def tokenize(expression: str) -> list[Token]:
    """Разбивает выражение на токены, окружённые START_OF_LINE и END_OF_LINE."""

    tokens = [Token("", TokenType.START_OF_LINE, 0, 0)]
    buffer: list[str] = []
    buffer_start = 0
    escaped = 0
    previous_type = TokenType.START_OF_LINE
    treat_as_text = False

    def flush(token_type: TokenType) -> None:
        nonlocal buffer_start, escaped
        escape_count = 0
        # Символы экранирования входят только в текстовые токены
        if token_type is TokenType.TEXT:
            escape_count, escaped = escaped, 0
        end = buffer_start + len(buffer) + escape_count
        tokens.append(Token("".join(buffer), token_type, buffer_start, end))
        buffer.clear()
        buffer_start = end

    for index, char in enumerate(expression):
        if not treat_as_text and char == ESCAPE_CHARACTER:
            escaped += 1
            treat_as_text = True
            continue

        if treat_as_text:
            if not _can_escape(char):
                raise ExpressionSyntaxError(
                    expression,
                    index - 1,
                    index + 1,
                    "Only the characters '{', '}', '(', ')', '\\', '/' and whitespace can be escaped",
                    "If you did mean to use an '\\' you can use '\\\\' to escape it",
                )
            current_type = TokenType.TEXT
            treat_as_text = False
        else:
            current_type = _token_type_of(char)

        if previous_type is not TokenType.START_OF_LINE and (
            current_type is not previous_type
            or current_type not in (TokenType.WHITE_SPACE, TokenType.TEXT)
        ):
            flush(previous_type)
        buffer.append(char)
        previous_type = current_type

    if treat_as_text:
        raise ExpressionSyntaxError(
            expression,
            len(expression) - 1,
            len(expression),
            "The end of line can not be escaped",
            "You can use '\\\\' to escape the '\\'",
        )

    if buffer:
        flush(previous_type)

    tokens.append(Token("", TokenType.END_OF_LINE, len(expression), len(expression)))
    return tokens


@dataclass
class _Result:
    consumed: int
    nodes: list[Node]


_Parser = Callable[["ExpressionParser", int], _Result]
_NOTHING = _Result(0, [])


class ExpressionParser:
    """Рекурсивный парсер Cucumber Expression."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.tokens = tokenize(expression)

    def parse(self) -> Node:
        result = self._parse_tokens_until(_EXPRESSION_PARSERS, 1, (TokenType.END_OF_LINE,))
        return Node(NodeType.EXPRESSION, tuple(result.nodes), None, 0, len(self.expression))

    def _looking_at(self, index: int, token_type: TokenType) -> bool:
        if index < 0:
            return token_type is TokenType.START_OF_LINE
        if index >= len(self.tokens):
            return token_type is TokenType.END_OF_LINE
        return self.tokens[index].type is token_type

    def _looking_at_any(self, index: int, token_types: Sequence[TokenType]) -> bool:
        return any(self._looking_at(index, token_type) for token_type in token_types)

    def _parse_tokens_until(
        self, parsers: Sequence[_Parser], start: int, end_types: Sequence[TokenType]
    ) -> _Result:
        current = start
        nodes: list[Node] = []
        while current < len(self.tokens):
            if self._looking_at_any(current, end_types):
                break
            result = self._parse_token(parsers, current)
            if result.consumed == 0:
                # Последний парсер в каждом наборе принимает любой допустимый токен
                raise ExpressionSyntaxError(
                    self.expression,
                    self.tokens[current].start,
                    self.tokens[current].end,
                    f"Unexpected token '{self.tokens[current].text}'",
                    "Check the expression for misplaced brackets",
                )
            current += result.consumed
            nodes.extend(result.nodes)
        return _Result(current - start, nodes)

    def _parse_token(self, parsers: Sequence[_Parser], index: int) -> _Result:
        for parser in parsers:
            result = parser(self, index)
            if result.consumed:
                return result
        return _NOTHING

    def _parse_text(self, index: int) -> _Result:
        token = self.tokens[index]
        if token.type in (TokenType.WHITE_SPACE, TokenType.TEXT, TokenType.END_PARAMETER, TokenType.END_OPTIONAL):
            return _Result(1, [Node(NodeType.TEXT, (), token.text, token.start, token.end)])
        if token.type is TokenType.ALTERNATION:
            raise ExpressionSyntaxError(
                self.expression,
                token.start,
                token.end,
                "An alternation can not be used inside an optional",
                "If you did not mean to use an alternation you can use '\\/' to escape the '/'. "
                "Otherwise rephrase your expression or consider using a regular expression instead.",
            )
        return _NOTHING

    def _parse_name(self, index: int) -> _Result:
        token = self.tokens[index]
        if token.type in (TokenType.WHITE_SPACE, TokenType.TEXT):
            return _Result(1, [Node(NodeType.TEXT, (), token.text, token.start, token.end)])
        if token.type in (
            TokenType.BEGIN_PARAMETER,
            TokenType.END_PARAMETER,
            TokenType.BEGIN_OPTIONAL,
            TokenType.END_OPTIONAL,
            TokenType.ALTERNATION,
        ):
            raise ExpressionSyntaxError(
                self.expression,
                token.start,
                token.end,
                "Parameter names may not contain '{', '}', '(', ')', '\\' or '/'",
                "Did you mean to use a regular expression?",
            )
        return _NOTHING

    def _parse_between(
        self,
        index: int,
        node_type: NodeType,
        begin: TokenType,
        end: TokenType,
        parsers: Sequence[_Parser],
    ) -> _Result:
        if not self._looking_at(index, begin):
            return _NOTHING
        current = index + 1
        result = self._parse_tokens_until(parsers, current, (end, TokenType.END_OF_LINE))
        current += result.consumed
        if not self._looking_at(current, end):
            opening = self.tokens[index]
            raise ExpressionSyntaxError(
                self.expression,
                opening.start,
                opening.end,
                f"The '{begin.symbol}' does not have a matching '{end.symbol}'",
                f"If you did not intend to use {begin.symbol} you can use '\\{begin.symbol}' to escape it",
            )
        node = Node(node_type, tuple(result.nodes), None, self.tokens[index].start, self.tokens[current].end)
        return _Result(current + 1 - index, [node])

    def _parse_parameter(self, index: int) -> _Result:
        return self._parse_between(
            index, NodeType.PARAMETER, TokenType.BEGIN_PARAMETER, TokenType.END_PARAMETER, _PARAMETER_PARSERS
        )

    def _parse_optional(self, index: int) -> _Result:
        return self._parse_between(
            index, NodeType.OPTIONAL, TokenType.BEGIN_OPTIONAL, TokenType.END_OPTIONAL, _OPTIONAL_PARSERS
        )

    def _parse_alternative_separator(self, index: int) -> _Result:
        if not self._looking_at(index, TokenType.ALTERNATION):
            return _NOTHING
        token = self.tokens[index]
        return _Result(1, [Node(NodeType.ALTERNATIVE, (), token.text, token.start, token.end)])

    def _parse_alternation(self, index: int) -> _Result:
        if not self._looking_at_any(
            index - 1, (TokenType.START_OF_LINE, TokenType.WHITE_SPACE, TokenType.END_PARAMETER)
        ):
            return _NOTHING
        result = self._parse_tokens_until(
            _ALTERNATIVE_PARSERS,
            index,
            (TokenType.WHITE_SPACE, TokenType.END_OF_LINE, TokenType.BEGIN_PARAMETER),
        )
        if not any(node.type is NodeType.ALTERNATIVE for node in result.nodes):
            return _NOTHING
        start = self.tokens[index].start
        end = self.tokens[index + result.consumed].start
        alternatives = self._split_alternatives(start, end, result.nodes)
        return _Result(result.consumed, [Node(NodeType.ALTERNATION, alternatives, None, start, end)])

    @staticmethod
    def _split_alternatives(start: int, end: int, nodes: Sequence[Node]) -> tuple[Node, ...]:
        separators: list[Node] = []
        groups: list[list[Node]] = [[]]
        for node in nodes:
            if node.type is NodeType.ALTERNATIVE:
                separators.append(node)
                groups.append([])
            else:
                groups[-1].append(node)

        alternatives: list[Node] = []
        for position, group in enumerate(groups):
            group_start = start if position == 0 else separators[position - 1].end
            group_end = end if position == len(separators) else separators[position].start
            alternatives.append(Node(NodeType.ALTERNATIVE, tuple(group), None, group_start, group_end))
        return tuple(alternatives)


_PARAMETER_PARSERS: tuple[_Parser, ...] = (ExpressionParser._parse_name,)
_OPTIONAL_PARSERS: tuple[_Parser, ...] = (
    ExpressionParser._parse_optional,
    ExpressionParser._parse_parameter,
    ExpressionParser._parse_text,
)
_ALTERNATIVE_PARSERS: tuple[_Parser, ...] = (
    ExpressionParser._parse_alternative_separator,
    ExpressionParser._parse_optional,
    ExpressionParser._parse_parameter,
    ExpressionParser._parse_text,
)
_EXPRESSION_PARSERS: tuple[_Parser, ...] = (
    ExpressionParser._parse_alternation,
    ExpressionParser._parse_optional,
    ExpressionParser._parse_parameter,
    ExpressionParser._parse_text,
)


def parse(expression: str) -> Node:
    """Разбирает выражение и возвращает корневой узел EXPRESSION."""

    return ExpressionParser(expression).parse()
