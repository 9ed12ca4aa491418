"""Проверки токенизатора и парсера Cucumber Expression."""

from __future__ import annotations

import pytest

from domain.enums import NodeType, TokenType
from domain.errors import ExpressionSyntaxError
from tools.expression_parser import Node, parse, tokenize


def _types(expression: str) -> list[TokenType]:
    return [token.type for token in tokenize(expression)]


def test_tokenize_marks_line_boundaries_and_positions() -> None:
    tokens = tokenize("a {int}")

    assert [(token.type, token.text, token.start, token.end) for token in tokens] == [
        (TokenType.START_OF_LINE, "", 0, 0),
        (TokenType.TEXT, "a", 0, 1),
        (TokenType.WHITE_SPACE, " ", 1, 2),
        (TokenType.BEGIN_PARAMETER, "{", 2, 3),
        (TokenType.TEXT, "int", 3, 6),
        (TokenType.END_PARAMETER, "}", 6, 7),
        (TokenType.END_OF_LINE, "", 7, 7),
    ]


def test_tokenize_empty_expression() -> None:
    assert _types("") == [TokenType.START_OF_LINE, TokenType.END_OF_LINE]


def test_tokenize_groups_whitespace_runs() -> None:
    assert _types("a  b") == [
        TokenType.START_OF_LINE,
        TokenType.TEXT,
        TokenType.WHITE_SPACE,
        TokenType.TEXT,
        TokenType.END_OF_LINE,
    ]


def test_escaped_characters_become_text_and_keep_source_span() -> None:
    tokens = tokenize(r"a \(b")

    assert tokens[3].type is TokenType.TEXT
    assert tokens[3].text == "(b"
    assert (tokens[3].start, tokens[3].end) == (2, 5)


def test_escaped_backslash_is_text() -> None:
    tokens = tokenize("\\\\")

    assert tokens[1].type is TokenType.TEXT
    assert tokens[1].text == "\\"


def test_only_special_characters_can_be_escaped() -> None:
    with pytest.raises(ExpressionSyntaxError) as error_info:
        tokenize(r"\a")

    assert error_info.value.start == 0
    assert "can be escaped" in error_info.value.problem


def test_end_of_line_can_not_be_escaped() -> None:
    with pytest.raises(ExpressionSyntaxError) as error_info:
        tokenize("abc\\")

    assert error_info.value.problem == "The end of line can not be escaped"
    assert "column 4" in str(error_info.value)


def test_parse_text_optional_and_whitespace() -> None:
    root = parse("three (brown) mice")

    assert root.type is NodeType.EXPRESSION
    assert (root.start, root.end) == (0, 18)
    assert [node.type for node in root.nodes] == [
        NodeType.TEXT,
        NodeType.TEXT,
        NodeType.OPTIONAL,
        NodeType.TEXT,
        NodeType.TEXT,
    ]
    optional = root.nodes[2]
    assert optional.text() == "brown"
    assert (optional.start, optional.end) == (6, 13)


def test_parse_alternation_splits_alternatives() -> None:
    root = parse("belly/stomach")

    alternation = root.nodes[0]
    assert alternation.type is NodeType.ALTERNATION
    assert (alternation.start, alternation.end) == (0, 13)
    assert [(node.type, node.text(), node.start, node.end) for node in alternation.nodes] == [
        (NodeType.ALTERNATIVE, "belly", 0, 5),
        (NodeType.ALTERNATIVE, "stomach", 6, 13),
    ]


def test_alternation_is_bounded_by_whitespace() -> None:
    root = parse("in my belly/stomach today")

    assert [node.type for node in root.nodes].count(NodeType.ALTERNATION) == 1
    assert root.nodes[-1].text() == "today"


def test_alternative_may_contain_optional() -> None:
    root = parse("cucumber(s)/gherkin")

    alternation = root.nodes[0]
    assert alternation.type is NodeType.ALTERNATION
    assert [node.type for node in alternation.nodes[0].nodes] == [NodeType.TEXT, NodeType.OPTIONAL]


def test_parse_parameter() -> None:
    root = parse("{int}")

    assert root.nodes == (
        Node(NodeType.PARAMETER, (Node(NodeType.TEXT, (), "int", 1, 4),), None, 0, 5),
    )
    assert root.nodes[0].text() == "int"


def test_parse_anonymous_parameter() -> None:
    parameter = parse("{}").nodes[0]

    assert parameter.type is NodeType.PARAMETER
    assert parameter.nodes == ()
    assert parameter.text() == ""


def test_closing_brackets_alone_are_text() -> None:
    root = parse("a) b}")

    assert all(node.type is NodeType.TEXT for node in root.nodes)
    assert "".join(node.text() for node in root.nodes) == "a) b}"


def test_unclosed_parameter() -> None:
    with pytest.raises(ExpressionSyntaxError) as error_info:
        parse("{int")

    assert error_info.value.problem == "The '{' does not have a matching '}'"
    assert (error_info.value.start, error_info.value.end) == (0, 1)
    assert str(error_info.value).startswith("This Cucumber Expression has a problem at column 1:")


def test_unclosed_optional() -> None:
    with pytest.raises(ExpressionSyntaxError) as error_info:
        parse("three (brown mice")

    assert error_info.value.problem == "The '(' does not have a matching ')'"
    assert error_info.value.start == 6


def test_alternation_inside_optional_is_rejected() -> None:
    with pytest.raises(ExpressionSyntaxError) as error_info:
        parse("three (brown/black) mice")

    assert error_info.value.problem == "An alternation can not be used inside an optional"


@pytest.mark.parametrize("expression", ["{a/b}", "{a(b}", "{a{b}}"])
def test_parameter_name_may_not_contain_brackets(expression: str) -> None:
    with pytest.raises(ExpressionSyntaxError) as error_info:
        parse(expression)

    assert error_info.value.problem.startswith("Parameter names may not contain")
