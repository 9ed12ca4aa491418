"""Проверки сопоставления шагов тесткейса с определениями шагов."""

from __future__ import annotations

from domain.enums import MatchStatus, StepKeyword, StepPatternType
from domain.models import StepDefinition, StepParameter, TestStep
from infrastructure.expression_cache import ExpressionCache
from infrastructure.parameter_type_registry import ParameterTypeRegistry
from tools.expression_factory import ExpressionFactory
from tools.step_matcher import StepMatcher


def _matcher(fuzzy_threshold: float = 0.5) -> StepMatcher:
    cache = ExpressionCache(ExpressionFactory(ParameterTypeRegistry()))
    return StepMatcher(cache, fuzzy_threshold=fuzzy_threshold)


def _definition(step_id: str, pattern: str, **kwargs) -> StepDefinition:
    return StepDefinition(
        id=step_id,
        keyword=kwargs.pop("keyword", StepKeyword.GIVEN),
        pattern=pattern,
        regex=kwargs.pop("regex", None),
        code_ref=f"steps.{step_id}",
        **kwargs,
    )


def test_exact_match_extracts_typed_arguments() -> None:
    definitions = [_definition("cukes", "у меня есть {int} огурц(ов)")]

    matches = _matcher().match_steps([TestStep(order=1, text="у меня есть 5 огурцов")], definitions)

    assert matches[0].status is MatchStatus.EXACT
    assert matches[0].step_definition.id == "cukes"
    assert matches[0].arguments == [5]
    assert matches[0].confidence == 1.0
    assert matches[0].generated_gherkin_line == "Given у меня есть 5 огурцов"
    assert matches[0].notes is None


def test_gherkin_line_uses_localized_keyword() -> None:
    definitions = [_definition("1", "открыт стартовый экран", keyword=StepKeyword.WHEN)]

    matches = _matcher().match_steps(
        [TestStep(order=1, text="  открыт стартовый экран ")], definitions, language="ru"
    )

    assert matches[0].generated_gherkin_line == "Когда открыт стартовый экран"


def test_anonymous_parameter_uses_declared_type() -> None:
    definitions = [
        _definition(
            "balance",
            "баланс равен {}",
            parameters=[StepParameter(name="amount", type="decimal")],
        )
    ]

    matches = _matcher().match_steps([TestStep(order=1, text="баланс равен 10.50")], definitions)

    assert str(matches[0].arguments[0]) == "10.50"


def test_regular_expression_definition() -> None:
    definitions = [
        _definition(
            "regex",
            "пользователь вводит число",
            regex=r"^пользователь вводит (\d+)$",
            pattern_type=StepPatternType.REGULAR_EXPRESSION,
        ),
        _definition(
            "unanchored",
            r"код (\d{4})",
            pattern_type=StepPatternType.REGULAR_EXPRESSION,
        ),
    ]

    matches = _matcher().match_steps(
        [TestStep(order=1, text="пользователь вводит 42"), TestStep(order=2, text="получен код 1234")],
        definitions,
    )

    assert matches[0].status is MatchStatus.EXACT
    assert matches[0].arguments == [42]
    assert matches[1].step_definition.id == "unanchored"
    assert matches[1].arguments == ["1234"]


def test_several_matching_definitions_are_ambiguous() -> None:
    definitions = [_definition("word", "нажать {word}"), _definition("any", "нажать {}")]

    matches = _matcher().match_steps([TestStep(order=1, text="нажать кнопку")], definitions)

    assert matches[0].status is MatchStatus.AMBIGUOUS
    assert matches[0].step_definition is None
    assert matches[0].notes == {"reason": "ambiguous_step_definitions", "candidates": ["word", "any"]}
    assert matches[0].status.requires_manual_review


def test_match_steps_collects_structured_notes_for_unmatched() -> None:
    test_steps = [TestStep(order=1, text="Выполнить важное действие")]
    step_definitions = [_definition("1", "Открыт стартовый экран")]

    matches = _matcher(fuzzy_threshold=0.8).match_steps(test_steps, step_definitions)

    assert matches[0].status is MatchStatus.UNMATCHED
    assert matches[0].step_definition is None
    assert matches[0].generated_gherkin_line is None
    assert matches[0].notes == {
        "reason": "no_definition_found",
        "original_text": "Выполнить важное действие",
        "closest_pattern": "Открыт стартовый экран",
        "confidence": matches[0].notes["confidence"],
    }


def test_close_text_is_reported_as_fuzzy() -> None:
    definitions = [_definition("login", "пользователь вводит логин {string}")]

    matches = _matcher().match_steps([TestStep(order=1, text="пользователь вводит логин admin")], definitions)

    assert matches[0].status is MatchStatus.FUZZY
    assert matches[0].step_definition.id == "login"
    assert matches[0].confidence >= 0.5
    assert matches[0].notes["closest_pattern"] == "пользователь вводит логин {string}"


def test_no_definitions() -> None:
    matches = _matcher().match_steps([TestStep(order=1, text="что-то")], [])

    assert matches[0].status is MatchStatus.UNMATCHED
    assert matches[0].confidence is None
    assert matches[0].notes["closest_pattern"] is None


def test_broken_definitions_are_skipped() -> None:
    definitions = [
        _definition("broken", "открыть {unknown}"),
        _definition("bad-hint", "открыть {}", parameters=[StepParameter(name="x", type="list")]),
        _definition("ok", "открыть {word}"),
    ]

    matches = _matcher().match_steps([TestStep(order=1, text="открыть меню")], definitions)

    assert matches[0].status is MatchStatus.EXACT
    assert matches[0].step_definition.id == "ok"


def test_transform_errors_are_reported_in_notes() -> None:
    definitions = [_definition("count", "нажать {int} раз"), _definition("any", "нажать {} раз")]

    matches = _matcher().match_steps([TestStep(order=1, text="нажать 99999999999 раз")], definitions)

    assert matches[0].status is MatchStatus.EXACT
    assert matches[0].step_definition.id == "any"
    assert "count" in matches[0].notes["match_errors"]
