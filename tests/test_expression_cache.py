from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from app.observability import metrics
from domain.errors import GrammarError
from infrastructure.expression_cache import ExpressionCache
from infrastructure.parameter_type_registry import ParameterTypeRegistry
from tools.expression_factory import ExpressionFactory


def _cache(max_entries: int = 256) -> ExpressionCache:
    return ExpressionCache(ExpressionFactory(ParameterTypeRegistry()), max_entries=max_entries)


def test_same_source_is_compiled_once() -> None:
    metrics.reset()
    cache = _cache()

    first = cache.get("I have {int} cukes")
    second = cache.get("I have {int} cukes")

    assert first is second
    assert len(cache) == 1
    snapshot = metrics.snapshot().values
    assert snapshot["expression.cache.miss"] == 1
    assert snapshot["expression.cache.hit"] == 1


def test_least_recently_used_entry_is_evicted() -> None:
    cache = _cache(max_entries=2)

    cache.get("a")
    cache.get("b")
    cache.get("a")
    cache.get("c")

    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache


def test_compile_errors_are_not_cached() -> None:
    cache = _cache()

    for _ in range(2):
        with pytest.raises(GrammarError):
            cache.get("()")

    assert "()" not in cache
    assert len(cache) == 0


def test_concurrent_get_shares_one_instance() -> None:
    cache = _cache()

    with ThreadPoolExecutor(max_workers=8) as executor:
        expressions = list(executor.map(lambda _: cache.get("{int} {word}"), range(100)))

    assert all(expression is expressions[0] for expression in expressions)


def test_clear() -> None:
    cache = _cache()
    cache.get("a")

    cache.clear()

    assert len(cache) == 0
