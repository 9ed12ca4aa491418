"""Кеш скомпилированных выражений шагов в памяти."""
from __future__ import annotations

import logging
from collections import OrderedDict
from threading import RLock

from app.observability import metrics
from tools.expression_factory import Expression, ExpressionFactory

logger = logging.getLogger(__name__)


class ExpressionCache:
    """Компилирует каждый исходный текст выражения один раз и хранит недавно использованные.

    Компиляция выполняется под блокировкой, поэтому конкурентные вызовы с одним
    и тем же текстом получают один и тот же экземпляр. Выражения с ошибкой
    компиляции не кешируются: ошибка возвращается каждому вызывающему.
    """

    def __init__(self, factory: ExpressionFactory, max_entries: int = 256) -> None:
        self._factory = factory
        self._lock = RLock()
        self._max_entries = max(1, max_entries)
        self._entries: OrderedDict[str, Expression] = OrderedDict()

    @property
    def factory(self) -> ExpressionFactory:
        return self._factory

    def get(self, source: str) -> Expression:
        with self._lock:
            expression = self._entries.get(source)
            if expression is not None:
                self._entries.move_to_end(source)
                metrics.inc("expression.cache.hit")
                return expression

            metrics.inc("expression.cache.miss")
            expression = self._factory.create_expression(source)
            self._entries[source] = expression
            self._trim_locked()
            return expression

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, source: object) -> bool:
        with self._lock:
            return source in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _trim_locked(self) -> None:
        while len(self._entries) > self._max_entries:
            stale_source, _ = self._entries.popitem(last=False)
            logger.debug("Выражение %r вытеснено из кеша", stale_source)
