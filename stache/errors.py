"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from StacheUserError.

Programming errors and bugs should NOT inherit from StacheUserError -
they will propagate with full tracebacks. Exceptions raised by user
lambdas and filters are propagated as is.
"""

from __future__ import annotations

from typing import Sequence


class StacheUserError(Exception):
    """
    Base class for all user-facing errors in stache.

    These errors indicate problems that the user can fix:
    malformed templates, missing partials, invalid configuration, etc.
    """
    pass


class TemplateSyntaxError(StacheUserError):
    """Ошибка лексического анализа: незакрытый тег, некорректная смена разделителей."""

    def __init__(self, message: str, line: int, column: int, position: int):
        super().__init__(f"{message} at {line}:{column}")
        self.line = line
        self.column = column
        self.position = position


class UnbalancedSectionError(TemplateSyntaxError):
    """Несовпадающие или незакрытые теги секций."""

    def __init__(self, message: str, name: str, line: int, column: int, position: int):
        super().__init__(message, line, column, position)
        self.name = name


class UnknownPragmaError(StacheUserError):
    """Прагма с неизвестным именем (в строгом режиме)."""

    def __init__(self, name: str):
        super().__init__(f"Unknown pragma '{name}'")
        self.name = name


class UnknownFilterError(StacheUserError):
    """Фильтр значения не зарегистрирован в движке."""

    def __init__(self, name: str):
        super().__init__(f"Unknown filter '{name}'")
        self.name = name


class PartialNotFoundError(StacheUserError):
    """Резолвер не смог предоставить частичный шаблон."""

    def __init__(self, name: str):
        super().__init__(f"Partial not found: '{name}'")
        self.name = name


class PartialCycleError(StacheUserError):
    """Цепочка включений частичных шаблонов превысила допустимую глубину."""

    def __init__(self, chain: Sequence[str]):
        super().__init__(
            f"Partial inclusion depth exceeded ({len(chain)}): {' -> '.join(chain)}"
        )
        self.chain = tuple(chain)


class ResolverTypeNotFoundError(StacheUserError):
    """Raised when an aggregate resolver has no resolver of the requested type."""
    pass


class InvalidArgumentError(StacheUserError, TypeError):
    """Некорректный вызов API (например, скаляр в качестве корня контекста)."""
    pass


class ConfigError(StacheUserError):
    """Некорректная конфигурация движка."""
    pass


__all__ = [
    "StacheUserError",
    "TemplateSyntaxError",
    "UnbalancedSectionError",
    "UnknownPragmaError",
    "UnknownFilterError",
    "PartialNotFoundError",
    "PartialCycleError",
    "ResolverTypeNotFoundError",
    "InvalidArgumentError",
    "ConfigError",
]
