"""
Состояние прагм.

Прагмы действуют от тега {{%NAME}} до конца текущего шаблона.
Состояние создаётся на каждый шаблон в рамках одного вызова рендеринга
и явно передаётся в рекурсивные вызовы, глобального состояния нет.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional

from ..errors import UnknownPragmaError

logger = logging.getLogger(__name__)

IMPLICIT_ITERATOR = "IMPLICIT-ITERATOR"
FILTERS = "FILTERS"
SUB_VIEWS = "SUB-VIEWS"

KNOWN_PRAGMAS = frozenset({IMPLICIT_ITERATOR, FILTERS, SUB_VIEWS})


class PragmaState:
    """
    Включённые прагмы и их параметры.

    Отображение: имя прагмы -> параметры (key=value из тега).
    """

    def __init__(self, enabled: Optional[Mapping[str, Mapping[str, str]]] = None, strict: bool = True):
        """
        Args:
            enabled: Начально включённые прагмы с параметрами
            strict: Если True, неизвестная прагма вызывает UnknownPragmaError,
                    иначе она игнорируется с предупреждением
        """
        self.strict = strict
        self._enabled: Dict[str, Dict[str, str]] = {}
        for name, params in (enabled or {}).items():
            self.enable(name, params)

    @classmethod
    def from_names(cls, names: Iterable[str], strict: bool = True) -> "PragmaState":
        """Создаёт состояние из списка имён прагм без параметров."""
        return cls({name: {} for name in names}, strict=strict)

    def enable(self, name: str, params: Optional[Mapping[str, str]] = None) -> None:
        """
        Включает прагму до конца текущего шаблона.

        Raises:
            UnknownPragmaError: Для неизвестной прагмы в строгом режиме
        """
        if name not in KNOWN_PRAGMAS:
            if self.strict:
                raise UnknownPragmaError(name)
            logger.warning(f"Ignoring unknown pragma '{name}'")
            return
        self._enabled[name] = dict(params or {})
        logger.debug(f"Enabled pragma {name} {dict(params or {})}")

    def is_enabled(self, name: str) -> bool:
        return name in self._enabled

    def params(self, name: str) -> Dict[str, str]:
        return dict(self._enabled.get(name, {}))

    @property
    def iterator_name(self) -> Optional[str]:
        """
        Имя неявного итератора для прагмы IMPLICIT-ITERATOR.

        None - прагма выключена или итератор остаётся стандартным '.'.
        """
        if IMPLICIT_ITERATOR not in self._enabled:
            return None
        name = self._enabled[IMPLICIT_ITERATOR].get("iterator") or "."
        return None if name == "." else name

    def copy(self) -> "PragmaState":
        return PragmaState(self._enabled, strict=self.strict)

    def __repr__(self) -> str:
        return f"PragmaState({sorted(self._enabled)})"


__all__ = [
    "PragmaState",
    "IMPLICIT_ITERATOR",
    "FILTERS",
    "SUB_VIEWS",
    "KNOWN_PRAGMAS",
]
