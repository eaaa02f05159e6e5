"""
Кэш скомпилированных шаблонов.

Отображает идентификатор шаблона (имя или сам текст) вместе с начальными
разделителями в готовый документ. Записи удаляются только явным clear():
актуальность исходников обеспечивает резолвер.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .nodes import TemplateAST
from .tokens import Delimiters

logger = logging.getLogger(__name__)

# Ключ: ("name" | "text", идентификатор, разделители)
CacheKey = Tuple[str, str, Delimiters]


def name_key(name: str, delimiters: Delimiters) -> CacheKey:
    return ("name", name, delimiters)


def text_key(text: str, delimiters: Delimiters) -> CacheKey:
    return ("text", text, delimiters)


@dataclass(frozen=True)
class CacheSnapshot:
    enabled: bool
    entries: int
    hits: int
    misses: int


class TemplateCache:
    """
    Потокобезопасный кэш документов.

    Одновременная компиляция одного и того же шаблона допустима:
    результат детерминирован, побеждает последняя запись.
    Переменная окружения STACHE_CACHE=0/false/no/off выключает кэш.
    """

    def __init__(self, *, enabled: Optional[bool] = None):
        env = os.environ.get("STACHE_CACHE", None)
        if env is not None:
            self.enabled = env.strip().lower() not in {"0", "false", "no", "off", ""}
        elif enabled is not None:
            self.enabled = bool(enabled)
        else:
            self.enabled = True

        self._entries: Dict[CacheKey, TemplateAST] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: CacheKey) -> Optional[TemplateAST]:
        if not self.enabled:
            return None
        with self._lock:
            ast = self._entries.get(key)
            if ast is None:
                self._misses += 1
            else:
                self._hits += 1
        if ast is not None:
            logger.debug(f"Template cache hit: {key[0]} {key[1][:40]!r}")
        return ast

    def put(self, key: CacheKey, ast: TemplateAST) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = ast

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def snapshot(self) -> CacheSnapshot:
        with self._lock:
            return CacheSnapshot(
                enabled=self.enabled,
                entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
            )

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["TemplateCache", "CacheSnapshot", "CacheKey", "name_key", "text_key"]
