"""
Лексические типы.

Определяет типы токенов Mustache-шаблона и сам токен
с позиционной информацией.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple

# Пара разделителей (открывающий, закрывающий)
Delimiters = Tuple[str, str]

DEFAULT_DELIMITERS: Delimiters = ("{{", "}}")


class TokenType(enum.Enum):
    """Типы токенов в шаблоне."""

    TEXT = "TEXT"

    # Переменные
    VARIABLE = "VARIABLE"                    # {{name}}
    RAW_VARIABLE = "RAW_VARIABLE"            # {{{name}}} или {{&name}}

    # Секции
    SECTION_OPEN = "SECTION_OPEN"            # {{#name}}
    INVERTED_OPEN = "INVERTED_OPEN"          # {{^name}}
    SECTION_CLOSE = "SECTION_CLOSE"          # {{/name}}

    # Наследование шаблонов
    BLOCK_OPEN = "BLOCK_OPEN"                # {{$name}}
    PARENT_OPEN = "PARENT_OPEN"              # {{<name}}

    # Прочие теги
    PARTIAL = "PARTIAL"                      # {{>name}}
    COMMENT = "COMMENT"                      # {{!...}}
    DELIMITER_CHANGE = "DELIMITER_CHANGE"    # {{=<% %>=}}
    PRAGMA = "PRAGMA"                        # {{%NAME key=value}}


# Теги, которые могут быть standalone (занимать строку целиком)
STANDALONE_TYPES = frozenset({
    TokenType.SECTION_OPEN,
    TokenType.INVERTED_OPEN,
    TokenType.SECTION_CLOSE,
    TokenType.BLOCK_OPEN,
    TokenType.PARENT_OPEN,
    TokenType.PARTIAL,
    TokenType.COMMENT,
    TokenType.DELIMITER_CHANGE,
    TokenType.PRAGMA,
})

# Теги, открывающие контейнер
OPENING_TYPES = frozenset({
    TokenType.SECTION_OPEN,
    TokenType.INVERTED_OPEN,
    TokenType.BLOCK_OPEN,
    TokenType.PARENT_OPEN,
})


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.

    Для тегов value - имя тега (обрезанное от пробелов), для текста - сам текст.
    position/end ограничивают сам тег, raw_start/raw_end - весь фрагмент
    исходника, который занимает токен, включая срезанные standalone-пробелы
    и перевод строки. Отрезки raw_start/raw_end всех токенов покрывают
    исходный текст без пропусков.
    """
    type: TokenType
    value: str
    position: int        # Позиция начала тега в исходном тексте
    end: int             # Позиция сразу за тегом
    line: int            # Номер строки (начиная с 1)
    column: int          # Номер колонки (начиная с 1)
    raw_start: int
    raw_end: int
    standalone: bool = False
    indent: str = ""     # Ведущие пробелы строки standalone-тега
    delimiters: Delimiters = DEFAULT_DELIMITERS  # Разделители, действовавшие для тега

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


__all__ = [
    "Delimiters",
    "DEFAULT_DELIMITERS",
    "TokenType",
    "Token",
    "STANDALONE_TYPES",
    "OPENING_TYPES",
]
