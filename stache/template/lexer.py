"""
Лексический анализатор Mustache-шаблонов.

Разбивает исходный текст на плоскую последовательность токенов с учётом
текущей пары разделителей, смены разделителей и правила standalone-строк.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .tokens import Token, TokenType, Delimiters, DEFAULT_DELIMITERS, STANDALONE_TYPES
from ..errors import TemplateSyntaxError

logger = logging.getLogger(__name__)

# Хвост standalone-строки: пробелы и перевод строки (или конец текста)
_LINE_TAIL = re.compile(r"[ \t]*(?:\r?\n|\Z)")

_SIGILS = {
    "#": TokenType.SECTION_OPEN,
    "^": TokenType.INVERTED_OPEN,
    "/": TokenType.SECTION_CLOSE,
    "$": TokenType.BLOCK_OPEN,
    "<": TokenType.PARENT_OPEN,
    ">": TokenType.PARTIAL,
    "&": TokenType.RAW_VARIABLE,
    "!": TokenType.COMMENT,
    "%": TokenType.PRAGMA,
    "=": TokenType.DELIMITER_CHANGE,
}


class TemplateLexer:
    """
    Лексический анализатор шаблонов.

    Ищет открывающий разделитель, определяет тип тега по первому символу
    его содержимого и выпускает токены TEXT для текста между тегами.
    Теги смены разделителей меняют разделители для всего последующего текста.
    """

    def __init__(self, text: str, delimiters: Delimiters = DEFAULT_DELIMITERS):
        self.text = text
        self.length = len(text)
        self.delimiters = parse_delimiters_pair(delimiters)

    def tokenize(self) -> List[Token]:
        """
        Токенизирует весь исходный текст и возвращает список токенов.

        Raises:
            TemplateSyntaxError: При незакрытом теге или некорректной смене разделителей
        """
        tokens: List[Token] = []
        otag, ctag = self.delimiters

        pos = 0            # Начало ещё не выпущенного текста
        last_tag_end = 0   # Конец предыдущего тега (вместе со срезанными пробелами)

        while True:
            start = self.text.find(otag, pos)
            if start == -1:
                break

            tag_type, value, end, new_delimiters = self._read_tag(start, otag, ctag)

            raw_start, raw_end, indent = start, end, ""
            standalone = False
            if tag_type in STANDALONE_TYPES:
                bounds = self._standalone_bounds(start, end, last_tag_end)
                if bounds is not None:
                    raw_start, raw_end = bounds
                    indent = self.text[raw_start:start]
                    standalone = True

            if raw_start > pos:
                tokens.append(self._text_token(pos, raw_start))

            line, column = self._line_col(start)
            tokens.append(Token(
                type=tag_type,
                value=value,
                position=start,
                end=end,
                line=line,
                column=column,
                raw_start=raw_start,
                raw_end=raw_end,
                standalone=standalone,
                indent=indent,
                delimiters=(otag, ctag),
            ))

            if new_delimiters is not None:
                otag, ctag = new_delimiters

            pos = raw_end
            last_tag_end = raw_end

        if pos < self.length:
            tokens.append(self._text_token(pos, self.length))

        logger.debug(f"Tokenized template of length {self.length} into {len(tokens)} tokens")
        return tokens

    def _read_tag(
        self, start: int, otag: str, ctag: str
    ) -> Tuple[TokenType, str, int, Optional[Delimiters]]:
        """
        Читает тег, начинающийся в позиции start.

        Returns:
            (тип тега, имя/содержимое, позиция за тегом, новые разделители или None)
        """
        content_start = start + len(otag)
        triple = self.text.startswith("{", content_start)
        if triple:
            content_start += 1
            closing = "}" + ctag
        else:
            closing = ctag

        close = self.text.find(closing, content_start)
        if close == -1:
            line, column = self._line_col(start)
            raise TemplateSyntaxError(f"Unclosed tag (expected {closing!r})", line, column, start)

        end = close + len(closing)
        content = self.text[content_start:close].strip()

        if triple:
            return TokenType.RAW_VARIABLE, self._require_name(content, start), end, None

        tag_type = _SIGILS.get(content[:1], TokenType.VARIABLE)
        if tag_type is TokenType.VARIABLE:
            return tag_type, self._require_name(content, start), end, None

        body = content[1:].strip()
        if tag_type is TokenType.COMMENT:
            return tag_type, body, end, None
        if tag_type is TokenType.DELIMITER_CHANGE:
            new_delimiters = self._parse_delimiter_change(content, start)
            return tag_type, " ".join(new_delimiters), end, new_delimiters

        return tag_type, self._require_name(body, start), end, None

    def _parse_delimiter_change(self, content: str, start: int) -> Delimiters:
        """Разбирает содержимое тега {{=<% %>=}}."""
        parts = content[1:-1].split() if len(content) >= 2 and content.endswith("=") else []
        if len(parts) != 2 or any("=" in part for part in parts):
            line, column = self._line_col(start)
            raise TemplateSyntaxError(f"Malformed delimiter change {content!r}", line, column, start)
        return parts[0], parts[1]

    def _require_name(self, name: str, start: int) -> str:
        if not name:
            line, column = self._line_col(start)
            raise TemplateSyntaxError("Empty tag name", line, column, start)
        return name

    def _standalone_bounds(self, start: int, end: int, last_tag_end: int) -> Optional[Tuple[int, int]]:
        """
        Проверяет, занимает ли тег строку целиком.

        Слева от тега до начала строки - только пробелы и нет других тегов,
        справа - только пробелы до перевода строки или конца текста.

        Returns:
            Границы срезаемой строки (начало строки, позиция за переводом строки) или None
        """
        line_start = self.text.rfind("\n", 0, start) + 1
        if line_start < last_tag_end:
            return None

        left = self.text[line_start:start]
        if left.strip(" \t"):
            return None

        tail = _LINE_TAIL.match(self.text, end)
        if tail is None:
            return None

        return line_start, tail.end()

    def _text_token(self, start: int, end: int) -> Token:
        line, column = self._line_col(start)
        return Token(
            type=TokenType.TEXT,
            value=self.text[start:end],
            position=start,
            end=end,
            line=line,
            column=column,
            raw_start=start,
            raw_end=end,
        )

    def _line_col(self, position: int) -> Tuple[int, int]:
        """Номер строки и колонки (с 1) для позиции в тексте."""
        line = self.text.count("\n", 0, position) + 1
        column = position - (self.text.rfind("\n", 0, position) + 1) + 1
        return line, column


def parse_delimiters_pair(delimiters) -> Delimiters:
    """
    Проверяет пару разделителей из настроек.

    Принимает последовательность из двух строк или строку вида "<% %>".
    """
    if isinstance(delimiters, str):
        parts = delimiters.split()
    else:
        parts = list(delimiters)
    if len(parts) != 2 or not all(isinstance(p, str) and p and not p.isspace() for p in parts):
        raise ValueError(f"Delimiters must be a pair of non-empty strings, got {delimiters!r}")
    return parts[0], parts[1]


def tokenize_template(text: str, delimiters: Delimiters = DEFAULT_DELIMITERS) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        text: Исходный текст шаблона
        delimiters: Начальная пара разделителей

    Returns:
        Список токенов

    Raises:
        TemplateSyntaxError: При ошибке лексического анализа
    """
    return TemplateLexer(text, delimiters).tokenize()


__all__ = ["TemplateLexer", "tokenize_template", "parse_delimiters_pair"]
