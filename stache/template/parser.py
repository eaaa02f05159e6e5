"""
Построитель дерева для Mustache-шаблонов.

Однократно проходит по последовательности токенов, сопоставляет
открывающие и закрывающие теги секций и строит документ -
упорядоченный список узлов, часть из которых содержит вложенные узлы.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .lexer import tokenize_template
from .nodes import (
    TemplateAST, TemplateNode, TextNode, VariableNode, CommentNode, DelimiterNode,
    PragmaNode, PartialNode, ContainerNode, SectionNode, InvertedSectionNode,
    BlockNode, ParentNode,
)
from .tokens import Token, TokenType, Delimiters, DEFAULT_DELIMITERS, OPENING_TYPES
from ..errors import UnbalancedSectionError

logger = logging.getLogger(__name__)

_CONTAINER_CLASSES = {
    TokenType.SECTION_OPEN: SectionNode,
    TokenType.INVERTED_OPEN: InvertedSectionNode,
    TokenType.BLOCK_OPEN: BlockNode,
}


@dataclass
class _OpenContainer:
    """Открытый, ещё не закрытый контейнер на стеке построителя."""
    token: Token
    children: List[TemplateNode] = field(default_factory=list)


class TemplateParser:
    """
    Построитель дерева шаблона.

    Держит стек открытых контейнеров: открывающий тег кладёт контейнер
    на стек, закрывающий снимает его и проверяет совпадение имён.
    """

    def __init__(self, source: str):
        """
        Args:
            source: Исходный текст шаблона (нужен для извлечения тел секций)
        """
        self.source = source

    def parse(self, tokens: List[Token]) -> TemplateAST:
        """
        Строит документ из токенов.

        Raises:
            UnbalancedSectionError: При несовпадающих, лишних или незакрытых тегах секций
        """
        root: List[TemplateNode] = []
        stack: List[_OpenContainer] = []

        for token in tokens:
            if token.type in OPENING_TYPES:
                stack.append(_OpenContainer(token))
                continue

            if token.type is TokenType.SECTION_CLOSE:
                if not stack:
                    raise UnbalancedSectionError(
                        f"Closing tag '{token.value}' without opening tag",
                        token.value, token.line, token.column, token.position,
                    )
                opened = stack.pop()
                if opened.token.value != token.value:
                    raise UnbalancedSectionError(
                        f"Section '{opened.token.value}' (opened at {opened.token.line}:{opened.token.column}) "
                        f"closed by '{token.value}'",
                        token.value, token.line, token.column, token.position,
                    )
                node = self._build_container(opened, token)
            else:
                node = self._build_leaf(token)

            (stack[-1].children if stack else root).append(node)

        if stack:
            unclosed = stack[-1].token
            raise UnbalancedSectionError(
                f"Unclosed section '{unclosed.value}'",
                unclosed.value, unclosed.line, unclosed.column, unclosed.position,
            )

        logger.debug(f"Parsed template into {len(root)} top-level nodes")
        return root

    def _build_container(self, opened: _OpenContainer, closing: Token) -> ContainerNode:
        """Создаёт узел контейнера вместе с исходным текстом его тела."""
        start = opened.token
        body = self.source[start.end:closing.position]
        common = dict(
            name=start.value,
            children=tuple(opened.children),
            body=body,
            delimiters=start.delimiters,
            line=start.line,
            column=start.column,
        )
        if start.type is TokenType.PARENT_OPEN:
            return ParentNode(indent=start.indent, **common)
        return _CONTAINER_CLASSES[start.type](**common)

    def _build_leaf(self, token: Token) -> TemplateNode:
        """Создаёт листовой узел из токена."""
        if token.type is TokenType.TEXT:
            return TextNode(text=token.value)
        if token.type is TokenType.VARIABLE:
            return VariableNode(name=token.value, escaped=True, line=token.line, column=token.column)
        if token.type is TokenType.RAW_VARIABLE:
            return VariableNode(name=token.value, escaped=False, line=token.line, column=token.column)
        if token.type is TokenType.COMMENT:
            return CommentNode(text=token.value)
        if token.type is TokenType.PARTIAL:
            return PartialNode(name=token.value, indent=token.indent, standalone=token.standalone)
        if token.type is TokenType.DELIMITER_CHANGE:
            otag, ctag = token.value.split()
            return DelimiterNode(delimiters=(otag, ctag))
        if token.type is TokenType.PRAGMA:
            name, params = parse_pragma(token.value)
            return PragmaNode(name=name, params=params, line=token.line, column=token.column)

        raise ValueError(f"Unexpected token: {token!r}")


def parse_pragma(value: str) -> tuple[str, Dict[str, str]]:
    """
    Разбирает содержимое прагмы "NAME key=value key2=value2".

    Параметр без "=" получает пустое значение.
    """
    parts = value.split()
    params: Dict[str, str] = {}
    for part in parts[1:]:
        key, _, param_value = part.partition("=")
        params[key] = param_value
    return parts[0], params


def parse_template(text: str, delimiters: Optional[Delimiters] = None) -> TemplateAST:
    """
    Удобная функция: токенизация и построение дерева за один вызов.

    Raises:
        TemplateSyntaxError: При ошибке лексического анализа
        UnbalancedSectionError: При несбалансированных секциях
    """
    tokens = tokenize_template(text, delimiters or DEFAULT_DELIMITERS)
    return TemplateParser(text).parse(tokens)


__all__ = ["TemplateParser", "parse_template", "parse_pragma"]
