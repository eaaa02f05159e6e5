"""
Ядро шаблонизатора: лексер, построитель дерева, стек контекстов,
прагмы, кэш и рендерер.
"""

from __future__ import annotations

from .context import MISSING, ContextStack
from .lexer import TemplateLexer, tokenize_template
from .parser import TemplateParser, parse_template
from .processor import TemplateRenderer
from .sections import SectionKind, classify_section_value
from .tokens import Token, TokenType, DEFAULT_DELIMITERS

__all__ = [
    "MISSING",
    "ContextStack",
    "TemplateLexer",
    "tokenize_template",
    "TemplateParser",
    "parse_template",
    "TemplateRenderer",
    "SectionKind",
    "classify_section_value",
    "Token",
    "TokenType",
    "DEFAULT_DELIMITERS",
]
