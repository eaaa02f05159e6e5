"""
AST-узлы Mustache-шаблона.

Определяет иерархию неизменяемых классов узлов. Готовое дерево (документ)
не изменяется при рендеринге и может использоваться несколькими
рендерингами одновременно.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Tuple

from .tokens import Delimiters, DEFAULT_DELIMITERS


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть (после standalone-обрезки).
    """
    text: str


@dataclass(frozen=True)
class VariableNode(TemplateNode):
    """Подстановка переменной {{name}} / {{{name}}} / {{&name}}."""
    name: str
    escaped: bool = True
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class CommentNode(TemplateNode):
    """Комментарий {{! ... }}. Ничего не выводит."""
    text: str


@dataclass(frozen=True)
class DelimiterNode(TemplateNode):
    """
    Смена разделителей {{=<% %>=}}.

    Уже учтена лексером, рендерер её пропускает.
    """
    delimiters: Delimiters


@dataclass(frozen=True)
class PragmaNode(TemplateNode):
    """
    Прагма {{%NAME key=value ...}}.

    Меняет состояние прагм до конца текущего шаблона.
    """
    name: str
    params: Mapping[str, str] = field(default_factory=dict)
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class PartialNode(TemplateNode):
    """
    Включение частичного шаблона {{>name}}.

    indent - отступ строки standalone-тега, которым выравнивается вывод.
    """
    name: str
    indent: str = ""
    standalone: bool = False


@dataclass(frozen=True)
class ContainerNode(TemplateNode):
    """
    Базовый класс для узлов с дочерними элементами.

    body - исходный (не отрендеренный) текст тела контейнера,
    delimiters - разделители, действовавшие на открывающем теге.
    """
    name: str
    children: Tuple[TemplateNode, ...] = ()
    body: str = ""
    delimiters: Delimiters = DEFAULT_DELIMITERS
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class SectionNode(ContainerNode):
    """Секция {{#name}}...{{/name}}."""
    pass


@dataclass(frozen=True)
class InvertedSectionNode(ContainerNode):
    """Инвертированная секция {{^name}}...{{/name}}: рендерится, когда секция не рендерилась бы."""
    pass


@dataclass(frozen=True)
class BlockNode(ContainerNode):
    """
    Блок {{$name}}...{{/name}}.

    Выводит переопределение блока из родительского вызова,
    а при его отсутствии - собственное содержимое.
    """
    pass


@dataclass(frozen=True)
class ParentNode(ContainerNode):
    """
    Наследование {{<name}}...{{/name}}.

    Рендерит шаблон name, переопределяя его блоки блоками из children.
    """
    indent: str = ""


# Алиас для списка узлов (документ)
TemplateAST = List[TemplateNode]


def format_ast_tree(ast, indent: int = 0) -> str:
    """Форматирует AST как дерево для отладки."""
    lines = []
    prefix = "  " * indent

    for node in ast:
        if isinstance(node, TextNode):
            # Показываем только начало текста для читабельности
            text_preview = repr(node.text[:50] + "..." if len(node.text) > 50 else node.text)
            lines.append(f"{prefix}TextNode({text_preview})")
        elif isinstance(node, VariableNode):
            lines.append(f"{prefix}VariableNode('{node.name}', escaped={node.escaped})")
        elif isinstance(node, ContainerNode):
            lines.append(f"{prefix}{type(node).__name__}('{node.name}')")
            if node.children:
                lines.append(format_ast_tree(node.children, indent + 1))
        elif isinstance(node, PartialNode):
            lines.append(f"{prefix}PartialNode('{node.name}')")
        elif isinstance(node, PragmaNode):
            lines.append(f"{prefix}PragmaNode('{node.name}')")
        else:
            lines.append(f"{prefix}{type(node).__name__}")

    return "\n".join(lines)


__all__ = [
    "TemplateNode",
    "TemplateAST",
    "TextNode",
    "VariableNode",
    "CommentNode",
    "DelimiterNode",
    "PragmaNode",
    "PartialNode",
    "ContainerNode",
    "SectionNode",
    "InvertedSectionNode",
    "BlockNode",
    "ParentNode",
    "format_ast_tree",
]
