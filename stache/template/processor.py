"""
Рендерер Mustache-документов.

Обходит дерево шаблона против стека контекстов и состояния прагм,
классифицирует значения секций, подключает частичные и родительские
шаблоны через обработчики загрузки. Дерево при рендеринге не изменяется.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from .context import MISSING, ContextStack
from .escaping import EscapeFn, html_escape
from .filters import DEFAULT_FILTERS, FilterFn, apply_filters, split_filters
from .handlers import TemplateLoaderHandlers
from .nodes import (
    TemplateAST, TemplateNode, TextNode, VariableNode, CommentNode, DelimiterNode,
    PragmaNode, PartialNode, SectionNode, InvertedSectionNode, BlockNode, ParentNode,
)
from .pragmas import PragmaState, FILTERS, SUB_VIEWS
from .sections import SectionKind, classify_section_value, is_falsy
from .tokens import DEFAULT_DELIMITERS
from ..errors import PartialNotFoundError, PartialCycleError
from ..types import SubView

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = logging.getLogger(__name__)


@dataclass
class RenderState:
    """
    Состояние рендеринга одного шаблона в рамках одного вызова.

    pragmas - прагмы текущего шаблона, blocks - действующие переопределения
    блоков, partial_chain - цепочка имён включённых шаблонов.
    """
    pragmas: PragmaState
    blocks: Mapping[str, BlockNode] = field(default_factory=dict)
    partial_chain: Tuple[str, ...] = ()


def indent_lines(text: str, indent: str) -> str:
    """Добавляет отступ в начало каждой строки текста."""
    return "".join(indent + line for line in text.splitlines(keepends=True))


class TemplateRenderer:
    """
    Основной рендерер шаблонов.

    Один экземпляр может обслуживать любое число рендерингов:
    стек контекстов и состояние прагм создаются на каждый вызов.
    """

    def __init__(
        self,
        handlers: TemplateLoaderHandlers,
        config: "EngineConfig",
        escape: Optional[EscapeFn] = None,
        filters: Optional[Mapping[str, FilterFn]] = None,
    ):
        """
        Args:
            handlers: Обработчики компиляции текстов и загрузки партиалов
            config: Настройки движка
            escape: Функция экранирования (по умолчанию HTML)
            filters: Фильтры значений для прагмы FILTERS
        """
        self.handlers = handlers
        self.config = config
        self.escape: EscapeFn = escape or html_escape
        self.filters: Dict[str, FilterFn] = dict(DEFAULT_FILTERS)
        if filters:
            self.filters.update(filters)

    def new_state(self) -> RenderState:
        """Начальное состояние для корневого шаблона."""
        return RenderState(
            pragmas=PragmaState.from_names(self.config.pragmas, strict=self.config.strict_pragmas)
        )

    def render(self, ast: TemplateAST, view: Any) -> str:
        """
        Рендерит документ с view в качестве корневого фрейма.

        Returns:
            Отрендеренный текст
        """
        return self.render_nodes(ast, ContextStack.from_view(view), self.new_state())

    def render_nodes(self, nodes, stack: ContextStack, state: RenderState) -> str:
        """Рендерит последовательность узлов."""
        result_parts: List[str] = []
        for node in nodes:
            rendered = self._render_node(node, stack, state)
            if rendered:
                result_parts.append(rendered)
        return "".join(result_parts)

    # ======= Узлы =======

    def _render_node(self, node: TemplateNode, stack: ContextStack, state: RenderState) -> str:
        if isinstance(node, TextNode):
            return node.text
        if isinstance(node, VariableNode):
            return self._render_variable(node, stack, state)
        if isinstance(node, SectionNode):
            return self._render_section(node, stack, state)
        if isinstance(node, InvertedSectionNode):
            if is_falsy(stack.resolve(node.name)):
                return self.render_nodes(node.children, stack, state)
            return ""
        if isinstance(node, PartialNode):
            return self._render_partial(node, stack, state)
        if isinstance(node, BlockNode):
            override = state.blocks.get(node.name)
            children = override.children if override is not None else node.children
            return self.render_nodes(children, stack, state)
        if isinstance(node, ParentNode):
            return self._render_parent(node, stack, state)
        if isinstance(node, PragmaNode):
            state.pragmas.enable(node.name, node.params)
            return ""
        if isinstance(node, (CommentNode, DelimiterNode)):
            return ""

        raise TypeError(f"No renderer for node type: {type(node).__name__}")

    def _render_variable(self, node: VariableNode, stack: ContextStack, state: RenderState) -> str:
        name, filter_names = node.name, []
        if state.pragmas.is_enabled(FILTERS):
            name, filter_names = split_filters(name)

        value = stack.resolve(name)
        if value is MISSING:
            return ""

        if callable(value):
            # Результат лямбды-переменной рендерится как шаблон
            result = value()
            value = "" if result is None else self.render_nodes(
                self.handlers.compile_text(str(result), DEFAULT_DELIMITERS), stack, self._isolated(state)
            )

        if filter_names:
            value = apply_filters(value, filter_names, self.filters)

        if value is None:
            return ""
        text = value if isinstance(value, str) else str(value)
        return self.escape(text) if node.escaped else text

    def _render_section(self, node: SectionNode, stack: ContextStack, state: RenderState) -> str:
        section = classify_section_value(stack.resolve(node.name))

        if section.kind is SectionKind.FALSY:
            return ""

        if section.kind is SectionKind.LIST:
            alias = state.pragmas.iterator_name
            parts = []
            for item in section.items:
                with stack.pushed(item, alias):
                    parts.append(self.render_nodes(node.children, stack, state))
            return "".join(parts)

        if section.kind is SectionKind.LAMBDA:
            return self._render_section_lambda(node, section.value, stack, state)

        if section.kind is SectionKind.OBJECT:
            with stack.pushed(section.value):
                return self.render_nodes(node.children, stack, state)

        raise AssertionError(f"Unhandled section kind: {section.kind}")

    def _render_section_lambda(self, node: SectionNode, fn, stack: ContextStack, state: RenderState) -> str:
        """
        Секция высшего порядка.

        Лямбда получает исходное тело секции и функцию рендеринга против
        текущего стека. Результат вставляется без экранирования и без
        повторного разбора.
        """
        captured = stack.copy()

        def render(text: str) -> str:
            ast = self.handlers.compile_text(text, node.delimiters)
            return self.render_nodes(ast, captured.copy(), self._isolated(state))

        result = fn(node.body, render)
        return "" if result is None else str(result)

    @staticmethod
    def _isolated(state: RenderState) -> RenderState:
        """Состояние для текста лямбды: его прагмы не влияют на шаблон."""
        return replace(state, pragmas=state.pragmas.copy())

    def _render_partial(self, node: PartialNode, stack: ContextStack, state: RenderState) -> str:
        if state.pragmas.is_enabled(SUB_VIEWS):
            candidate = stack.resolve(node.name)
            if isinstance(candidate, SubView):
                output = self._render_sub_view(candidate, node.name, state)
                return self._apply_indent(output, node.indent)

        ast = self._load_partial(node.name)
        if ast is None:
            return ""

        output = self.render_nodes(ast, stack, self._partial_state(node.name, state))
        return self._apply_indent(output, node.indent)

    def _render_sub_view(self, sub_view: SubView, name: str, state: RenderState) -> str:
        logger.debug(f"Rendering sub-view for partial '{name}'")
        ast = self.handlers.load_template(sub_view.template)
        return self.render_nodes(ast, ContextStack.from_view(sub_view.view), self._partial_state(name, state))

    def _render_parent(self, node: ParentNode, stack: ContextStack, state: RenderState) -> str:
        # Внешние переопределения приоритетнее собственных
        overrides: Dict[str, BlockNode] = {
            child.name: child for child in node.children if isinstance(child, BlockNode)
        }
        overrides.update(state.blocks)

        ast = self._load_partial(node.name)
        if ast is None:
            return ""

        child_state = replace(self._partial_state(node.name, state), blocks=overrides)
        output = self.render_nodes(ast, stack, child_state)
        return self._apply_indent(output, node.indent)

    # ======= Внутренние методы =======

    def _load_partial(self, name: str) -> Optional[TemplateAST]:
        ast = self.handlers.load_partial(name)
        if ast is None:
            if self.config.strict_partials:
                raise PartialNotFoundError(name)
            logger.warning(f"Partial '{name}' not found, rendering empty string")
        return ast

    def _partial_state(self, name: str, state: RenderState) -> RenderState:
        """
        Состояние для включаемого шаблона.

        Raises:
            PartialCycleError: Если цепочка включений длиннее max_partial_depth
        """
        chain = state.partial_chain + (name,)
        if len(chain) > self.config.max_partial_depth:
            raise PartialCycleError(chain)

        if self.config.partials_inherit_pragmas:
            pragmas = state.pragmas.copy()
        else:
            pragmas = PragmaState.from_names(self.config.pragmas, strict=self.config.strict_pragmas)

        return RenderState(pragmas=pragmas, blocks=state.blocks, partial_chain=chain)

    def _apply_indent(self, output: str, indent: str) -> str:
        """Выравнивает вывод standalone-тега по его отступу."""
        if not indent or not output:
            return output
        if self.config.indent_partials:
            return indent_lines(output, indent)
        return indent + output


__all__ = ["TemplateRenderer", "RenderState", "indent_lines"]
