"""
Движок Mustache-шаблонов.

Публичный API, объединяющий лексер, построитель дерева, кэш, резолверы
и рендерер: render(шаблон, представление) -> текст.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .config import EngineConfig, load_config
from .errors import ConfigError, InvalidArgumentError
from .resolvers import AggregateResolver, FileSystemResolver, MapResolver, TemplateResolver
from .template.cache import TemplateCache, name_key, text_key
from .template.escaping import EscapeFn
from .template.filters import FilterFn
from .template.lexer import tokenize_template
from .template.nodes import TemplateAST
from .template.parser import TemplateParser
from .template.processor import TemplateRenderer
from .template.tokens import Delimiters, Token

logger = logging.getLogger(__name__)

# Типы, которые не могут быть корнем контекста
_UNSTRUCTURED_VIEWS = (str, bytes, bytearray, int, float, complex, bool, list, tuple)


class _CallLoader:
    """
    Обработчики загрузки для одного вызова render().

    Частичные шаблоны, переданные в вызов, имеют приоритет над резолвером
    движка и кэшируются по тексту, а не по имени.
    """

    def __init__(self, engine: "MustacheEngine", partials: Optional[Mapping[str, str]] = None):
        self.engine = engine
        self.partials: Dict[str, str] = dict(partials or {})

    def compile_text(self, text: str, delimiters: Delimiters) -> TemplateAST:
        # Текст от лямбд произволен, в кэш он не попадает
        return self.engine._build(text, delimiters)

    def load_partial(self, name: str) -> Optional[TemplateAST]:
        if name in self.partials:
            return self.engine._compile_text(self.partials[name], self.engine.config.delimiters)
        return self.engine._compile_named(name)

    def load_template(self, template: str) -> TemplateAST:
        ast = self.load_partial(template)
        if ast is None:
            ast = self.engine._compile_text(template, self.engine.config.delimiters)
        return ast


class MustacheEngine:
    """
    Движок шаблонов.

    Скомпилированные документы кэшируются и используются совместно;
    каждый вызов render() получает собственные стек контекстов
    и состояние прагм.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        resolver: Optional[TemplateResolver] = None,
        escape: Optional[EscapeFn] = None,
        filters: Optional[Mapping[str, FilterFn]] = None,
    ):
        """
        Args:
            config: Настройки движка (по умолчанию - значения EngineConfig)
            resolver: Резолвер шаблонов по имени; по умолчанию строится из config
            escape: Функция экранирования вместо HTML-экранирования
            filters: Дополнительные фильтры для прагмы FILTERS
        """
        self.config = config or EngineConfig()
        self.resolver: TemplateResolver = resolver if resolver is not None else self._default_resolver()
        self.escape = escape
        self.filters: Dict[str, FilterFn] = dict(filters or {})
        self.cache = TemplateCache(enabled=self.config.cache)

    @classmethod
    def from_config_file(cls, path: Path, **kwargs) -> "MustacheEngine":
        """Создаёт движок с настройками из YAML-файла."""
        return cls(load_config(path), **kwargs)

    def _default_resolver(self) -> TemplateResolver:
        aggregate = AggregateResolver()
        aggregate.attach(MapResolver(), priority=2)
        if self.config.template_paths:
            aggregate.attach(
                FileSystemResolver(self.config.template_paths, suffix=self.config.template_suffix)
            )
        return aggregate

    # ======= Публичный API =======

    def render(self, template: str, view: Any = None, partials: Optional[Mapping[str, str]] = None) -> str:
        """
        Рендерит шаблон.

        Args:
            template: Имя шаблона (если его знает резолвер) или текст шаблона
            view: Корень контекста: отображение или объект
            partials: Частичные шаблоны только для этого вызова (имя -> текст)

        Returns:
            Отрендеренный текст

        Raises:
            InvalidArgumentError: Если view не является структурированным значением
            TemplateSyntaxError, UnbalancedSectionError: При ошибках в шаблоне
            PartialNotFoundError: При отсутствии партиала в строгом режиме
        """
        root = self._check_view(view)
        loader = _CallLoader(self, partials)
        ast = loader.load_template(template)
        renderer = TemplateRenderer(loader, self.config, escape=self.escape, filters=self.filters)
        return renderer.render(ast, root)

    def compile(self, template: str) -> TemplateAST:
        """Компилирует шаблон (имя или текст) в документ с кэшированием."""
        return _CallLoader(self).load_template(template)

    def tokenize(self, text: str) -> List[Token]:
        """Токенизирует текст с начальными разделителями из настроек."""
        return tokenize_template(text, self.config.delimiters)

    def add_filter(self, name: str, fn: FilterFn) -> None:
        """Регистрирует фильтр значения для прагмы FILTERS."""
        if not callable(fn):
            raise InvalidArgumentError(f"Filter '{name}' must be callable")
        self.filters[name] = fn

    def add_template(self, name: str, text: str) -> None:
        """
        Регистрирует шаблон в словарном резолвере движка.

        Raises:
            InvalidArgumentError: Если у движка нет словарного резолвера
        """
        if isinstance(self.resolver, MapResolver):
            target = self.resolver
        elif isinstance(self.resolver, AggregateResolver) and self.resolver.has_type(MapResolver):
            target = self.resolver.fetch_by_type(MapResolver)
        else:
            raise InvalidArgumentError("Engine resolver does not accept in-memory templates")
        target.set_template(name, text)
        self.cache.clear()

    def clear_cache(self) -> None:
        self.cache.clear()

    # ======= Внутренние методы =======

    def _check_view(self, view: Any) -> Any:
        if view is None:
            return {}
        if isinstance(view, _UNSTRUCTURED_VIEWS):
            raise InvalidArgumentError(
                f"View must be a mapping or an object, got {type(view).__name__}"
            )
        return view

    def _compile_text(self, text: str, delimiters: Delimiters) -> TemplateAST:
        key = text_key(text, delimiters)
        ast = self.cache.get(key)
        if ast is None:
            ast = self._build(text, delimiters)
            self.cache.put(key, ast)
        return ast

    def _compile_named(self, name: str) -> Optional[TemplateAST]:
        delimiters = self.config.delimiters
        key = name_key(name, delimiters)
        ast = self.cache.get(key)
        if ast is not None:
            return ast

        text = self.resolver.resolve(name)
        if text is None:
            return None

        logger.debug(f"Resolved template '{name}' ({len(text)} chars)")
        ast = self._build(text, delimiters)
        self.cache.put(key, ast)
        return ast

    def _build(self, text: str, delimiters: Delimiters) -> TemplateAST:
        tokens = tokenize_template(text, delimiters)
        return TemplateParser(text).parse(tokens)


def render(
    template: str,
    view: Any = None,
    partials: Optional[Mapping[str, str]] = None,
    escape: Optional[EscapeFn] = None,
    **options: Any,
) -> str:
    """
    Удобная функция: рендерит шаблон одноразовым движком.

    options - поля EngineConfig (delimiters, pragmas, strict_partials, ...).

    Raises:
        ConfigError: При некорректных options
    """
    try:
        config = EngineConfig(**options)
    except ValidationError as e:
        raise ConfigError(f"Invalid engine options: {e}") from e
    return MustacheEngine(config, escape=escape).render(template, view, partials=partials)


__all__ = ["MustacheEngine", "render"]
