"""
Внутренние обработчики для рендерера.

Предоставляет типизированный интерфейс, через который рендерер
компилирует тексты лямбд и загружает частичные шаблоны,
не завися от конкретного движка и резолвера.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from .nodes import TemplateAST
from .tokens import Delimiters


@runtime_checkable
class TemplateLoaderHandlers(Protocol):
    """
    Протокол загрузки и компиляции шаблонов для рендерера.
    """

    def compile_text(self, text: str, delimiters: Delimiters) -> TemplateAST:
        """
        Компилирует произвольный текст (тело лямбды, результат лямбды-переменной).

        Результат не кэшируется: такой текст формируется во время рендеринга.

        Args:
            text: Исходный текст шаблона
            delimiters: Начальная пара разделителей

        Returns:
            Документ
        """
        ...

    def load_partial(self, name: str) -> Optional[TemplateAST]:
        """
        Загружает и компилирует частичный шаблон по имени.

        Returns:
            Документ или None, если резолвер не знает такого имени
        """
        ...

    def load_template(self, template: str) -> TemplateAST:
        """
        Компилирует шаблон, заданный именем или непосредственно текстом.

        Имя проверяется через резолвер; если он его не знает,
        значение считается текстом шаблона.
        """
        ...


__all__ = ["TemplateLoaderHandlers"]
