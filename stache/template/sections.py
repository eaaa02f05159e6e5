"""
Классификация значений секций.

Разрешённое значение секции сводится к одному варианту из закрытого
набора ещё до рендеринга, поэтому диспетчеризация в рендерере
исчерпывающая и не зависит от разбросанных проверок типов.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Tuple

from .context import MISSING

# Функция рендеринга, передаваемая в лямбду: текст -> отрендеренный текст
RenderFn = Callable[[str], str]

# Лямбда секции: (исходное тело, функция рендеринга) -> результат
SectionLambda = Callable[[str, RenderFn], Any]


class SectionKind(enum.Enum):
    """Варианты значения секции."""
    FALSY = "falsy"      # отсутствует / None / False / "" / пустая коллекция
    LIST = "list"        # непустая последовательность или итерируемый объект
    LAMBDA = "lambda"    # вызываемое значение (секция высшего порядка)
    OBJECT = "object"    # любое другое истинное значение


@dataclass(frozen=True)
class SectionValue:
    """Результат классификации: вариант и нормализованное значение."""
    kind: SectionKind
    value: Any = None
    items: Tuple[Any, ...] = ()


_FALSY = SectionValue(SectionKind.FALSY)


def classify_section_value(value: Any) -> SectionValue:
    """
    Сводит значение секции к одному из вариантов SectionKind.

    Порядок проверок фиксирован: ложные значения, вызываемые, отображения и
    строки (как объекты), итерируемые (как списки), прочее. Итерируемые
    значения материализуются один раз, поэтому генераторы и произвольные
    итерируемые объекты обрабатываются так же, как списки.
    """
    if value is MISSING or value is None or value is False:
        return _FALSY

    if callable(value):
        return SectionValue(SectionKind.LAMBDA, value)

    if isinstance(value, (str, bytes)):
        return SectionValue(SectionKind.OBJECT, value) if value else _FALSY

    if isinstance(value, Mapping):
        return SectionValue(SectionKind.OBJECT, value) if len(value) else _FALSY

    if isinstance(value, Iterable):
        items = tuple(value)
        if not items:
            return _FALSY
        return SectionValue(SectionKind.LIST, value, items)

    return SectionValue(SectionKind.OBJECT, value)


def is_falsy(value: Any) -> bool:
    """Истинность значения в смысле секций."""
    return classify_section_value(value).kind is SectionKind.FALSY


__all__ = [
    "RenderFn",
    "SectionLambda",
    "SectionKind",
    "SectionValue",
    "classify_section_value",
    "is_falsy",
]
