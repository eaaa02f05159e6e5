"""
Фильтры значений для прагмы FILTERS.

При включённой прагме тег переменной может содержать цепочку фильтров:
{{ name | lower | capitalize }}. Фильтр получает разрешённое значение
до экранирования.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Tuple

from ..errors import UnknownFilterError

# Фильтр: значение -> новое значение
FilterFn = Callable[[Any], Any]


def _length(value: Any) -> int:
    try:
        return len(value)
    except TypeError:
        return len(str(value))


DEFAULT_FILTERS: Dict[str, FilterFn] = {
    "upper": lambda v: str(v).upper(),
    "lower": lambda v: str(v).lower(),
    "capitalize": lambda v: str(v).capitalize(),
    "title": lambda v: str(v).title(),
    "strip": lambda v: str(v).strip(),
    "length": _length,
}


def split_filters(name: str) -> Tuple[str, List[str]]:
    """Разделяет "name | f1 | f2" на имя и список фильтров."""
    head, *filters = [part.strip() for part in name.split("|")]
    return head, [f for f in filters if f]


def apply_filters(value: Any, filter_names: List[str], registry: Mapping[str, FilterFn]) -> Any:
    """
    Последовательно применяет фильтры к значению.

    Raises:
        UnknownFilterError: Если фильтр не зарегистрирован
    """
    for filter_name in filter_names:
        fn = registry.get(filter_name)
        if fn is None:
            raise UnknownFilterError(filter_name)
        value = fn(value)
    return value


__all__ = ["FilterFn", "DEFAULT_FILTERS", "split_filters", "apply_filters"]
