"""
Стек контекстов рендеринга и разрешение имён.

Фреймы просматриваются от последнего добавленного к первому.
Представление (view) может быть отображением, произвольным объектом
с атрибутами, последовательностью или скаляром.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator as AbcIterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

# Скаляры, у которых не ищутся атрибуты
_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool, type(None))


class _Missing:
    """Маркер «имя не найдено». Отличим от None/False, но ложен."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def _accepts_no_arguments(method: Any) -> bool:
    """Можно ли вызвать метод без аргументов."""
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return True
    return all(
        param.default is not param.empty
        or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
        for param in signature.parameters.values()
    )


def _lookup_attribute(frame: Any, key: str) -> Any:
    if key.startswith("_"):
        return MISSING

    try:
        value = getattr(frame, key)
    except AttributeError:
        return MISSING

    if inspect.ismethod(value) and _accepts_no_arguments(value):
        return value()
    return value


def lookup_key(frame: Any, key: str) -> Any:
    """
    Ищет ключ внутри одного значения.

    Правила:
    - отображение: проверка принадлежности ключа (значения 0/False считаются найденными);
    - последовательность: числовой ключ - индекс элемента, прочие ключи -
      публичные атрибуты (поля именованных кортежей), встроенные методы скрыты;
    - объект: публичный атрибут; связанный метод без обязательных аргументов
      вызывается, иначе возвращается как есть (лямбда секции).

    Returns:
        Найденное значение или MISSING
    """
    if isinstance(frame, Mapping):
        return frame[key] if key in frame else MISSING

    if isinstance(frame, _SCALAR_TYPES):
        return MISSING

    if isinstance(frame, Sequence):
        if key.lstrip("-").isdigit():
            index = int(key)
            if -len(frame) <= index < len(frame):
                return frame[index]
            return MISSING
        value = _lookup_attribute(frame, key)
        # count/index и прочие методы list/tuple
        return MISSING if inspect.isbuiltin(value) else value

    return _lookup_attribute(frame, key)


@dataclass(frozen=True)
class Frame:
    """
    Фрейм контекста.

    alias - дополнительное имя, под которым доступно значение фрейма
    (прагма IMPLICIT-ITERATOR).
    """
    value: Any
    alias: Optional[str] = None


class ContextStack:
    """
    Упорядоченный стек фреймов данных.

    Создаётся на каждый вызов рендеринга и не разделяется между вызовами.
    Одноразовые итераторы из данных материализуются в кортеж при первом
    разрешении и дальше отдаются из памяти, поэтому секция и инвертированная
    секция над одним генератором видят одни и те же элементы.
    """

    def __init__(
        self,
        frames: Optional[List[Frame]] = None,
        materialized: Optional[Dict[int, Tuple[Any, tuple]]] = None,
    ):
        self.frames: List[Frame] = list(frames or [])
        # id(итератор) -> (итератор, элементы); итератор держится ради стабильности id
        self._materialized: Dict[int, Tuple[Any, tuple]] = (
            materialized if materialized is not None else {}
        )

    @classmethod
    def from_view(cls, view: Any) -> "ContextStack":
        """Создаёт стек с единственным корневым фреймом."""
        return cls([Frame(view)])

    def push(self, value: Any, alias: Optional[str] = None) -> None:
        self.frames.append(Frame(value, alias))

    def pop(self) -> Frame:
        return self.frames.pop()

    @contextmanager
    def pushed(self, value: Any, alias: Optional[str] = None) -> Iterator["ContextStack"]:
        """Временно добавляет фрейм на время блока with."""
        self.push(value, alias)
        try:
            yield self
        finally:
            self.pop()

    def top(self) -> Any:
        """Значение верхнего фрейма (неявный итератор '.')."""
        return self.frames[-1].value if self.frames else MISSING

    def copy(self) -> "ContextStack":
        return ContextStack(self.frames, self._materialized)

    def resolve(self, name: str) -> Any:
        """
        Разрешает имя (возможно, составное через точку) в стеке.

        Первый сегмент ищется во фреймах сверху вниз, остальные -
        строго внутри найденного значения, без возврата к стеку.

        Returns:
            Значение или MISSING
        """
        if name == ".":
            return self._stabilize(self.top())

        head, *rest = name.split(".")
        value = self._resolve_head(head)

        for segment in rest:
            if value is MISSING:
                break
            value = lookup_key(self._stabilize(value), segment)

        return self._stabilize(value)

    def _stabilize(self, value: Any) -> Any:
        if not isinstance(value, AbcIterator) or isinstance(value, (Sequence, Mapping)):
            return value
        entry = self._materialized.get(id(value))
        if entry is None:
            entry = (value, tuple(value))
            self._materialized[id(value)] = entry
        return entry[1]

    def _resolve_head(self, key: str) -> Any:
        for frame in reversed(self.frames):
            if frame.alias is not None and frame.alias == key:
                return frame.value
            value = lookup_key(frame.value, key)
            if value is not MISSING:
                return value
        return MISSING

    def __len__(self) -> int:
        return len(self.frames)

    def __repr__(self) -> str:
        return f"ContextStack(depth={len(self.frames)})"


__all__ = ["MISSING", "Frame", "ContextStack", "lookup_key"]
