"""
Резолверы шаблонов.

Резолвер по имени шаблона возвращает его исходный текст или None.
Движок обращается к резолверу только при промахе кэша.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Type, TypeVar, runtime_checkable

from .errors import ResolverTypeNotFoundError

logger = logging.getLogger(__name__)

_R = TypeVar("_R")


@runtime_checkable
class TemplateResolver(Protocol):
    """Протокол резолвера: имя шаблона -> текст шаблона или None."""

    def resolve(self, name: str) -> Optional[str]:
        ...


class MapResolver:
    """Резолвер по словарю имя -> текст."""

    def __init__(self, templates: Optional[Mapping[str, str]] = None):
        self.templates: Dict[str, str] = dict(templates or {})

    def set_template(self, name: str, text: str) -> None:
        self.templates[name] = text

    def resolve(self, name: str) -> Optional[str]:
        return self.templates.get(name)

    def __repr__(self) -> str:
        return f"MapResolver({sorted(self.templates)})"


class FileSystemResolver:
    """
    Резолвер шаблонов из каталогов.

    Имя "a/b" ищется как <path>/a/b<suffix> в каждом каталоге поиска;
    последний добавленный каталог проверяется первым.
    Имена, выходящие за пределы каталога поиска, не разрешаются.
    """

    def __init__(self, paths: Iterable[Path] = (), suffix: str = ".mustache", separator: str = "/"):
        """
        Args:
            paths: Каталоги поиска шаблонов
            suffix: Суффикс файлов шаблонов
            separator: Разделитель сегментов в имени шаблона
        """
        self.suffix = suffix
        self.separator = separator
        self._paths: List[Path] = []
        for path in paths:
            self.add_template_path(path)

    @property
    def paths(self) -> Tuple[Path, ...]:
        return tuple(self._paths)

    def add_template_path(self, path: Path) -> None:
        """
        Добавляет каталог поиска.

        Raises:
            NotADirectoryError: Если каталог не существует
        """
        path = Path(path)
        if not path.is_dir():
            raise NotADirectoryError(f"Template path is not a directory: {path}")
        self._paths.insert(0, path.resolve())

    def resolve(self, name: str) -> Optional[str]:
        segments = [s for s in name.split(self.separator) if s]
        if not segments or any(s in (".", "..") for s in segments):
            return None

        rel = Path(*segments)
        filename = rel.with_name(rel.name + self.suffix) if self.suffix else rel

        for base in self._paths:
            candidate = base / filename
            try:
                found = candidate.is_file()
            except (OSError, ValueError):
                # Текст шаблона вместо имени может не быть допустимым путём
                found = False
            if found:
                logger.debug(f"Resolved template '{name}' -> {candidate}")
                return candidate.read_text(encoding="utf-8")
        return None

    def __repr__(self) -> str:
        return f"FileSystemResolver({[str(p) for p in self._paths]}, suffix={self.suffix!r})"


class AggregateResolver:
    """
    Резолвер, опрашивающий несколько резолверов по приоритету.

    Больший приоритет опрашивается раньше; при равных приоритетах -
    в порядке добавления.
    """

    def __init__(self):
        self._queue: List[Tuple[int, int, TemplateResolver]] = []
        self._counter = 0

    def attach(self, resolver: TemplateResolver, priority: int = 1) -> "AggregateResolver":
        """Добавляет резолвер с приоритетом."""
        self._queue.append((priority, self._counter, resolver))
        self._counter += 1
        self._queue.sort(key=lambda entry: (-entry[0], entry[1]))
        return self

    def __iter__(self):
        return (resolver for _, _, resolver in self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def resolve(self, name: str) -> Optional[str]:
        for resolver in self:
            text = resolver.resolve(name)
            if text is not None:
                return text
        return None

    def has_type(self, resolver_type: type) -> bool:
        """Есть ли среди подключённых резолвер указанного типа."""
        return any(isinstance(resolver, resolver_type) for resolver in self)

    def fetch_by_type(self, resolver_type: Type[_R]) -> _R:
        """
        Возвращает первый подключённый резолвер указанного типа.

        Raises:
            ResolverTypeNotFoundError: Если такого резолвера нет
        """
        for resolver in self:
            if isinstance(resolver, resolver_type):
                return resolver
        raise ResolverTypeNotFoundError(
            f"Unable to find resolver of type '{resolver_type.__name__}'"
        )


__all__ = [
    "TemplateResolver",
    "MapResolver",
    "FileSystemResolver",
    "AggregateResolver",
]
