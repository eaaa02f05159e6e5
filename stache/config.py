"""
Конфигурация движка.

Настройки задаются в коде или читаются из YAML-файла (.stache.yaml)
и проверяются моделью pydantic.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError
from .template.lexer import parse_delimiters_pair

CONFIG_FILENAME = ".stache.yaml"

_yaml = YAML(typ="safe")


class EngineConfig(BaseModel):
    """
    Настройки движка шаблонов.

    Функция экранирования задаётся аргументом движка:
    вызываемые объекты не представимы в YAML.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Начальные разделители для каждого шаблона
    delimiters: Tuple[str, str] = ("{{", "}}")
    # Прагмы, включённые для каждого шаблона
    pragmas: List[str] = Field(default_factory=list)
    # Выравнивать вывод standalone-партиалов по отступу тега
    indent_partials: bool = True
    # Отсутствующий партиал: ошибка (True) или пустая строка (False)
    strict_partials: bool = True
    # Неизвестная прагма: ошибка (True) или игнорирование (False)
    strict_pragmas: bool = True
    # Партиалы наследуют текущие прагмы вызывающего шаблона
    partials_inherit_pragmas: bool = False
    # Максимальная глубина цепочки включений партиалов
    max_partial_depth: int = Field(default=64, ge=1)
    # Настройки файлового резолвера
    template_paths: List[Path] = Field(default_factory=list)
    template_suffix: str = ".mustache"
    # Кэш скомпилированных шаблонов
    cache: bool = True

    @field_validator("delimiters", mode="before")
    @classmethod
    def _check_delimiters(cls, value):
        try:
            return parse_delimiters_pair(value)
        except (TypeError, ValueError) as e:
            raise ValueError(str(e)) from e


def _read_yaml_map(path: Path) -> dict:
    """Читает YAML файл и возвращает словарь."""
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def load_config(path: Path) -> EngineConfig:
    """
    Загружает конфигурацию движка из YAML.

    Относительные template_paths отсчитываются от каталога файла.

    Raises:
        ConfigError: Если файл не найден, не является отображением или не проходит проверку
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    raw = _read_yaml_map(path)
    paths = raw.get("template_paths")
    if isinstance(paths, list):
        raw["template_paths"] = [(path.parent / str(p)) for p in paths]

    try:
        return EngineConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def find_config(start: Path) -> Path | None:
    """Ищет .stache.yaml в каталоге start и выше по дереву."""
    current = Path(start).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


__all__ = ["EngineConfig", "load_config", "find_config", "CONFIG_FILENAME"]
