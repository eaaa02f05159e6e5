from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Версия установленного дистрибутива stache.
    Без установки (запуск из исходников) возвращает "0.0.0".
    """
    try:
        return metadata.version("stache")
    except metadata.PackageNotFoundError:
        return "0.0.0"

__all__ = ["tool_version"]
