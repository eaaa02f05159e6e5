from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SubView:
    """
    Представление, связанное с собственным шаблоном (прагма SUB-VIEWS).

    Если тег {{>name}} разрешается в контексте в SubView, вместо частичного
    шаблона name рендерится template (имя или текст) с view в качестве корня.
    """
    template: str
    view: Any = None


__all__ = ["SubView"]
