"""
HTML-экранирование значений переменных.
"""

from __future__ import annotations

from typing import Callable

# Функция экранирования: текст -> безопасный текст
EscapeFn = Callable[[str], str]


def html_escape(s: str) -> str:
    # Амперсанд заменяется первым, поэтому повторное экранирование
    # даёт двойные сущности (&amp;amp;).
    return (
        s.replace("&", "&amp;")
         .replace("<", "&lt;")
         .replace(">", "&gt;")
         .replace('"', "&quot;")
         .replace("'", "&#39;")
    )


__all__ = ["EscapeFn", "html_escape"]
