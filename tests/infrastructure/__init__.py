"""
Общая тестовая инфраструктура stache.

Модули:
- file_utils: создание файлов шаблонов и конфигураций
- views: тестовые представления (объекты, итерируемые, лямбды)
"""

from .file_utils import write, write_config
from .views import (
    ShoppingCartView,
    HigherOrderView,
    NestedObjectsView,
    TraversableItems,
    PrivateFieldsView,
)

__all__ = [
    "write",
    "write_config",
    "ShoppingCartView",
    "HigherOrderView",
    "NestedObjectsView",
    "TraversableItems",
    "PrivateFieldsView",
]
