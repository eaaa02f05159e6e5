"""
stache - движок логически-пассивных шаблонов Mustache.
"""

from __future__ import annotations

from .config import EngineConfig, find_config, load_config
from .engine import MustacheEngine, render
from .errors import (
    StacheUserError,
    TemplateSyntaxError,
    UnbalancedSectionError,
    UnknownPragmaError,
    UnknownFilterError,
    PartialNotFoundError,
    PartialCycleError,
    ResolverTypeNotFoundError,
    InvalidArgumentError,
    ConfigError,
)
from .resolvers import AggregateResolver, FileSystemResolver, MapResolver, TemplateResolver
from .types import SubView
from .version import tool_version

__version__ = tool_version()

__all__ = [
    "MustacheEngine",
    "render",
    "EngineConfig",
    "load_config",
    "find_config",
    "SubView",
    "TemplateResolver",
    "MapResolver",
    "FileSystemResolver",
    "AggregateResolver",
    "StacheUserError",
    "TemplateSyntaxError",
    "UnbalancedSectionError",
    "UnknownPragmaError",
    "UnknownFilterError",
    "PartialNotFoundError",
    "PartialCycleError",
    "ResolverTypeNotFoundError",
    "InvalidArgumentError",
    "ConfigError",
]
