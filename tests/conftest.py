from pathlib import Path

import pytest

from stache import EngineConfig, MustacheEngine


@pytest.fixture(autouse=True)
def _default_cache_env(monkeypatch):
    # переменная окружения перекрывает настройку кэша, в тестах она не задана
    monkeypatch.delenv("STACHE_CACHE", raising=False)


@pytest.fixture
def engine() -> MustacheEngine:
    """Движок с настройками по умолчанию."""
    return MustacheEngine()


@pytest.fixture
def make_engine():
    """Фабрика движков: make_engine(strict_partials=False, ...)."""
    def _make(**options) -> MustacheEngine:
        return MustacheEngine(EngineConfig(**options))
    return _make


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Каталог шаблонов для файлового резолвера."""
    root = tmp_path / "templates"
    root.mkdir()
    return root
