# creator/engines/__init__.py
"""
Engines package - the engine contract, registry, resource library and
the built-in generator engines.
"""
from .base import Engine, EngineKind, EngineRegistry
from .library import ResourceLibrary
from .builtin import (
    AIEngine,
    AppCreationEngine,
    BackendEngine,
    ContentEngine,
    DesignSystemEngine,
    BUILTIN_ENGINES,
)


def default_registry() -> EngineRegistry:
    """Fresh registry with one instance of every built-in engine."""
    registry = EngineRegistry()
    for engine_cls in BUILTIN_ENGINES:
        registry.register(engine_cls.kind, engine_cls())
    return registry


__all__ = [
    "Engine",
    "EngineKind",
    "EngineRegistry",
    "ResourceLibrary",
    "AIEngine",
    "AppCreationEngine",
    "BackendEngine",
    "ContentEngine",
    "DesignSystemEngine",
    "BUILTIN_ENGINES",
    "default_registry",
]
