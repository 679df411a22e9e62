from .memory_source import InMemoryOrderedSource, MemoryResultHandle

__all__ = ["InMemoryOrderedSource", "MemoryResultHandle"]
