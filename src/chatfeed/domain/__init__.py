from .source import LiveResultHandle, OrderedQuerySource

__all__ = ["LiveResultHandle", "OrderedQuerySource"]
