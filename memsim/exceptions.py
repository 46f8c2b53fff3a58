from __future__ import annotations
from typing import Any, Optional


class MemSimError(Exception):
    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.message = message
        self.context = kwargs


class InvalidArgument(MemSimError, ValueError):
    pass


class IndexOutOfRange(InvalidArgument, IndexError):
    def __init__(self, message: str, index: Optional[int] = None,
                 size: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.index = index
        self.size = size


class BlockNotFound(IndexOutOfRange):
    def __init__(self, message: str, block: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.block = block


__all__ = [
    'MemSimError',
    'InvalidArgument',
    'IndexOutOfRange',
    'BlockNotFound',
]
