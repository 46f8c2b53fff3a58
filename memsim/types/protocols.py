from __future__ import annotations

import sys
from typing import Iterator, Optional, Protocol, runtime_checkable

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from .blocks import MemoryBlock, MemoryInfo


@runtime_checkable
class IBlockCursor(Protocol):
    def has_next(self) -> bool: ...
    def next(self) -> MemoryBlock: ...
    def __iter__(self) -> Self: ...
    def __next__(self) -> MemoryBlock: ...


@runtime_checkable
class IBlockSequence(Protocol):
    @property
    def size(self) -> int:
        ...

    def get(self, index: int) -> Optional[MemoryBlock]:
        ...

    def add_first(self, block: MemoryBlock) -> None:
        ...

    def add_last(self, block: MemoryBlock) -> None:
        ...

    def index_of(self, block: Optional[MemoryBlock]) -> int:
        ...

    def iterator(self) -> IBlockCursor:
        ...

    def __iter__(self) -> Iterator[MemoryBlock]:
        ...


@runtime_checkable
class IMemorySpace(Protocol):
    def malloc(self, length: int) -> int:
        ...

    def free(self, address: int) -> None:
        ...

    def defrag(self) -> None:
        ...

    def get_memory_info(self) -> MemoryInfo:
        ...
