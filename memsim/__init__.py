"""
memsim - Simulated Dynamic Memory Allocation

A teaching model of an allocator's bookkeeping over a single fixed-size
address space. No real memory is touched: the library tracks which address
ranges are free and which are allocated.

Key Features:
- First-fit allocation over an ordered free list
- Explicit defragmentation merging contiguous free blocks
- Linked block list with O(1) access to both ends
- Usage and fragmentation statistics
"""

from __future__ import annotations

__version__ = "1.0.0"
__license__ = "MIT"

from .memory.block_list import BlockList, BlockListIterator, BlockNode
from .memory.space import MALLOC_FAILED, MemorySpace

from .factory import (
    DEFAULT_MAX_SIZE,
    create_legacy_memory_space,
    create_memory_space
)

from .types.blocks import MemoryBlock, MemoryInfo
from .types.protocols import IBlockSequence, IMemorySpace

from .exceptions import (
    MemSimError,
    InvalidArgument,
    IndexOutOfRange,
    BlockNotFound
)

__all__ = [
    # Core components
    "MemorySpace",
    "MALLOC_FAILED",
    "BlockList",
    "BlockListIterator",
    "BlockNode",

    # Factories
    "DEFAULT_MAX_SIZE",
    "create_memory_space",
    "create_legacy_memory_space",

    # Types
    "MemoryBlock",
    "MemoryInfo",
    "IBlockSequence",
    "IMemorySpace",

    # Exceptions
    "MemSimError",
    "InvalidArgument",
    "IndexOutOfRange",
    "BlockNotFound",
]

VERSION_INFO = tuple(map(int, __version__.split('.')))

def get_version() -> str:
    """Get the current version string."""
    return __version__

def get_version_info() -> tuple[int, ...]:
    """Get version as tuple of integers."""
    return VERSION_INFO
