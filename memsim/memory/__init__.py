from .block_list import BlockList, BlockListIterator, BlockNode
from .space import ALLOCATED, FREE, MALLOC_FAILED, UNTRACKED, MemorySpace

__all__ = [
    "BlockList",
    "BlockListIterator",
    "BlockNode",
    "MemorySpace",
    "MALLOC_FAILED",
    "FREE",
    "ALLOCATED",
    "UNTRACKED",
]
