"""
Type definitions and protocols for the memsim library.
"""

from .aliases import Address
from .blocks import MemoryBlock, MemoryInfo
from .protocols import IBlockCursor, IBlockSequence, IMemorySpace

__all__ = [
    # Records
    "MemoryBlock",
    "MemoryInfo",

    # Protocols
    "IBlockCursor",
    "IBlockSequence",
    "IMemorySpace",

    # Type aliases
    "Address",
]
