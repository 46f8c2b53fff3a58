"""
Simulated memory space with first-fit allocation.

A :class:`MemorySpace` manages the address range ``[0, max_size)`` with two
block lists: ``free`` and ``allocated``. No real memory is touched; only the
bookkeeping of which ranges are handed out is modelled.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import numpy as np

from ..exceptions import InvalidArgument
from ..types.aliases import Address
from ..types.blocks import MemoryBlock, MemoryInfo
from .block_list import BlockList

logger = logging.getLogger(__name__)

MALLOC_FAILED = -1

FREE = 0
ALLOCATED = 1
UNTRACKED = -1

LEGACY_GUARD_BLOCK = MemoryBlock(0, 100)


class MemorySpace:
    __slots__ = ('_max_size', '_free', '_allocated', '_legacy_free_guard',
                 '_allocation_count', '_failed_allocation_count',
                 '_deallocation_count', '_merge_count')

    def __init__(self, max_size: int, legacy_free_guard: bool = False):
        if max_size <= 0:
            raise InvalidArgument(f"Memory size must be positive: {max_size}", max_size=max_size)

        self._max_size = max_size
        self._legacy_free_guard = legacy_free_guard
        self._allocated = BlockList()
        self._free = BlockList()
        self._free.add_last(MemoryBlock(0, max_size))

        self._allocation_count = 0
        self._failed_allocation_count = 0
        self._deallocation_count = 0
        self._merge_count = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def free_list(self) -> BlockList:
        return self._free

    @property
    def allocated_list(self) -> BlockList:
        return self._allocated

    @property
    def legacy_free_guard(self) -> bool:
        return self._legacy_free_guard

    def malloc(self, length: int) -> int:
        """Allocate ``length`` words from the first free block large enough.

        The free list is scanned in list order, not address order. The found
        block is consumed when it fits exactly, otherwise it shrinks from the
        front. Returns the base address of the new block, or ``MALLOC_FAILED``.
        """
        if length <= 0:
            self._failed_allocation_count += 1
            logger.debug("malloc(%d) rejected: length must be positive", length)
            return MALLOC_FAILED

        node = self._free.first
        while node is not None:
            found = node.block
            if found.length >= length:
                block = MemoryBlock(found.base_address, length)
                self._allocated.add_last(block)

                if found.length == length:
                    self._free.remove_node(node)
                else:
                    found.base_address += length
                    found.length -= length

                self._allocation_count += 1
                logger.debug("malloc(%d) -> %d", length, block.base_address)
                return Address(block.base_address)
            node = node.next

        self._failed_allocation_count += 1
        logger.debug("malloc(%d) failed: no free block is large enough", length)
        return MALLOC_FAILED

    def free(self, address: int) -> None:
        """Move the allocated block starting at ``address`` to the end of the free list.

        Adjacent free blocks are not merged; see :meth:`defrag`. Unknown
        addresses are ignored.
        """
        if self._legacy_free_guard and self._free.size == 1 and self._free.first.block == LEGACY_GUARD_BLOCK:
            raise InvalidArgument("Cannot free while the whole legacy space is free", address=address)

        node = self._allocated.first
        while node is not None:
            if node.block.base_address == address:
                block = node.block
                self._free.add_last(block)
                self._allocated.remove_node(node)
                self._deallocation_count += 1
                logger.debug("free(%d) released %s", address, block)
                return
            node = node.next

        logger.debug("free(%d) ignored: no allocated block at this address", address)

    def defrag(self) -> None:
        """Merge address-contiguous free blocks.

        Each block, in list order, absorbs every later block adjacent to it on
        either side; the scan for the current block restarts after each merge.
        The surviving record is the one met first in the list.
        """
        merged = 0
        current = self._free.first
        while current is not None:
            keeper = current.block
            candidate = current.next
            while candidate is not None:
                other = candidate.block
                if keeper.precedes(other):
                    keeper.length += other.length
                elif other.precedes(keeper):
                    keeper.base_address = other.base_address
                    keeper.length += other.length
                else:
                    candidate = candidate.next
                    continue

                self._free.remove_node(candidate)
                merged += 1
                logger.debug("defrag merged %s into %s", other, keeper)
                candidate = current.next
            current = current.next

        self._merge_count += merged
        logger.debug("defrag finished: %d merges, %d free blocks", merged, self._free.size)

    def occupancy_map(self) -> np.ndarray:
        """Per-address state: ``FREE``, ``ALLOCATED`` or ``UNTRACKED``.

        Overlapping records are not detected here; the later list wins.
        """
        occupancy = np.full(self._max_size, UNTRACKED, dtype=np.int8)
        for block in self._free:
            occupancy[block.base_address:block.end_address] = FREE
        for block in self._allocated:
            occupancy[block.base_address:block.end_address] = ALLOCATED
        return occupancy

    def is_consistent(self) -> bool:
        """True when every address is covered by exactly one block and no block leaves the space."""
        coverage = np.zeros(self._max_size, dtype=np.int64)
        for blocks in (self._free, self._allocated):
            for block in blocks:
                if block.end_address > self._max_size:
                    return False
                coverage[block.base_address:block.end_address] += 1
        return bool(np.all(coverage == 1))

    def get_memory_info(self) -> MemoryInfo:
        free_lengths = np.fromiter((block.length for block in self._free), dtype=np.int64,
                                   count=self._free.size)
        used_lengths = np.fromiter((block.length for block in self._allocated), dtype=np.int64,
                                   count=self._allocated.size)

        return MemoryInfo(
            total=self._max_size,
            free=int(free_lengths.sum()),
            used=int(used_lengths.sum()),
            free_block_count=self._free.size,
            allocated_block_count=self._allocated.size,
            largest_free_block=int(free_lengths.max()) if free_lengths.size else 0,
            allocation_count=self._allocation_count,
            failed_allocation_count=self._failed_allocation_count,
            deallocation_count=self._deallocation_count,
            merge_count=self._merge_count,
        )

    def snapshot(self) -> Dict[str, Any]:
        return {
            'max_size': self._max_size,
            'free': self._blocks_as_lists(self._free),
            'allocated': self._blocks_as_lists(self._allocated),
        }

    @staticmethod
    def _blocks_as_lists(blocks: BlockList) -> List[List[int]]:
        return [list(block.as_tuple()) for block in blocks]

    def __str__(self) -> str:
        return f"{self._free}\n{self._allocated}"

    def __repr__(self) -> str:
        return (
            f"MemorySpace(max_size={self._max_size}, "
            f"free={self._free.size} blocks, allocated={self._allocated.size} blocks)"
        )
