from __future__ import annotations

import sys
from typing import Iterator, List, Optional, Union

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from ..exceptions import BlockNotFound, IndexOutOfRange, InvalidArgument
from ..types.blocks import MemoryBlock


class BlockNode:
    """A position in a :class:`BlockList`: one block and the link to its successor."""

    __slots__ = ('block', 'next')

    def __init__(self, block: MemoryBlock, next: Optional[BlockNode] = None):
        self.block = block
        self.next = next

    def __repr__(self) -> str:
        return f"BlockNode({self.block})"


class BlockListIterator:
    """Forward-only, single-pass cursor over the blocks following a node."""

    __slots__ = ('_current',)

    def __init__(self, first: Optional[BlockNode]):
        self._current = first

    def has_next(self) -> bool:
        return self._current is not None

    def next(self) -> MemoryBlock:
        if self._current is None:
            raise StopIteration
        block = self._current.block
        self._current = self._current.next
        return block

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> MemoryBlock:
        return self.next()


class BlockList:
    """Singly linked sequence of memory blocks with O(1) access to both ends.

    ``first`` and ``last`` are both ``None`` exactly when the list is empty,
    and ``last.next`` is always ``None``. Lookups by value use
    :class:`MemoryBlock` equality, so of two equal records the one closer
    to the front is the one found.
    """

    __slots__ = ('_first', '_last', '_size')

    def __init__(self):
        self._first: Optional[BlockNode] = None
        self._last: Optional[BlockNode] = None
        self._size = 0

    @property
    def first(self) -> Optional[BlockNode]:
        return self._first

    @property
    def last(self) -> Optional[BlockNode]:
        return self._last

    @property
    def size(self) -> int:
        return self._size

    def _check_position(self, index: int) -> None:
        if index < 0 or index > self._size:
            raise IndexOutOfRange(
                f"Index {index} must be between 0 and size ({self._size})",
                index=index, size=self._size
            )

    def get_node(self, index: int) -> Optional[BlockNode]:
        """Return the node at ``index``; ``None`` when ``index == size``."""
        self._check_position(index)
        node = self._first
        for _ in range(index):
            node = node.next
        return node

    def get(self, index: int) -> Optional[MemoryBlock]:
        """Return the block at ``index``.

        The bound is inclusive of ``size``, where ``None`` is returned.
        Every index is rejected while the list is empty.
        """
        if self._size == 0:
            raise IndexOutOfRange(f"Index {index} out of range for empty list",
                                  index=index, size=0)
        node = self.get_node(index)
        return node.block if node is not None else None

    def add_first(self, block: MemoryBlock) -> None:
        node = BlockNode(block, self._first)
        if self._size == 0:
            self._last = node
        self._first = node
        self._size += 1

    def add_last(self, block: MemoryBlock) -> None:
        node = BlockNode(block)
        if self._size == 0:
            self._first = node
        else:
            self._last.next = node
        self._last = node
        self._size += 1

    def add(self, index: int, block: MemoryBlock) -> None:
        """Insert ``block`` before the element currently at ``index``.

        Inserting at either end is O(1); anywhere else walks the chain.
        """
        self._check_position(index)

        if index == 0:
            self.add_first(block)
            return

        if index == self._size:
            self.add_last(block)
            return

        prev = self.get_node(index - 1)
        prev.next = BlockNode(block, prev.next)
        self._size += 1

    def index_of(self, block: Optional[MemoryBlock]) -> int:
        if block is None:
            return -1

        node = self._first
        index = 0
        while node is not None:
            if node.block == block:
                return index
            node = node.next
            index += 1
        return -1

    def remove_node(self, node: Optional[BlockNode]) -> None:
        """Unlink ``node``. A node that does not belong to this list is ignored."""
        if node is None:
            raise InvalidArgument("Cannot remove an absent node")

        if node is self._first:
            self._first = node.next
            if self._first is None:
                self._last = None
            node.next = None
            self._size -= 1
            return

        prev = self._first
        while prev is not None and prev.next is not node:
            prev = prev.next

        if prev is None:
            return

        prev.next = node.next
        if node is self._last:
            self._last = prev
        node.next = None
        self._size -= 1

    def remove_at(self, index: int) -> None:
        self.remove_node(self.get_node(index))

    def remove_block(self, block: MemoryBlock) -> None:
        index = self.index_of(block)
        if index == -1:
            raise BlockNotFound(f"Block {block} is not in the list", block=block,
                                index=index, size=self._size)
        self.remove_at(index)

    def remove(self, target: Union[BlockNode, int, MemoryBlock, None]) -> None:
        """Remove by position, by index or by value."""
        if isinstance(target, MemoryBlock):
            self.remove_block(target)
        elif isinstance(target, int):
            self.remove_at(target)
        else:
            self.remove_node(target)

    def remove_first(self) -> MemoryBlock:
        if self._first is None:
            raise IndexOutOfRange("Cannot remove from an empty list", index=0, size=0)
        block = self._first.block
        self.remove_node(self._first)
        return block

    def iterator(self) -> BlockListIterator:
        return BlockListIterator(self._first)

    def to_list(self) -> List[MemoryBlock]:
        return list(self)

    def __iter__(self) -> Iterator[MemoryBlock]:
        return self.iterator()

    def __len__(self) -> int:
        return self._size

    def __contains__(self, block: object) -> bool:
        return isinstance(block, MemoryBlock) and self.index_of(block) != -1

    def __str__(self) -> str:
        return "".join(f"{block} " for block in self)

    def __repr__(self) -> str:
        return f"BlockList([{', '.join(str(block) for block in self)}])"
