from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import InvalidArgument


@dataclass(slots=True)
class MemoryBlock:
    """A contiguous range ``[base_address, base_address + length)``.

    Mutable: the allocator shrinks and grows free blocks in place. Two
    blocks compare equal when both fields match.
    """
    base_address: int
    length: int

    def __post_init__(self):
        if self.base_address < 0:
            raise InvalidArgument(f"Invalid base address: {self.base_address}",
                                  base_address=self.base_address)
        if self.length <= 0:
            raise InvalidArgument(f"Invalid block length: {self.length}", length=self.length)

    @property
    def end_address(self) -> int:
        return self.base_address + self.length

    def precedes(self, other: MemoryBlock) -> bool:
        return self.end_address == other.base_address

    def as_tuple(self) -> tuple[int, int]:
        return (self.base_address, self.length)

    def __str__(self) -> str:
        return f"({self.base_address} , {self.length})"


@dataclass(frozen=True, slots=True)
class MemoryInfo:
    total: int
    free: int
    used: int
    free_block_count: int
    allocated_block_count: int
    largest_free_block: int
    allocation_count: int = 0
    failed_allocation_count: int = 0
    deallocation_count: int = 0
    merge_count: int = 0

    @property
    def usage_ratio(self) -> float:
        return self.used / self.total if self.total > 0 else 0.0

    @property
    def fragmentation_ratio(self) -> float:
        return 1.0 - (self.largest_free_block / self.free) if self.free > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'free': self.free,
            'used': self.used,
            'free_block_count': self.free_block_count,
            'allocated_block_count': self.allocated_block_count,
            'largest_free_block': self.largest_free_block,
            'allocation_count': self.allocation_count,
            'failed_allocation_count': self.failed_allocation_count,
            'deallocation_count': self.deallocation_count,
            'merge_count': self.merge_count,
            'usage_ratio': self.usage_ratio,
            'fragmentation_ratio': self.fragmentation_ratio,
        }
