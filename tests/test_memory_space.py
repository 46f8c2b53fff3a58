import numpy as np
import pytest

from memsim import (
    MALLOC_FAILED,
    InvalidArgument,
    MemoryBlock,
    MemorySpace,
    create_legacy_memory_space,
    create_memory_space,
)
from memsim.memory import ALLOCATED, FREE, UNTRACKED
from memsim.types import IMemorySpace


def blocks_of(block_list):
    return [block.as_tuple() for block in block_list]


def total_length(space):
    return sum(b.length for b in space.free_list) + sum(b.length for b in space.allocated_list)


class TestMemorySpaceConstruction:
    def test_initial_state(self):
        space = MemorySpace(100)
        assert space.max_size == 100
        assert blocks_of(space.free_list) == [(0, 100)]
        assert blocks_of(space.allocated_list) == []
        assert isinstance(space, IMemorySpace)

    def test_invalid_size(self):
        with pytest.raises(InvalidArgument, match="must be positive"):
            MemorySpace(0)

    def test_factory(self):
        space = create_memory_space()
        assert space.max_size == 100
        assert not space.legacy_free_guard
        assert create_legacy_memory_space().legacy_free_guard


class TestMalloc:
    def setup_method(self):
        self.space = MemorySpace(100)

    @pytest.mark.parametrize("length", [0, -1, -100])
    def test_non_positive_length(self, length):
        assert self.space.malloc(length) == MALLOC_FAILED == -1
        assert blocks_of(self.space.free_list) == [(0, 100)]
        assert blocks_of(self.space.allocated_list) == []

    def test_split(self):
        assert self.space.malloc(17) == 0
        assert blocks_of(self.space.free_list) == [(17, 83)]
        assert blocks_of(self.space.allocated_list) == [(0, 17)]

    def test_free_block_shrinks_in_place(self):
        record = self.space.free_list.first.block
        self.space.malloc(17)
        assert self.space.free_list.first.block is record
        assert record == MemoryBlock(17, 83)

    def test_consecutive_allocations(self):
        assert self.space.malloc(10) == 0
        assert self.space.malloc(20) == 10
        assert self.space.malloc(30) == 30
        assert blocks_of(self.space.allocated_list) == [(0, 10), (10, 20), (30, 30)]
        assert total_length(self.space) == 100

    def test_exact_fit_consumes_block(self):
        space = MemorySpace(10)
        assert space.malloc(10) == 0
        assert space.free_list.size == 0
        assert space.malloc(1) == MALLOC_FAILED

    def test_too_large(self):
        assert self.space.malloc(101) == MALLOC_FAILED
        assert blocks_of(self.space.free_list) == [(0, 100)]
        assert self.space.allocated_list.size == 0

    def test_first_fit_uses_list_order(self):
        space = MemorySpace(130)
        space.free_list.remove_first()
        for base, length in [(0, 10), (20, 5), (30, 100)]:
            space.free_list.add_last(MemoryBlock(base, length))

        assert space.malloc(5) == 0
        assert blocks_of(space.free_list) == [(5, 5), (20, 5), (30, 100)]

    def test_first_fit_is_not_address_order(self):
        space = MemorySpace(130)
        space.free_list.remove_first()
        for base, length in [(30, 100), (0, 10)]:
            space.free_list.add_last(MemoryBlock(base, length))

        assert space.malloc(5) == 30

    def test_total_length_is_preserved(self):
        for length in (7, 13, 1, 40):
            address = self.space.malloc(length)
            assert MemoryBlock(address, length) in self.space.allocated_list
            assert total_length(self.space) == 100


class TestFree:
    def setup_method(self):
        self.space = MemorySpace(100)
        self.space.malloc(17)

    def test_free_appends_without_merging(self):
        self.space.free(0)
        assert blocks_of(self.space.allocated_list) == []
        assert blocks_of(self.space.free_list) == [(17, 83), (0, 17)]

    def test_free_moves_the_same_record(self):
        record = self.space.allocated_list.first.block
        self.space.free(0)
        assert self.space.free_list.last.block is record

    def test_free_unknown_address(self):
        self.space.free(5)
        self.space.free(17)
        assert blocks_of(self.space.free_list) == [(17, 83)]
        assert blocks_of(self.space.allocated_list) == [(0, 17)]

    def test_double_free_is_ignored(self):
        self.space.free(0)
        self.space.free(0)
        assert blocks_of(self.space.free_list) == [(17, 83), (0, 17)]

    def test_free_on_pristine_space_is_a_no_op(self):
        space = MemorySpace(100)
        space.free(0)
        assert blocks_of(space.free_list) == [(0, 100)]

    def test_freed_block_is_reused(self):
        self.space.malloc(83)
        self.space.free(0)
        assert self.space.malloc(10) == 0
        assert blocks_of(self.space.free_list) == [(10, 7)]


class TestLegacyFreeGuard:
    def test_guard_rejects_free_on_pristine_space(self):
        space = create_legacy_memory_space()
        with pytest.raises(InvalidArgument, match="legacy"):
            space.free(0)

    def test_guard_inactive_once_allocated(self):
        space = create_legacy_memory_space()
        space.malloc(17)
        space.free(0)
        assert blocks_of(space.free_list) == [(17, 83), (0, 17)]

    def test_guard_ignores_other_sizes(self):
        space = create_legacy_memory_space(max_size=50)
        space.free(0)
        assert blocks_of(space.free_list) == [(0, 50)]


class TestDefrag:
    def test_merge_backward_neighbour(self):
        space = MemorySpace(100)
        space.malloc(17)
        space.free(0)

        space.defrag()

        assert blocks_of(space.free_list) == [(0, 100)]

    def test_merge_chain_keeps_first_record(self):
        space = MemorySpace(30)
        for _ in range(3):
            space.malloc(10)
        space.free(10)
        space.free(0)
        space.free(20)
        keeper = space.free_list.first.block

        space.defrag()

        assert blocks_of(space.free_list) == [(0, 30)]
        assert space.free_list.first.block is keeper

    def test_merge_forward_neighbour(self):
        space = MemorySpace(30)
        for _ in range(3):
            space.malloc(10)
        space.free(0)
        space.free(10)

        space.defrag()

        assert blocks_of(space.free_list) == [(0, 20)]
        assert blocks_of(space.allocated_list) == [(20, 10)]

    def test_non_adjacent_blocks_untouched(self):
        space = MemorySpace(30)
        for _ in range(3):
            space.malloc(10)
        space.free(20)
        space.free(0)

        space.defrag()

        assert blocks_of(space.free_list) == [(20, 10), (0, 10)]

    def test_one_record_per_contiguous_run(self):
        space = MemorySpace(60)
        for _ in range(6):
            space.malloc(10)
        for address in (50, 10, 40, 0):
            space.free(address)

        space.defrag()

        assert sorted(blocks_of(space.free_list)) == [(0, 20), (40, 20)]
        assert total_length(space) == 60
        assert space.is_consistent()

    def test_defrag_enables_allocation(self):
        space = MemorySpace(20)
        space.malloc(10)
        space.malloc(10)
        space.free(10)
        space.free(0)
        assert space.malloc(20) == MALLOC_FAILED

        space.defrag()

        assert space.malloc(20) == 0

    def test_defrag_on_empty_free_list(self):
        space = MemorySpace(10)
        space.malloc(10)
        space.defrag()
        assert space.free_list.size == 0


class TestInspection:
    def setup_method(self):
        self.space = MemorySpace(100)

    def test_rendering(self):
        self.space.malloc(17)
        assert str(self.space) == "(17 , 83) \n(0 , 17) "

    def test_snapshot(self):
        self.space.malloc(17)
        self.space.free(0)
        assert self.space.snapshot() == {
            'max_size': 100,
            'free': [[17, 83], [0, 17]],
            'allocated': [],
        }

    def test_memory_info(self):
        self.space.malloc(10)
        self.space.malloc(10)
        self.space.free(0)
        self.space.malloc(0)

        info = self.space.get_memory_info()

        assert info.total == 100
        assert info.free == 90
        assert info.used == 10
        assert info.free_block_count == 2
        assert info.allocated_block_count == 1
        assert info.largest_free_block == 80
        assert info.allocation_count == 2
        assert info.failed_allocation_count == 1
        assert info.deallocation_count == 1
        assert info.usage_ratio == pytest.approx(0.1)
        assert info.fragmentation_ratio == pytest.approx(1 - 80 / 90)

    def test_memory_info_counts_merges(self):
        self.space.malloc(10)
        self.space.free(0)
        self.space.defrag()

        info = self.space.get_memory_info()

        assert info.merge_count == 1
        assert info.fragmentation_ratio == 0.0

    def test_memory_info_when_full(self):
        self.space.malloc(100)
        info = self.space.get_memory_info()
        assert info.free == 0
        assert info.largest_free_block == 0
        assert info.fragmentation_ratio == 0.0
        assert info.to_dict()['usage_ratio'] == 1.0

    def test_occupancy_map(self):
        self.space.malloc(17)
        occupancy = self.space.occupancy_map()

        assert occupancy.dtype == np.int8
        assert occupancy.shape == (100,)
        assert np.all(occupancy[:17] == ALLOCATED)
        assert np.all(occupancy[17:] == FREE)

    def test_occupancy_map_untracked(self):
        self.space.free_list.remove_first()
        assert np.all(self.space.occupancy_map() == UNTRACKED)

    def test_consistency(self):
        self.space.malloc(17)
        self.space.malloc(3)
        self.space.free(0)
        assert self.space.is_consistent()

    def test_inconsistency_is_reported_not_prevented(self):
        self.space.free_list.add_last(MemoryBlock(50, 10))
        assert not self.space.is_consistent()

        self.space.free_list.remove(MemoryBlock(50, 10))
        self.space.free_list.add_last(MemoryBlock(95, 10))
        assert not self.space.is_consistent()


if __name__ == "__main__":
    pytest.main([__file__])
