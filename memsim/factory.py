from __future__ import annotations

from .memory.space import MemorySpace

DEFAULT_MAX_SIZE = 100


def create_memory_space(max_size: int = DEFAULT_MAX_SIZE, **kwargs) -> MemorySpace:
    return MemorySpace(max_size, **kwargs)


def create_legacy_memory_space(max_size: int = DEFAULT_MAX_SIZE) -> MemorySpace:
    """A space that keeps the historical ``free`` guard against a pristine 100-word free list."""
    return MemorySpace(max_size, legacy_free_guard=True)
