"""
Type aliases for the memsim library.

Addresses are plain integers measured in words of the
simulated address space.
"""

from typing import NewType

Address = NewType('Address', int)

__all__ = [
    'Address',
]
