"""
Command-line interface for the memsim library.

This module provides commands for replaying a scripted sequence of
allocator operations and for running random allocation workloads.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import InvalidArgument
from .factory import DEFAULT_MAX_SIZE, create_memory_space
from .memory.space import MALLOC_FAILED, MemorySpace
from .utils.logger import configure_logging

logger = logging.getLogger(__name__)

OPERATIONS = ('malloc', 'free', 'defrag')


def parse_operation(text: str) -> Tuple[str, Optional[int]]:
    """Parse ``malloc:<length>``, ``free:<address>`` or ``defrag``."""
    name, _, argument = text.partition(':')
    name = name.strip().lower()

    if name not in OPERATIONS:
        raise ValueError(f"Unknown operation: {text!r}")

    if name == 'defrag':
        if argument:
            raise ValueError(f"defrag takes no argument: {text!r}")
        return name, None

    try:
        return name, int(argument)
    except ValueError:
        raise ValueError(f"{name} needs an integer argument: {text!r}") from None


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--max-size', type=int, default=DEFAULT_MAX_SIZE,
                        help='Size of the simulated address space')
    parser.add_argument('--output', type=str, help='Output file for results')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')


def _emit(results: Dict[str, Any], output: Optional[str]) -> None:
    if output:
        with open(output, 'w') as f:
            json.dump(results, f, indent=2)
    else:
        print(json.dumps(results, indent=2))


def simulate_command(argv: Optional[Sequence[str]] = None) -> int:
    """CLI command replaying a sequence of allocator operations."""
    parser = argparse.ArgumentParser(prog='memsim simulate',
                                     description='Replay malloc/free/defrag operations')
    _add_common_arguments(parser)
    parser.add_argument('--legacy-free-guard', action='store_true',
                        help='Reject free() while the free list is exactly [(0 , 100)]')
    parser.add_argument('operations', nargs='*', metavar='OP',
                        help='malloc:<length>, free:<address> or defrag')

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        operations = [parse_operation(op) for op in args.operations]
        space = create_memory_space(args.max_size, legacy_free_guard=args.legacy_free_guard)
    except (ValueError, InvalidArgument) as e:
        parser.error(str(e))

    results = run_simulation(space, operations)
    _emit(results, args.output)
    return 1 if results['error'] else 0


def stress_command(argv: Optional[Sequence[str]] = None) -> int:
    """CLI command running a random malloc/free workload."""
    parser = argparse.ArgumentParser(prog='memsim stress',
                                     description='Run a random allocation workload')
    _add_common_arguments(parser)
    parser.add_argument('--operations', type=int, default=1000,
                        help='Number of malloc/free operations')
    parser.add_argument('--max-request', type=int, default=16,
                        help='Largest length requested by malloc')
    parser.add_argument('--free-probability', type=float, default=0.4,
                        help='Chance that a step frees a live block')
    parser.add_argument('--defrag-every', type=int, default=0,
                        help='Run defrag every N operations (0 disables)')
    parser.add_argument('--seed', type=int, default=0, help='Random seed')

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.max_request <= 0:
        parser.error(f"--max-request must be positive: {args.max_request}")

    try:
        space = create_memory_space(args.max_size)
    except InvalidArgument as e:
        parser.error(str(e))

    results = run_stress(
        space,
        args.operations,
        args.max_request,
        args.free_probability,
        args.defrag_every,
        args.seed
    )
    _emit(results, args.output)
    return 0


def run_simulation(space: MemorySpace, operations: List[Tuple[str, Optional[int]]]) -> Dict[str, Any]:
    """Apply ``operations`` in order, stopping at the first hard failure."""
    steps = []
    error = None

    for name, argument in operations:
        step: Dict[str, Any] = {'op': name, 'arg': argument}
        try:
            if name == 'malloc':
                step['result'] = space.malloc(argument)
            elif name == 'free':
                space.free(argument)
            else:
                space.defrag()
        except InvalidArgument as e:
            step['error'] = e.message
            error = e.message
            steps.append(step)
            logger.error("%s(%s) failed: %s", name, argument, e.message)
            break
        steps.append(step)

    return {
        'config': {
            'max_size': space.max_size,
            'legacy_free_guard': space.legacy_free_guard,
        },
        'steps': steps,
        'error': error,
        'state': space.snapshot(),
        'memory_info': space.get_memory_info().to_dict(),
    }


def run_stress(
    space: MemorySpace,
    operations: int,
    max_request: int,
    free_probability: float,
    defrag_every: int,
    seed: int
) -> Dict[str, Any]:
    rng = np.random.default_rng(seed)
    live: List[int] = []
    fragmentation = np.zeros(operations, dtype=np.float64)

    for i in range(operations):
        if live and rng.random() < free_probability:
            address = live.pop(int(rng.integers(len(live))))
            space.free(address)
        else:
            address = space.malloc(int(rng.integers(1, max_request + 1)))
            if address != MALLOC_FAILED:
                live.append(address)

        if defrag_every > 0 and (i + 1) % defrag_every == 0:
            space.defrag()

        fragmentation[i] = space.get_memory_info().fragmentation_ratio

    info = space.get_memory_info()
    attempts = info.allocation_count + info.failed_allocation_count

    return {
        'config': {
            'max_size': space.max_size,
            'operations': operations,
            'max_request': max_request,
            'free_probability': free_probability,
            'defrag_every': defrag_every,
            'seed': seed,
        },
        'results': {
            'malloc_success_rate': info.allocation_count / attempts if attempts else 0.0,
            'fragmentation': {
                'mean': float(fragmentation.mean()) if operations else 0.0,
                'max': float(fragmentation.max()) if operations else 0.0,
                'final': info.fragmentation_ratio,
            },
            'live_blocks': len(live),
            'consistent': space.is_consistent(),
        },
        'memory_info': info.to_dict(),
    }


COMMANDS = {
    'simulate': simulate_command,
    'stress': stress_command,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv:
        print("Usage: memsim <command> [options]")
        print(f"Commands: {', '.join(COMMANDS)}")
        return 1

    command = COMMANDS.get(argv[0])
    if command is None:
        print(f"Unknown command: {argv[0]}")
        return 1

    return command(argv[1:])


if __name__ == '__main__':
    sys.exit(main())
