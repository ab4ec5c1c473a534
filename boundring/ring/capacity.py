"""
Bounded-load capacity ceiling.

Implements the per-host ceiling from "consistent hashing with bounded
loads": a host may carry at most (1 + load_bound_factor) times the average
load, where the average counts the request about to be placed.

    ceiling = ceil(((total_load + 1) / host_count) * (1 + load_bound_factor))

The average is computed as an exact fraction so the ceiling never picks up
floating point error (e.g. 2.4 * 1.25 rounding up to 4).
"""

import math
from fractions import Fraction


LOAD_BOUND_FACTOR = 0.25


def max_load(
    total_load: int,
    host_count: int,
    load_bound_factor: float = LOAD_BOUND_FACTOR,
) -> int:
    """
    Compute the current per-host load ceiling.

    Args:
        total_load: Sum of all hosts' outstanding load.
        host_count: Number of registered hosts. Must be positive.
        load_bound_factor: Slack above the average load a host may absorb.

    Returns:
        The maximum load a single host may reach, always at least 1.

    Raises:
        ValueError: If host_count is not positive.
    """
    if host_count <= 0:
        raise ValueError("host_count must be > 0")

    average = Fraction(total_load + 1, host_count)

    # Only reachable when unpaired decrements drove total_load negative.
    if average <= 0:
        average = Fraction(1)

    return math.ceil(average * (1 + Fraction(load_bound_factor)))


def has_headroom(
    load_bound: int,
    total_load: int,
    host_count: int,
    load_bound_factor: float = LOAD_BOUND_FACTOR,
) -> bool:
    """Check whether a host can take one more unit of load."""
    return load_bound + 1 <= max_load(
        total_load,
        host_count,
        load_bound_factor=load_bound_factor,
    )
