"""
Hash ring for routing keys to backend hosts.

Provides consistent hashing with virtual nodes for stable key-to-host
mapping, plus bounded-load selection so no host is driven far above the
average load.
"""

from .capacity import LOAD_BOUND_FACTOR, has_headroom, max_load
from .hash_ring import DEFAULT_REPLICA_NUM, HashRing
from .hashing import (
    HASH_ALGORITHMS,
    HashFunc,
    default_hash_func,
    get_hash_func,
    virtual_node_key,
)
from .host import Host
from .read_write_lock import ReadWriteLock

__all__ = [
    "DEFAULT_REPLICA_NUM",
    "HASH_ALGORITHMS",
    "HashFunc",
    "HashRing",
    "Host",
    "LOAD_BOUND_FACTOR",
    "ReadWriteLock",
    "default_hash_func",
    "get_hash_func",
    "has_headroom",
    "max_load",
    "virtual_node_key",
]
