"""
Consistent hash ring with bounded loads.

Routes string keys to registered backend hosts:
- Deterministic mapping: the same key maps to the same host while the ring
  is unchanged
- Minimal redistribution: adding/removing a host only remaps the keys that
  land on its virtual nodes
- Bounded loads: get_host_by_key_least() skips hosts whose outstanding load
  would exceed (1 + 0.25) times the average, probing clockwise

Usage:
    ring = HashRing(replica_num=10)
    ring.register_host("10.0.0.1:6379")
    ring.register_host("10.0.0.2:6379")

    host = ring.get_host_by_key_least("user:42")
    ring.inc_load(host)
    try:
        forward(host, "user:42")
    finally:
        ring.dec_load(host)
"""

from __future__ import annotations

import bisect
import threading
from typing import Any, Iterator

from boundring.env import Env
from boundring.errors import (
    HostAlreadyExistsError,
    HostNotFoundError,
    VirtualNodeCollisionError,
)
from boundring.logging import Logger, LoggingConfig
from boundring.logging.boundring_logging_models import (
    RingDebug,
    RingError,
    RingInfo,
    RingTrace,
    RingWarning,
)

from .capacity import LOAD_BOUND_FACTOR, has_headroom, max_load
from .hashing import HashFunc, default_hash_func, get_hash_func, virtual_node_key
from .host import Host
from .read_write_lock import ReadWriteLock


DEFAULT_REPLICA_NUM = 10


class HashRing:
    """
    A consistent hash ring of backend hosts with live load accounting.

    Each host is placed on the ring at `replica_num` virtual-node positions.
    Lookups binary-search the sorted positions for the first one at or after
    the key's hash, wrapping to the start of the ring.

    Thread-safe: registration and unregistration hold the exclusive side of
    a reader/writer lock; lookups and snapshots share the read side; load
    updates share the read side for the host lookup and serialize only on a
    separate counter lock.

    Attributes:
        replica_num: Virtual nodes per host, fixed at construction.
        total_load: Sum of every host's outstanding load.
    """

    __slots__ = (
        "_replica_num",
        "_hash_func",
        "_hosts",
        "_position_to_host",
        "_sorted_positions",
        "_total_load",
        "_topology_lock",
        "_load_lock",
        "_logger",
    )

    def __init__(
        self,
        replica_num: int = DEFAULT_REPLICA_NUM,
        hash_func: HashFunc | None = None,
        logger: Logger | None = None,
    ) -> None:
        """
        Initialize an empty ring.

        Args:
            replica_num: Virtual nodes per host. Values <= 0 fall back to
                DEFAULT_REPLICA_NUM.
            hash_func: Maps key bytes to an unsigned 64-bit position.
                Defaults to SHA-512 truncated to its first 8 bytes.
            logger: Logger to emit ring events through.
        """
        if replica_num <= 0:
            replica_num = DEFAULT_REPLICA_NUM

        if hash_func is None:
            hash_func = default_hash_func

        if logger is None:
            logger = Logger()

        self._replica_num = replica_num
        self._hash_func = hash_func

        self._hosts: dict[str, Host] = {}  # address -> host
        self._position_to_host: dict[int, str] = {}  # ring position -> address
        self._sorted_positions: list[int] = []  # ascending, for binary search
        self._total_load = 0

        self._topology_lock = ReadWriteLock()
        self._load_lock = threading.Lock()
        self._logger = logger

    @classmethod
    def from_env(
        cls,
        env: Env,
        logger: Logger | None = None,
    ) -> HashRing:
        """
        Build a ring from environment configuration.

        Applies the logging settings process-wide before constructing the
        ring, so registration events already honour them.
        """
        LoggingConfig().update(
            log_directory=env.BOUNDRING_LOGS_DIRECTORY,
            log_level=env.BOUNDRING_LOG_LEVEL,
            log_output=env.BOUNDRING_LOG_OUTPUT,
        )

        return cls(
            replica_num=env.BOUNDRING_REPLICA_NUM,
            hash_func=get_hash_func(env.BOUNDRING_HASH_ALGORITHM),
            logger=logger,
        )

    # =========================================================================
    # Host Management
    # =========================================================================

    def register_host(self, address: str) -> None:
        """
        Add a host to the ring.

        Places `replica_num` virtual nodes at hash(address + replica index).
        The registration is all-or-nothing: on any error the ring is left
        unchanged.

        Args:
            address: Unique host address.

        Raises:
            HostAlreadyExistsError: If the address is already registered.
            VirtualNodeCollisionError: If a virtual node lands on a position
                that is already occupied.
        """
        with self._topology_lock.write():
            if address in self._hosts:
                self._logger.log(
                    RingWarning(
                        message=f"Rejected duplicate registration of host {address}",
                        address=address,
                        host_count=len(self._hosts),
                    ),
                    name="ring",
                )
                raise HostAlreadyExistsError(address)

            positions = self._virtual_node_positions(address)

            claimed: dict[int, str] = {}
            for position in positions:
                owner = self._position_to_host.get(position, claimed.get(position))
                if owner is not None:
                    self._logger.log(
                        RingError(
                            message=f"Virtual node of host {address} collides with host {owner}",
                            address=address,
                            position=position,
                            owner=owner,
                        ),
                        name="ring",
                    )
                    raise VirtualNodeCollisionError(address, position, owner)

                claimed[position] = address

            self._hosts[address] = Host(
                address=address,
                positions=tuple(positions),
            )

            for replica, position in enumerate(positions):
                self._position_to_host[position] = address
                self._sorted_positions.append(position)

                self._logger.log(
                    RingDebug(
                        message=f"Added virtual node {position} for host {address}",
                        address=address,
                        position=position,
                        replica=replica,
                    ),
                    name="ring",
                )

            self._sorted_positions.sort()

            self._logger.log(
                RingInfo(
                    message=f"Registered host {address}",
                    address=address,
                    replica_num=self._replica_num,
                    host_count=len(self._hosts),
                ),
                name="ring",
            )

    def unregister_host(self, address: str) -> None:
        """
        Remove a host and all of its virtual nodes from the ring.

        Any load still recorded against the host is dropped from the
        ring's total.

        Args:
            address: Address of a registered host.

        Raises:
            HostNotFoundError: If the address is not registered.
        """
        with self._topology_lock.write():
            host = self._hosts.get(address)
            if host is None:
                self._logger.log(
                    RingWarning(
                        message=f"Cannot unregister unknown host {address}",
                        address=address,
                        host_count=len(self._hosts),
                    ),
                    name="ring",
                )
                raise HostNotFoundError(address)

            del self._hosts[address]

            for replica, position in enumerate(host.positions):
                del self._position_to_host[position]
                self._remove_position(position)

                self._logger.log(
                    RingDebug(
                        message=f"Removed virtual node {position} for host {address}",
                        address=address,
                        position=position,
                        replica=replica,
                    ),
                    name="ring",
                )

            with self._load_lock:
                self._total_load -= host.load_bound

            self._logger.log(
                RingInfo(
                    message=f"Unregistered host {address}",
                    address=address,
                    replica_num=self._replica_num,
                    host_count=len(self._hosts),
                ),
                name="ring",
            )

    # =========================================================================
    # Lookup Operations
    # =========================================================================

    def get_host_by_key(self, key: str) -> str:
        """
        Get the host responsible for a key.

        Args:
            key: The key to route.

        Returns:
            The address owning the first ring position at or after the
            key's hash.

        Raises:
            HostNotFoundError: If the ring is empty.
        """
        with self._topology_lock.read():
            self._ensure_not_empty()

            index = self._search_index(key)
            position = self._sorted_positions[index]
            address = self._position_to_host[position]

            self._logger.log(
                RingTrace(
                    message=f"Resolved key {key} to host {address}",
                    key=key,
                    address=address,
                    position=position,
                ),
                name="ring",
            )

            return address

    def get_host_by_key_least(self, key: str) -> str:
        """
        Get a host for a key without exceeding the bounded-load ceiling.

        Starts at the key's natural ring position and walks clockwise until
        it finds a host with headroom. The least loaded host always has
        headroom, so the walk terminates.

        Args:
            key: The key to route.

        Returns:
            The address of the first host on the walk with headroom.

        Raises:
            HostNotFoundError: If the ring is empty.
        """
        with self._topology_lock.read():
            self._ensure_not_empty()

            ring_size = len(self._sorted_positions)
            index = self._search_index(key)

            while True:
                position = self._sorted_positions[index]
                address = self._position_to_host[position]

                if self._check_load_capacity(address):
                    self._logger.log(
                        RingTrace(
                            message=f"Resolved key {key} to host {address} within load bound",
                            key=key,
                            address=address,
                            position=position,
                        ),
                        name="ring",
                    )
                    return address

                self._logger.log(
                    RingTrace(
                        message=f"Host {address} is at capacity, probing next position for key {key}",
                        key=key,
                        address=address,
                        position=position,
                    ),
                    name="ring",
                )

                index = (index + 1) % ring_size

    def max_load(self) -> int:
        """
        Get the current per-host load ceiling.

        Raises:
            HostNotFoundError: If the ring is empty.
        """
        with self._topology_lock.read():
            self._ensure_not_empty()
            return self._max_load_unlocked()

    # =========================================================================
    # Load Accounting
    # =========================================================================

    def inc_load(self, address: str) -> None:
        """
        Record one more in-flight request against a host.

        Raises:
            HostNotFoundError: If the address is not registered.
        """
        self._add_load(address, 1)

    def dec_load(self, address: str) -> None:
        """
        Record one finished request against a host.

        Must be paired with an earlier inc_load() for the same host.

        Raises:
            HostNotFoundError: If the address is not registered.
        """
        self._add_load(address, -1)

    def get_loads(self) -> dict[str, int]:
        """Snapshot every registered host's current load."""
        with self._topology_lock.read():
            with self._load_lock:
                return {
                    address: host.load_bound
                    for address, host in self._hosts.items()
                }

    # =========================================================================
    # Statistics
    # =========================================================================

    @property
    def replica_num(self) -> int:
        return self._replica_num

    @property
    def total_load(self) -> int:
        with self._load_lock:
            return self._total_load

    def hosts(self) -> list[str]:
        """Get all registered host addresses, in registration order."""
        with self._topology_lock.read():
            return list(self._hosts)

    def positions(self) -> list[int]:
        """Get a copy of the sorted virtual-node positions."""
        with self._topology_lock.read():
            return list(self._sorted_positions)

    def key_distribution(self, sample_keys: list[str]) -> dict[str, int]:
        """
        Count how many sample keys each host would receive.

        Useful for testing and debugging ring balance.
        """
        with self._topology_lock.read():
            distribution: dict[str, int] = {address: 0 for address in self._hosts}

            if not self._sorted_positions:
                return distribution

            for key in sample_keys:
                index = self._search_index(key)
                address = self._position_to_host[self._sorted_positions[index]]
                distribution[address] += 1

            return distribution

    def get_ring_info(self) -> dict[str, Any]:
        """Get a summary of the ring's topology and load."""
        with self._topology_lock.read():
            with self._load_lock:
                loads = {
                    address: host.load_bound
                    for address, host in self._hosts.items()
                }
                total_load = self._total_load

            return {
                "host_count": len(self._hosts),
                "virtual_node_count": len(self._sorted_positions),
                "replicas_per_host": self._replica_num,
                "load_bound_factor": LOAD_BOUND_FACTOR,
                "total_load": total_load,
                "max_load": (
                    max_load(total_load, len(self._hosts)) if self._hosts else None
                ),
                "loads": loads,
            }

    def __len__(self) -> int:
        """Return the number of registered hosts."""
        with self._topology_lock.read():
            return len(self._hosts)

    def __contains__(self, address: str) -> bool:
        """Check if a host is registered."""
        with self._topology_lock.read():
            return address in self._hosts

    def __iter__(self) -> Iterator[str]:
        """Iterate over a snapshot of registered host addresses."""
        return iter(self.hosts())

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _hash(self, key: str) -> int:
        return self._hash_func(key.encode("utf-8"))

    def _virtual_node_positions(self, address: str) -> list[int]:
        return [
            self._hash(virtual_node_key(address, replica))
            for replica in range(self._replica_num)
        ]

    def _search_index(self, key: str) -> int:
        """
        Find the index of the first ring position >= hash(key).

        Wraps to 0 when the hash is past the last position. Caller must
        hold the read lock and have checked the ring is not empty.
        """
        index = bisect.bisect_left(self._sorted_positions, self._hash(key))

        if index >= len(self._sorted_positions):
            index = 0

        return index

    def _remove_position(self, position: int) -> None:
        index = bisect.bisect_left(self._sorted_positions, position)

        if (
            index < len(self._sorted_positions)
            and self._sorted_positions[index] == position
        ):
            del self._sorted_positions[index]

    def _ensure_not_empty(self) -> None:
        if not self._hosts:
            self._logger.log(
                RingWarning(
                    message="Lookup against empty ring",
                    host_count=0,
                ),
                name="ring",
            )
            raise HostNotFoundError()

    def _check_load_capacity(self, address: str) -> bool:
        host = self._hosts.get(address)
        if host is None:
            raise HostNotFoundError(address)

        with self._load_lock:
            return has_headroom(
                host.load_bound,
                self._total_load,
                len(self._hosts),
            )

    def _max_load_unlocked(self) -> int:
        with self._load_lock:
            return max_load(self._total_load, len(self._hosts))

    def _add_load(self, address: str, delta: int) -> None:
        with self._topology_lock.read():
            host = self._hosts.get(address)
            if host is None:
                raise HostNotFoundError(address)

            with self._load_lock:
                host.load_bound += delta
                self._total_load += delta
