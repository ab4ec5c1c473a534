"""
Hash ring errors.

Every error raised by the ring derives from HashRingError so transport
layers can map the whole family to a single failure response, while still
being able to tell a duplicate registration apart from a missing host.
"""


class HashRingError(Exception):
    """Base exception for hash ring operations."""

    pass


class HostAlreadyExistsError(HashRingError):
    """
    Raised when registering an address that is already on the ring.

    The ring is left exactly as it was before the failed call.
    """

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"host already exists: {address}")


class HostNotFoundError(HashRingError):
    """
    Raised when an operation targets an unknown host, or when a lookup
    is made against an empty ring (address is None in that case).
    """

    def __init__(self, address: str | None = None) -> None:
        self.address = address

        if address is None:
            super().__init__("host not found: ring has no registered hosts")

        else:
            super().__init__(f"host not found: {address}")


class VirtualNodeCollisionError(HashRingError):
    """
    Raised when one of a new host's virtual nodes hashes onto a ring
    position that is already occupied.

    Registration is rejected as a whole and no positions are inserted.
    """

    def __init__(
        self,
        address: str,
        position: int,
        owner: str,
    ) -> None:
        self.address = address
        self.position = position
        self.owner = owner
        super().__init__(
            f"virtual node collision: {address} hashes to position {position} "
            f"already owned by {owner}"
        )
