from dataclasses import dataclass


@dataclass(slots=True)
class Host:
    """
    A backend registered on the ring.

    Attributes:
        address: Unique host address (e.g. "10.0.0.1:6379").
        positions: Ring positions of this host's virtual nodes,
            in replica order.
        load_bound: Requests currently in flight to this host.
    """

    address: str
    positions: tuple[int, ...]
    load_bound: int = 0
