from .ring import (
    HashRingError,
    HostAlreadyExistsError,
    HostNotFoundError,
    VirtualNodeCollisionError,
)

__all__ = [
    "HashRingError",
    "HostAlreadyExistsError",
    "HostNotFoundError",
    "VirtualNodeCollisionError",
]
