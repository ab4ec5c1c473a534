"""
Hash functions for placing keys and virtual nodes on the ring.

A hash function is any callable taking the raw key bytes and returning an
unsigned 64-bit integer. The built-in algorithms all take a digest of the
key and read its first 8 bytes as a little-endian integer.
"""

import hashlib
from typing import Callable, Literal


HashFunc = Callable[[bytes], int]

HashAlgorithmName = Literal["sha512", "sha256", "blake2b", "md5"]

MAX_POSITION = 2**64 - 1


def _truncate(digest: bytes) -> int:
    return int.from_bytes(digest[:8], byteorder="little")


def sha512_hash(data: bytes) -> int:
    return _truncate(hashlib.sha512(data).digest())


def sha256_hash(data: bytes) -> int:
    return _truncate(hashlib.sha256(data).digest())


def blake2b_hash(data: bytes) -> int:
    return _truncate(hashlib.blake2b(data, digest_size=8).digest())


def md5_hash(data: bytes) -> int:
    return _truncate(hashlib.md5(data, usedforsecurity=False).digest())


default_hash_func: HashFunc = sha512_hash


HASH_ALGORITHMS: dict[str, HashFunc] = {
    "sha512": sha512_hash,
    "sha256": sha256_hash,
    "blake2b": blake2b_hash,
    "md5": md5_hash,
}


def get_hash_func(algorithm: HashAlgorithmName | str) -> HashFunc:
    """
    Look up a built-in hash function by name.

    Raises:
        ValueError: If the algorithm is not one of HASH_ALGORITHMS.
    """
    hash_func = HASH_ALGORITHMS.get(algorithm.lower())
    if hash_func is None:
        raise ValueError(
            f"unknown hash algorithm {algorithm!r}, "
            f"expected one of {sorted(HASH_ALGORITHMS)}"
        )

    return hash_func


def virtual_node_key(address: str, replica: int) -> str:
    # Address followed directly by the decimal replica index.
    return f"{address}{replica}"
