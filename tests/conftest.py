"""
Pytest configuration for boundring tests.

Keeps ring logging quiet unless a test raises the level itself, and
provides deterministic hash functions so ring layouts are reproducible.
"""

import pytest

from boundring.logging import LoggingConfig
from boundring.ring import default_hash_func


# Ring layout for hosts A, B, C with replica_num=3:
#   100:A 200:B 300:C 400:A 500:B 600:C 700:A 800:B 900:C
FIXED_POSITIONS: dict[bytes, int] = {
    b"A0": 100,
    b"A1": 400,
    b"A2": 700,
    b"B0": 200,
    b"B1": 500,
    b"B2": 800,
    b"C0": 300,
    b"C1": 600,
    b"C2": 900,
    b"foo": 150,
    b"bar": 450,
    b"wrap": 950,
    b"late": 850,
    b"exact": 500,
}


def fixed_hash(data: bytes) -> int:
    position = FIXED_POSITIONS.get(data)
    if position is None:
        return default_hash_func(data)

    return position


@pytest.fixture(autouse=True)
def configure_log_level():
    config = LoggingConfig()
    config.update(log_level="error", log_output="stderr")
    config.reset_directory()
    yield
    config.update(log_level="error", log_output="stderr")
    config.reset_directory()


@pytest.fixture
def fixed_hash_func():
    return fixed_hash


@pytest.fixture
def temp_log_directory(tmp_path) -> str:
    return str(tmp_path)
