from .env import Env as Env, load_env as load_env
from .errors import (
    HashRingError as HashRingError,
    HostAlreadyExistsError as HostAlreadyExistsError,
    HostNotFoundError as HostNotFoundError,
    VirtualNodeCollisionError as VirtualNodeCollisionError,
)
from .ring import HashRing as HashRing
