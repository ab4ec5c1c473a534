from __future__ import annotations
from pydantic import BaseModel, StrictInt, StrictStr
from typing import Callable, Dict, Literal, Union

PrimaryType = Union[str, int, float, bytes, bool]

HashAlgorithm = Literal["sha512", "sha256", "blake2b", "md5"]


class Env(BaseModel):
    BOUNDRING_REPLICA_NUM: StrictInt = 10
    BOUNDRING_HASH_ALGORITHM: HashAlgorithm = "sha512"
    BOUNDRING_LOG_LEVEL: StrictStr = "info"
    BOUNDRING_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    BOUNDRING_LOGS_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "BOUNDRING_REPLICA_NUM": int,
            "BOUNDRING_HASH_ALGORITHM": str,
            "BOUNDRING_LOG_LEVEL": str,
            "BOUNDRING_LOG_OUTPUT": str,
            "BOUNDRING_LOGS_DIRECTORY": str,
        }
