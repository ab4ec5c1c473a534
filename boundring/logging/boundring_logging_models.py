from .models import Entry, LogLevel


class RingTrace(Entry, kw_only=True):
    key: str
    address: str | None = None
    position: int | None = None
    level: LogLevel = LogLevel.TRACE

class RingDebug(Entry, kw_only=True):
    address: str
    position: int
    replica: int
    level: LogLevel = LogLevel.DEBUG

class RingInfo(Entry, kw_only=True):
    address: str
    replica_num: int
    host_count: int
    level: LogLevel = LogLevel.INFO

class RingWarning(Entry, kw_only=True):
    address: str | None = None
    host_count: int
    level: LogLevel = LogLevel.WARN

class RingError(Entry, kw_only=True):
    address: str
    position: int
    owner: str
    level: LogLevel = LogLevel.ERROR
