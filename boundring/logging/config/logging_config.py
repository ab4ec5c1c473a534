import threading
from typing import List, Literal

from boundring.logging.models import LogLevel, LogLevelName
from .log_level_map import LogLevelMap
from .stream_type import StreamType


LogOutput = Literal['stdout', 'stderr']


# Ring calls arrive on arbitrary worker threads, so logging settings are
# process-wide rather than per-context.
_state_lock = threading.Lock()
_global_log_level: LogLevel = LogLevel.INFO
_global_disabled_loggers: List[str] = []
_global_log_output_type: StreamType = StreamType.STDERR
_global_logging_directory: str | None = None
_global_level_map = LogLevelMap()


class LoggingConfig:
    def __init__(self) -> None:
        self._level_map = _global_level_map

    def update(
        self,
        log_directory: str | None = None,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
    ):
        global _global_log_level
        global _global_log_output_type
        global _global_logging_directory

        with _state_lock:
            if log_directory:
                _global_logging_directory = log_directory

            if log_level:
                _global_log_level = LogLevel.to_level(log_level)

            if log_output:
                _global_log_output_type = (
                    StreamType.STDOUT if log_output == 'stdout' else StreamType.STDERR
                )

    def reset_directory(self):
        global _global_logging_directory

        with _state_lock:
            _global_logging_directory = None

    def disable(self, logger_name: str):
        with _state_lock:
            if logger_name not in _global_disabled_loggers:
                _global_disabled_loggers.append(logger_name)

    def enable(self, logger_name: str):
        with _state_lock:
            if logger_name in _global_disabled_loggers:
                _global_disabled_loggers.remove(logger_name)

    def enabled(self, logger_name: str, log_level: LogLevel) -> bool:
        return logger_name not in _global_disabled_loggers and (
            self._level_map[log_level] >= self._level_map[_global_log_level]
        )

    @property
    def level(self):
        return _global_log_level

    @property
    def output(self):
        return _global_log_output_type

    @property
    def directory(self):
        return _global_logging_directory
