import datetime
import io
import os
import pathlib
import sys
import threading
from typing import (
    Callable,
    Dict,
    TypeVar,
)

import msgspec

from boundring.logging.config.logging_config import LoggingConfig
from boundring.logging.config.stream_type import StreamType
from boundring.logging.models import Entry, Log

T = TypeVar('T', bound=Entry)


DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"
DEFAULT_LOGFILE = "boundring.json"


class LoggerStream:
    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ) -> None:
        if name is None:
            name = "default"

        self._name = name
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._config = LoggingConfig()
        self._files: Dict[str, io.BufferedWriter] = {}
        self._files_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._closed = False

    @property
    def name(self):
        return self._name

    @property
    def closed(self):
        return self._closed

    def log(
        self,
        entry: T | Log[T],
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if self._closed:
            return

        filename: str | None = None
        directory: str | None = None

        if path:
            logfile_path = pathlib.Path(path)
            is_logfile = len(logfile_path.suffix) > 0

            filename = logfile_path.name if is_logfile else None
            directory = str(logfile_path.parent.absolute()) if is_logfile else str(logfile_path.absolute())

        if template is None:
            template = self._default_template

        if filename is None:
            filename = self._default_logfile

        if directory is None:
            directory = self._default_log_directory

        if directory is None:
            directory = self._config.directory

        if filename or directory:
            self._log_to_file(
                entry,
                filename=filename,
                directory=directory,
                filter=filter,
            )

        else:
            self._log(
                entry,
                template=template,
                filter=filter,
            )

    def _log(
        self,
        entry_or_log: T | Log[T],
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        entry = self._unwrap(entry_or_log)

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if template is None:
            template = DEFAULT_TEMPLATE

        log = self._to_log(entry_or_log)
        stream = sys.stdout if self._config.output == StreamType.STDOUT else sys.stderr

        try:
            line = entry.to_template(
                template,
                context={
                    "filename": log.filename,
                    "function_name": log.function_name,
                    "line_number": log.line_number,
                    "thread_id": log.thread_id,
                    "timestamp": log.timestamp,
                },
            )

            with self._write_lock:
                stream.write(line + "\n")
                stream.flush()

        except Exception as err:
            self._write_error(log, err)

    def _log_to_file(
        self,
        entry_or_log: T | Log[T],
        filename: str | None = None,
        directory: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        entry = self._unwrap(entry_or_log)

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if filename is None:
            filename = DEFAULT_LOGFILE

        if directory is None:
            directory = os.path.join(os.getcwd(), "logs")

        log = self._to_log(entry_or_log)

        try:
            logfile_path = self._to_logfile_path(filename, directory)
            logfile = self._open_file(logfile_path)

            with self._write_lock:
                logfile.write(msgspec.json.encode(log) + b"\n")
                logfile.flush()

        except Exception as err:
            self._write_error(log, err)

    def _open_file(self, logfile_path: str):
        with self._files_lock:
            logfile = self._files.get(logfile_path)
            if logfile is None or logfile.closed:
                pathlib.Path(logfile_path).parent.mkdir(parents=True, exist_ok=True)
                logfile = open(logfile_path, "ab")
                self._files[logfile_path] = logfile

            return logfile

    def _to_logfile_path(
        self,
        filename: str,
        directory: str,
    ):
        filename_path = pathlib.Path(filename)

        if filename_path.suffix != ".json":
            raise ValueError(
                f"log file {filename} must use the .json extension"
            )

        return os.path.join(directory, filename)

    def _to_log(self, entry_or_log: T | Log[T]) -> Log[T]:
        if isinstance(entry_or_log, Log):
            return entry_or_log

        log_file, line_number, function_name = self._find_caller()

        return Log(
            entry=entry_or_log,
            logger_name=self._name,
            filename=log_file,
            function_name=function_name,
            line_number=line_number,
            thread_id=threading.get_native_id(),
            timestamp=datetime.datetime.now(datetime.UTC).isoformat(),
        )

    def _unwrap(self, entry_or_log: T | Log[T]) -> T:
        if isinstance(entry_or_log, Log):
            return entry_or_log.entry

        return entry_or_log

    def _write_error(self, log: Log[T], err: Exception):
        if sys.stderr.closed:
            return

        sys.stderr.write(
            log.entry.to_template(
                ERROR_TEMPLATE,
                context={
                    "filename": log.filename,
                    "function_name": log.function_name,
                    "line_number": log.line_number,
                    "error": str(err),
                    "thread_id": log.thread_id,
                    "timestamp": log.timestamp,
                },
            ) + "\n"
        )

    def _find_caller(self):
        """
        Find the stack frame of the caller so that we can note the source
        file name, line number and function name.
        """
        frame = sys._getframe(4)
        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )

    def close(self):
        with self._files_lock:
            for logfile in self._files.values():
                if logfile.closed is False:
                    logfile.close()

            self._files.clear()

        self._closed = True
