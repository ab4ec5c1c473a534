from __future__ import annotations

import datetime
import pathlib
import sys
import threading
from typing import (
    Callable,
    Dict,
    TypeVar,
)

from boundring.logging.models import Entry, Log

from .logger_stream import LoggerStream

T = TypeVar('T', bound=Entry)


class Logger:
    def __init__(self) -> None:
        self._streams: Dict[str, LoggerStream] = {}
        self._streams_lock = threading.Lock()

    def __getitem__(self, name: str):
        with self._streams_lock:
            if self._streams.get(name) is None:
                self._streams[name] = LoggerStream(name=name)

            return self._streams[name]

    def configure(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
    ):
        if name is None:
            name = 'default'

        filename: str | None = None
        directory: str | None = None

        if path:
            logfile_path = pathlib.Path(path)
            is_logfile = len(logfile_path.suffix) > 0

            filename = logfile_path.name if is_logfile else None
            directory = str(logfile_path.parent.absolute()) if is_logfile else str(logfile_path.absolute())

        with self._streams_lock:
            if (existing := self._streams.get(name)) is not None:
                existing.close()

            self._streams[name] = LoggerStream(
                name=name,
                template=template,
                filename=filename,
                directory=directory,
            )

            return self._streams[name]

    def log(
        self,
        entry: T,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if name is None:
            name = 'default'

        stream = self[name]

        if stream._config.enabled(name, entry.level) is False:
            return

        frame = sys._getframe(1)
        code = frame.f_code

        stream.log(
            Log(
                entry=entry,
                logger_name=name,
                filename=code.co_filename,
                function_name=code.co_name,
                line_number=frame.f_lineno,
                thread_id=threading.get_native_id(),
                timestamp=datetime.datetime.now(datetime.UTC).isoformat(),
            ),
            template=template,
            path=path,
            filter=filter,
        )

    def close(self):
        with self._streams_lock:
            for stream in self._streams.values():
                stream.close()

            self._streams.clear()
