import asyncio
import io
import os
import pathlib
import sys
from collections import defaultdict
from typing import Callable, Dict, TextIO, TypeVar

import msgspec

from validation_harness.logging.config.logging_config import LoggingConfig
from validation_harness.logging.config.stream_type import StreamType
from validation_harness.logging.models import Entry, Log, LogLevel

T = TypeVar("T", bound=Entry)

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {logger} - {filename}:{function_name}.{line_number} - {message}"


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

        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._files: Dict[str, io.BufferedWriter] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._cwd: str | None = None

        self._config = LoggingConfig()
        self._initialized: bool = False

    @property
    def name(self):
        return self._name

    def configure(
        self,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ):
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

    async def initialize(self):
        async with self._init_lock:
            self._loop = asyncio.get_running_loop()

            if self._initialized:
                return

            if self._cwd is None:
                self._cwd = await self._loop.run_in_executor(
                    None,
                    os.getcwd,
                )

            self._initialized = True

    async def log(
        self,
        entry: T,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        filename: str | None = None
        directory: str | None = None

        if path:
            filename, directory = self._split_path(path)

        if template is None:
            template = self._default_template

        if filename is None:
            filename = self._default_logfile

        if directory is None:
            directory = self._default_log_directory

        if filename or directory or self._config.directory:
            await self._log_to_file(
                entry,
                filename=filename,
                directory=directory,
                filter=filter,
            )

        else:
            await self._log(
                entry,
                template=template,
                filter=filter,
            )

    async def _log(
        self,
        entry: T,
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if self._initialized is False:
            await self.initialize()

        if template is None:
            template = DEFAULT_TEMPLATE

        log = self._to_log(entry)
        output = self._select_output(entry)

        line = entry.to_template(
            template,
            context={
                "logger": self._name,
                "filename": log.filename,
                "function_name": log.function_name,
                "line_number": log.line_number,
                "thread_id": log.thread_id,
                "timestamp": log.timestamp,
            },
        )

        output.write(line + "\n")
        output.flush()

    async def _log_to_file(
        self,
        entry: T,
        filename: str | None = None,
        directory: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if self._initialized is False:
            await self.initialize()

        if filename is None:
            filename = f"{self._name}.log.json"

        logfile_path = self._to_logfile_path(
            filename,
            directory=directory,
        )

        log = self._to_log(entry)

        file_lock = self._file_locks[logfile_path]
        async with file_lock:
            await self._loop.run_in_executor(
                None,
                self._write_to_file,
                log,
                logfile_path,
            )

    def _write_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        logfile = self._files.get(logfile_path)
        if logfile is None or logfile.closed:
            pathlib.Path(logfile_path).parent.mkdir(parents=True, exist_ok=True)
            logfile = open(logfile_path, "ab")
            self._files[logfile_path] = logfile

        logfile.write(msgspec.json.encode(log) + b"\n")
        logfile.flush()

    def _to_log(self, entry: T) -> Log[T]:
        filename, line_number, function_name = self._find_caller()

        return Log(
            entry=entry,
            logger=self._name,
            filename=filename,
            function_name=function_name,
            line_number=line_number,
        )

    def _select_output(self, entry: Entry) -> TextIO:
        if entry.level in (LogLevel.ERROR, LogLevel.CRITICAL, LogLevel.FATAL):
            return sys.stderr

        if self._config.output == StreamType.STDERR:
            return sys.stderr

        return sys.stdout

    def _split_path(self, path: str):
        logfile_path = pathlib.Path(path)
        is_logfile = len(logfile_path.suffix) > 0

        filename = logfile_path.name if is_logfile else None
        directory = (
            str(logfile_path.parent.absolute())
            if is_logfile
            else str(logfile_path.absolute())
        )

        return filename, directory

    def _to_logfile_path(
        self,
        filename: str,
        directory: str | None = None,
    ):
        filename_path = pathlib.Path(filename)

        if filename_path.suffix != ".json":
            raise ValueError(f"Log file {filename} must use a .json suffix")

        if self._config.directory:
            directory = self._config.directory

        elif directory is None:
            directory = self._cwd

        return os.path.join(directory, filename_path)

    def _find_caller(self):
        """First frame outside this module, reported as (file, line, function)."""
        frame = sys._getframe(0)
        while frame.f_back is not None and frame.f_code.co_filename == __file__:
            frame = frame.f_back

        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )

    async def close(self):
        for logfile_path in list(self._files):
            async with self._file_locks[logfile_path]:
                logfile = self._files.pop(logfile_path)
                if logfile.closed is False:
                    await self._loop.run_in_executor(None, logfile.close)

        self._initialized = False
