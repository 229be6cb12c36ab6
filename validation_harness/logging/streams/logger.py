import pathlib
from typing import Dict

from .logger_context import LoggerContext


class Logger:
    def __init__(self) -> None:
        self._contexts: Dict[str, LoggerContext] = {}

    def context(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        nested: bool = False,
    ):
        if name is None:
            name = 'default'

        filename, directory = self._split_path(path)

        if self._contexts.get(name) is None:
            self._contexts[name] = LoggerContext(
                name=name,
                template=template,
                filename=filename,
                directory=directory,
                nested=nested,
            )

        else:
            context = self._contexts[name]
            context.template = template if template else context.template
            context.filename = filename if filename else context.filename
            context.directory = directory if directory else context.directory
            context.nested = nested
            context.stream.configure(
                template=context.template,
                filename=context.filename,
                directory=context.directory,
            )

        return self._contexts[name]

    def _split_path(self, path: str | None):
        if path is None:
            return None, None

        logfile_path = pathlib.Path(path)
        is_logfile = len(logfile_path.suffix) > 0

        filename = logfile_path.name if is_logfile else None
        directory = (
            str(logfile_path.parent.absolute())
            if is_logfile
            else str(logfile_path.absolute())
        )

        return filename, directory

    async def close(self):
        for context in self._contexts.values():
            await context.stream.close()
