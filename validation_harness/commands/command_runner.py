import asyncio
import pathlib
import time
from typing import Callable

from validation_harness.exceptions import CommandFailed
from validation_harness.logging import Logger
from validation_harness.logging.harness_logging_models import (
    CommandDebug,
    CommandError,
    CommandOutput,
)

from .models import CommandResult

LineHandler = Callable[[str], None]


class CommandRunner:
    """
    Runs external commands from a single fixed working directory.

    Every call waits for the subprocess to exit before returning. Nothing
    is retried; a failed ``run_checked`` raises ``CommandFailed``.
    """

    def __init__(self, working_directory: str | pathlib.Path) -> None:
        self.working_directory = str(pathlib.Path(working_directory).absolute())
        self._logger = Logger()

    async def run(self, command: str, *args: str) -> CommandResult:
        async with self._logger.context(name="command_runner", nested=True) as ctx:
            await ctx.log(
                CommandDebug(
                    message=f"Executing: {command} {' '.join(args)}",
                    command=command,
                    args=list(args),
                    working_directory=self.working_directory,
                )
            )

        start = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.working_directory,
            )

        except OSError as err:
            return self._spawn_failure(command, args, err, start)

        stdout, stderr = await process.communicate()

        return CommandResult(
            command=command,
            args=args,
            return_code=process.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            working_directory=self.working_directory,
            process_id=process.pid,
            elapsed=time.monotonic() - start,
        )

    async def run_checked(self, command: str, *args: str) -> CommandResult:
        result = await self.run(command, *args)
        if result.return_code != 0:
            await self._report_failure(result)
            raise CommandFailed(result)

        return result

    async def run_streaming(
        self,
        command: str,
        *args: str,
        on_line: LineHandler | None = None,
    ) -> CommandResult:
        async with self._logger.context(name="command_runner", nested=True) as ctx:
            await ctx.log(
                CommandDebug(
                    message=f"Streaming: {command} {' '.join(args)}",
                    command=command,
                    args=list(args),
                    working_directory=self.working_directory,
                )
            )

            start = time.monotonic()

            try:
                process = await asyncio.create_subprocess_exec(
                    command,
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=self.working_directory,
                )

            except OSError as err:
                return self._spawn_failure(command, args, err, start)

            stdout_lines: list[str] = []

            async def forward_stdout():
                async for raw_line in process.stdout:
                    line = raw_line.decode(errors="replace").rstrip("\n")
                    stdout_lines.append(line)

                    if on_line:
                        on_line(line)

                    else:
                        await ctx.log(
                            CommandOutput(
                                message=line,
                                command=command,
                            )
                        )

            _, stderr = await asyncio.gather(
                forward_stdout(),
                process.stderr.read(),
            )

            return_code = await process.wait()

        stdout = "\n".join(stdout_lines)
        if stdout_lines:
            stdout += "\n"

        return CommandResult(
            command=command,
            args=args,
            return_code=return_code,
            stdout=stdout,
            stderr=stderr.decode(errors="replace"),
            working_directory=self.working_directory,
            process_id=process.pid,
            elapsed=time.monotonic() - start,
        )

    async def _report_failure(self, result: CommandResult):
        async with self._logger.context(name="command_runner", nested=True) as ctx:
            for line in result.stdout_lines():
                await ctx.log(
                    CommandOutput(
                        message=f"out> {line}",
                        command=result.command,
                    )
                )

            for line in result.stderr_lines():
                await ctx.log(
                    CommandError(
                        message=f"err> {line}",
                        command=result.command,
                        return_code=result.return_code,
                    )
                )

    def _spawn_failure(
        self,
        command: str,
        args: tuple[str, ...],
        err: OSError,
        start: float,
    ):
        return CommandResult(
            command=command,
            args=args,
            return_code=127,
            stderr=str(err),
            working_directory=self.working_directory,
            elapsed=time.monotonic() - start,
        )
