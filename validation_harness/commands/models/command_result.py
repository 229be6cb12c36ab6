import shlex
from typing import Tuple

from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr


class CommandResult(BaseModel):
    command: StrictStr
    args: Tuple[str, ...] = ()
    return_code: StrictInt
    stdout: StrictStr = ""
    stderr: StrictStr = ""
    working_directory: StrictStr
    process_id: StrictInt | None = None
    elapsed: StrictInt | StrictFloat = 0

    @property
    def succeeded(self):
        return self.return_code == 0

    def display(self):
        return shlex.join([self.command, *self.args])

    def stdout_lines(self):
        return [line for line in self.stdout.splitlines() if line]

    def stderr_lines(self):
        return [line for line in self.stderr.splitlines() if line]
