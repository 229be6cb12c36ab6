from .command_runner import CommandRunner as CommandRunner
from .models import CommandResult as CommandResult
