from .command_result import CommandResult as CommandResult
