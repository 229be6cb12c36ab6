from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List

if TYPE_CHECKING:
    from validation_harness.commands.models import CommandResult


class HarnessError(Exception):
    pass


class CommandFailed(HarnessError):
    def __init__(self, result: CommandResult) -> None:
        self.result = result
        self.return_code = result.return_code
        self.stdout = result.stdout
        self.stderr = result.stderr

        super().__init__(
            f"Command '{result.display()}' exited with code {result.return_code}"
        )


class BridgeError(HarnessError):
    pass


class ProvisionFailed(BridgeError):
    def __init__(self, cluster_name: str, node_count: int, reason: str) -> None:
        self.cluster_name = cluster_name
        self.node_count = node_count

        super().__init__(
            f"Failed to provision cluster '{cluster_name}' with {node_count} nodes - {reason}"
        )


class ModuleNotFound(HarnessError):
    def __init__(self, module_name: str, known: Iterable[str]) -> None:
        self.module_name = module_name
        self.known = sorted(known)

        super().__init__(
            f"Unknown module '{module_name}' (registered: {', '.join(self.known) or 'none'})"
        )


class ModuleValidationFailed(HarnessError):
    def __init__(
        self,
        module_name: str,
        group: int,
        error: str | None,
        trace: str | None = None,
    ) -> None:
        self.module_name = module_name
        self.group = group
        self.error = error
        self.trace = trace

        super().__init__(
            f"Module '{module_name}' in group {group} failed - {error}"
        )


class LogAssertionFailed(HarnessError):
    def __init__(self, test_name: str, transcript: str) -> None:
        self.test_name = test_name
        self.transcript = transcript

        super().__init__(transcript)


class RequiredErrorMissing(HarnessError):
    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = sorted(missing)

        super().__init__(
            f"Required errors never observed: {', '.join(self.missing)}"
        )


class ModuleFailuresReported(HarnessError):
    def __init__(self, failures: Dict[str, List[str]]) -> None:
        self.failures = failures

        lines = [
            message
            for messages in failures.values()
            for message in messages
        ]

        super().__init__("\n".join(lines))


class InvalidDefinition(HarnessError):
    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason

        super().__init__(f"Invalid harness definition '{source}' - {reason}")
