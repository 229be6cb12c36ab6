from __future__ import annotations

from typing import List, Tuple

from .ctool_operation import CToolOperation

ALL_NODES = "all"


class CToolCommand:
    """
    Argument vector for one ctool invocation. Instances are built through
    the classmethods below so every operation's argument order lives in a
    single place.
    """

    __slots__ = ("operation", "arguments")

    def __init__(
        self,
        operation: CToolOperation,
        *arguments: str,
    ) -> None:
        self.operation = operation
        self.arguments: Tuple[str, ...] = tuple(str(arg) for arg in arguments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CToolCommand):
            return NotImplemented

        return (
            self.operation == other.operation
            and self.arguments == other.arguments
        )

    def __repr__(self) -> str:
        return f"CToolCommand({self.operation.value}, {' '.join(self.arguments)})"

    def to_args(self) -> List[str]:
        return [self.operation.value, *self.arguments]

    @classmethod
    def list_clusters(cls):
        return cls(CToolOperation.LIST)

    @classmethod
    def launch(cls, cluster_name: str, node_count: int):
        return cls(CToolOperation.LAUNCH, cluster_name, str(node_count))

    @classmethod
    def destroy(cls, cluster_name: str):
        return cls(CToolOperation.DESTROY, cluster_name)

    @classmethod
    def reset(cls, cluster_name: str):
        return cls(CToolOperation.RESET, cluster_name)

    @classmethod
    def hosts(cls, cluster_name: str):
        return cls(CToolOperation.INFO, cluster_name, "--hosts")

    @classmethod
    def push(cls, cluster_name: str, nodes: str, source: str, destination: str):
        return cls(CToolOperation.SCP, cluster_name, nodes, source, destination)

    @classmethod
    def pull(cls, cluster_name: str, node: int, local_path: str, remote_path: str):
        return cls(
            CToolOperation.SCP,
            "-r",
            cluster_name,
            str(node),
            local_path,
            remote_path,
        )

    @classmethod
    def run(cls, cluster_name: str, nodes: str | int, remote_command: str):
        return cls(CToolOperation.RUN, cluster_name, str(nodes), remote_command)

    @classmethod
    def change_config(cls, cluster_name: str, key: str, value: str):
        return cls(
            CToolOperation.CHANGE_CONFIG,
            cluster_name,
            ALL_NODES,
            "--k",
            key,
            "--value",
            value,
        )
