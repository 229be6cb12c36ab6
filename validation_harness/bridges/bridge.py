from abc import ABC, abstractmethod
from typing import Dict, List

from .models import ClusterState


class Bridge(ABC):
    """
    Owns one named cluster for the lifetime of a harness run.
    """

    @abstractmethod
    async def observe(self) -> ClusterState: ...

    @abstractmethod
    async def provision(self) -> ClusterState: ...

    @abstractmethod
    async def start(self) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...

    @abstractmethod
    async def apply_config(self, options: Dict[str, str]) -> None: ...

    @abstractmethod
    async def capture_logs(self, test_name: str) -> None: ...

    @abstractmethod
    async def read_cluster_logs(self, test_name: str) -> str: ...

    @abstractmethod
    async def endpoints(self) -> List[str]: ...

    @abstractmethod
    async def destroy(self, best_effort: bool = False) -> None: ...

    @abstractmethod
    async def node_tool(
        self,
        node: str | int,
        command: str,
        arguments: str = "",
    ) -> str: ...

    @abstractmethod
    async def sstable_split(
        self,
        node: str | int,
        keyspace_path: str,
        options: str = "",
    ) -> str: ...

    @abstractmethod
    async def sstable_metadata(self, node: str | int, keyspace_path: str) -> str: ...
