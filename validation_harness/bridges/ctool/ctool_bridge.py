import asyncio
import os
import pathlib
from typing import Dict, List

from validation_harness.commands import CommandResult, CommandRunner
from validation_harness.env import Env
from validation_harness.exceptions import (
    BridgeError,
    CommandFailed,
    HarnessError,
    ProvisionFailed,
)
from validation_harness.logging import Logger
from validation_harness.logging.harness_logging_models import (
    ClusterDebug,
    ClusterInfo,
    ClusterWarning,
)
from validation_harness.oracle import LogOracle
from validation_harness.specs.cluster_target import ClusterTarget, ConfigValue

from validation_harness.bridges.archive_cluster_logs import (
    PIDS_FOLDER,
    archive_existing_directory,
    capture_folder,
    check_for_folder,
    node_log_path,
    pid_file_path,
)
from validation_harness.bridges.bridge import Bridge
from validation_harness.bridges.models import ClusterState

from .ctool_command import ALL_NODES, CToolCommand

REMOTE_PID_FILE = "~/PID"


class CToolBridge(Bridge):
    """
    Drives a cluster through the ``ctool`` command line.

    Node ordinals passed to ctool are 0-indexed, while local pid and log
    files are numbered from 1.
    """

    def __init__(
        self,
        target: ClusterTarget,
        env: Env | None = None,
        runner: CommandRunner | None = None,
        oracle: LogOracle | None = None,
    ) -> None:
        if env is None:
            env = Env()

        if runner is None:
            runner = CommandRunner(env.HARNESS_WORKING_DIRECTORY)

        if oracle is None:
            oracle = LogOracle()

        self.target = target
        self.cluster_name = target.cluster_name
        self.node_count = target.node_count

        self._env = env
        self._runner = runner
        self._oracle = oracle
        self._executable = env.HARNESS_CTOOL_EXECUTABLE
        self._remote_home = env.HARNESS_REMOTE_HOME.rstrip("/")
        self._log_root = pathlib.Path(env.log_root)
        self._logger = Logger()

    async def observe(self) -> ClusterState:
        listed = await self._ctool(CToolCommand.list_clusters())
        if self.cluster_name not in listed.stdout.split():
            return ClusterState.ABSENT

        endpoints = await self.endpoints()
        if len(endpoints) != self.node_count:
            return ClusterState.EXISTS_WRONG_SIZE

        return ClusterState.EXISTS_CORRECT_SIZE

    async def provision(self) -> ClusterState:
        try:
            state = await self.observe()

            await self._log_info(
                f"Cluster {self.cluster_name} observed as {state.value}"
            )

            if state == ClusterState.ABSENT:
                await self._ctool(
                    CToolCommand.launch(self.cluster_name, self.node_count)
                )

            elif state == ClusterState.EXISTS_WRONG_SIZE:
                await self._ctool(CToolCommand.destroy(self.cluster_name))
                await self._ctool(
                    CToolCommand.launch(self.cluster_name, self.node_count)
                )

            else:
                await self._ctool(CToolCommand.reset(self.cluster_name))

            await self.install()

        except CommandFailed as err:
            raise ProvisionFailed(
                self.cluster_name,
                self.node_count,
                str(err),
            ) from err

        await self._log_info(
            f"Cluster {self.cluster_name} provisioned with {self.node_count} nodes"
        )

        return state

    async def install(self):
        await self._ctool(
            CToolCommand.push(
                self.cluster_name,
                ALL_NODES,
                self._env.install_source,
                self._remote_home,
            )
        )

    async def start(self):
        await self._run_remote(
            ALL_NODES,
            f"{self._remote_home}/bin/cassandra -p {REMOTE_PID_FILE}",
        )

        pids_directory = self._log_root.joinpath(PIDS_FOLDER)
        if not check_for_folder(pids_directory):
            try:
                os.makedirs(pids_directory, exist_ok=True)

            except OSError as err:
                async with self._logger.context(name="ctool_bridge") as ctx:
                    await ctx.log(
                        ClusterWarning(
                            message=f"Could not create {pids_directory} - {err}",
                            cluster_name=self.cluster_name,
                            node_count=self.node_count,
                        )
                    )

        for ordinal in range(self.node_count):
            await self._ctool(
                CToolCommand.pull(
                    self.cluster_name,
                    ordinal,
                    str(pid_file_path(self._log_root, ordinal + 1)),
                    REMOTE_PID_FILE,
                )
            )

    async def stop(self):
        for ordinal in range(self.node_count):
            pid = self._read_pid(ordinal + 1)
            result = await self._run_remote(ordinal, f"kill {pid}", check=False)

            if result.return_code != 0:
                await self._log_warning(
                    f"kill {pid} on node {ordinal} exited with code {result.return_code}"
                )

    async def apply_config(self, options: Dict[str, ConfigValue]):
        for key, value in options.items():
            await self._ctool(
                CToolCommand.change_config(
                    self.cluster_name,
                    key,
                    self._format_config_value(value),
                )
            )

    async def capture_logs(self, test_name: str):
        folder = capture_folder(self._log_root, test_name)

        if check_for_folder(folder):
            loop = asyncio.get_running_loop()
            archive_path = await loop.run_in_executor(
                None,
                archive_existing_directory,
                folder,
            )

            await self._log_debug(f"Archived previous capture to {archive_path}")

        folder.mkdir(parents=True, exist_ok=True)

        for ordinal in range(self.node_count):
            await self._ctool(
                CToolCommand.pull(
                    self.cluster_name,
                    ordinal,
                    str(node_log_path(self._log_root, test_name, ordinal + 1)),
                    f"{self._remote_home}/logs/system.log",
                )
            )

    async def read_cluster_logs(self, test_name: str) -> str:
        if not check_for_folder(capture_folder(self._log_root, test_name)):
            return ""

        log_paths = [
            node_log_path(self._log_root, test_name, node)
            for node in range(1, self.node_count + 1)
        ]

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            self._oracle.read_transcript,
            log_paths,
        )

    async def endpoints(self) -> List[str]:
        result = await self._ctool(CToolCommand.hosts(self.cluster_name))
        return result.stdout.split()

    async def destroy(self, best_effort: bool = False):
        if not best_effort:
            await self.stop()
            await self._ctool(CToolCommand.reset(self.cluster_name))
            return

        try:
            await self.stop()

        except HarnessError as err:
            await self._log_warning(f"Stop during teardown failed - {err}")

        try:
            await self._ctool(CToolCommand.reset(self.cluster_name))

        except HarnessError as err:
            await self._log_warning(f"Reset during teardown failed - {err}")

    async def node_tool(
        self,
        node: str | int,
        command: str,
        arguments: str = "",
    ) -> str:
        remote_command = f"{self._remote_home}/bin/nodetool {command}"
        if arguments:
            remote_command = f"{remote_command} {arguments}"

        result = await self._run_remote(node, remote_command)
        return result.stdout

    async def sstable_split(
        self,
        node: str | int,
        keyspace_path: str,
        options: str = "",
    ) -> str:
        tool = f"{self._remote_home}/tools/bin/sstablesplit"
        if options:
            tool = f"{tool} {options}"

        result = await self._run_remote(
            node,
            f"{tool} {self._remote_home}/data/data/{keyspace_path}",
        )

        return result.stdout

    async def sstable_metadata(self, node: str | int, keyspace_path: str) -> str:
        result = await self._run_remote(
            node,
            f"{self._remote_home}/tools/bin/sstablemetadata {self._remote_home}/data/data/{keyspace_path}",
        )

        return result.stdout

    async def _ctool(self, command: CToolCommand) -> CommandResult:
        return await self._runner.run_checked(
            self._executable,
            *command.to_args(),
        )

    async def _run_remote(
        self,
        nodes: str | int,
        remote_command: str,
        check: bool = True,
    ) -> CommandResult:
        command = CToolCommand.run(self.cluster_name, nodes, remote_command)
        result = await self._runner.run_streaming(
            self._executable,
            *command.to_args(),
        )

        if check and result.return_code != 0:
            raise CommandFailed(result)

        return result

    def _read_pid(self, node: int) -> str:
        path = pid_file_path(self._log_root, node)

        try:
            pid = path.read_text().strip()

        except OSError as err:
            raise BridgeError(
                f"Could not read pid file {path} for node {node} - {err}"
            ) from err

        if not pid:
            raise BridgeError(f"Pid file {path} for node {node} is empty")

        return pid

    def _format_config_value(self, value: ConfigValue):
        if isinstance(value, bool):
            return str(value).lower()

        return str(value)

    async def _log_info(self, message: str):
        async with self._logger.context(name="ctool_bridge") as ctx:
            await ctx.log(
                ClusterInfo(
                    message=message,
                    cluster_name=self.cluster_name,
                    node_count=self.node_count,
                )
            )

    async def _log_debug(self, message: str):
        async with self._logger.context(name="ctool_bridge") as ctx:
            await ctx.log(
                ClusterDebug(
                    message=message,
                    cluster_name=self.cluster_name,
                    node_count=self.node_count,
                )
            )

    async def _log_warning(self, message: str):
        async with self._logger.context(name="ctool_bridge") as ctx:
            await ctx.log(
                ClusterWarning(
                    message=message,
                    cluster_name=self.cluster_name,
                    node_count=self.node_count,
                )
            )
