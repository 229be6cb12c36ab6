import datetime
import pathlib
import tarfile

import zstandard

from validation_harness.bridges.archive_cluster_logs import (
    archive_existing_directory,
    check_for_folder,
    node_log_path,
    pid_file_path,
)


class TestPaths:
    def test_node_logs_are_one_indexed(self, tmp_path: pathlib.Path):
        assert node_log_path(tmp_path, "basic", 1) == tmp_path.joinpath("basic", "node1.log")

    def test_pid_files_live_under_pids(self, tmp_path: pathlib.Path):
        assert pid_file_path(tmp_path, 3) == tmp_path.joinpath("PIDs", "node3_PID.txt")

    def test_check_for_folder(self, tmp_path: pathlib.Path):
        assert check_for_folder(tmp_path)
        assert not check_for_folder(tmp_path.joinpath("missing"))


class TestArchiveExistingDirectory:
    def test_archive_contains_previous_logs_and_folder_is_cleared(
        self,
        tmp_path: pathlib.Path,
    ):
        folder = tmp_path.joinpath("basic")
        folder.joinpath("nested").mkdir(parents=True)
        folder.joinpath("node1.log").write_text("ERROR old\n")
        folder.joinpath("nested", "extra.txt").write_text("extra\n")

        archive = archive_existing_directory(
            folder,
            timestamp=datetime.datetime(2024, 5, 1, 12, 30, 0, tzinfo=datetime.UTC),
        )

        assert archive.name == "basic_20240501123000000000_archived.tar.zst"
        assert folder.is_dir()
        assert list(folder.iterdir()) == []

        with open(archive, "rb") as archive_file:
            with zstandard.ZstdDecompressor().stream_reader(archive_file) as reader:
                with tarfile.open(fileobj=reader, mode="r|") as tar:
                    names = {member.name for member in tar}

        assert "basic/node1.log" in names
        assert "basic/nested/extra.txt" in names
