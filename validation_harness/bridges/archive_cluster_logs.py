import datetime
import os
import pathlib
import shutil
import tarfile

import zstandard

PIDS_FOLDER = "PIDs"


def check_for_folder(path: str | pathlib.Path) -> bool:
    return pathlib.Path(path).is_dir()


def capture_folder(log_root: str | pathlib.Path, test_name: str):
    return pathlib.Path(log_root, test_name)


def node_log_path(log_root: str | pathlib.Path, test_name: str, node: int):
    return pathlib.Path(log_root, test_name, f"node{node}.log")


def pid_file_path(log_root: str | pathlib.Path, node: int):
    return pathlib.Path(log_root, PIDS_FOLDER, f"node{node}_PID.txt")


def archive_existing_directory(
    folder: str | pathlib.Path,
    timestamp: datetime.datetime | None = None,
) -> pathlib.Path:
    """
    Compress ``folder`` into ``<name>_<timestamp>_archived.tar.zst`` next
    to it, then empty the folder so a new capture starts clean.
    """

    folder = pathlib.Path(folder)
    if timestamp is None:
        timestamp = datetime.datetime.now(datetime.UTC)

    archive_path = folder.parent.joinpath(
        f"{folder.name}_{timestamp.strftime('%Y%m%d%H%M%S%f')}_archived.tar.zst"
    )

    compressor = zstandard.ZstdCompressor()

    with open(archive_path, "wb") as archive_file:
        with compressor.stream_writer(archive_file) as writer:
            with tarfile.open(fileobj=writer, mode="w|") as tar:
                tar.add(folder, arcname=folder.name)

    for entry in os.scandir(folder):
        if entry.is_dir(follow_symlinks=False):
            shutil.rmtree(entry.path)

        else:
            os.remove(entry.path)

    return archive_path
