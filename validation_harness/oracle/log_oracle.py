import pathlib
import re
from typing import Iterable, Set, Tuple

ERROR_PATTERN = re.compile("error", re.IGNORECASE)


class LogOracle:
    """
    Decides whether captured cluster logs contain error lines.

    A line is an error line when it contains ``error`` in any case. Lines
    keep their trailing newline so transcripts concatenate cleanly.
    """

    def scan(self, raw_text: str) -> bool:
        return ERROR_PATTERN.search(raw_text) is not None

    def grep(self, path: str | pathlib.Path) -> str:
        with open(path, encoding="utf-8", errors="replace") as log_file:
            return "".join(
                self._terminate(line)
                for line in log_file
                if ERROR_PATTERN.search(line)
            )

    def read_transcript(self, paths: Iterable[str | pathlib.Path]) -> str:
        combined = "".join(
            self.grep(path)
            for path in paths
            if pathlib.Path(path).is_file()
        )

        if self.scan(combined):
            return combined

        return ""

    def filter_transcript(
        self,
        transcript: str,
        ignored: Iterable[str],
        required: Iterable[str],
    ) -> Tuple[str, Set[str]]:
        ignored = list(ignored)
        required = list(required)

        remaining: list[str] = []
        satisfied: Set[str] = set()

        for line in transcript.splitlines(keepends=True):
            if any(pattern in line for pattern in ignored):
                continue

            matched = {pattern for pattern in required if pattern in line}
            if matched:
                satisfied.update(matched)
                continue

            remaining.append(line)

        return "".join(remaining), satisfied

    def _terminate(self, line: str):
        if line.endswith("\n"):
            return line

        return f"{line}\n"
