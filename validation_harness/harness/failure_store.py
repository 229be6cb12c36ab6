import threading
from typing import Dict, List


class FailureStore:
    """
    Failure messages keyed by module name, in the order they arrived.
    Appends may come from any thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._failures: Dict[str, List[str]] = {}

    def __len__(self):
        with self._lock:
            return sum(len(messages) for messages in self._failures.values())

    def append(self, module_name: str, message: str):
        with self._lock:
            self._failures.setdefault(module_name, []).append(
                f"{module_name}: {message}"
            )

    def snapshot(self) -> Dict[str, List[str]]:
        with self._lock:
            return {
                module_name: list(messages)
                for module_name, messages in self._failures.items()
            }
