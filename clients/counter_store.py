"""
Durable storage for invoice counter state.

State is a mapping of partition key -> last issued value. Reads never fail:
a missing, unreadable or malformed file is treated as empty state, so a
corrupted counter file restarts at zero instead of blocking invoicing.
Writes are atomic (temp file + rename in the same directory) and fail loudly.
"""

import os
import json
import logging
import tempfile
import threading
from contextlib import suppress
from typing import Callable, TypeVar

from clients.file_gate import FileGate
from core.exceptions import CounterWriteError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CounterState = dict[str, int]


class CounterStore:
    """
    Storage interface used by the sequence service.

    Implementations provide read/write of whole-state snapshots plus a
    critical section that serializes read-modify-write cycles per file.
    """

    def read(self, file: str) -> CounterState:
        raise NotImplementedError

    def write(self, file: str, state: CounterState) -> None:
        raise NotImplementedError

    def run_exclusive(self, file: str, fn: Callable[[], T]) -> T:
        raise NotImplementedError


def _validate_state(data) -> CounterState | None:
    """Return the state if every entry is str -> non-negative int, else None."""
    if not isinstance(data, dict):
        return None
    for key, value in data.items():
        if not isinstance(key, str):
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return None
    return dict(data)


class JsonFileCounterStore(CounterStore):
    """
    Counter state as a pretty-printed JSON object on disk.

    Usage:
        store = JsonFileCounterStore(FileGate())
        store.run_exclusive(".seq.json", lambda: store.write(".seq.json", {"2025-01": 7}))
    """

    def __init__(self, gate: FileGate | None = None):
        self.gate = gate or FileGate()

    def read(self, file: str) -> CounterState:
        """
        Load state from file.

        Returns {} if the file is absent, unreadable or not a valid state
        object. Never raises.
        """
        try:
            with open(file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable counter state in {file}, starting empty: {e}")
            return {}

        state = _validate_state(data)
        if state is None:
            logger.warning(f"Malformed counter state in {file}, starting empty")
            return {}
        return state

    def write(self, file: str, state: CounterState) -> None:
        """
        Persist state atomically.

        Readers see either the old file or the new one, never a partial
        write. Parent directories are created as needed.

        Raises:
            CounterWriteError: On any I/O failure
        """
        directory = os.path.dirname(os.path.abspath(file))
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise CounterWriteError(file, f"cannot create directory: {e}") from e

        payload = json.dumps(state, indent=2, sort_keys=True)
        temp = None
        try:
            fd, temp = tempfile.mkstemp(
                prefix=f".{os.path.basename(file)}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp, file)
        except OSError as e:
            if temp is not None:
                with suppress(OSError):
                    os.unlink(temp)
            raise CounterWriteError(file, str(e)) from e

    def run_exclusive(self, file: str, fn: Callable[[], T]) -> T:
        return self.gate.run_exclusive(file, fn)


class InMemoryCounterStore(CounterStore):
    """Process-local store for tests and single-process tooling."""

    def __init__(self, initial: dict[str, CounterState] | None = None):
        self._files: dict[str, CounterState] = {
            name: dict(state) for name, state in (initial or {}).items()
        }
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self.writes = 0

    def read(self, file: str) -> CounterState:
        return dict(self._files.get(file, {}))

    def write(self, file: str, state: CounterState) -> None:
        self._files[file] = dict(state)
        self.writes += 1

    def run_exclusive(self, file: str, fn: Callable[[], T]) -> T:
        with self._guard:
            lock = self._locks.setdefault(file, threading.Lock())
        with lock:
            return fn()
