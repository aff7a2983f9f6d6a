"""Tests for counter state storage."""

import json
import os
import threading

import pytest

from clients.counter_store import InMemoryCounterStore, JsonFileCounterStore
from clients.file_gate import FileGate
from core.exceptions import CounterWriteError


@pytest.fixture
def store() -> JsonFileCounterStore:
    return JsonFileCounterStore(FileGate(retries=5, delay_seconds=0.001))


class TestJsonFileRead:
    """read() never fails; bad state reads as empty."""

    def test_missing_file_is_empty(self, store, tmp_path):
        assert store.read(str(tmp_path / "absent.json")) == {}

    def test_reads_valid_state(self, store, tmp_path):
        path = tmp_path / "seq.json"
        path.write_text(json.dumps({"2025-01": 7, "2025-02": 0}))

        assert store.read(str(path)) == {"2025-01": 7, "2025-02": 0}

    @pytest.mark.parametrize("content", [
        "",
        "{not json",
        "[1, 2, 3]",
        '"text"',
        '{"2025-01": "seven"}',
        '{"2025-01": -1}',
        '{"2025-01": 1.5}',
        '{"2025-01": true}',
    ])
    def test_malformed_state_is_empty(self, store, tmp_path, content):
        path = tmp_path / "seq.json"
        path.write_text(content)

        assert store.read(str(path)) == {}

    def test_unreadable_path_is_empty(self, store, tmp_path):
        """A directory where the file should be cannot be read as state."""
        path = tmp_path / "seq.json"
        path.mkdir()

        assert store.read(str(path)) == {}

    def test_malformed_state_logged(self, store, tmp_path, caplog):
        path = tmp_path / "seq.json"
        path.write_text("{oops")

        store.read(str(path))

        assert "starting empty" in caplog.text


class TestJsonFileWrite:
    """write() is atomic and loud."""

    def test_creates_parent_directories(self, store, tmp_path):
        path = tmp_path / "a" / "b" / "seq.json"

        store.write(str(path), {"2025": 3})

        assert json.loads(path.read_text()) == {"2025": 3}

    def test_overwrites_and_leaves_no_temp_files(self, store, tmp_path):
        path = tmp_path / "seq.json"
        store.write(str(path), {"2025-01": 1})
        store.write(str(path), {"2025-01": 2, "2025-02": 1})

        assert store.read(str(path)) == {"2025-01": 2, "2025-02": 1}
        assert sorted(os.listdir(tmp_path)) == ["seq.json"]

    def test_write_then_read_empty_state(self, store, tmp_path):
        path = tmp_path / "seq.json"
        store.write(str(path), {})
        assert store.read(str(path)) == {}

    def test_failure_raises_counter_write_error(self, store, tmp_path):
        """Writing onto a path that is a directory fails the rename."""
        path = tmp_path / "seq.json"
        path.mkdir()
        (path / "occupied").write_text("x")

        with pytest.raises(CounterWriteError) as exc_info:
            store.write(str(path), {"2025": 1})

        assert exc_info.value.path == str(path)
        # Temp file cleaned up after the failed rename
        assert sorted(os.listdir(tmp_path)) == ["seq.json"]

    def test_unwritable_parent_raises(self, store, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(CounterWriteError):
            store.write(str(blocker / "seq.json"), {"2025": 1})

    def test_readers_never_see_partial_state(self, store, tmp_path):
        """Concurrent readers only ever observe complete snapshots."""
        path = str(tmp_path / "seq.json")
        big = {f"key-{i:05d}": i for i in range(2000)}
        store.write(path, big)
        seen_bad = []
        done = threading.Event()

        def reader():
            while not done.is_set():
                state = store.read(path)
                if state != big:
                    seen_bad.append(len(state))

        thread = threading.Thread(target=reader)
        thread.start()
        for _ in range(30):
            store.write(path, big)
        done.set()
        thread.join()

        assert seen_bad == []


class TestJsonFileExclusive:

    def test_runs_under_gate_and_cleans_marker(self, store, tmp_path):
        path = str(tmp_path / "seq.json")

        def body():
            assert os.path.exists(path + ".lock")
            return 42

        assert store.run_exclusive(path, body) == 42
        assert not os.path.exists(path + ".lock")


class TestInMemoryCounterStore:

    def test_read_returns_copy(self):
        store = InMemoryCounterStore({"f": {"2025": 1}})

        state = store.read("f")
        state["2025"] = 99

        assert store.read("f") == {"2025": 1}

    def test_write_counts(self):
        store = InMemoryCounterStore()
        store.write("f", {"a": 1})
        store.write("f", {"a": 2})

        assert store.writes == 2
        assert store.read("f") == {"a": 2}

    def test_files_are_independent(self):
        store = InMemoryCounterStore()
        store.write("f1", {"a": 1})

        assert store.read("f2") == {}

    def test_run_exclusive_returns_result(self):
        store = InMemoryCounterStore()
        assert store.run_exclusive("f", lambda: "ok") == "ok"
