"""Shared test fixtures for the invoice numbering test suite."""

import pytest

from clients.counter_store import InMemoryCounterStore, JsonFileCounterStore
from clients.file_gate import FileGate
from core.config import NumberingConfig
from core.services.sequence_service import SequenceService


# =============================================================================
# CONFIG & STORAGE FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clean_numbering_env(monkeypatch):
    """Ensure no INVOICE_* environment leaks into tests."""
    for name in (
        "INVOICE_SEQ_FILE", "INVOICE_SEQ_SCOPE", "INVOICE_SEQ_PAD", "INVOICE_SEQ_PREFIX",
        "INVOICE_TIMEZONE", "INVOICE_SEQ_LOCK_RETRIES", "INVOICE_SEQ_LOCK_DELAY_MS",
        "INVOICE_SEQ_LOCK_STALE_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def counter_file(tmp_path) -> str:
    """Path of a fresh counter file (not yet created)."""
    return str(tmp_path / "counters" / ".seq.json")


@pytest.fixture
def config(counter_file) -> NumberingConfig:
    return NumberingConfig(counter_file=counter_file)


@pytest.fixture
def gate() -> FileGate:
    """Gate with a generous retry budget so contention tests stay serialized."""
    return FileGate(retries=2000, delay_seconds=0.005)


@pytest.fixture
def file_store(gate) -> JsonFileCounterStore:
    return JsonFileCounterStore(gate)


@pytest.fixture
def memory_store() -> InMemoryCounterStore:
    return InMemoryCounterStore()


@pytest.fixture
def sequence(file_store, config) -> SequenceService:
    """SequenceService backed by a real JSON file in tmp_path."""
    return SequenceService(file_store, config)


@pytest.fixture
def memory_sequence(memory_store, config) -> SequenceService:
    """SequenceService backed by the in-memory fake."""
    return SequenceService(memory_store, config)
