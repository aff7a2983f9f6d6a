# Storage clients
from clients.file_gate import FileGate
from clients.counter_store import (
    CounterState,
    CounterStore,
    JsonFileCounterStore,
    InMemoryCounterStore,
)
