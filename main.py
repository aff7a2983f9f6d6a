"""Application entry point: wires config, storage and services into a FastAPI app."""

import logging

from fastapi import FastAPI

from api.errors import register_error_handlers
from api.invoices import create_invoices_router
from api.middleware import RequestIDMiddleware
from api.sequence import create_sequence_router
from clients.counter_store import CounterStore, JsonFileCounterStore
from clients.file_gate import FileGate
from core.config import NumberingConfig, load_config
from core.services.invoice_service import InvoiceService
from core.services.sequence_service import SequenceService

logger = logging.getLogger(__name__)


def build_store(config: NumberingConfig) -> JsonFileCounterStore:
    """JSON file store guarded by a lock marker per counter file."""
    gate = FileGate(
        retries=config.lock_retries,
        delay_seconds=config.lock_retry_delay_ms / 1000,
        stale_after_seconds=config.lock_stale_seconds,
    )
    return JsonFileCounterStore(gate)


def create_app(
    config: NumberingConfig | None = None,
    store: CounterStore | None = None,
) -> FastAPI:
    """
    Build the API app.

    Args:
        config: Numbering config; loaded from the environment if omitted
        store: Counter store; a JSON file store per config if omitted
    """
    config = config or load_config()
    store = store or build_store(config)

    sequence = SequenceService(store, config)
    invoices = InvoiceService(sequence)

    app = FastAPI(title="Invoice numbering")
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_sequence_router(sequence), prefix="/api")
    app.include_router(create_invoices_router(invoices), prefix="/api")

    app.state.sequence = sequence
    app.state.invoices = invoices

    logger.info(f"Invoice API ready (counter file {config.counter_file})")
    return app
