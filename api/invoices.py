"""Invoice endpoints under /api/invoices: totals and finalization."""

from fastapi import APIRouter, Request

from api.base import success_response
from api.middleware import request_id_of
from core.models import InvoiceData
from core.services.invoice_service import InvoiceService, resolve_languages


def _invoice_payload(body: dict) -> InvoiceData:
    """Accept either {"data": {...}} or the bare invoice object."""
    raw = body.get("data", body) if isinstance(body, dict) else body
    return InvoiceData.model_validate(raw if raw is not None else {})


def create_invoices_router(invoices: InvoiceService) -> APIRouter:
    router = APIRouter()

    @router.post("/invoices/totals")
    async def totals(request: Request, body: dict):
        invoice = _invoice_payload(body)
        result = invoices.compute_totals(invoice)
        return success_response(result.model_dump(mode="json"), request_id_of(request)).model_dump(mode="json")

    @router.post("/invoices/finalize")
    def finalize(request: Request, body: dict):
        invoice = _invoice_payload(body)
        requested = body.get("languages")
        languages = resolve_languages(
            requested if isinstance(requested, list) else None,
            all_languages=bool(body.get("all", False)),
            default=body.get("language") or invoice.language,
        )
        result = invoices.finalize(invoice, languages=languages)
        return success_response(
            result.model_dump(mode="json", by_alias=True), request_id_of(request)
        ).model_dump(mode="json")

    return router
