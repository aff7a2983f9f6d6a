"""Core domain models."""

from core.models.sequence import Scope, SequenceOptions, IssuedNumber, CounterValue, CounterReset
from core.models.line_item import LineItem
from core.models.invoice import (
    Language, Currency, resolve_language,
    CompanyInfo, ClientInfo, ServicePeriod, InvoiceData,
    VatBucket, InvoiceTotals, FinalizedInvoice,
)

__all__ = [
    # Sequence
    "Scope", "SequenceOptions", "IssuedNumber", "CounterValue", "CounterReset",
    # LineItem
    "LineItem",
    # Invoice
    "Language", "Currency", "resolve_language",
    "CompanyInfo", "ClientInfo", "ServicePeriod", "InvoiceData",
    "VatBucket", "InvoiceTotals", "FinalizedInvoice",
]
