"""
Invoice service: settles the invoice number and computes totals.

This is the seam between the editor's invoice data and the rendering
pipeline. An invoice arriving without a number gets one from the sequence
service; an invoice that already has one passes through untouched, so
re-submitting or rendering several languages never issues a second number.
"""

import logging

from core.calculator import calculate
from core.models import FinalizedInvoice, InvoiceData, InvoiceTotals, Language, resolve_language
from core.services.sequence_service import SequenceService

logger = logging.getLogger(__name__)

SMALL_BUSINESS_NOTE = "Gemäß §19 UStG wird keine Umsatzsteuer berechnet."
REVERSE_CHARGE_NOTE = "Steuerschuldnerschaft des Leistungsempfängers (Reverse-Charge)."


def resolve_languages(
    requested: list[str] | None = None,
    all_languages: bool = False,
    default: Language | str | None = None,
) -> list[Language]:
    """
    Decide which languages to render.

    An explicit list wins, then all_languages, then the single default.
    Unknown codes map to German; duplicates are dropped, order kept.
    """
    if requested:
        languages = [resolve_language(code) for code in requested]
    elif all_languages:
        languages = list(Language)
    else:
        languages = [resolve_language(default)]
    return list(dict.fromkeys(languages))


def file_name_for(number: str, language: Language) -> str:
    """Suggested PDF file name."""
    return f"rechnung-{number}-{language.value}.pdf"


class InvoiceService:
    """Service for finalizing invoices before rendering."""

    def __init__(self, sequence: SequenceService):
        self.sequence = sequence

    def assign_number(self, invoice: InvoiceData) -> tuple[InvoiceData, bool]:
        """
        Give the invoice a number if it has none.

        Blank means empty after trimming whitespace.

        Returns:
            (invoice, assigned) where assigned is True if a number was issued

        Raises:
            CounterWriteError: If the counter cannot be persisted
        """
        if invoice.has_number:
            return invoice, False

        issued = self.sequence.next()
        logger.info(f"Assigned invoice number {issued.number}")
        return invoice.model_copy(update={"number": issued.number}), True

    def compute_totals(self, invoice: InvoiceData) -> InvoiceTotals:
        """Totals for the invoice's items under its tax regime."""
        return calculate(invoice.items, tax_exempt=invoice.tax_exempt)

    def notes_for(self, invoice: InvoiceData) -> list[str]:
        """User notes followed by the legal notes the invoice's flags require."""
        notes = list(invoice.notes)
        if invoice.kleinunternehmer:
            notes.append(SMALL_BUSINESS_NOTE)
        if invoice.reverse_charge:
            notes.append(REVERSE_CHARGE_NOTE)
        return notes

    def finalize(
        self,
        invoice: InvoiceData,
        languages: list[Language] | None = None,
    ) -> FinalizedInvoice:
        """
        Settle the number and compute totals.

        Args:
            invoice: Normalized invoice data
            languages: Output languages; defaults to the invoice's own

        Returns:
            Finalized invoice with one suggested file name per language

        Raises:
            CounterWriteError: If a number had to be issued and could not be persisted
        """
        invoice, assigned = self.assign_number(invoice)
        totals = self.compute_totals(invoice)
        languages = languages or [invoice.language]

        return FinalizedInvoice(
            invoice=invoice,
            totals=totals,
            notes=self.notes_for(invoice),
            number_assigned=assigned,
            file_names={lang: file_name_for(invoice.number, lang) for lang in languages},
        )
