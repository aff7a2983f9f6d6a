"""Invoice domain models.

InvoiceData mirrors the JSON the browser form posts (camelCase keys) and
normalizes missing or malformed fields on the way in, so downstream code
never sees a partial invoice. Amounts are Decimal.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from core.models.line_item import LineItem
from utils.timezone import parse_iso_date, today_iso

PLACEHOLDER_NAME = "—"


class Language(str, Enum):
    """Supported output languages."""

    DE = "de"
    EN = "en"
    RU = "ru"
    BG = "bg"
    TR = "tr"


DEFAULT_LANGUAGE = Language.EN
FALLBACK_LANGUAGE = Language.DE


def resolve_language(value) -> Language:
    """Map free-form input to a supported language; unknown codes fall back to German."""
    if isinstance(value, Language):
        return value
    try:
        return Language(str(value or "").strip().lower())
    except ValueError:
        return FALLBACK_LANGUAGE


class Currency(str, Enum):
    """Supported invoice currencies."""

    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"


class CompanyInfo(BaseModel):
    """Issuing company."""

    name: str = PLACEHOLDER_NAME
    address_lines: list[str] = Field(default_factory=list, alias="addressLines")
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    ust_id: str | None = Field(None, alias="ustId")
    steuer_nr: str | None = Field(None, alias="steuerNr")
    iban: str | None = None
    bic: str | None = None
    bank_name: str | None = Field(None, alias="bankName")
    logo_path: str | None = Field(None, alias="logoPath")

    model_config = {"populate_by_name": True}

    @field_validator("name", mode="before")
    @classmethod
    def placeholder_name(cls, value):
        return value or PLACEHOLDER_NAME

    @field_validator("address_lines", mode="before")
    @classmethod
    def lines_or_empty(cls, value):
        return value or []


class ClientInfo(BaseModel):
    """Invoice recipient."""

    name: str = PLACEHOLDER_NAME
    address_lines: list[str] = Field(default_factory=list, alias="addressLines")
    ust_id: str | None = Field(None, alias="ustId")

    model_config = {"populate_by_name": True}

    @field_validator("name", mode="before")
    @classmethod
    def placeholder_name(cls, value):
        return value or PLACEHOLDER_NAME

    @field_validator("address_lines", mode="before")
    @classmethod
    def lines_or_empty(cls, value):
        return value or []


class ServicePeriod(BaseModel):
    """Period the invoiced service was delivered in (ISO dates)."""

    from_iso: str = Field(..., alias="fromISO")
    to_iso: str = Field(..., alias="toISO")

    model_config = {"populate_by_name": True}


class InvoiceData(BaseModel):
    """
    Invoice as composed in the editor.

    A blank number means "assign one on finalize".
    """

    language: Language = DEFAULT_LANGUAGE
    currency: Currency = Currency.EUR
    number: str = ""
    issue_date_iso: str = Field(default_factory=today_iso, alias="issueDateISO")
    service_period: ServicePeriod | None = Field(None, alias="servicePeriod")
    due_days: int = Field(0, alias="dueDays")
    reverse_charge: bool = Field(False, alias="reverseCharge")
    kleinunternehmer: bool = False  # small-business regime, no VAT charged
    notes: list[str] = Field(default_factory=list)

    company: CompanyInfo = Field(default_factory=CompanyInfo)
    client: ClientInfo = Field(default_factory=ClientInfo)
    items: list[LineItem] = Field(default_factory=list)

    extra_tables: list[dict] = Field(default_factory=list, alias="extraTables")
    extra_images: list[dict] = Field(default_factory=list, alias="extraImages")

    model_config = {"populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)

        language = data.get("language")
        data["language"] = resolve_language(language) if language else DEFAULT_LANGUAGE
        data["currency"] = data.get("currency") or Currency.EUR
        data["number"] = str(data.get("number") or "")

        for key in ("issueDateISO", "issue_date_iso"):
            if key in data and not data[key]:
                del data[key]

        # Keep the period only when both ends are real dates
        for key in ("servicePeriod", "service_period"):
            if key in data:
                period = data[key]
                if isinstance(period, ServicePeriod):
                    period = period.model_dump(by_alias=True)
                if not _valid_period(period):
                    data[key] = None

        for key in ("dueDays", "due_days"):
            if key in data:
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    data[key] = 0
                else:
                    data[key] = int(value)

        for key in ("reverseCharge", "reverse_charge", "kleinunternehmer"):
            if key in data:
                data[key] = bool(data[key])

        if not isinstance(data.get("notes"), list):
            data["notes"] = []

        for key in ("company", "client"):
            if data.get(key) is None:
                data.pop(key, None)

        for key in ("extraTables", "extra_tables", "extraImages", "extra_images"):
            if key in data and not isinstance(data[key], list):
                data[key] = []

        # An invoice always has at least one row
        items = data.get("items")
        if not isinstance(items, list) or not items:
            data["items"] = [LineItem(quantity=Decimal("1"))]

        return data

    @property
    def has_number(self) -> bool:
        """Whether a non-blank invoice number is already set."""
        return bool(self.number.strip())

    @property
    def tax_exempt(self) -> bool:
        """No VAT is charged under the small-business regime."""
        return self.kleinunternehmer


def _valid_period(period) -> bool:
    if not isinstance(period, dict):
        return False
    start = period.get("fromISO", period.get("from_iso"))
    end = period.get("toISO", period.get("to_iso"))
    if not isinstance(start, str) or not isinstance(end, str):
        return False
    return parse_iso_date(start) is not None and parse_iso_date(end) is not None


class VatBucket(BaseModel):
    """Items sharing one VAT rate."""

    rate: Decimal
    net_sum: Decimal
    vat_amount: Decimal


class InvoiceTotals(BaseModel):
    """Monetary breakdown of an invoice, rounded to cents at each step."""

    subtotal_net: Decimal
    vat_buckets: list[VatBucket]
    vat_total: Decimal
    grand_total: Decimal
    line_totals: list[Decimal] = Field(default_factory=list)


class FinalizedInvoice(BaseModel):
    """Invoice with its number settled and totals computed, ready for rendering."""

    invoice: InvoiceData
    totals: InvoiceTotals
    notes: list[str]
    number_assigned: bool
    file_names: dict[Language, str]
