"""Line item model.

Amounts are Decimal throughout. Wire keys follow the browser form
(qty, unitPrice, vatRate); snake_case names are accepted too.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from core.money import to_decimal


class LineItem(BaseModel):
    """
    One invoice row.

    No range checks: negative quantities or prices are computed as given.
    Missing or null numbers count as zero.
    """

    description: str = ""
    quantity: Decimal = Field(Decimal("0"), alias="qty")
    unit: str | None = None
    unit_price: Decimal = Field(Decimal("0"), alias="unitPrice")  # net, per unit
    vat_rate: Decimal = Field(Decimal("0"), alias="vatRate")  # percent; 0 = exempt

    model_config = {"populate_by_name": True}

    @field_validator("quantity", "unit_price", "vat_rate", mode="before")
    @classmethod
    def coerce_number(cls, value):
        return to_decimal(value)

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value
