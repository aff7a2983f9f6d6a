"""Net, VAT and gross totals for a list of line items.

Rounding happens where each amount is produced (per line, per bucket, per
aggregate), never deferred to the end. Totals therefore carry the same
cent-level rounding drift as a printed invoice that adds up its rows.
"""

from decimal import Decimal

from core.models import InvoiceTotals, LineItem, VatBucket
from core.money import ZERO, round2

HUNDRED = Decimal("100")


def line_net(item: LineItem) -> Decimal:
    """Rounded net amount of one row."""
    return round2(item.quantity * item.unit_price)


def calculate(items: list[LineItem], tax_exempt: bool = False) -> InvoiceTotals:
    """
    Compute the monetary breakdown of an invoice.

    Args:
        items: Line items; values are used as given, negatives included
        tax_exempt: Small-business regime; suppresses VAT entirely

    Returns:
        Totals with one VAT bucket per distinct rate, ascending by rate
        (no buckets when tax_exempt)
    """
    nets = [line_net(item) for item in items]
    subtotal_net = round2(sum(nets, ZERO))

    if tax_exempt:
        return InvoiceTotals(
            subtotal_net=subtotal_net,
            vat_buckets=[],
            vat_total=ZERO,
            grand_total=subtotal_net,
            line_totals=nets,
        )

    by_rate: dict[Decimal, list[Decimal]] = {}
    for item, net in zip(items, nets):
        by_rate.setdefault(item.vat_rate, []).append(net)

    buckets = []
    for rate in sorted(by_rate):
        group_net = round2(sum(by_rate[rate], ZERO))
        buckets.append(VatBucket(
            rate=rate,
            net_sum=group_net,
            vat_amount=round2(group_net * rate / HUNDRED),
        ))

    vat_total = round2(sum((b.vat_amount for b in buckets), ZERO))

    return InvoiceTotals(
        subtotal_net=subtotal_net,
        vat_buckets=buckets,
        vat_total=vat_total,
        grand_total=round2(subtotal_net + vat_total),
        line_totals=nets,
    )
