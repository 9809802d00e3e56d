"""
Delimited text export of sold lines.
"""
import csv
import io
from typing import Iterable

from kasir.schemas.sales import Sale

EXPORT_HEADER = ["Timestamp", "Buyer", "Item Name", "Quantity", "Unit Price", "Line Total"]


def render_sales_csv(sales: Iterable[Sale]) -> str:
    """
    One row per line item. Unit price is the price actually charged (after
    discount), so quantity times unit price equals the line total.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for sale in sales:
        for line in sale.line_items:
            writer.writerow([
                sale.timestamp.isoformat(),
                sale.buyer,
                line.name,
                line.quantity,
                f"{line.unit_price_after_discount:.2f}",
                f"{line.line_total:.2f}",
            ])
    return buffer.getvalue()
