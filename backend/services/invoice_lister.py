"""
Invoice Lister
Pages through an account's invoices for a date range and splits them by status
"""

import logging
from typing import Optional

from services.invoice_models import CategorizedInvoices, InvoiceLink, PAID_OR_OPEN_STATUSES

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def _field(obj, name: str):
    """Read a field from a Stripe object or a plain dict"""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def to_invoice_link(invoice) -> InvoiceLink:
    return InvoiceLink(
        invoice_id=_field(invoice, "id"),
        invoice_pdf=_field(invoice, "invoice_pdf"),
        invoice_number=_field(invoice, "number"),
        amount_paid=_field(invoice, "amount_paid"),
        amount_due=_field(invoice, "amount_due"),
    )


def list_invoice_links(client, gte: int, lte: int) -> CategorizedInvoices:
    """
    Collect every invoice created in [gte, lte] and partition by status

    Args:
        client: Billing client exposing list_invoices(limit, created, starting_after)
        gte: Range start, Unix seconds (inclusive)
        lte: Range end, Unix seconds (inclusive)

    Returns:
        CategorizedInvoices in listing order

    Raises:
        Whatever the billing client raises; no partial result is returned
    """
    result = CategorizedInvoices()
    starting_after: Optional[str] = None
    pages = 0

    while True:
        page = client.list_invoices(
            limit=PAGE_SIZE,
            created={"gte": gte, "lte": lte},
            starting_after=starting_after,
        )
        pages += 1

        data = _field(page, "data") or []
        if not data:
            break

        for invoice in data:
            link = to_invoice_link(invoice)
            if _field(invoice, "status") in PAID_OR_OPEN_STATUSES:
                result.paid_and_open.append(link)
            else:
                result.other_status.append(link)

        starting_after = _field(data[-1], "id")

        if not _field(page, "has_more"):
            break

    logger.info(
        f"[LISTER] {pages} page(s): {len(result.paid_and_open)} paid/open, "
        f"{len(result.other_status)} other"
    )
    return result
