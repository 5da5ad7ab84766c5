"""
Pydantic models for the invoice consolidation pipeline
Invoice links, status categories and download outcomes
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class InvoiceCategory(str, Enum):
    """Output partitions, in processing order"""
    PAID_AND_OPEN = "Paid_And_Open"
    OTHER_STATUS = "Other_Status"


# Statuses routed to PAID_AND_OPEN; everything else is OTHER_STATUS
PAID_OR_OPEN_STATUSES = ("paid", "open")


class InvoiceLink(BaseModel):
    """Essential fields of one provider invoice"""
    invoice_id: Optional[str] = None
    invoice_pdf: Optional[str] = None
    invoice_number: Optional[str] = None
    amount_paid: Optional[int] = None
    amount_due: Optional[int] = None

    @property
    def file_stem(self) -> str:
        """Invoice number verbatim, or the provider id when no number was assigned"""
        return self.invoice_number or self.invoice_id or "invoice"


class CategorizedInvoices(BaseModel):
    """One account's invoices split by status"""
    paid_and_open: List[InvoiceLink] = Field(default_factory=list)
    other_status: List[InvoiceLink] = Field(default_factory=list)

    def links_for(self, category: InvoiceCategory) -> List[InvoiceLink]:
        if category == InvoiceCategory.PAID_AND_OPEN:
            return self.paid_and_open
        return self.other_status


class FetchResult(BaseModel):
    """Best-effort download outcome: a landed file or a dropped invoice"""
    invoice_number: Optional[str] = None
    path: Optional[str] = None
    dropped: bool = False
    reason: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return not self.dropped and self.path is not None
