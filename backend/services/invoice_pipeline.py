"""
Invoice Pipeline
Drives listing, downloading and merging for every configured billing account
"""

import asyncio
import calendar
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Tuple

from config import resolve_account_secret
from services.directory_stager import stage_directory
from services.invoice_lister import list_invoice_links
from services.invoice_models import CategorizedInvoices, InvoiceCategory
from services.pdf_consolidator import create_placeholder_pdf, merge_pdfs
from services.pdf_fetcher import PdfFetcher
from services.stripe_service import StripeBillingClient

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def normalize_month(year: int, month: int) -> Tuple[int, int]:
    """Roll an out-of-range month into the neighbouring year (13 -> January next year)"""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return year, month


def month_date_range(year: int, month: int) -> Tuple[int, int]:
    """
    Unix-second bounds of a calendar month in the server's local time zone

    Returns:
        (gte, lte): local midnight on the 1st and 23:59:59 on the last day,
        both inclusive
    """
    year, month = normalize_month(year, month)
    last_day = calendar.monthrange(year, month)[1]

    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59)
    return int(start.timestamp()), int(end.timestamp())


def output_file_name(account_key: str, category: InvoiceCategory, month_name: str, year: int) -> str:
    return f"{account_key.upper()}-{category.value}-{month_name}-{year}.pdf"


class InvoicePipeline:
    """
    Produces one consolidated PDF per (account, category)

    Accounts run in configuration order, categories in InvoiceCategory order.
    """

    def __init__(
        self,
        accounts: Dict[str, str],
        fetcher: PdfFetcher,
        scratch_root: Path,
        client_factory: Callable[..., object] = StripeBillingClient
    ):
        self.accounts = accounts
        self.fetcher = fetcher
        self.scratch_root = Path(scratch_root)
        self.client_factory = client_factory

    async def run(self, year: int, month: int) -> List[str]:
        """
        Build every output file for the given month

        Returns:
            Output paths, exactly two per configured account
        """
        year, month = normalize_month(year, month)
        month_name = MONTH_NAMES[month - 1]
        gte, lte = month_date_range(year, month)

        logger.info(f"[PIPELINE] {month_name} {year}: range {gte}..{lte}, {len(self.accounts)} account(s)")

        output_paths: List[str] = []
        for account_key, env_var in self.accounts.items():
            client = self.client_factory(resolve_account_secret(account_key, env_var), account_key=account_key)
            invoices = await asyncio.to_thread(list_invoice_links, client, gte, lte)
            output_paths.extend(
                await self.process_account(account_key, invoices, month_name, year)
            )

        logger.info(f"[PIPELINE] ✅ {len(output_paths)} file(s) ready")
        return output_paths

    async def process_account(
        self,
        account_key: str,
        invoices: CategorizedInvoices,
        month_name: str,
        year: int
    ) -> List[str]:
        paths = []
        for category in InvoiceCategory:
            output_path = self.scratch_root / output_file_name(account_key, category, month_name, year)
            links = invoices.links_for(category)
            staging_path = self.scratch_root / f"{category.value.lower()}_{account_key}"
            staging_dir = await asyncio.to_thread(stage_directory, staging_path)

            if links:
                results = await self.fetcher.fetch_all(links, staging_dir)
                landed = [r.path for r in results if r.ok and Path(r.path).exists()]

                if landed:
                    await asyncio.to_thread(merge_pdfs, landed, output_path)
                else:
                    logger.warning(
                        f"[PIPELINE] All {len(links)} download(s) dropped for {account_key}/{category.value}, "
                        f"writing placeholder"
                    )
                    await asyncio.to_thread(create_placeholder_pdf, output_path)
            else:
                await asyncio.to_thread(create_placeholder_pdf, output_path)

            paths.append(str(output_path))

        return paths
