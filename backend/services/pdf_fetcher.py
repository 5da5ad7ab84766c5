"""
Resilient PDF Fetcher
Rate-limited, retrying downloads of invoice PDFs. A download that keeps
failing is dropped (logged, never raised) so one bad invoice cannot sink
the whole batch.
"""

import asyncio
import time
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

from services.invoice_models import FetchResult, InvoiceLink

logger = logging.getLogger(__name__)

MAX_RETRIES = 5  # after the first attempt, so 6 attempts in total


class RateLimiter:
    """
    Process-wide ceiling on outbound requests per second

    Slots are handed out at fixed spacing; callers sleep until theirs.
    Reservation happens without awaiting, so a single event loop needs no lock.
    """

    def __init__(self, max_per_second: float = 80):
        if max_per_second <= 0:
            raise ValueError("max_per_second must be positive")
        self.max_per_second = max_per_second
        self.interval = 1.0 / max_per_second
        self._next_slot = 0.0

    def reserve(self) -> float:
        """Claim the next slot and return how long to wait for it"""
        now = time.monotonic()
        slot = max(now, self._next_slot)
        self._next_slot = slot + self.interval
        return slot - now

    async def acquire(self) -> None:
        delay = self.reserve()
        if delay > 0:
            await asyncio.sleep(delay)


class PdfFetcher:
    """Downloads invoice PDFs through a shared rate limiter"""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        timeout_seconds: float = 30.0,
        max_retries: int = MAX_RETRIES,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.rate_limiter = rate_limiter
        self.timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self.max_retries = max_retries
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport
        )

    async def _download(self, client: httpx.AsyncClient, url: str, dest: Path) -> None:
        await self.rate_limiter.acquire()
        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                with open(dest, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
        except BaseException:
            dest.unlink(missing_ok=True)
            raise

    async def fetch(self, client: httpx.AsyncClient, link: InvoiceLink, dest: Path) -> FetchResult:
        """
        Download one invoice PDF to dest, retrying immediately on failure

        Returns:
            FetchResult with path on success, or dropped=True with the last error
        """
        attempts = 0
        last_error = ""

        while attempts <= self.max_retries:
            attempts += 1
            try:
                if not link.invoice_pdf:
                    raise ValueError(f"Invoice PDF URL missing for invoice number: {link.invoice_number}")

                await self._download(client, link.invoice_pdf, dest)
                logger.info(f"[FETCH] File downloaded: {dest}")
                return FetchResult(
                    invoice_number=link.invoice_number,
                    path=str(dest),
                    attempts=attempts
                )

            except Exception as e:
                last_error = str(e) or e.__class__.__name__
                logger.warning(f"[FETCH] Error downloading {link.invoice_number} (attempt {attempts}): {last_error}")

        logger.error(f"[FETCH] ❌ Failed to download {link.invoice_number} after {attempts} attempts")
        return FetchResult(
            invoice_number=link.invoice_number,
            dropped=True,
            reason=last_error,
            attempts=attempts
        )

    async def fetch_all(self, links: Sequence[InvoiceLink], directory: Path) -> List[FetchResult]:
        """
        Fetch every link concurrently into directory

        Waits for all downloads to settle. Results follow the order of links,
        not completion order.
        """
        directory = Path(directory)
        async with self._client() as client:
            results = await asyncio.gather(*[
                self.fetch(client, link, directory / f"{link.file_stem}.pdf")
                for link in links
            ])

        landed = sum(1 for r in results if r.ok)
        logger.info(f"[FETCH] {landed}/{len(results)} file(s) downloaded into {directory}")
        return list(results)
