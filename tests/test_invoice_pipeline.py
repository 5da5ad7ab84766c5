import asyncio
from datetime import datetime
from types import SimpleNamespace

import httpx
import pytest
from pypdf import PdfReader

from config import ConfigurationError
from services.invoice_pipeline import InvoicePipeline, month_date_range, normalize_month, output_file_name
from services.invoice_models import InvoiceCategory
from services.pdf_consolidator import PLACEHOLDER_TEXT
from services.pdf_fetcher import PdfFetcher, RateLimiter
from conftest import pdf_bytes


def invoice(id, status, url=None):
    return SimpleNamespace(
        id=id, status=status, number=id.upper(),
        invoice_pdf=url or f"https://pay.example/{id}",
        amount_paid=0, amount_due=0,
    )


class FakeBillingClient:
    def __init__(self, invoices):
        self.invoices = invoices

    def list_invoices(self, limit, created, starting_after=None):
        return SimpleNamespace(data=self.invoices, has_more=False)


def make_pipeline(tmp_path, accounts, invoices_by_account, handler):
    def factory(api_key, account_key=None):
        return FakeBillingClient(invoices_by_account.get(account_key, []))

    fetcher = PdfFetcher(RateLimiter(10_000), transport=httpx.MockTransport(handler))
    return InvoicePipeline(accounts, fetcher, tmp_path, client_factory=factory)


def page_count(path):
    return len(PdfReader(path).pages)


class TestMonthDateRange:

    def test_covers_whole_month_in_local_time(self):
        gte, lte = month_date_range(2024, 3)

        assert datetime.fromtimestamp(gte) == datetime(2024, 3, 1, 0, 0, 0)
        assert datetime.fromtimestamp(lte) == datetime(2024, 3, 31, 23, 59, 59)

    def test_leap_february(self):
        _, lte = month_date_range(2024, 2)
        assert datetime.fromtimestamp(lte) == datetime(2024, 2, 29, 23, 59, 59)

    def test_december_ends_on_the_31st(self):
        _, lte = month_date_range(2023, 12)
        assert datetime.fromtimestamp(lte) == datetime(2023, 12, 31, 23, 59, 59)

    def test_month_13_rolls_into_next_january(self):
        assert normalize_month(2024, 13) == (2025, 1)
        assert month_date_range(2024, 13) == month_date_range(2025, 1)

    def test_month_0_rolls_into_previous_december(self):
        assert normalize_month(2024, 0) == (2023, 12)


def test_output_file_name():
    name = output_file_name("acme", InvoiceCategory.PAID_AND_OPEN, "March", 2024)
    assert name == "ACME-Paid_And_Open-March-2024.pdf"


def test_end_to_end_paid_and_draft(tmp_path, monkeypatch):
    monkeypatch.setenv("STRIPE_KEY_ACME", "sk_test_acme")
    widths = {"/in_1": 300, "/in_2": 400, "/in_3": 500}
    pipeline = make_pipeline(
        tmp_path,
        {"acme": "STRIPE_KEY_ACME"},
        {"acme": [invoice("in_1", "paid"), invoice("in_2", "paid"), invoice("in_3", "draft")]},
        lambda request: httpx.Response(200, content=pdf_bytes(1, width=widths[request.url.path])),
    )

    paths = asyncio.run(pipeline.run(2024, 3))

    assert paths == [
        str(tmp_path / "ACME-Paid_And_Open-March-2024.pdf"),
        str(tmp_path / "ACME-Other_Status-March-2024.pdf"),
    ]
    paid_pages = PdfReader(paths[0]).pages
    assert [round(float(p.mediabox.width)) for p in paid_pages] == [300, 400]
    assert page_count(paths[1]) == 1
    assert sorted(p.name for p in (tmp_path / "paid_and_open_acme").iterdir()) == ["IN_1.pdf", "IN_2.pdf"]


def test_two_paths_per_account_without_invoices(tmp_path, monkeypatch):
    monkeypatch.setenv("KEY_A", "sk_a")
    monkeypatch.setenv("KEY_B", "sk_b")
    pipeline = make_pipeline(
        tmp_path,
        {"a": "KEY_A", "b": "KEY_B"},
        {},
        lambda request: httpx.Response(500),
    )

    paths = asyncio.run(pipeline.run(2024, 3))

    assert len(paths) == 4
    assert [p.rsplit("/", 1)[-1] for p in paths] == [
        "A-Paid_And_Open-March-2024.pdf",
        "A-Other_Status-March-2024.pdf",
        "B-Paid_And_Open-March-2024.pdf",
        "B-Other_Status-March-2024.pdf",
    ]
    for path in paths:
        reader = PdfReader(path)
        assert len(reader.pages) == 1
        assert PLACEHOLDER_TEXT in reader.pages[0].extract_text()


def test_all_downloads_dropped_falls_back_to_placeholder(tmp_path, monkeypatch):
    monkeypatch.setenv("STRIPE_KEY_ACME", "sk_test_acme")
    pipeline = make_pipeline(
        tmp_path,
        {"acme": "STRIPE_KEY_ACME"},
        {"acme": [invoice("in_1", "paid"), invoice("in_2", "open")]},
        lambda request: httpx.Response(500),
    )

    paths = asyncio.run(pipeline.run(2024, 3))

    reader = PdfReader(paths[0])
    assert len(reader.pages) == 1
    assert PLACEHOLDER_TEXT in reader.pages[0].extract_text()


def test_partial_download_failure_merges_survivors(tmp_path, monkeypatch):
    monkeypatch.setenv("STRIPE_KEY_ACME", "sk_test_acme")

    def handler(request):
        if request.url.path == "/in_2":
            return httpx.Response(404)
        return httpx.Response(200, content=pdf_bytes(2))

    pipeline = make_pipeline(
        tmp_path,
        {"acme": "STRIPE_KEY_ACME"},
        {"acme": [invoice("in_1", "paid"), invoice("in_2", "paid"), invoice("in_3", "open")]},
        handler,
    )

    paths = asyncio.run(pipeline.run(2024, 3))

    assert page_count(paths[0]) == 4


def test_missing_account_secret_aborts(tmp_path, monkeypatch):
    monkeypatch.delenv("STRIPE_KEY_MISSING", raising=False)
    pipeline = make_pipeline(tmp_path, {"acme": "STRIPE_KEY_MISSING"}, {}, lambda request: httpx.Response(200))

    with pytest.raises(ConfigurationError):
        asyncio.run(pipeline.run(2024, 3))


def test_listing_error_aborts(tmp_path, monkeypatch):
    monkeypatch.setenv("STRIPE_KEY_ACME", "sk_test_acme")

    class FailingClient:
        def __init__(self, api_key, account_key=None):
            pass

        def list_invoices(self, **kwargs):
            raise RuntimeError("listing failed")

    fetcher = PdfFetcher(RateLimiter(10_000), transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    pipeline = InvoicePipeline({"acme": "STRIPE_KEY_ACME"}, fetcher, tmp_path, client_factory=FailingClient)

    with pytest.raises(RuntimeError, match="listing failed"):
        asyncio.run(pipeline.run(2024, 3))


class SlowFirstTransport(httpx.AsyncBaseTransport):
    """Answers later for invoices listed earlier, so completion order is reversed"""

    def __init__(self, delays, widths):
        self.delays = delays
        self.widths = widths

    async def handle_async_request(self, request):
        path = request.url.path
        await asyncio.sleep(self.delays[path])
        return httpx.Response(200, content=pdf_bytes(1, width=self.widths[path]), request=request)


def test_merge_follows_listing_order_not_completion_or_name_order(tmp_path, monkeypatch):
    monkeypatch.setenv("STRIPE_KEY_ACME", "sk_test_acme")
    invoices = [
        SimpleNamespace(id=f"in_{n}", status="paid", number=number,
                        invoice_pdf=f"https://pay.example/{number}", amount_paid=0, amount_due=0)
        for n, number in enumerate(["Z-9", "M-5", "A-1"])
    ]
    transport = SlowFirstTransport(
        delays={"/Z-9": 0.3, "/M-5": 0.15, "/A-1": 0.0},
        widths={"/Z-9": 300, "/M-5": 400, "/A-1": 500},
    )
    fetcher = PdfFetcher(RateLimiter(10_000), transport=transport)
    pipeline = InvoicePipeline(
        {"acme": "STRIPE_KEY_ACME"}, fetcher, tmp_path,
        client_factory=lambda api_key, account_key=None: FakeBillingClient(invoices),
    )

    paths = asyncio.run(pipeline.run(2024, 3))

    widths = [round(float(p.mediabox.width)) for p in PdfReader(paths[0]).pages]
    assert widths == [300, 400, 500]


def test_staging_runs_off_the_event_loop_thread(tmp_path, monkeypatch):
    import threading
    from services import invoice_pipeline
    from services.directory_stager import stage_directory

    monkeypatch.setenv("STRIPE_KEY_ACME", "sk_test_acme")
    threads = []

    def recording_stage(path):
        threads.append(threading.current_thread())
        return stage_directory(path)

    monkeypatch.setattr(invoice_pipeline, "stage_directory", recording_stage)
    pipeline = make_pipeline(tmp_path, {"acme": "STRIPE_KEY_ACME"}, {}, lambda request: httpx.Response(200))

    asyncio.run(pipeline.run(2024, 3))

    assert len(threads) == 2
    assert all(t is not threading.main_thread() for t in threads)
