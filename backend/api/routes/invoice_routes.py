"""
Invoice Consolidation Routes
User flow: POST year/month/email → list → download → merge → upload → email
"""

import asyncio
import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.error_codes import ErrorCode, ErrorMessage
from api.models.request_model import GenerateInvoicesRequest, GenerateInvoicesResponse, parse_int_prefix
from services.delivery_service import DeliveryService
from services.invoice_pipeline import InvoicePipeline, MONTH_NAMES, month_date_range, normalize_month

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Invoices"])

SUCCESS_MESSAGE = "All data is sent to admin email."


def get_pipeline(request: Request) -> InvoicePipeline:
    return request.app.state.pipeline


def get_delivery(request: Request) -> DeliveryService:
    return request.app.state.delivery


def error_json(error_code: ErrorCode, details: str = None) -> JSONResponse:
    content, status_code = ErrorMessage.get_error_response(error_code, details)
    return JSONResponse(status_code=status_code, content=content)


@router.api_route("/generate-pdf", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def generate_pdf_method_not_allowed():
    return error_json(ErrorCode.METHOD_NOT_ALLOWED)


@router.post("/generate-pdf", response_model=GenerateInvoicesResponse)
async def generate_pdf(
    request: Request,
    pipeline: InvoicePipeline = Depends(get_pipeline),
    delivery: DeliveryService = Depends(get_delivery)
):
    """
    Consolidate a month of invoices for every configured account

    **Body**: `{"year": "2024", "month": "3", "email": "a@b.com"}`

    **Flow**:
    1. List invoices per account for the month
    2. Download and merge PDFs per status category
    3. Upload merged files, email the requester and the administrator
    """
    start_time = time.time()

    # Step 1: Validate body
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        return error_json(ErrorCode.MISSING_FIELDS)

    try:
        body = GenerateInvoicesRequest.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"[GENERATE] Rejected body: {e.error_count()} validation error(s)")
        return error_json(ErrorCode.MISSING_FIELDS)

    if body.missing_fields():
        return error_json(ErrorCode.MISSING_FIELDS)

    year = parse_int_prefix(body.year)
    month = parse_int_prefix(body.month)

    if year is None or month is None:
        return error_json(ErrorCode.INVALID_YEAR_OR_MONTH)

    try:
        month_date_range(year, month)
    except (ValueError, OverflowError, OSError):
        return error_json(ErrorCode.INVALID_YEAR_OR_MONTH)

    norm_year, norm_month = normalize_month(year, month)
    month_name = MONTH_NAMES[norm_month - 1]
    logger.info(f"[GENERATE] Request for {month_name} {norm_year} from {body.email}")

    # Step 2: Build files and deliver
    try:
        pdf_paths = await pipeline.run(year, month)
        await asyncio.to_thread(delivery.deliver, pdf_paths, body.email, month_name, norm_year)

    except Exception as e:
        logger.error(f"[GENERATE] Error in processing request: {e}", exc_info=True)
        return error_json(ErrorCode.INTERNAL_SERVER_ERROR)

    execution_time_ms = int((time.time() - start_time) * 1000)
    logger.info(f"[GENERATE] ✅ Completed in {execution_time_ms}ms ({len(pdf_paths)} files)")

    return GenerateInvoicesResponse(success=True, message=SUCCESS_MESSAGE)
