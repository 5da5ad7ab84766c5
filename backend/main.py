"""
Invoice Consolidation API
Main FastAPI application: monthly Stripe invoice PDFs, merged and delivered
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

import config
from api.routes.invoice_routes import router as invoice_router
from services.cloudinary_service import CloudinaryService
from services.delivery_service import DeliveryService
from services.email_service import MailTransport, smtp_config_from_env
from services.invoice_pipeline import InvoicePipeline
from services.pdf_fetcher import PdfFetcher, RateLimiter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build process-scoped services once and share them through app.state"""
    rate_limiter = RateLimiter(config.DOWNLOAD_MAX_RPS)
    fetcher = PdfFetcher(rate_limiter, timeout_seconds=config.DOWNLOAD_TIMEOUT_SECONDS)

    app.state.pipeline = InvoicePipeline(
        accounts=config.load_account_config(),
        fetcher=fetcher,
        scratch_root=config.SCRATCH_ROOT
    )
    app.state.delivery = DeliveryService(
        storage=CloudinaryService(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            api_key=config.CLOUDINARY_API_KEY,
            api_secret=config.CLOUDINARY_API_SECRET
        ),
        mailer=MailTransport(smtp_config_from_env(
            server=config.SMTP_SERVER,
            port=config.SMTP_PORT,
            user=config.GMAIL_EMAIL,
            password=config.GMAIL_APP_PASSWORD
        )),
        admin_email=config.ADMIN_EMAIL
    )

    logger.info(f"Services ready: {len(app.state.pipeline.accounts)} account(s), {rate_limiter.max_per_second:g} downloads/s")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Invoice Consolidation API",
    description="Merges a month of Stripe invoice PDFs per account and delivers them by email",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(invoice_router)


@app.get("/")
async def root():
    """Health check and API info"""
    return {
        "status": "online",
        "service": "Invoice Consolidation API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "generate": "POST /api/generate-pdf"
        },
        "workflow": "List invoices → Download PDFs → Merge per status → Upload → Email"
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "services": {
            "billing": "Stripe (per configured account)",
            "pdf": "pypdf merge + reportlab placeholder",
            "storage": "Cloudinary (raw uploads)",
            "email": f"SMTP ({config.SMTP_SERVER})"
        }
    }


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Invoice Consolidation API...")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
