"""
Delivery Stage
Uploads consolidated PDFs and notifies the requester and the administrator
"""

import logging
from typing import List, Optional, Sequence

from config import ConfigurationError
from services.cloudinary_service import CloudinaryService
from services.email_service import MailTransport

logger = logging.getLogger(__name__)


class DeliveryService:
    """Upload-then-email; any failure propagates to the caller"""

    def __init__(self, storage: CloudinaryService, mailer: MailTransport, admin_email: Optional[str]):
        self.storage = storage
        self.mailer = mailer
        self.admin_email = admin_email

    def upload_all(self, pdf_paths: Sequence[str]) -> List[str]:
        urls = []
        for pdf_path in pdf_paths:
            urls.append(self.storage.upload_file(pdf_path)["url"])
        return urls

    def deliver(self, pdf_paths: Sequence[str], requester_email: str, month_name: str, year: int) -> List[str]:
        """
        Upload every file, then send both emails over one SMTP session

        Args:
            pdf_paths: Consolidated files, attached to the requester email
            requester_email: Address from the request
            month_name: e.g. "March"
            year: e.g. 2024

        Returns:
            Public URLs of the uploaded files, in pdf_paths order
        """
        if not self.admin_email:
            raise ConfigurationError("ADMIN_EMAIL is not configured")

        logger.info(f"[DELIVERY] Uploading {len(pdf_paths)} file(s)")
        urls = self.upload_all(pdf_paths)

        with self.mailer.session() as session:
            session.send(
                to=requester_email,
                subject=f"Your Invoices for {month_name} {year}",
                body=f"Please find attached your invoices for {month_name} {year}.",
                attachments=list(pdf_paths)
            )
            logger.info(f"[DELIVERY] Email sent to user: {requester_email}")

            session.send(
                to=self.admin_email,
                subject=f"Invoices Generated for {month_name} {year}",
                body=(
                    f"Invoices have been generated and sent to {requester_email}.\n"
                    f"Uploaded PDF URLs:\n"
                    + "\n".join(urls)
                )
            )
            logger.info(f"[DELIVERY] Email sent to admin: {self.admin_email}")

        return urls
