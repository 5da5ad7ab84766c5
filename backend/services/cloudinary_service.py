"""Cloudinary storage service for consolidated invoice PDFs"""

import cloudinary
import cloudinary.uploader
import os
import logging
from typing import Dict, Optional

from config import ConfigurationError

logger = logging.getLogger(__name__)


class CloudinaryService:
    """
    Service for uploading merged invoice files to Cloudinary
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        folder: str = "invoices"
    ):
        """Initialize Cloudinary with explicit credentials"""
        self.folder = folder

        if not all([cloud_name, api_key, api_secret]):
            logger.warning("Cloudinary credentials not configured - uploads will fail")
            self.enabled = False
            return

        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True
        )

        self.enabled = True
        logger.info("Cloudinary service initialized")

    def upload_file(self, file_path: str) -> Dict[str, str]:
        """
        Upload a PDF to Cloudinary as an opaque raw resource

        Args:
            file_path: Local path to the file

        Returns:
            Dict with url, public_id and size

        Raises:
            ConfigurationError: credentials missing
            cloudinary.exceptions.Error: upload rejected
        """
        if not self.enabled:
            raise ConfigurationError("Cloudinary is not configured")

        logger.info(f"Uploading {os.path.basename(file_path)} to Cloudinary...")

        # PDFs go up as "raw" so Cloudinary does not treat them as images
        result = cloudinary.uploader.upload(
            file_path,
            resource_type="raw",
            folder=self.folder,
            use_filename=True,
            unique_filename=True
        )

        upload_info = {
            "url": result["secure_url"],
            "public_id": result.get("public_id"),
            "size": result.get("bytes")
        }

        logger.info(f"✅ Uploaded to Cloudinary: {upload_info['url']}")
        return upload_info
