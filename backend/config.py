"""
Runtime configuration
Environment-derived settings and the billing account map
"""

import json
import os
import tempfile
import logging
from pathlib import Path
from typing import Dict, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Cloudinary
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")

# Mail transport (Gmail SMTP by default)
GMAIL_EMAIL = os.getenv("GMAIL_EMAIL")
GMAIL_APP_PASSWORD = os.getenv("GMAIL_APP_PASSWORD")
SMTP_SERVER = os.getenv("SMTP_SERVER", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")

# Scratch area and downloads
SCRATCH_ROOT = Path(os.getenv("SCRATCH_ROOT", tempfile.gettempdir()))
DOWNLOAD_MAX_RPS = float(os.getenv("DOWNLOAD_MAX_RPS", "80"))
DOWNLOAD_TIMEOUT_SECONDS = float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "30"))

ACCOUNT_CONFIG_PATH = Path(
    os.getenv("ACCOUNT_CONFIG_PATH", Path(__file__).resolve().parent.parent / "config.json")
)


class ConfigurationError(RuntimeError):
    """Raised when a required setting or account secret is missing"""


def load_account_config(path: Optional[Path] = None) -> Dict[str, str]:
    """
    Load the account key -> secret env var mapping

    Args:
        path: JSON file to read (default: ACCOUNT_CONFIG_PATH)

    Returns:
        Mapping in file order
    """
    config_path = Path(path or ACCOUNT_CONFIG_PATH)

    if not config_path.exists():
        raise ConfigurationError(f"Account config not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        accounts = json.load(f)

    if not isinstance(accounts, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in accounts.items()
    ):
        raise ConfigurationError(f"Account config must map account keys to env var names: {config_path}")

    logger.info(f"Loaded {len(accounts)} billing account(s) from {config_path}")
    return accounts


def resolve_account_secret(account_key: str, env_var: str) -> str:
    """Look up an account's billing secret in the environment"""
    secret = os.getenv(env_var)
    if not secret:
        raise ConfigurationError(f"Secret for account '{account_key}' is not set ({env_var})")
    return secret
