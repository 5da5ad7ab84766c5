"""Stripe billing client bound to one account's secret key"""

import logging
from typing import Any, Dict, Optional

import stripe

logger = logging.getLogger(__name__)


class StripeBillingClient:
    """
    Thin wrapper around the Stripe invoice API for a single account

    Each configured account gets its own instance so secrets never leak
    between accounts through the module-level stripe.api_key.
    """

    def __init__(self, api_key: str, account_key: Optional[str] = None):
        self.api_key = api_key
        self.account_key = account_key

    def list_invoices(
        self,
        limit: int,
        created: Dict[str, int],
        starting_after: Optional[str] = None
    ) -> Any:
        """
        Fetch one page of invoices

        Args:
            limit: Page size
            created: Range filter, e.g. {"gte": ..., "lte": ...}
            starting_after: Cursor (id of the previous page's last invoice)

        Returns:
            Stripe ListObject with `data` and `has_more`
        """
        params: Dict[str, Any] = {"limit": limit, "created": created}
        if starting_after:
            params["starting_after"] = starting_after

        logger.debug(f"[STRIPE] Listing invoices for {self.account_key}: {params}")
        return stripe.Invoice.list(api_key=self.api_key, **params)
