"""Zuora REST API client."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

import requests

from .config import ZuoraRestConfig
from .exceptions import BillingApiError
from .models import Invoice, InvoiceItem, InvoiceSummary

logger = logging.getLogger(__name__)

INVOICE_TRANSACTIONS_ROUTE = "transactions/invoices/accounts/{account_id}"


class ZuoraRestClient:
    """Client for the Zuora REST endpoints used by the payment failure flow."""

    def __init__(self, config: ZuoraRestConfig, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            config: Zuora REST configuration.
            session: Optional session, mostly for tests.
        """
        self.config = config
        self.session = session or requests.Session()

    def build_request(self, route: str, method: str = "GET") -> requests.Request:
        """Build an authenticated request for a route relative to the base URL."""
        return requests.Request(
            method,
            f"{self.config.baseUrl}/{route}",
            headers={
                "apiAccessKeyId": self.config.username,
                "apiSecretAccessKey": self.config.password,
                "Accept": "application/json",
            },
        )

    def _send(self, request: requests.Request) -> Dict[str, Any]:
        prepared = self.session.prepare_request(request)
        try:
            response = self.session.send(prepared, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f"Request to Zuora failed: {e}")
            raise BillingApiError("Request to Zuora was unsuccessful") from e

        if not response.ok:
            logger.error(f"Zuora returned {response.status_code} for {request.url}")
            raise BillingApiError("Request to Zuora was unsuccessful")

        try:
            data = response.json(parse_float=Decimal)
        except ValueError as e:
            logger.error(f"Zuora returned a body that is not JSON: {e}")
            raise BillingApiError("Error when converting Zuora response to case class") from e
        if not isinstance(data, dict):
            raise BillingApiError("Error when converting Zuora response to case class")
        # Zuora reports some failures as 200 with success=false
        if data.get("success") is False:
            logger.error(f"Zuora reported an unsuccessful call for {request.url}: {data.get('reasons')}")
            raise BillingApiError("Request to Zuora was unsuccessful")
        return data

    def get_invoice_transactions(self, account_id: str) -> InvoiceSummary:
        """
        Fetch the invoices of an account with their items.

        Raises:
            BillingApiError: If the call fails or the response cannot be read.
        """
        route = INVOICE_TRANSACTIONS_ROUTE.format(account_id=account_id)
        data = self._send(self.build_request(route))
        try:
            return to_invoice_summary(data)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            logger.error(f"Could not read invoice transactions for account {account_id}: {e!r}")
            raise BillingApiError("Error when converting Zuora response to case class") from e


def _money(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got {value!r}")
    return Decimal(str(value))


def _to_invoice_item(raw: Dict[str, Any]) -> InvoiceItem:
    return InvoiceItem(
        id=raw["id"],
        chargeAmount=_money(raw["chargeAmount"]),
        productName=raw["productName"],
        subscriptionName=raw["subscriptionName"],
        serviceStartDate=date.fromisoformat(raw["serviceStartDate"]),
        serviceEndDate=date.fromisoformat(raw["serviceEndDate"]),
        chargeName=raw.get("chargeName", ""),
    )


def _to_invoice(raw: Dict[str, Any]) -> Invoice:
    return Invoice(
        id=raw["id"],
        amount=_money(raw["amount"]),
        balance=_money(raw["balance"]),
        status=raw["status"],
        invoiceNumber=raw.get("invoiceNumber", ""),
        invoiceItems=tuple(_to_invoice_item(item) for item in raw.get("invoiceItems", [])),
    )


def to_invoice_summary(data: Dict[str, Any]) -> InvoiceSummary:
    """Convert an invoice transactions response body, keeping API order."""
    return InvoiceSummary(invoices=tuple(_to_invoice(invoice) for invoice in data["invoices"]))
