"""Pytest configuration and fixtures."""

import json
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict
from unittest.mock import MagicMock

import pytest

from payment_failure.config import AppConfig, TrustedApiConfig, ZuoraRestConfig
from payment_failure.models import Invoice, InvoiceItem, InvoiceSummary


@pytest.fixture
def trusted_api_config() -> TrustedApiConfig:
    """Trusted caller credentials."""
    return TrustedApiConfig(apiClientId="validUser", apiToken="validPassword", tenantId="tenant-001")


@pytest.fixture
def app_config(trusted_api_config: TrustedApiConfig) -> AppConfig:
    """Configuration with one trusted caller."""
    return AppConfig(
        stage="DEV",
        trusted_api_configs=[trusted_api_config],
        zuora_rest=ZuoraRestConfig(baseUrl="https://www.test.com", username="fakeUser", password="fakePassword"),
        queue_name="subs-welcome-email",
    )


@pytest.fixture
def callout_data() -> Dict[str, str]:
    """A well formed payment failure callout."""
    return {
        "accountId": "accountId",
        "paymentId": "paymentId",
        "failureNumber": "1",
        "paymentMethodType": "CreditCard",
        "currency": "GBP",
        "email": "test.user123@guardian.co.uk",
        "firstName": "Test",
        "lastName": "User",
        "creditCardType": "Visa",
        "creditCardExpirationMonth": "12",
        "creditCardExpirationYear": "2017",
        "tenantId": "tenant-001",
    }


@pytest.fixture
def make_event() -> Callable[..., Dict[str, Any]]:
    """Build an API Gateway event around a callout body."""
    def _make_event(body: Any, api_client_id: str = "validUser", api_token: str = "validPassword") -> Dict[str, Any]:
        return {
            "queryStringParameters": {"apiClientId": api_client_id, "apiToken": api_token},
            "body": body if isinstance(body, str) else json.dumps(body),
        }
    return _make_event


def make_item(item_id: str = "item-1", charge_amount: str = "49.0",
              product: str = "Supporter", subscription: str = "A-S123") -> InvoiceItem:
    return InvoiceItem(
        id=item_id,
        chargeAmount=Decimal(charge_amount),
        productName=product,
        subscriptionName=subscription,
        serviceStartDate=date(2017, 3, 1),
        serviceEndDate=date(2017, 3, 31),
    )


def make_invoice(invoice_id: str = "inv-1", amount: str = "49.0", balance: str = "49.0",
                 status: str = "Posted", items=None) -> Invoice:
    return Invoice(
        id=invoice_id,
        amount=Decimal(amount),
        balance=Decimal(balance),
        status=status,
        invoiceItems=tuple(items if items is not None else [make_item()]),
    )


@pytest.fixture
def invoice_summary() -> InvoiceSummary:
    """One paid invoice followed by one unpaid invoice with a discount first."""
    return InvoiceSummary(invoices=(
        make_invoice("inv-paid", balance="0", items=[make_item("paid-item", product="Paid")]),
        make_invoice("inv-unpaid", amount="1234.5", balance="1234.5", items=[
            make_item("discount", charge_amount="-5.0", product="Discount"),
            make_item("charge", charge_amount="1239.5", product="Guardian Weekly", subscription="A-S999"),
        ]),
    ))


@pytest.fixture
def billing_client(invoice_summary: InvoiceSummary) -> MagicMock:
    """Billing client returning the invoice summary fixture."""
    client = MagicMock()
    client.get_invoice_transactions.return_value = invoice_summary
    return client


@pytest.fixture
def queue_client() -> MagicMock:
    """Queue client that accepts every message."""
    client = MagicMock()
    client.send_data_extension_to_queue.return_value = {"MessageId": "msg-1"}
    return client
