"""Data models for payment failure notifications."""

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class PaymentFailureCallout:
    """The payment failure event posted by the billing provider."""
    accountId: str
    paymentId: str
    failureNumber: str   # "1", "2" or "3"
    paymentMethodType: str
    currency: str        # ISO code, any case
    email: str
    firstName: str
    lastName: str
    creditCardType: str
    creditCardExpirationMonth: str
    creditCardExpirationYear: str
    tenantId: str

    def loggable(self) -> str:
        """Identifiers safe to write to the logs."""
        return (
            f"accountId: {self.accountId}, paymentId: {self.paymentId}, "
            f"failureNumber: {self.failureNumber}, paymentMethodType: {self.paymentMethodType}, "
            f"currency: {self.currency}"
        )


@dataclass(frozen=True)
class InvoiceItem:
    """A single charge on an invoice."""
    id: str
    chargeAmount: Decimal
    productName: str
    subscriptionName: str
    serviceStartDate: date
    serviceEndDate: date
    chargeName: str = ""


@dataclass(frozen=True)
class Invoice:
    """An invoice with its items, in the order returned by the billing API."""
    id: str
    amount: Decimal
    balance: Decimal
    status: str          # e.g. "Posted", "Draft", "Canceled"
    invoiceNumber: str = ""
    invoiceItems: Tuple[InvoiceItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class InvoiceSummary:
    """All invoices of an account."""
    invoices: Tuple[Invoice, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SelectedInvoiceItem:
    """The unpaid invoice item a notification is about."""
    subscriptionName: str
    productName: str
    amount: Decimal      # invoice total, not the item amount
    serviceStartDate: date
    serviceEndDate: date


@dataclass(frozen=True)
class SubscriberAttributes:
    """Template attributes for the email system."""
    SubscriberKey: str
    EmailAddress: str
    subscriber_id: str
    product: str
    payment_method: str
    card_type: str
    card_expiry_date: str
    first_name: str
    last_name: str
    paymentId: str
    price: str
    serviceStartDate: str
    serviceEndDate: str


@dataclass(frozen=True)
class NotificationMessage:
    """Message published to the email queue."""
    DataExtensionName: str
    Address: str
    SubscriberKey: str
    SubscriberAttributes: SubscriberAttributes

    def to_dict(self) -> Dict[str, Any]:
        """Queue wire format."""
        return {
            'DataExtensionName': self.DataExtensionName,
            'To': {
                'Address': self.Address,
                'SubscriberKey': self.SubscriberKey,
                'ContactAttributes': {
                    'SubscriberAttributes': asdict(self.SubscriberAttributes),
                },
            },
        }
