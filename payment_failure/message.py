"""Building the notification message published for the email system."""

from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
from types import MappingProxyType
from typing import Union

from .exceptions import PayloadParseError
from .models import (
    NotificationMessage,
    PaymentFailureCallout,
    SelectedInvoiceItem,
    SubscriberAttributes,
)

DATA_EXTENSION_NAMES = MappingProxyType({
    '1': 'first-failed-payment-email',
    '2': 'second-failed-payment-email',
    '3': 'third-failed-payment-email',
})

CURRENCY_SYMBOLS = MappingProxyType({
    'GBP': '£',
    'AUD': '$',
    'EUR': '€',
    'USD': '$',
    'CAD': '$',
    'NZD': '$',
})

CENTS = Decimal('0.01')


def data_extension_name_for_attempt(failure_number: str) -> str:
    """Data extension (email variant) for a failed payment attempt."""
    try:
        return DATA_EXTENSION_NAMES[failure_number]
    except KeyError:
        raise PayloadParseError(f"Unknown failureNumber: {failure_number!r}") from None


def price(amount: Union[Decimal, int, float, str], currency: str) -> str:
    """
    Format an amount with its currency symbol, e.g. "£1,234.50".

    Unknown currencies are prefixed with their upper-cased code instead.
    """
    # str() first so floats keep their shortest repr instead of binary noise
    value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_EVEN)
    upper_case_currency = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(upper_case_currency, upper_case_currency)
    return f"{symbol}{value:,.2f}"


def service_date_format(d: date) -> str:
    """Render a service date as "05 March 2024"."""
    return d.strftime('%d %B %Y')


def to_message(callout: PaymentFailureCallout, item: SelectedInvoiceItem) -> NotificationMessage:
    """Combine a callout and its unpaid invoice item into a notification message."""
    return NotificationMessage(
        DataExtensionName=data_extension_name_for_attempt(callout.failureNumber),
        Address=callout.email,
        SubscriberKey=callout.email,
        SubscriberAttributes=SubscriberAttributes(
            SubscriberKey=callout.email,
            EmailAddress=callout.email,
            subscriber_id=item.subscriptionName,
            product=item.productName,
            payment_method=callout.paymentMethodType,
            card_type=callout.creditCardType,
            card_expiry_date=callout.creditCardExpirationMonth + '/' + callout.creditCardExpirationYear,
            first_name=callout.firstName,
            last_name=callout.lastName,
            paymentId=callout.paymentId,
            price=price(item.amount, callout.currency),
            serviceStartDate=service_date_format(item.serviceStartDate),
            serviceEndDate=service_date_format(item.serviceEndDate),
        ),
    )
