"""Selection of the unpaid invoice item a payment failure refers to."""

import logging

from .exceptions import BillingApiError, DataUnavailable
from .models import Invoice, InvoiceItem, SelectedInvoiceItem

logger = logging.getLogger(__name__)


def is_unpaid(invoice: Invoice) -> bool:
    return invoice.balance > 0 and invoice.status == 'Posted'


def is_chargeable(item: InvoiceItem) -> bool:
    # drops discounts, holiday credits and free products
    return item.chargeAmount > 0


def resolve_invoice_item(account_id: str, billing_client) -> SelectedInvoiceItem:
    """
    Find the first unpaid invoice of an account and its first chargeable item.

    Invoices and items are scanned in the order the billing API returns them.

    Raises:
        DataUnavailable: If the billing API call fails, there is no unpaid
            invoice, or the unpaid invoice has no chargeable item.
    """
    logger.info(f"Attempting to get further details from account {account_id}")
    try:
        summary = billing_client.get_invoice_transactions(account_id)
    except BillingApiError as e:
        logger.error(f"Invoice lookup failed for account {account_id}: {e}")
        raise DataUnavailable(account_id) from e

    invoice = next((inv for inv in summary.invoices if is_unpaid(inv)), None)
    if invoice is None:
        logger.error(f"No unpaid invoice found for account {account_id} - nothing to do")
        raise DataUnavailable(account_id)
    logger.info(f"Found unpaid invoice {invoice.invoiceNumber or invoice.id} for account {account_id} "
                f"(balance {invoice.balance}, {len(invoice.invoiceItems)} items)")

    item = next((it for it in invoice.invoiceItems if is_chargeable(it)), None)
    if item is None:
        logger.error(f"Unpaid invoice {invoice.id} for account {account_id} has no chargeable items")
        raise DataUnavailable(account_id)

    selected = SelectedInvoiceItem(
        subscriptionName=item.subscriptionName,
        productName=item.productName,
        amount=invoice.amount,
        serviceStartDate=item.serviceStartDate,
        serviceEndDate=item.serviceEndDate,
    )
    logger.info(f"Payment failure information for account {account_id} is: {selected}")
    return selected
