"""Error kinds raised while processing a payment failure callout."""


class PaymentFailureError(Exception):
    """Base exception for all payment failure processing errors."""


class ConfigurationUnavailable(PaymentFailureError):
    """Raised when the configuration cannot be loaded."""


class AuthenticationFailure(PaymentFailureError):
    """Raised when the request credentials do not match a trusted pair."""


class TenantMismatch(PaymentFailureError):
    """Raised when the callout tenant is not trusted."""


class PayloadParseError(PaymentFailureError):
    """Raised when the callout body is malformed or incomplete."""


class BillingApiError(PaymentFailureError):
    """Raised when the billing API call fails or returns an unreadable body."""


class DataUnavailable(PaymentFailureError):
    """Raised when no qualifying unpaid invoice or line item can be found."""

    def __init__(self, account_id: str):
        super().__init__(f"Could not retrieve additional data for account {account_id}")
        self.account_id = account_id


class PublishFailure(PaymentFailureError):
    """Raised when the notification could not be queued."""

    def __init__(self, account_id: str):
        super().__init__(f"Could not enqueue message for account {account_id}")
        self.account_id = account_id
