"""Callout authentication against the trusted API configuration."""

import hmac
from typing import Any, Dict, Sequence

from .config import TrustedApiConfig
from .models import PaymentFailureCallout


def _matches(supplied: str, trusted: str) -> bool:
    # JSON allows lone surrogates, which plain utf-8 cannot encode
    return hmac.compare_digest(
        supplied.encode('utf-8', 'surrogatepass'),
        trusted.encode('utf-8', 'surrogatepass'),
    )


def credentials_are_valid(event: Dict[str, Any], trusted_configs: Sequence[TrustedApiConfig]) -> bool:
    """
    Check the apiClientId/apiToken query string parameters of an API Gateway event.

    Every trusted entry is compared so the result does not depend on which
    entry matched.
    """
    params = event.get('queryStringParameters') or {}
    api_client_id = params.get('apiClientId')
    api_token = params.get('apiToken')
    if not isinstance(api_client_id, str) or not isinstance(api_token, str):
        return False

    valid = False
    for trusted in trusted_configs:
        id_ok = _matches(api_client_id, trusted.apiClientId)
        token_ok = _matches(api_token, trusted.apiToken)
        valid |= id_ok and token_ok
    return valid


def tenant_is_valid(callout: PaymentFailureCallout, trusted_configs: Sequence[TrustedApiConfig]) -> bool:
    """Check the tenant carried in the callout against the trusted tenants."""
    valid = False
    for trusted in trusted_configs:
        valid |= _matches(callout.tenantId, trusted.tenantId)
    return valid
