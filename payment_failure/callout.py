"""Parsing of the payment failure callout body."""

import base64
import binascii
import json
from dataclasses import fields
from typing import Any, Dict, Union

from .exceptions import PayloadParseError
from .message import DATA_EXTENSION_NAMES
from .models import PaymentFailureCallout

CALLOUT_FIELDS = tuple(f.name for f in fields(PaymentFailureCallout))


def event_body(event: Dict[str, Any]) -> str:
    """Return the raw body of an API Gateway event."""
    body = event.get('body')
    if not isinstance(body, str):
        raise PayloadParseError("Request has no body")
    if event.get('isBase64Encoded'):
        try:
            return base64.b64decode(body, validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise PayloadParseError(f"Body is not valid base64: {e}") from e
    return body


def parse_callout(body: Union[str, bytes]) -> PaymentFailureCallout:
    """
    Parse and validate a payment failure callout.

    Every field of PaymentFailureCallout is required and must be a string.
    Unknown fields are ignored.

    Raises:
        PayloadParseError: If the body is not a JSON object, a field is
            missing or has the wrong type, or failureNumber is not a known
            attempt.
    """
    try:
        data = json.loads(body)
    except (ValueError, TypeError) as e:
        raise PayloadParseError(f"Callout body is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PayloadParseError("Callout body must be a JSON object")

    missing = [name for name in CALLOUT_FIELDS if name not in data]
    if missing:
        raise PayloadParseError(f"Missing required fields: {', '.join(missing)}")

    wrong_type = [name for name in CALLOUT_FIELDS if not isinstance(data[name], str)]
    if wrong_type:
        raise PayloadParseError(f"Fields must be strings: {', '.join(wrong_type)}")

    if data['failureNumber'] not in DATA_EXTENSION_NAMES:
        raise PayloadParseError(f"Unknown failureNumber: {data['failureNumber']!r}")

    return PaymentFailureCallout(**{name: data[name] for name in CALLOUT_FIELDS})
