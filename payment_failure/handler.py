"""
Lambda handler for Zuora payment failure callouts.

Authenticates the callout, looks up the unpaid invoice it refers to and
queues a failed payment email for the email system.
"""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .auth import credentials_are_valid, tenant_is_valid
from .callout import event_body, parse_callout
from .config import AppConfig, load_config
from .exceptions import (
    AuthenticationFailure,
    ConfigurationUnavailable,
    DataUnavailable,
    PayloadParseError,
    PublishFailure,
    TenantMismatch,
)
from .invoices import resolve_invoice_item
from .message import to_message
from .models import PaymentFailureCallout
from .queue_client import SqsQueueClient
from .responses import bad_request, internal_server_error, successful_execution, unauthorized
from .zuora_client import ZuoraRestClient

# Configure logging
logger = logging.getLogger()
logger.setLevel(getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO))


class State(Enum):
    """Steps of callout processing. The last state reached decides the response."""
    RECEIVED = 'Received'
    AUTHENTICATED = 'Authenticated'
    PARSED = 'Parsed'
    TENANT_VALIDATED = 'TenantValidated'
    ENRICHED = 'Enriched'
    PUBLISHED = 'Published'
    SUCCESS = 'Success'
    UNAUTHORIZED = 'Unauthorized'
    BAD_REQUEST = 'BadRequest'
    ENRICHMENT_FAILED = 'EnrichmentFailed'
    PUBLISH_FAILED = 'PublishFailed'


def run_pipeline(event: Dict[str, Any], config: AppConfig, billing_client,
                 queue_client) -> Tuple[State, Optional[PaymentFailureCallout]]:
    """
    Run the callout through every step, returning the terminal state.

    Steps run in a fixed order: credentials, parsing, tenant, enrichment and
    publishing. The first failure ends processing. The parsed callout is
    returned alongside the state when parsing got that far.
    """
    state = State.RECEIVED
    callout = None
    try:
        if not credentials_are_valid(event, config.trusted_api_configs):
            raise AuthenticationFailure("Request from Zuora could not be authenticated")
        state = State.AUTHENTICATED
        logger.info(f"Authenticated request successfully in {config.stage}")

        callout = parse_callout(event_body(event))
        state = State.PARSED

        if not tenant_is_valid(callout, config.trusted_api_configs):
            raise TenantMismatch(f"Incorrect tenant id was provided for account {callout.accountId}")
        state = State.TENANT_VALIDATED
        logger.info(f"received {callout.loggable()}")

        item = resolve_invoice_item(callout.accountId, billing_client)
        state = State.ENRICHED

        queue_client.send_data_extension_to_queue(to_message(callout, item), callout.accountId)
        state = State.PUBLISHED
    except (AuthenticationFailure, TenantMismatch) as e:
        logger.info(f"{e} (after {state.value})")
        return State.UNAUTHORIZED, callout
    except PayloadParseError as e:
        logger.error(f"error parsing callout body: {e}")
        return State.BAD_REQUEST, callout
    except DataUnavailable as e:
        logger.error(f"{e} ({callout.loggable()})")
        return State.ENRICHMENT_FAILED, callout
    except PublishFailure as e:
        logger.error(f"{e} ({callout.loggable()})")
        return State.PUBLISH_FAILED, callout

    logger.info(f"Callout {state.value.lower()} for {callout.loggable()}")
    return State.SUCCESS, callout


def response_for(state: State, account_id: Optional[str] = None) -> Dict[str, Any]:
    """API Gateway response for a terminal state."""
    if state is State.SUCCESS:
        return successful_execution()
    if state is State.BAD_REQUEST:
        return bad_request()
    if state is State.UNAUTHORIZED:
        return unauthorized()
    if state is State.ENRICHMENT_FAILED:
        return internal_server_error(f"Could not retrieve additional data for account {account_id}")
    if state is State.PUBLISH_FAILED:
        return internal_server_error(f"Could not enqueue message for account {account_id}")
    raise ValueError(f"{state} is not a terminal state")


def process_callout(event: Dict[str, Any], config: AppConfig, billing_client, queue_client) -> Dict[str, Any]:
    """Process one callout event and return its API Gateway response."""
    state, callout = run_pipeline(event, config, billing_client, queue_client)
    return response_for(state, callout.accountId if callout else None)


_clients: Optional[Tuple[AppConfig, ZuoraRestClient, SqsQueueClient]] = None
_config_error: Optional[ConfigurationUnavailable] = None


def _load_clients() -> Tuple[AppConfig, ZuoraRestClient, SqsQueueClient]:
    """
    Configuration and clients, created once per execution context.

    A configuration failure is remembered, so every later request in the
    same execution context fails the same way.
    """
    global _clients, _config_error
    if _config_error is not None:
        raise _config_error
    if _clients is None:
        try:
            config = load_config()
            _clients = (config, ZuoraRestClient(config.zuora_rest), SqsQueueClient(config.queue_name))
        except ConfigurationUnavailable as e:
            _config_error = e
            raise
        except (BotoCoreError, ClientError) as e:
            _config_error = ConfigurationUnavailable(f"Unable to create AWS clients: {e}")
            raise _config_error from e
    return _clients


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Handle a payment failure callout from Zuora.
    Triggered by API Gateway.
    """
    stage = os.getenv('Stage', 'DEV')
    logger.info(f"Payment Failure Lambda is starting up in {stage}")
    try:
        config, billing_client, queue_client = _load_clients()
    except ConfigurationUnavailable as e:
        logger.error(f"Failed to load configuration: {e}")
        return internal_server_error("Failed to execute lambda - unable to load configuration")
    except Exception as e:
        logger.error(f"Error starting payment-failure: {str(e)}", exc_info=True)
        return internal_server_error("Internal server error")

    try:
        return process_callout(event, config, billing_client, queue_client)
    except Exception as e:
        logger.error(f"Error in payment-failure: {str(e)}", exc_info=True)
        return internal_server_error("Internal server error")
