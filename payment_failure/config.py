"""Configuration management."""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from .exceptions import ConfigurationUnavailable

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_BUCKET = "payment-failure-lambdas-private"
DEFAULT_QUEUE_NAME = "subs-welcome-email"


@dataclass(frozen=True)
class TrustedApiConfig:
    """Credentials and tenant a callout must present."""
    apiClientId: str
    apiToken: str
    tenantId: str


@dataclass(frozen=True)
class ZuoraRestConfig:
    """Billing REST API configuration."""
    baseUrl: str      # e.g. "https://rest.apisandbox.zuora.com/v1"
    username: str
    password: str
    timeout: float = 30.0


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    stage: str
    trusted_api_configs: List[TrustedApiConfig]
    zuora_rest: ZuoraRestConfig
    queue_name: str


def config_key(stage: str) -> str:
    """S3 key of the private configuration for a stage."""
    return f"{stage}/payment-failure-lambdas.private.json"


def _require(data: Dict[str, Any], key: str, section: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise ConfigurationUnavailable(f"Missing '{key}' in {section}")
    return data[key]


def _require_str(data: Dict[str, Any], key: str, section: str) -> str:
    value = _require(data, key, section)
    if not isinstance(value, str):
        raise ConfigurationUnavailable(f"'{key}' in {section} must be a string")
    return value


def parse_config(raw: Dict[str, Any], stage: str) -> AppConfig:
    """
    Build an AppConfig from the private JSON document.

    Raises:
        ConfigurationUnavailable: If a required value is missing or the
            document belongs to another stage.
    """
    config_stage = _require(raw, "stage", "configuration")
    if config_stage != stage:
        raise ConfigurationUnavailable(
            f"Configuration stage '{config_stage}' does not match the running stage '{stage}'"
        )

    trusted = _require(raw, "trustedApiConfig", "configuration")
    # A single trusted caller can be given as an object instead of a list
    if isinstance(trusted, dict):
        trusted = [trusted]
    if not isinstance(trusted, list) or not trusted:
        raise ConfigurationUnavailable("trustedApiConfig must contain at least one entry")
    trusted_api_configs = [
        TrustedApiConfig(
            apiClientId=_require_str(entry, "apiClientId", "trustedApiConfig"),
            apiToken=_require_str(entry, "apiToken", "trustedApiConfig"),
            tenantId=_require_str(entry, "tenantId", "trustedApiConfig"),
        )
        for entry in trusted
    ]

    zuora = _require(raw, "zuoraRestConfig", "configuration")
    zuora_rest = ZuoraRestConfig(
        baseUrl=_require_str(zuora, "baseUrl", "zuoraRestConfig").rstrip("/"),
        username=_require_str(zuora, "username", "zuoraRestConfig"),
        password=_require_str(zuora, "password", "zuoraRestConfig"),
        timeout=float(zuora.get("timeout", os.getenv("ZUORA_TIMEOUT_SECONDS", "30"))),
    )

    queue_name = os.getenv("EMAIL_QUEUE_NAME") or raw.get("queueName") or DEFAULT_QUEUE_NAME

    return AppConfig(
        stage=stage,
        trusted_api_configs=trusted_api_configs,
        zuora_rest=zuora_rest,
        queue_name=queue_name,
    )


def _read_s3_config(stage: str, s3_client=None) -> Dict[str, Any]:
    bucket = os.getenv("CONFIG_BUCKET", DEFAULT_CONFIG_BUCKET)
    key = config_key(stage)
    s3 = s3_client or boto3.client("s3")
    logger.info(f"Loading configuration from s3://{bucket}/{key}")
    response = s3.get_object(Bucket=bucket, Key=key)
    return json.loads(response["Body"].read())


def _read_file_config(path: str) -> Dict[str, Any]:
    logger.info(f"Loading configuration from {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_config(stage: Optional[str] = None, s3_client=None) -> AppConfig:
    """
    Load configuration for the given stage.

    The private JSON document is read from CONFIG_FILE when set, otherwise
    from the configuration bucket in S3.

    Raises:
        ConfigurationUnavailable: If the configuration cannot be read or is invalid.
    """
    stage = stage or os.getenv("Stage", "DEV")
    config_file = os.getenv("CONFIG_FILE")

    try:
        if config_file:
            raw = _read_file_config(config_file)
        else:
            raw = _read_s3_config(stage, s3_client)
    except (ClientError, BotoCoreError, OSError, ValueError) as e:
        raise ConfigurationUnavailable(f"Unable to load configuration for stage {stage}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationUnavailable("Configuration document must be a JSON object")
    try:
        return parse_config(raw, stage)
    except (TypeError, ValueError) as e:
        raise ConfigurationUnavailable(f"Invalid configuration for stage {stage}: {e}") from e
