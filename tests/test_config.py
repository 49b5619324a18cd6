"""Tests for configuration loading."""

import io
import json
from pathlib import Path
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from payment_failure.config import (
    DEFAULT_QUEUE_NAME,
    TrustedApiConfig,
    config_key,
    load_config,
    parse_config,
)
from payment_failure.exceptions import ConfigurationUnavailable


@pytest.fixture
def raw_config() -> Dict[str, Any]:
    return {
        "stage": "CODE",
        "trustedApiConfig": {"apiClientId": "a", "apiToken": "b", "tenantId": "c"},
        "zuoraRestConfig": {"baseUrl": "https://rest.test.com/v1/", "username": "u", "password": "p"},
    }


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CONFIG_FILE", "CONFIG_BUCKET", "EMAIL_QUEUE_NAME", "Stage", "ZUORA_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)


class TestParseConfig:
    """Tests for parse_config."""

    def test_single_trusted_entry(self, raw_config) -> None:
        config = parse_config(raw_config, "CODE")

        assert config.stage == "CODE"
        assert config.trusted_api_configs == [TrustedApiConfig("a", "b", "c")]
        assert config.zuora_rest.baseUrl == "https://rest.test.com/v1"
        assert config.zuora_rest.timeout == 30.0
        assert config.queue_name == DEFAULT_QUEUE_NAME

    def test_several_trusted_entries(self, raw_config) -> None:
        raw_config["trustedApiConfig"] = [
            {"apiClientId": "a", "apiToken": "b", "tenantId": "c"},
            {"apiClientId": "d", "apiToken": "e", "tenantId": "f"},
        ]
        config = parse_config(raw_config, "CODE")
        assert [t.tenantId for t in config.trusted_api_configs] == ["c", "f"]

    def test_queue_name_override(self, raw_config, monkeypatch: pytest.MonkeyPatch) -> None:
        raw_config["queueName"] = "from-file"
        assert parse_config(raw_config, "CODE").queue_name == "from-file"

        monkeypatch.setenv("EMAIL_QUEUE_NAME", "from-env")
        assert parse_config(raw_config, "CODE").queue_name == "from-env"

    def test_stage_mismatch(self, raw_config) -> None:
        with pytest.raises(ConfigurationUnavailable, match="stage"):
            parse_config(raw_config, "PROD")

    @pytest.mark.parametrize("key", ["stage", "trustedApiConfig", "zuoraRestConfig"])
    def test_missing_section(self, raw_config, key: str) -> None:
        del raw_config[key]
        with pytest.raises(ConfigurationUnavailable, match=key):
            parse_config(raw_config, "CODE")

    def test_missing_credential(self, raw_config) -> None:
        del raw_config["trustedApiConfig"]["apiToken"]
        with pytest.raises(ConfigurationUnavailable, match="apiToken"):
            parse_config(raw_config, "CODE")

    def test_empty_trusted_list(self, raw_config) -> None:
        raw_config["trustedApiConfig"] = []
        with pytest.raises(ConfigurationUnavailable):
            parse_config(raw_config, "CODE")

    @pytest.mark.parametrize("section,key", [
        ("trustedApiConfig", "apiClientId"),
        ("trustedApiConfig", "apiToken"),
        ("trustedApiConfig", "tenantId"),
        ("zuoraRestConfig", "baseUrl"),
        ("zuoraRestConfig", "username"),
        ("zuoraRestConfig", "password"),
    ])
    @pytest.mark.parametrize("value", [None, 42, ["x"]])
    def test_values_must_be_strings(self, raw_config, section: str, key: str, value) -> None:
        raw_config[section][key] = value
        with pytest.raises(ConfigurationUnavailable, match=key):
            parse_config(raw_config, "CODE")


class TestLoadConfig:
    """Tests for load_config."""

    def test_from_file(self, raw_config, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(raw_config))
        monkeypatch.setenv("CONFIG_FILE", str(path))

        config = load_config("CODE")

        assert config.zuora_rest.username == "u"

    def test_stage_from_environment(self, raw_config, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(raw_config))
        monkeypatch.setenv("CONFIG_FILE", str(path))
        monkeypatch.setenv("Stage", "CODE")

        assert load_config().stage == "CODE"

    def test_from_s3(self, raw_config, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONFIG_BUCKET", "private-bucket")
        s3 = MagicMock()
        s3.get_object.return_value = {"Body": io.BytesIO(json.dumps(raw_config).encode("utf-8"))}

        config = load_config("CODE", s3_client=s3)

        s3.get_object.assert_called_once_with(Bucket="private-bucket", Key=config_key("CODE"))
        assert config.stage == "CODE"

    def test_config_key(self) -> None:
        assert config_key("PROD") == "PROD/payment-failure-lambdas.private.json"

    def test_s3_failure(self) -> None:
        s3 = MagicMock()
        s3.get_object.side_effect = ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        with pytest.raises(ConfigurationUnavailable):
            load_config("CODE", s3_client=s3)

    def test_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "missing.json"))
        with pytest.raises(ConfigurationUnavailable):
            load_config("CODE")

    def test_invalid_json(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        monkeypatch.setenv("CONFIG_FILE", str(path))
        with pytest.raises(ConfigurationUnavailable):
            load_config("CODE")

    def test_invalid_timeout(self, raw_config, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        raw_config["zuoraRestConfig"]["timeout"] = "soon"
        path = tmp_path / "config.json"
        path.write_text(json.dumps(raw_config))
        monkeypatch.setenv("CONFIG_FILE", str(path))
        with pytest.raises(ConfigurationUnavailable):
            load_config("CODE")
