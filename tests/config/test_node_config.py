from __future__ import annotations

import pytest

from dkgclient.config import (
    ConfigurationError,
    MissingConfigurationError,
    PollingConfig,
    build_node_config,
    get_node_config,
)


def test_build_node_config_requires_endpoint_and_port() -> None:
    with pytest.raises(ConfigurationError, match="Endpoint and port are required"):
        build_node_config("", 8900)
    with pytest.raises(ConfigurationError, match="Endpoint and port are required"):
        build_node_config("localhost", None)


def test_base_url_follows_ssl_flag() -> None:
    assert build_node_config("localhost", 8900).base_url == "http://localhost:8900"
    assert build_node_config("node.example.org", "443", use_ssl=True).base_url == (
        "https://node.example.org:443"
    )
    assert build_node_config("https://node.example.org/", 8900).base_url == (
        "https://node.example.org:8900"
    )


def test_node_resilience_defaults_to_node_base_url() -> None:
    resilience = build_node_config("localhost", 8900).resilience_config()

    assert resilience.name == "dkg-node"
    assert resilience.base_url == "http://localhost:8900"
    assert resilience.ratelimit is not None
    assert resilience.retry.build().total == 3


def test_polling_defaults() -> None:
    polling = PollingConfig()

    assert polling.max_number_of_retries == 5
    assert polling.frequency == 5.0
    assert polling.timeout_in_seconds == 25.0
    assert polling.number_of_results == 2000
    assert polling.settle_delay == 0.5


def test_polling_rejects_negative_values() -> None:
    with pytest.raises(ConfigurationError, match="frequency"):
        PollingConfig(frequency=-1)


def test_get_node_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DKG_NODE_ENDPOINT", "node.example.org")
    monkeypatch.setenv("DKG_NODE_PORT", "8900")
    monkeypatch.setenv("DKG_NODE_USE_SSL", "true")
    monkeypatch.setenv("DKG_MAX_NUMBER_OF_RETRIES", "2")
    monkeypatch.setenv("DKG_FREQUENCY", "0.25")

    config = get_node_config()

    assert config.base_url == "https://node.example.org:8900"
    assert config.polling.max_number_of_retries == 2
    assert config.polling.frequency == 0.25


def test_get_node_config_reports_missing_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DKG_NODE_ENDPOINT", raising=False)
    monkeypatch.setenv("DKG_NODE_PORT", "8900")

    with pytest.raises(MissingConfigurationError, match="DKG_NODE_ENDPOINT"):
        get_node_config()
