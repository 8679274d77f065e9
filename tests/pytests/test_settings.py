# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

"""
Tests for the provider settings and the clients built from them.
"""

import yaml
from pytest import fixture, raises

from sysdig_provider.common.settings import ProviderSettings
from sysdig_provider.exceptions import ConfigurationError
from sysdig_provider.provider import SysdigClients

ENV_VARS = [
    ProviderSettings.secure_token_env,
    ProviderSettings.secure_url_env,
    ProviderSettings.secure_tls_env,
    ProviderSettings.monitor_token_env,
    ProviderSettings.monitor_url_env,
    ProviderSettings.monitor_tls_env,
    ProviderSettings.extra_headers_env,
    ProviderSettings.log_level_env,
]


@fixture(autouse=True)
def clean_env(monkeypatch):
    for env_var in ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)


def write_config(tmp_path, content):
    config_file = tmp_path / "sysdig.yaml"
    config_file.write_text(yaml.dump(content))
    return str(config_file)


def test_defaults():
    settings = ProviderSettings()
    assert settings.secure_api_token is None
    assert settings.secure_url == "https://secure.sysdig.com"
    assert settings.monitor_url == "https://app.sysdigcloud.com"
    assert settings.secure_insecure_tls is False
    assert settings.monitor_insecure_tls is False
    assert settings.extra_headers == {}
    assert settings.timeout == 300.0


def test_from_environment(monkeypatch):
    monkeypatch.setenv("SYSDIG_SECURE_API_TOKEN", "secure-token")
    monkeypatch.setenv("SYSDIG_SECURE_URL", "https://eu1.app.sysdig.test/")
    monkeypatch.setenv("SYSDIG_SECURE_INSECURE_TLS", "true")
    monkeypatch.setenv("SYSDIG_MONITOR_API_TOKEN", "monitor-token")
    monkeypatch.setenv("SYSDIG_EXTRA_HEADERS", '{"X-Tenant": "one", "X-Count": 2}')
    settings = ProviderSettings()
    assert settings.secure_api_token == "secure-token"
    assert settings.secure_url == "https://eu1.app.sysdig.test"
    assert settings.secure_insecure_tls is True
    assert settings.monitor_api_token == "monitor-token"
    assert settings.monitor_insecure_tls is False
    assert settings.extra_headers == {"X-Tenant": "one", "X-Count": "2"}


def test_invalid_extra_headers(monkeypatch):
    monkeypatch.setenv("SYSDIG_EXTRA_HEADERS", "X-Tenant: one")
    with raises(ConfigurationError):
        ProviderSettings()
    monkeypatch.setenv("SYSDIG_EXTRA_HEADERS", '["X-Tenant"]')
    with raises(ConfigurationError):
        ProviderSettings()


def test_precedence(monkeypatch, tmp_path):
    monkeypatch.setenv("SYSDIG_SECURE_API_TOKEN", "env-token")
    monkeypatch.setenv("SYSDIG_MONITOR_API_TOKEN", "env-monitor-token")
    monkeypatch.setenv("SYSDIG_SECURE_INSECURE_TLS", "true")
    config_file = write_config(
        tmp_path,
        {
            "secure": {
                "api_token": "file-token",
                "url": "https://secure.sysdig.test",
                "insecure_tls": False,
            },
            "timeout": 30,
        },
    )
    settings = ProviderSettings(config_file)
    assert settings.secure_api_token == "file-token"
    assert settings.secure_insecure_tls is False
    assert settings.monitor_api_token == "env-monitor-token"
    assert settings.timeout == 30.0

    settings = ProviderSettings(config_file, secure_api_token="arg-token", timeout=5)
    assert settings.secure_api_token == "arg-token"
    assert settings.secure_url == "https://secure.sysdig.test"
    assert settings.timeout == 5.0


def test_invalid_config_file(tmp_path):
    with raises(ConfigurationError):
        ProviderSettings(write_config(tmp_path, {"secure": {"url": "secure.sysdig.test"}}))
    with raises(ConfigurationError):
        ProviderSettings(write_config(tmp_path, {"unknown": True}))
    with raises(ConfigurationError):
        ProviderSettings(write_config(tmp_path, ["secure"]))
    with raises(ConfigurationError):
        ProviderSettings(str(tmp_path / "missing.yaml"))


def test_clients_require_token():
    clients = SysdigClients(ProviderSettings(monitor_api_token="monitor-token"))
    with raises(ConfigurationError):
        clients.secure_client()
    monitor = clients.monitor_client()
    assert monitor is clients.monitor_client()
    assert monitor.url == "https://app.sysdigcloud.com"


def test_clients_settings():
    settings = ProviderSettings(
        secure_api_token="token",
        secure_url="https://secure.sysdig.test",
        secure_insecure_tls=True,
        extra_headers={"X-Tenant": "one"},
    )
    client = SysdigClients(settings).secure_client()
    assert client.insecure is True
    assert client.session.verify is False
    assert client.extra_headers == {"X-Tenant": "one"}
