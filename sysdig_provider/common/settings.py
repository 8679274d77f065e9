#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the ProviderSettings class
"""

from __future__ import annotations

from json import JSONDecodeError, loads
from os import environ, path

import yaml
from compose_x_common.compose_x_common import keyisset, set_else_none

try:
    from yaml import CSafeLoader as Loader
except ImportError:
    from yaml import SafeLoader as Loader

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import ConfigurationError
from sysdig_provider.specs import validate_definition

TRUE_VALUES = ["1", "true", "yes", "on"]


def env_bool(name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


class ProviderSettings:
    """
    Class to handle the settings of the provider: API endpoints, tokens and TLS for
    Sysdig Secure and Sysdig Monitor.

    Priority goes to the keyword arguments, then the configuration file, then the
    environment variables, then the defaults.

    :ivar str secure_api_token:
    :ivar str secure_url:
    :ivar bool secure_insecure_tls:
    :ivar str monitor_api_token:
    :ivar str monitor_url:
    :ivar bool monitor_insecure_tls:
    :ivar dict extra_headers:
    :ivar float timeout: per request timeout, in seconds
    """

    secure_token_env = "SYSDIG_SECURE_API_TOKEN"
    secure_url_env = "SYSDIG_SECURE_URL"
    secure_tls_env = "SYSDIG_SECURE_INSECURE_TLS"
    monitor_token_env = "SYSDIG_MONITOR_API_TOKEN"
    monitor_url_env = "SYSDIG_MONITOR_URL"
    monitor_tls_env = "SYSDIG_MONITOR_INSECURE_TLS"
    extra_headers_env = "SYSDIG_EXTRA_HEADERS"
    log_level_env = "SYSDIG_LOG_LEVEL"

    secure_key = "secure"
    monitor_key = "monitor"

    default_secure_url = "https://secure.sysdig.com"
    default_monitor_url = "https://app.sysdigcloud.com"
    default_timeout = 300.0

    def __init__(self, config_file: str = None, **kwargs):
        file_content = self.load_config_file(config_file) if config_file else {}
        secure = set_else_none(self.secure_key, file_content, alt_value={})
        monitor = set_else_none(self.monitor_key, file_content, alt_value={})

        self.secure_api_token = self.pick(
            kwargs, "secure_api_token", secure, "api_token", self.secure_token_env
        )
        self.secure_url = self.pick(
            kwargs,
            "secure_url",
            secure,
            "url",
            self.secure_url_env,
            self.default_secure_url,
        ).rstrip("/")
        self.secure_insecure_tls = self.pick_bool(
            kwargs, "secure_insecure_tls", secure, self.secure_tls_env
        )
        self.monitor_api_token = self.pick(
            kwargs, "monitor_api_token", monitor, "api_token", self.monitor_token_env
        )
        self.monitor_url = self.pick(
            kwargs,
            "monitor_url",
            monitor,
            "url",
            self.monitor_url_env,
            self.default_monitor_url,
        ).rstrip("/")
        self.monitor_insecure_tls = self.pick_bool(
            kwargs, "monitor_insecure_tls", monitor, self.monitor_tls_env
        )
        self.extra_headers = self.set_extra_headers(kwargs, file_content)
        self.log_level = self.pick(
            kwargs, "log_level", file_content, "log_level", self.log_level_env
        )
        self.timeout = float(
            set_else_none(
                "timeout",
                kwargs,
                alt_value=set_else_none(
                    "timeout", file_content, alt_value=self.default_timeout
                ),
            )
        )

    def __repr__(self):
        return (
            f"ProviderSettings(secure_url={self.secure_url!r}, "
            f"monitor_url={self.monitor_url!r})"
        )

    @staticmethod
    def load_config_file(config_file: str) -> dict:
        """
        Loads the YAML (or JSON) configuration file and validates it.

        :param str config_file: path to the file
        :raises ConfigurationError: file missing, unparseable or invalid
        """
        if not path.exists(config_file):
            raise ConfigurationError(f"Configuration file {config_file} not found")
        LOG.info(f"Loading provider configuration from {config_file}")
        with open(config_file) as config_fd:
            try:
                content = yaml.load(config_fd.read(), Loader=Loader)
            except yaml.YAMLError as error:
                raise ConfigurationError(
                    f"Failed to parse configuration file {config_file}: {error}"
                ) from error
        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError(
                f"Configuration file {config_file} must be a mapping, "
                f"got {type(content).__name__}"
            )
        validate_definition(content, "provider", config_file)
        return content

    @staticmethod
    def pick(
        kwargs: dict,
        arg_name: str,
        section: dict,
        section_key: str,
        env_name: str,
        default: str = None,
    ):
        if keyisset(arg_name, kwargs):
            return kwargs[arg_name]
        if keyisset(section_key, section):
            return section[section_key]
        return environ.get(env_name) or default

    @staticmethod
    def pick_bool(kwargs: dict, arg_name: str, section: dict, env_name: str) -> bool:
        if arg_name in kwargs and kwargs[arg_name] is not None:
            return bool(kwargs[arg_name])
        if "insecure_tls" in section:
            return bool(section["insecure_tls"])
        return env_bool(env_name)

    def set_extra_headers(self, kwargs: dict, file_content: dict) -> dict:
        if keyisset("extra_headers", kwargs):
            return dict(kwargs["extra_headers"])
        if keyisset("extra_headers", file_content):
            return dict(file_content["extra_headers"])
        raw_headers = environ.get(self.extra_headers_env)
        if not raw_headers:
            return {}
        try:
            headers = loads(raw_headers)
        except JSONDecodeError as error:
            raise ConfigurationError(
                f"{self.extra_headers_env} must be a JSON object: {error}"
            ) from error
        if not isinstance(headers, dict):
            raise ConfigurationError(f"{self.extra_headers_env} must be a JSON object")
        return {str(key): str(value) for key, value in headers.items()}
