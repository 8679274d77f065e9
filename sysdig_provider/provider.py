#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Provider level objects: the API clients handed to every resource and data source.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sysdig_provider.common.settings import ProviderSettings

from sysdig_provider.client import MonitorClient, SecureClient
from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import ConfigurationError


class SysdigClients:
    """
    Builds the Monitor and Secure clients on first use, from the provider settings.
    """

    def __init__(self, settings: ProviderSettings):
        self.settings = settings
        self._monitor_client = None
        self._secure_client = None

    def monitor_client(self) -> MonitorClient:
        if self._monitor_client is None:
            if not self.settings.monitor_api_token:
                raise ConfigurationError(
                    "sysdig monitor client cannot be created, monitor API token is not set"
                )
            LOG.debug(f"Creating Sysdig Monitor client for {self.settings.monitor_url}")
            self._monitor_client = MonitorClient(
                self.settings.monitor_api_token,
                self.settings.monitor_url,
                insecure=self.settings.monitor_insecure_tls,
                extra_headers=self.settings.extra_headers,
                timeout=self.settings.timeout,
            )
        return self._monitor_client

    def secure_client(self) -> SecureClient:
        if self._secure_client is None:
            if not self.settings.secure_api_token:
                raise ConfigurationError(
                    "sysdig secure client cannot be created, secure API token is not set"
                )
            LOG.debug(f"Creating Sysdig Secure client for {self.settings.secure_url}")
            self._secure_client = SecureClient(
                self.settings.secure_api_token,
                self.settings.secure_url,
                insecure=self.settings.secure_insecure_tls,
                extra_headers=self.settings.extra_headers,
                timeout=self.settings.timeout,
            )
        return self._secure_client
