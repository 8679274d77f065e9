#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Clients for the Sysdig Monitor and Sysdig Secure APIs.
"""

from sysdig_provider.client.common import SysdigClient
from sysdig_provider.client.monitor import MonitorClient
from sysdig_provider.client.secure import SecureClient

__all__ = ["MonitorClient", "SecureClient", "SysdigClient"]
