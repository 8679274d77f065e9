#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""Sysdig Monitor client."""

from sysdig_provider.client.common import SysdigClient
from sysdig_provider.client.group_mapping import GroupMapper
from sysdig_provider.client.notification_channels import NotificationChannelsClient


class MonitorClient(GroupMapper, NotificationChannelsClient, SysdigClient):
    product = "monitor"
