#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resources and data sources exposed by the provider, by type name.
"""

from sysdig_provider.fargate import workload_agent
from sysdig_provider.resources import notification_channel_slack

RESOURCES = {
    notification_channel_slack.RESOURCE_NAME: notification_channel_slack,
}

DATA_SOURCES = {
    workload_agent.DATA_SOURCE_NAME: workload_agent.read_fargate_workload_agent,
}
