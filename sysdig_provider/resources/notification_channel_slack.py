#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resource ``sysdig_secure_notification_channel_slack``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sysdig_provider.common.resource_data import ResourceData
    from sysdig_provider.provider import SysdigClients

from sysdig_provider.client.notification_channels import (
    NotificationChannel,
    NotificationChannelOptions,
    TemplateConfiguration,
    TemplateConfigurationSection,
)
from sysdig_provider.common.logging import LOG
from sysdig_provider.common.resource_data import Diagnostics
from sysdig_provider.exceptions import (
    NotificationChannelNotFound,
    SysdigBaseException,
)
from sysdig_provider.specs import validate_definition

RESOURCE_NAME = "sysdig_secure_notification_channel_slack"
NOTIFICATION_CHANNEL_TYPE_SLACK = "SLACK"
SLACK_TEMPLATE_KEY_V1 = "SLACK_SECURE_EVENT_NOTIFICATION_TEMPLATE_METADATA_v1"
SLACK_TEMPLATE_KEY_V2 = "SLACK_SECURE_EVENT_NOTIFICATION_TEMPLATE_METADATA_v2"
SECURE_EVENT_NOTIFICATION_CONTENT_SECTION = "SECURE_EVENT_NOTIFICATION_CONTENT"
TEMPLATE_KEYS = {"v1": SLACK_TEMPLATE_KEY_V1, "v2": SLACK_TEMPLATE_KEY_V2}

DEFAULTS = {
    "enabled": True,
    "notify_when_ok": False,
    "notify_when_resolved": False,
    "send_test_notification": False,
    "private_channel": False,
}


def channel_diff_suppressed(old: str, new: str) -> bool:
    """
    Channels of private slack notification channels not created by the user come back
    empty, no diff in that case.
    """
    return old == new or new == ""


def channel_id(data: ResourceData) -> int:
    try:
        return int(data.id)
    except (TypeError, ValueError) as error:
        raise SysdigBaseException(
            f"invalid notification channel id {data.id!r}"
        ) from error


def template_configuration(template_version: str) -> list:
    if template_version not in TEMPLATE_KEYS:
        return []
    return [
        TemplateConfiguration(
            TEMPLATE_KEYS[template_version],
            [TemplateConfigurationSection(SECURE_EVENT_NOTIFICATION_CONTENT_SECTION)],
        )
    ]


def template_version_from_channel(channel: NotificationChannel):
    """
    :return: v1 or v2, None when no template is configured
    :raises SysdigBaseException: more than one template configuration
    """
    templates = channel.options.template_configuration
    if not templates:
        return None
    if len(templates) > 1:
        raise SysdigBaseException(
            "expected slack notification templates to have only one configuration, "
            f"found {len(templates)}"
        )
    if templates[0].template_key == SLACK_TEMPLATE_KEY_V2:
        return "v2"
    return "v1"


def get_value(data: ResourceData, key: str):
    value = data.get(key)
    return DEFAULTS.get(key) if value is None else value


def slack_channel_from_resource_data(
    data: ResourceData, team_id: int
) -> NotificationChannel:
    validate_definition(data.to_dict(), "notification_channel_slack", RESOURCE_NAME)
    options = NotificationChannelOptions(
        url=data.get("url"),
        channel=data.get("channel") or "",
        private_channel=get_value(data, "private_channel"),
        notify_on_ok=get_value(data, "notify_when_ok"),
        notify_on_resolve=get_value(data, "notify_when_resolved"),
        send_test_notification=get_value(data, "send_test_notification"),
        template_configuration=template_configuration(data.get("template_version")),
    )
    return NotificationChannel(
        name=data.get("name"),
        channel_type=NOTIFICATION_CHANNEL_TYPE_SLACK,
        enabled=get_value(data, "enabled"),
        team_id=team_id,
        options=options,
    )


def slack_channel_to_resource_data(
    channel: NotificationChannel, data: ResourceData
) -> None:
    data.set("name", channel.name)
    data.set("enabled", channel.enabled)
    data.set("team_id", channel.team_id)
    data.set("version", channel.version)
    data.set("notify_when_ok", channel.options.notify_on_ok)
    data.set("notify_when_resolved", channel.options.notify_on_resolve)
    data.set("send_test_notification", channel.options.send_test_notification)
    data.set("url", channel.options.url)
    data.set("channel", channel.options.channel)
    data.set("private_channel", channel.options.private_channel)
    template_version = template_version_from_channel(channel)
    if template_version:
        data.set("template_version", template_version)


def create(data: ResourceData, clients: SysdigClients) -> Diagnostics:
    try:
        client = clients.secure_client()
        team_id = client.current_team_id()
        channel = slack_channel_from_resource_data(data, team_id)
        channel = client.create_notification_channel(channel)
    except SysdigBaseException as error:
        return Diagnostics.from_error(error)
    data.set_id(str(channel.id))
    LOG.info(f"{RESOURCE_NAME} - created {channel.id}")
    return read(data, clients)


def read(data: ResourceData, clients: SysdigClients) -> Diagnostics:
    try:
        client = clients.secure_client()
        channel = client.get_notification_channel_by_id(channel_id(data))
    except NotificationChannelNotFound:
        LOG.warning(f"{RESOURCE_NAME} - {data.id} not found, removing from state")
        data.set_id("")
        return Diagnostics()
    except SysdigBaseException as error:
        return Diagnostics.from_error(error)
    try:
        slack_channel_to_resource_data(channel, data)
    except SysdigBaseException as error:
        return Diagnostics.from_error(error)
    return Diagnostics()


def update(data: ResourceData, clients: SysdigClients) -> Diagnostics:
    try:
        client = clients.secure_client()
        team_id = client.current_team_id()
        channel = slack_channel_from_resource_data(data, team_id)
        channel.version = data.get("version")
        channel.id = channel_id(data)
        # Without permissions on the slack channel, the API returns it empty and
        # rejects updates that set it.
        current = client.get_notification_channel_by_id(channel.id)
        if not current.options.channel:
            channel.options.channel = ""
        client.update_notification_channel(channel)
    except SysdigBaseException as error:
        return Diagnostics.from_error(error)
    return read(data, clients)


def delete(data: ResourceData, clients: SysdigClients) -> Diagnostics:
    try:
        clients.secure_client().delete_notification_channel(channel_id(data))
    except SysdigBaseException as error:
        return Diagnostics.from_error(error)
    return Diagnostics()


def import_state(data: ResourceData, clients: SysdigClients) -> list:
    """Passthrough import, the ID is the notification channel ID."""
    return [data]
