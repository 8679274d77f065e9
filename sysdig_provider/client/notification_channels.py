#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Notification channels API and the current user team lookup.
"""

from __future__ import annotations

from compose_x_common.compose_x_common import keyisset, set_else_none

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import DecodeError, NotificationChannelNotFound

NOTIFICATION_CHANNELS_PATH = "/api/notificationChannels"
CURRENT_USER_PATH = "/api/users/me"


class TemplateConfigurationSection:
    def __init__(self, section_name: str, should_show: bool = True):
        self.section_name = section_name
        self.should_show = should_show

    def to_dict(self) -> dict:
        return {"sectionName": self.section_name, "shouldShow": self.should_show}

    @classmethod
    def from_dict(cls, definition: dict) -> TemplateConfigurationSection:
        return cls(
            set_else_none("sectionName", definition),
            bool(set_else_none("shouldShow", definition, alt_value=False)),
        )


class TemplateConfiguration:
    def __init__(self, template_key: str, sections: list = None):
        self.template_key = template_key
        self.sections = list(sections) if sections else []

    def to_dict(self) -> dict:
        return {
            "templateKey": self.template_key,
            "templateConfigurationSections": [
                section.to_dict() for section in self.sections
            ],
        }

    @classmethod
    def from_dict(cls, definition: dict) -> TemplateConfiguration:
        return cls(
            set_else_none("templateKey", definition),
            [
                TemplateConfigurationSection.from_dict(section)
                for section in set_else_none(
                    "templateConfigurationSections", definition, alt_value=[]
                )
            ],
        )


class NotificationChannelOptions:
    """
    Options of a notification channel. Only the fields used by the provider are modelled,
    the other ones are kept as received.
    """

    mapping = {
        "url": "url",
        "channel": "channel",
        "private_channel": "privateChannel",
        "notify_on_ok": "notifyOnOk",
        "notify_on_resolve": "notifyOnResolve",
        "send_test_notification": "sendTestNotification",
    }

    def __init__(self, **kwargs):
        self.url = set_else_none("url", kwargs, alt_value="")
        self.channel = set_else_none("channel", kwargs, alt_value="")
        self.private_channel = bool(set_else_none("private_channel", kwargs))
        self.notify_on_ok = bool(set_else_none("notify_on_ok", kwargs))
        self.notify_on_resolve = bool(set_else_none("notify_on_resolve", kwargs))
        self.send_test_notification = bool(
            set_else_none("send_test_notification", kwargs)
        )
        self.template_configuration = list(
            set_else_none("template_configuration", kwargs, alt_value=[])
        )
        self.extra = dict(set_else_none("extra", kwargs, alt_value={}))

    def to_dict(self) -> dict:
        definition = dict(self.extra)
        for attribute, key in self.mapping.items():
            definition[key] = getattr(self, attribute)
        if not self.channel:
            definition.pop("channel")
        definition["templateConfiguration"] = [
            template.to_dict() for template in self.template_configuration
        ]
        return definition

    @classmethod
    def from_dict(cls, definition: dict) -> NotificationChannelOptions:
        kwargs = {
            attribute: definition[key]
            for attribute, key in cls.mapping.items()
            if key in definition
        }
        kwargs["template_configuration"] = [
            TemplateConfiguration.from_dict(template)
            for template in set_else_none(
                "templateConfiguration", definition, alt_value=[]
            )
        ]
        kwargs["extra"] = {
            key: value
            for key, value in definition.items()
            if key not in cls.mapping.values() and key != "templateConfiguration"
        }
        return cls(**kwargs)


class NotificationChannel:
    def __init__(
        self,
        name: str,
        channel_type: str,
        enabled: bool = True,
        team_id: int = None,
        options: NotificationChannelOptions = None,
        version: int = None,
        channel_id: int = None,
    ):
        self.id = channel_id
        self.version = version
        self.type = channel_type
        self.name = name
        self.enabled = enabled
        self.team_id = team_id
        self.options = options if options else NotificationChannelOptions()

    def __repr__(self):
        return f"NotificationChannel({self.id}, {self.type}, {self.name})"

    def to_dict(self) -> dict:
        definition = {
            "id": self.id,
            "version": self.version,
            "type": self.type,
            "name": self.name,
            "enabled": self.enabled,
            "teamId": self.team_id,
            "options": self.options.to_dict(),
        }
        return {key: value for key, value in definition.items() if value is not None}

    @classmethod
    def from_dict(cls, definition: dict) -> NotificationChannel:
        return cls(
            name=set_else_none("name", definition),
            channel_type=set_else_none("type", definition),
            enabled=bool(set_else_none("enabled", definition)),
            team_id=set_else_none("teamId", definition),
            options=NotificationChannelOptions.from_dict(
                set_else_none("options", definition, alt_value={})
            ),
            version=set_else_none("version", definition),
            channel_id=set_else_none("id", definition),
        )


class NotificationChannelsClient:
    """
    Notification channels CRUD, mixed into :class:`~sysdig_provider.client.common.SysdigClient`
    """

    def notification_channels_url(self, channel_id: int = None) -> str:
        if channel_id is None:
            return f"{self.url}{NOTIFICATION_CHANNELS_PATH}"
        return f"{self.url}{NOTIFICATION_CHANNELS_PATH}/{channel_id}"

    def current_team_id(self) -> int:
        response = self.do_request("GET", f"{self.url}{CURRENT_USER_PATH}")
        if response.status_code != 200:
            raise self.error_from_response(response)
        user = self.decode(response, "user")
        if not isinstance(user, dict) or not keyisset("currentTeam", user):
            raise DecodeError("current user has no currentTeam")
        return user["currentTeam"]

    def _channel_from_response(self, response) -> NotificationChannel:
        return NotificationChannel.from_dict(
            self.decode(response, "notificationChannel")
        )

    def create_notification_channel(
        self, channel: NotificationChannel
    ) -> NotificationChannel:
        response = self.do_request(
            "POST",
            self.notification_channels_url(),
            {"notificationChannel": channel.to_dict()},
        )
        if response.status_code not in [200, 201]:
            raise self.error_from_response(response)
        return self._channel_from_response(response)

    def get_notification_channel_by_id(self, channel_id: int) -> NotificationChannel:
        response = self.do_request("GET", self.notification_channels_url(channel_id))
        if response.status_code == 404:
            raise NotificationChannelNotFound()
        if response.status_code != 200:
            raise self.error_from_response(response)
        return self._channel_from_response(response)

    def update_notification_channel(
        self, channel: NotificationChannel
    ) -> NotificationChannel:
        response = self.do_request(
            "PUT",
            self.notification_channels_url(channel.id),
            {"notificationChannel": channel.to_dict()},
        )
        if response.status_code != 200:
            raise self.error_from_response(response)
        return self._channel_from_response(response)

    def delete_notification_channel(self, channel_id: int) -> None:
        response = self.do_request(
            "DELETE", self.notification_channels_url(channel_id)
        )
        if response.status_code == 404:
            LOG.debug(f"Notification channel {channel_id} already deleted")
        elif response.status_code not in [200, 204]:
            raise self.error_from_response(response)
