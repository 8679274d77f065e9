#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

import json

from pytest import fixture

from sysdig_provider.client import SecureClient
from sysdig_provider.client.notification_channels import (
    NotificationChannel,
    NotificationChannelOptions,
    TemplateConfiguration,
)
from sysdig_provider.common.resource_data import ResourceData
from sysdig_provider.resources import notification_channel_slack as slack

SLACK_URL = "https://hooks.slack.test/services/T0/B0/X"


class Clients:
    def __init__(self, session):
        self.client = SecureClient("token", "https://secure.sysdig.test", session=session)

    def secure_client(self):
        return self.client


@fixture
def clients(session):
    return Clients(session)


def channel_body(channel="#alerts", template_key=slack.SLACK_TEMPLATE_KEY_V2, version=1):
    templates = []
    if template_key:
        templates.append(
            {
                "templateKey": template_key,
                "templateConfigurationSections": [
                    {
                        "sectionName": slack.SECURE_EVENT_NOTIFICATION_CONTENT_SECTION,
                        "shouldShow": True,
                    }
                ],
            }
        )
    return {
        "notificationChannel": {
            "id": 5,
            "version": version,
            "type": "SLACK",
            "name": "alerts",
            "enabled": True,
            "teamId": 7,
            "options": {
                "url": SLACK_URL,
                "channel": channel,
                "privateChannel": False,
                "notifyOnOk": False,
                "notifyOnResolve": True,
                "sendTestNotification": False,
                "templateConfiguration": templates,
            },
        }
    }


def slack_data(**kwargs):
    values = {
        "name": "alerts",
        "url": SLACK_URL,
        "channel": "#alerts",
        "notify_when_resolved": True,
        "template_version": "v2",
    }
    values.update(kwargs)
    return ResourceData(values)


def test_create(clients, session, response):
    session.queue(
        response(200, {"user": {"currentTeam": 7}}),
        response(201, channel_body()),
        response(200, channel_body()),
    )
    data = slack_data()
    assert slack.create(data, clients) == []
    assert data.id == "5"
    assert data.get("version") == 1
    assert data.get("team_id") == 7
    assert data.get("template_version") == "v2"

    post = session.sent[1][0]
    assert post.method == "POST"
    assert post.url.endswith("/api/notificationChannels")
    payload = json.loads(post.body)["notificationChannel"]
    assert payload["type"] == "SLACK"
    assert payload["teamId"] == 7
    assert payload["enabled"] is True
    assert payload["options"]["notifyOnResolve"] is True
    assert payload["options"]["templateConfiguration"][0]["templateKey"] == (
        slack.SLACK_TEMPLATE_KEY_V2
    )
    assert "id" not in payload


def test_create_rejects_invalid_definition(clients, session, response):
    session.queue(response(200, {"user": {"currentTeam": 7}}))
    diagnostics = slack.create(slack_data(url=""), clients)
    assert diagnostics.has_error
    assert len(session.sent) == 1


def test_read_removes_missing_channel(clients, session, response):
    session.queue(response(404, reason="Not Found"))
    data = slack_data()
    data.set_id("5")
    assert slack.read(data, clients) == []
    assert data.id == ""


def test_read_invalid_id(clients):
    data = slack_data()
    data.set_id("not-a-number")
    assert slack.read(data, clients).has_error


def test_read_multiple_templates(clients, session, response):
    body = channel_body()
    templates = body["notificationChannel"]["options"]["templateConfiguration"]
    templates.append(dict(templates[0]))
    session.queue(response(200, body))
    data = slack_data()
    data.set_id("5")
    diagnostics = slack.read(data, clients)
    assert diagnostics.has_error
    assert "only one configuration" in diagnostics[0].summary


def test_update_keeps_channel_empty_when_hidden(clients, session, response):
    session.queue(
        response(200, {"user": {"currentTeam": 7}}),
        response(200, channel_body(channel="")),
        response(200, channel_body(channel="", version=2)),
        response(200, channel_body(channel="", version=2)),
    )
    data = slack_data(version=1, private_channel=True)
    data.set_id("5")
    assert slack.update(data, clients) == []
    put = session.sent[2][0]
    assert put.method == "PUT"
    assert put.url.endswith("/api/notificationChannels/5")
    payload = json.loads(put.body)["notificationChannel"]
    assert payload["id"] == 5
    assert payload["version"] == 1
    assert "channel" not in payload["options"]
    assert data.get("version") == 2
    assert data.get("channel") == ""


def test_update_api_error(clients, session, response):
    session.queue(
        response(200, {"user": {"currentTeam": 7}}),
        response(200, channel_body()),
        response(409, {"message": "Conflict", "errors": [{"reason": "version mismatch"}]}),
    )
    data = slack_data(version=1)
    data.set_id("5")
    diagnostics = slack.update(data, clients)
    assert diagnostics.has_error
    assert diagnostics[0].summary == "Conflict, version mismatch"


def test_delete(clients, session, response):
    session.queue(response(204))
    data = slack_data()
    data.set_id("5")
    assert slack.delete(data, clients) == []
    assert session.sent[0][0].method == "DELETE"


def test_template_version_from_channel():
    channel = NotificationChannel("alerts", "SLACK")
    assert slack.template_version_from_channel(channel) is None
    channel.options = NotificationChannelOptions(
        template_configuration=[TemplateConfiguration(slack.SLACK_TEMPLATE_KEY_V1)]
    )
    assert slack.template_version_from_channel(channel) == "v1"
    assert slack.template_configuration("v3") == []


def test_channel_diff_suppressed():
    assert slack.channel_diff_suppressed("#alerts", "#alerts")
    assert slack.channel_diff_suppressed("#alerts", "")
    assert not slack.channel_diff_suppressed("#alerts", "#other")


def test_import_state():
    data = slack_data()
    data.set_id("5")
    assert slack.import_state(data, None) == [data]


def test_registered():
    from sysdig_provider.resources import DATA_SOURCES, RESOURCES

    assert RESOURCES[slack.RESOURCE_NAME] is slack
    assert "sysdig_fargate_workload_agent" in DATA_SOURCES
