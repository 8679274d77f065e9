#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

import json

import requests
from pytest import fixture

from sysdig_provider.fargate.kilt import KiltConfiguration, KiltRecipeConfig


def make_response(status_code, body=None, reason="OK", url="https://sysdig.test/api"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = url
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, bytes):
        response._content = body
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


class RecordingSession(requests.Session):
    """
    Session returning queued responses instead of calling the network.
    """

    def __init__(self, responses=None):
        super().__init__()
        self.responses = list(responses or [])
        self.sent = []

    def queue(self, *responses):
        self.responses += list(responses)

    def send(self, request, **kwargs):
        self.sent.append((request, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@fixture
def session():
    return RecordingSession()


@fixture
def kilt_config():
    recipe = KiltRecipeConfig(
        agent_image="quay.io/sysdig/workload-agent:latest",
        sysdig_access_key="access-key",
        collector_host="collector.sysdig.test",
        collector_port="6443",
    )
    return KiltConfiguration(recipe_config=recipe.to_json())


def passthrough_patcher(kilt_config, stack_json, cancel_event=None):
    return stack_json


@fixture
def passthrough():
    return passthrough_patcher


@fixture
def response():
    return make_response
