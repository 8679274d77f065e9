#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

import json

from pytest import mark, raises

from sysdig_provider.exceptions import DecodeError
from sysdig_provider.fargate.patch_options import resolve_patch_options
from sysdig_provider.fargate.stack import (
    assemble_stack,
    container_name,
    stack_container_definitions,
)

DEFINITIONS = [
    {
        "name": "app",
        "image": "nginx:latest",
        "environment": [{"name": "MODE", "value": "prod"}],
        "logConfiguration": {
            "logDriver": "awslogs",
            "options": {"awslogs-group": "app"},
        },
    },
    {"name": "worker", "command": ["run", "--fast"], "essential": False},
]


def test_assembled_container_definitions_round_trip():
    stack = assemble_stack(json.dumps(DEFINITIONS), resolve_patch_options())
    decoded = json.loads(json.dumps(stack))
    properties = decoded["Resources"]["kilt"]["Properties"]
    assert properties["ContainerDefinitions"] == DEFINITIONS
    assert properties["RequiresCompatibilities"] == ["FARGATE"]
    assert decoded["Resources"]["kilt"]["Type"] == "AWS::ECS::TaskDefinition"


def test_assemble_does_not_alias_input_list():
    definitions = json.loads(json.dumps(DEFINITIONS))
    stack = assemble_stack(definitions, resolve_patch_options())
    stack_container_definitions(stack)[0]["name"] = "changed"
    assert definitions == DEFINITIONS


def test_no_tag_without_ignored_containers():
    stack = assemble_stack("[]", resolve_patch_options())
    assert stack["Resources"]["kilt"]["Properties"]["Tags"] == []


def test_ignore_containers_tag():
    options = resolve_patch_options(ignore_containers=["worker", " app ", "db"])
    stack = assemble_stack(json.dumps(DEFINITIONS), options)
    assert stack["Resources"]["kilt"]["Properties"]["Tags"] == [
        {"Key": "kilt-ignore-containers", "Value": "worker:app:db"}
    ]


@mark.parametrize("raw", ["", "[{", "{}", '["app"]', "null"])
def test_malformed_container_definitions(raw):
    with raises(DecodeError):
        assemble_stack(raw, resolve_patch_options())


def test_stack_without_container_definitions():
    with raises(DecodeError):
        stack_container_definitions({"Resources": {}})


def test_container_name():
    assert container_name({"Name": "app"}) == "app"
    assert container_name({"Name": 12}) is None
    assert container_name({"name": "app"}) is None
    assert container_name("app") is None
