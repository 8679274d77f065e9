#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Kilt configuration and the default task definition patcher.

The patcher applies the Sysdig workload agent recipe to every Fargate task definition of a
stack document: each instrumented container is started through the instrumentation entry
point, gets the agent environment variables and mounts the volumes of the
``SysdigInstrumentation`` sidecar, which is added once to the task definition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from threading import Event

import json
from copy import deepcopy

from compose_x_common.compose_x_common import keyisset, set_else_none
from troposphere.ecs import Environment, RepositoryCredentials, VolumesFrom

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import PatchCancelled, PatchFailed
from sysdig_provider.fargate.fargate_params import (
    AGENT_ENVIRONMENT,
    FARGATE,
    FREE_FORM_KEYS,
    IGNORE_CONTAINERS_SEPARATOR,
    IGNORE_CONTAINERS_TAG,
    INSTRUMENT_ENTRY_POINT,
    KILT_DEFINITION,
    SIDECAR_ENTRY_POINT,
    SIDECAR_NAME,
    TASK_DEFINITION_TYPE,
)


class KiltRecipeConfig:
    """
    Values the agent recipe gets rendered with.
    """

    fields = [
        "sysdig_access_key",
        "agent_image",
        "orchestrator_host",
        "orchestrator_port",
        "collector_host",
        "collector_port",
        "sysdig_logging",
    ]

    def __init__(self, **kwargs):
        for field in self.fields:
            setattr(self, field, set_else_none(field, kwargs, alt_value=""))

    def to_dict(self) -> dict:
        return {field: getattr(self, field) for field in self.fields}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class KiltConfiguration:
    """
    Configuration handed as is to the patcher.

    :ivar str kilt: recipe definition
    :ivar str image_auth_secret: secret ARN used to pull the agent image
    :ivar bool opt_in: only patch task definitions tagged for it, unused by KiltPatcher
    :ivar bool use_repository_hints:
    :ivar str recipe_config: JSON of the KiltRecipeConfig
    """

    def __init__(
        self,
        recipe_config: str,
        kilt: str = KILT_DEFINITION,
        image_auth_secret: str = "",
        opt_in: bool = False,
        use_repository_hints: bool = True,
    ):
        self.kilt = kilt
        self.image_auth_secret = image_auth_secret or ""
        self.opt_in = opt_in
        self.use_repository_hints = use_repository_hints
        self.recipe_config = recipe_config

    def __repr__(self):
        return (
            f"KiltConfiguration(opt_in={self.opt_in}, "
            f"use_repository_hints={self.use_repository_hints})"
        )


def capitalize_key(key: str) -> str:
    return key[:1].upper() + key[1:]


def capitalize_keys(value):
    """
    Recursively turns ECS API (camelCase) keys into CloudFormation (PascalCase) keys.
    The content of free-form maps (log driver options, docker labels...) is left as is.
    """
    if isinstance(value, list):
        return [capitalize_keys(item) for item in value]
    if not isinstance(value, dict):
        return value
    capitalized = {}
    for key, item in value.items():
        new_key = capitalize_key(key) if isinstance(key, str) else key
        if new_key in FREE_FORM_KEYS:
            capitalized[new_key] = deepcopy(item)
        else:
            capitalized[new_key] = capitalize_keys(item)
    return capitalized


def cloudformation_container_definitions(stack: dict) -> dict:
    """
    Returns a copy of the stack with the task definitions container definitions keys in
    CloudFormation format.
    """
    stack = deepcopy(stack)
    for resource in set_else_none("Resources", stack, alt_value={}).values():
        if not isinstance(resource, dict) or resource.get("Type") != TASK_DEFINITION_TYPE:
            continue
        properties = set_else_none("Properties", resource, alt_value={})
        if isinstance(properties.get("ContainerDefinitions"), list):
            properties["ContainerDefinitions"] = capitalize_keys(
                properties["ContainerDefinitions"]
            )
    return stack


def ignored_from_tags(tags) -> list:
    if not isinstance(tags, list):
        return []
    for tag in tags:
        if isinstance(tag, dict) and tag.get("Key") == IGNORE_CONTAINERS_TAG:
            return [
                name
                for name in str(tag.get("Value", "")).split(IGNORE_CONTAINERS_SEPARATOR)
                if name
            ]
    return []


def as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class KiltPatcher:
    """
    Default patcher, callable as ``patcher(kilt_config, stack_json, cancel_event)`` and
    returning the patched stack JSON.
    """

    def __call__(
        self,
        kilt_config: KiltConfiguration,
        stack_json: str,
        cancel_event: Event = None,
    ) -> str:
        try:
            stack = json.loads(stack_json)
        except ValueError as error:
            raise PatchFailed(f"could not parse stack template: {error}") from error
        recipe = self.load_recipe(kilt_config)
        resources = stack.get("Resources") if isinstance(stack, dict) else None
        if not isinstance(resources, dict):
            raise PatchFailed("stack Resources must be an object")
        for resource_name, resource in resources.items():
            if cancel_event is not None and cancel_event.is_set():
                raise PatchCancelled("patch cancelled")
            if self.should_patch(resource):
                LOG.debug(f"Patching task definition {resource_name}")
                self.patch_task_definition(resource["Properties"], recipe, kilt_config)
        return json.dumps(stack)

    @staticmethod
    def load_recipe(kilt_config: KiltConfiguration) -> dict:
        try:
            recipe = json.loads(kilt_config.recipe_config or "{}")
        except ValueError as error:
            raise PatchFailed(f"could not parse recipe configuration: {error}") from error
        if not isinstance(recipe, dict):
            raise PatchFailed("recipe configuration must be a JSON object")
        if not keyisset("agent_image", recipe):
            raise PatchFailed("recipe configuration is missing agent_image")
        return recipe

    @staticmethod
    def should_patch(resource) -> bool:
        if not isinstance(resource, dict) or resource.get("Type") != TASK_DEFINITION_TYPE:
            return False
        properties = resource.get("Properties")
        if not isinstance(properties, dict):
            return False
        return FARGATE in as_list(properties.get("RequiresCompatibilities"))

    def patch_task_definition(
        self, properties: dict, recipe: dict, kilt_config: KiltConfiguration
    ) -> None:
        containers = as_list(properties.get("ContainerDefinitions"))
        ignored = ignored_from_tags(properties.get("Tags"))
        has_sidecar = False
        for container in containers:
            if not isinstance(container, dict):
                continue
            name = container.get("Name")
            if name == SIDECAR_NAME:
                has_sidecar = True
                continue
            if name in ignored:
                LOG.debug(f"Container {name} is ignored, not instrumenting")
                continue
            self.instrument_container(container, recipe)
        if not has_sidecar:
            containers.append(self.sidecar_definition(recipe, kilt_config))
        properties["ContainerDefinitions"] = containers

    @staticmethod
    def instrument_container(container: dict, recipe: dict) -> None:
        original_command = as_list(container.get("EntryPoint")) + as_list(
            container.get("Command")
        )
        container["EntryPoint"] = list(INSTRUMENT_ENTRY_POINT)
        if original_command:
            container["Command"] = original_command
        else:
            container.pop("Command", None)
        environment = as_list(container.get("Environment"))
        for env_name, recipe_key in AGENT_ENVIRONMENT:
            if keyisset(recipe_key, recipe):
                environment.append(
                    Environment(Name=env_name, Value=str(recipe[recipe_key])).to_dict()
                )
        container["Environment"] = environment
        volumes_from = as_list(container.get("VolumesFrom"))
        volumes_from.append(
            VolumesFrom(SourceContainer=SIDECAR_NAME, ReadOnly=True).to_dict()
        )
        container["VolumesFrom"] = volumes_from

    @staticmethod
    def sidecar_definition(recipe: dict, kilt_config: KiltConfiguration) -> dict:
        sidecar = {
            "Name": SIDECAR_NAME,
            "Image": recipe["agent_image"],
            "EntryPoint": list(SIDECAR_ENTRY_POINT),
        }
        if kilt_config.image_auth_secret:
            sidecar["RepositoryCredentials"] = RepositoryCredentials(
                CredentialsParameter=kilt_config.image_auth_secret
            ).to_dict()
        return sidecar
