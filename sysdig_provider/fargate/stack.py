#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Container definitions model and the wrapping task definition stack the patcher works on.

Container definitions are kept as plain ordered dicts, only ``Name``, ``Environment`` and
``LogConfiguration`` are ever looked up, with safe lookups.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from sysdig_provider.fargate.patch_options import PatchOptions

import json
from copy import deepcopy

from troposphere import Tags

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import DecodeError
from sysdig_provider.fargate.fargate_params import (
    FARGATE,
    IGNORE_CONTAINERS_SEPARATOR,
    IGNORE_CONTAINERS_TAG,
    STACK_RESOURCE_NAME,
    TASK_DEFINITION_TYPE,
)


def decode_container_definitions(
    raw: Union[str, bytes], source: str = "input", objects_only: bool = True
) -> list:
    """
    Decodes a JSON array of container definitions.

    :param raw: the JSON text
    :param str source: where the JSON comes from, for the error message
    :param bool objects_only: reject arrays with entries that are not objects
    :raises DecodeError: invalid JSON, not a list, or not a list of objects
    """
    try:
        definitions = json.loads(raw)
    except (TypeError, ValueError) as error:
        raise DecodeError(
            f"failed to parse {source} container definitions: {error}"
        ) from error
    if not isinstance(definitions, list):
        raise DecodeError(f"{source} container definitions must be a JSON array")
    if objects_only and not all(
        isinstance(definition, dict) for definition in definitions
    ):
        raise DecodeError(
            f"{source} container definitions must be a JSON array of objects"
        )
    return definitions


def encode_container_definitions(definitions: list) -> str:
    return json.dumps(definitions)


def container_name(container: dict) -> Union[str, None]:
    """Returns the container Name when set and a string, None otherwise"""
    name = container.get("Name") if isinstance(container, dict) else None
    return name if isinstance(name, str) else None


def ignore_containers_tags(patch_options: PatchOptions) -> list:
    """
    Renders the kilt-ignore-containers tag from the ignore list, names joined with ``:``.

    :return: list of Key/Value tags, empty when nothing is ignored
    """
    if not patch_options.ignore_containers:
        return []
    tag_value = IGNORE_CONTAINERS_SEPARATOR.join(patch_options.ignore_containers)
    return Tags(**{IGNORE_CONTAINERS_TAG: tag_value}).to_dict()


def assemble_stack(
    container_definitions: Union[str, list], patch_options: PatchOptions
) -> dict:
    """
    Wraps the container definitions into a Fargate task definition template, the
    document format the patcher works on.

    :param container_definitions: JSON text of the container definitions, or the decoded list
    :param PatchOptions patch_options:
    :return: the stack document
    :rtype: dict
    """
    if isinstance(container_definitions, (str, bytes)):
        definitions = decode_container_definitions(container_definitions)
    else:
        definitions = deepcopy(container_definitions)
    tags = ignore_containers_tags(patch_options)
    if tags:
        LOG.debug(f"Ignoring containers {patch_options.ignore_containers}")
    return {
        "Resources": {
            STACK_RESOURCE_NAME: {
                "Type": TASK_DEFINITION_TYPE,
                "Properties": {
                    "RequiresCompatibilities": [FARGATE],
                    "ContainerDefinitions": definitions,
                    "Tags": tags,
                },
            }
        }
    }


def stack_container_definitions(stack: dict) -> list:
    """
    Extracts the container definitions from a (patched) stack document.

    :raises DecodeError: the document does not have the expected shape
    """
    try:
        definitions = stack["Resources"][STACK_RESOURCE_NAME]["Properties"][
            "ContainerDefinitions"
        ]
    except (KeyError, TypeError) as error:
        raise DecodeError(
            f"patched stack has no {STACK_RESOURCE_NAME} ContainerDefinitions: {error}"
        ) from error
    if not isinstance(definitions, list):
        raise DecodeError("patched stack ContainerDefinitions must be a list")
    return definitions
