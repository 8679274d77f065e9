#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Changes applied to the container definitions once the patcher is done.

* The ``SysdigInstrumentation`` sidecar gets the awslogs log configuration, if any.
* The instrumented containers listed for bare pdig get the instrumentation wrapper
  environment variable.

The wrapper variable is appended on each run, the post-patch must be applied only once
to a given set of container definitions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sysdig_provider.fargate.patch_options import (
        LogConfigurationOptions,
        PatchOptions,
    )

from troposphere.ecs import Environment, LogConfiguration

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import ConfigurationError
from sysdig_provider.fargate.fargate_params import (
    AWSLOGS_DRIVER,
    SIDECAR_NAME,
    WRAPPER_ENV_NAME,
    WRAPPER_ENV_VALUE,
)
from sysdig_provider.fargate.stack import (
    container_name,
    decode_container_definitions,
    encode_container_definitions,
)


def render_log_configuration(log_configuration: LogConfigurationOptions) -> dict:
    """
    Renders the awslogs LogConfiguration of the sidecar.

    :raises ConfigurationError: if group, stream_prefix or region is not set
    """
    options = {
        "awslogs-group": log_configuration.group,
        "awslogs-stream-prefix": log_configuration.stream_prefix,
        "awslogs-region": log_configuration.region,
    }
    missing = [
        field
        for field, value in zip(("group", "stream_prefix", "region"), options.values())
        if not isinstance(value, str) or not value
    ]
    if missing:
        raise ConfigurationError(
            f"log_configuration is missing required field(s): {', '.join(missing)}"
        )
    return LogConfiguration(LogDriver=AWSLOGS_DRIVER, Options=options).to_dict()


def wrapper_environment() -> dict:
    return Environment(Name=WRAPPER_ENV_NAME, Value=WRAPPER_ENV_VALUE).to_dict()


def use_bare_pdig(name: str, patch_options: PatchOptions) -> bool:
    return (
        name in patch_options.bare_pdig_on_containers
        and name not in patch_options.ignore_containers
    )


def append_environment(container: dict, variable: dict) -> None:
    environment = container.get("Environment")
    if not isinstance(environment, list):
        environment = []
    environment.append(variable)
    container["Environment"] = environment


def post_patch(patched: str, patch_options: PatchOptions) -> str:
    """
    Applies the post-patch changes to the patched container definitions.

    When there is no log configuration and no bare pdig container, the input is returned
    unchanged.

    :param str patched: JSON of the patched container definitions
    :param PatchOptions patch_options:
    :return: JSON of the final container definitions
    :raises DecodeError: invalid JSON, or not an array
    :raises ConfigurationError: incomplete log configuration
    """
    if (
        patch_options.log_configuration is None
        and not patch_options.bare_pdig_on_containers
    ):
        return patched

    containers = decode_container_definitions(
        patched, source="patched", objects_only=False
    )
    sidecar_log_configuration = None
    if patch_options.log_configuration is not None:
        sidecar_log_configuration = render_log_configuration(
            patch_options.log_configuration
        )

    for container in containers:
        # Lowercase "name" keys were capitalized when patching
        name = container_name(container)
        if name is None:
            continue
        if name == SIDECAR_NAME:
            if sidecar_log_configuration is not None:
                LOG.debug(f"Setting {SIDECAR_NAME} log configuration")
                container["LogConfiguration"] = dict(sidecar_log_configuration)
        elif use_bare_pdig(name, patch_options):
            LOG.debug(f"Using bare pdig for container {name}")
            append_environment(container, wrapper_environment())
    return encode_container_definitions(containers)
