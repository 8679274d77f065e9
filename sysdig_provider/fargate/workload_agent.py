#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Data source ``sysdig_fargate_workload_agent``: returns the input container definitions
instrumented with the Sysdig workload agent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from threading import Event
    from sysdig_provider.common.resource_data import ResourceData

from sysdig_provider.common import checksum_id
from sysdig_provider.common.logging import LOG
from sysdig_provider.common.resource_data import Diagnostics
from sysdig_provider.exceptions import SysdigBaseException
from sysdig_provider.fargate import patch_fargate_task_definition
from sysdig_provider.fargate.fargate_params import KILT_DEFINITION
from sysdig_provider.fargate.kilt import KiltConfiguration, KiltRecipeConfig
from sysdig_provider.fargate.patch_options import resolve_patch_options
from sysdig_provider.specs import validate_definition

DATA_SOURCE_NAME = "sysdig_fargate_workload_agent"


def kilt_configuration_from_resource_data(data: ResourceData) -> KiltConfiguration:
    recipe_config = KiltRecipeConfig(
        sysdig_access_key=data.get("sysdig_access_key"),
        agent_image=data.get("workload_agent_image"),
        orchestrator_host=data.get("orchestrator_host"),
        orchestrator_port=data.get("orchestrator_port"),
        collector_host=data.get("collector_host"),
        collector_port=data.get("collector_port"),
        sysdig_logging=data.get("sysdig_logging"),
    )
    return KiltConfiguration(
        recipe_config=recipe_config.to_json(),
        kilt=KILT_DEFINITION,
        image_auth_secret=data.get("image_auth_secret"),
        opt_in=False,
        use_repository_hints=True,
    )


def read_fargate_workload_agent(
    data: ResourceData, patcher: Callable = None, cancel_event: Event = None
) -> Diagnostics:
    """
    Read entrypoint of the data source. Sets ``output_container_definitions`` and the ID,
    the SHA-256 of the input container definitions.

    :param ResourceData data:
    :param patcher: patcher to use instead of the default KiltPatcher
    :param threading.Event cancel_event:
    :rtype: Diagnostics
    """
    try:
        validate_definition(data.to_dict(), "fargate_workload_agent", DATA_SOURCE_NAME)
    except SysdigBaseException as error:
        return Diagnostics.from_error(error)

    kilt_config = kilt_configuration_from_resource_data(data)
    container_definitions = data.get("container_definitions")
    patch_options = resolve_patch_options(
        bare_pdig_on_containers=data.get("bare_pdig_on_containers"),
        ignore_containers=data.get("ignore_containers"),
        log_configuration=data.get("log_configuration"),
    )
    try:
        output = patch_fargate_task_definition(
            container_definitions,
            kilt_config,
            patch_options,
            patcher=patcher,
            cancel_event=cancel_event,
        )
    except SysdigBaseException as error:
        return Diagnostics.errorf("Error applying configuration patch: %s", error)

    data.set_id(checksum_id(container_definitions))
    data.set("output_container_definitions", output)
    LOG.debug(f"{DATA_SOURCE_NAME} - container definitions patched, id {data.id}")
    return Diagnostics()
