#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Instruments Fargate container definitions with the Sysdig workload agent.

Container definitions and options -> wrapped stack -> patcher -> post-patch -> JSON.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Union

if TYPE_CHECKING:
    from threading import Event
    from sysdig_provider.fargate.kilt import KiltConfiguration
    from sysdig_provider.fargate.patch_options import PatchOptions

from sysdig_provider.common.logging import LOG
from sysdig_provider.fargate.invoke import invoke_patcher
from sysdig_provider.fargate.post_patch import post_patch
from sysdig_provider.fargate.stack import assemble_stack, encode_container_definitions


def patch_fargate_task_definition(
    container_definitions: Union[str, list],
    kilt_config: KiltConfiguration,
    patch_options: PatchOptions,
    patcher: Callable = None,
    cancel_event: Event = None,
) -> str:
    """
    Patches the container definitions.

    :param container_definitions: JSON array of the container definitions
    :param KiltConfiguration kilt_config: configuration handed to the patcher
    :param PatchOptions patch_options:
    :param patcher: patcher to use instead of the default KiltPatcher
    :param threading.Event cancel_event: set it to cancel the patch
    :return: JSON of the patched container definitions
    :rtype: str
    """
    stack = assemble_stack(container_definitions, patch_options)
    patched = invoke_patcher(
        stack, kilt_config, patcher=patcher, cancel_event=cancel_event
    )
    LOG.debug(f"Patcher returned {len(patched)} container definition(s)")
    return post_patch(encode_container_definitions(patched), patch_options)
