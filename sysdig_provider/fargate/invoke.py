#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Runs the task definition patcher against a wrapped stack document.

The patcher is third-party logic: anything it raises, other than a :class:`PatchFailed`,
is contained here and turned into a :class:`PatchFailed` so it never escapes the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from threading import Event
    from sysdig_provider.fargate.kilt import KiltConfiguration

import json

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import DecodeError, PatchCancelled, PatchFailed
from sysdig_provider.fargate.kilt import KiltPatcher, cloudformation_container_definitions
from sysdig_provider.fargate.stack import stack_container_definitions

UNKNOWN_FAULT = "unknown patcher fault"


def fault_message(fault: BaseException) -> str:
    try:
        message = str(fault)
    except Exception:
        message = ""
    return message or UNKNOWN_FAULT


def check_cancelled(cancel_event: Event = None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PatchCancelled("patch cancelled")


def run_patcher(
    patcher: Callable, kilt_config: KiltConfiguration, stack_json: str, cancel_event
) -> str:
    """
    Calls the patcher. PatchFailed errors go through untouched, any other fault is
    converted to PatchFailed.
    """
    try:
        return patcher(kilt_config, stack_json, cancel_event)
    except PatchFailed:
        raise
    except (Exception, SystemExit) as fault:
        LOG.error(f"Task definition patcher faulted: {fault.__class__.__name__}")
        LOG.debug(fault, exc_info=True)
        raise PatchFailed(fault_message(fault)) from fault


def invoke_patcher(
    stack: dict,
    kilt_config: KiltConfiguration,
    patcher: Callable = None,
    cancel_event: Event = None,
) -> list:
    """
    Patches the stack document and returns the patched container definitions.

    :param dict stack: the wrapped stack document
    :param KiltConfiguration kilt_config: passed as is to the patcher
    :param patcher: callable(kilt_config, stack_json, cancel_event) -> patched stack JSON.
        Defaults to KiltPatcher
    :param threading.Event cancel_event: when set, the patch stops with PatchCancelled
    :return: the patched container definitions
    :rtype: list
    :raises PatchFailed: the patcher failed, faulted, or the patch was cancelled
    :raises DecodeError: the patcher output is not a valid stack document
    """
    if patcher is None:
        patcher = KiltPatcher()
    check_cancelled(cancel_event)
    stack_json = json.dumps(cloudformation_container_definitions(stack))
    patched_json = run_patcher(patcher, kilt_config, stack_json, cancel_event)
    check_cancelled(cancel_event)
    try:
        patched_stack = json.loads(patched_json)
    except (TypeError, ValueError) as error:
        raise DecodeError(f"failed to parse patched stack: {error}") from error
    return stack_container_definitions(patched_stack)
