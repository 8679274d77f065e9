#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resolves the user instrumentation options into a :class:`PatchOptions`, built once per
patch request and passed down every stage of the pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable, Union

from compose_x_common.compose_x_common import set_else_none


class LogConfigurationOptions:
    """
    awslogs settings for the instrumentation sidecar. Values are kept as given,
    completeness is checked when the log configuration gets rendered.
    """

    def __init__(self, group: str = None, stream_prefix: str = None, region: str = None):
        self._group = group
        self._stream_prefix = stream_prefix
        self._region = region

    @property
    def group(self):
        return self._group

    @property
    def stream_prefix(self):
        return self._stream_prefix

    @property
    def region(self):
        return self._region

    def __repr__(self):
        return (
            f"LogConfigurationOptions(group={self.group!r}, "
            f"stream_prefix={self.stream_prefix!r}, region={self.region!r})"
        )

    def __eq__(self, other):
        return isinstance(other, LogConfigurationOptions) and (
            self.group,
            self.stream_prefix,
            self.region,
        ) == (other.group, other.stream_prefix, other.region)

    @classmethod
    def from_mapping(cls, definition: Mapping) -> LogConfigurationOptions:
        return cls(
            group=set_else_none("group", definition),
            stream_prefix=set_else_none("stream_prefix", definition),
            region=set_else_none("region", definition),
        )


class PatchOptions:
    """
    Instrumentation options. Read-only once created.

    :ivar tuple[str] ignore_containers: containers excluded from bare pdig instrumentation
    :ivar tuple[str] bare_pdig_on_containers: containers to run under bare pdig
    :ivar LogConfigurationOptions log_configuration: awslogs settings for the sidecar, or None
    """

    def __init__(
        self,
        ignore_containers: Iterable[str] = None,
        bare_pdig_on_containers: Iterable[str] = None,
        log_configuration: LogConfigurationOptions = None,
    ):
        self._ignore_containers = tuple(ignore_containers or ())
        self._bare_pdig_on_containers = tuple(bare_pdig_on_containers or ())
        self._log_configuration = log_configuration

    @property
    def ignore_containers(self) -> tuple:
        return self._ignore_containers

    @property
    def bare_pdig_on_containers(self) -> tuple:
        return self._bare_pdig_on_containers

    @property
    def log_configuration(self) -> Union[LogConfigurationOptions, None]:
        return self._log_configuration

    def __repr__(self):
        return (
            f"PatchOptions(ignore_containers={self.ignore_containers!r}, "
            f"bare_pdig_on_containers={self.bare_pdig_on_containers!r}, "
            f"log_configuration={self.log_configuration!r})"
        )


def trimmed_names(items) -> list:
    """
    Keeps the string entries, stripped. Duplicates are kept.
    """
    if not items:
        return []
    return [item.strip() for item in items if isinstance(item, str)]


def first_log_configuration(log_configuration) -> Union[LogConfigurationOptions, None]:
    """
    The log configuration can come as a single mapping, or as a list/set of them
    (host side blocks), in which case only the first one is used.
    """
    if not log_configuration:
        return None
    if isinstance(log_configuration, LogConfigurationOptions):
        return log_configuration
    if isinstance(log_configuration, Mapping):
        return LogConfigurationOptions.from_mapping(log_configuration)
    for definition in log_configuration:
        if isinstance(definition, LogConfigurationOptions):
            return definition
        if isinstance(definition, Mapping):
            return LogConfigurationOptions.from_mapping(definition)
    return None


def resolve_patch_options(
    bare_pdig_on_containers: Iterable[str] = None,
    ignore_containers: Iterable[str] = None,
    log_configuration=None,
) -> PatchOptions:
    """
    Builds the PatchOptions from the raw user inputs. Never fails on missing inputs.

    :param list[str] bare_pdig_on_containers:
    :param list[str] ignore_containers:
    :param log_configuration: mapping with group, stream_prefix and region, or a list of such
    :rtype: PatchOptions
    """
    return PatchOptions(
        ignore_containers=trimmed_names(ignore_containers),
        bare_pdig_on_containers=trimmed_names(bare_pdig_on_containers),
        log_configuration=first_log_configuration(log_configuration),
    )
