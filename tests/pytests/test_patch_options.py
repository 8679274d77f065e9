#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

from pytest import raises

from sysdig_provider.fargate.patch_options import (
    LogConfigurationOptions,
    resolve_patch_options,
)


def test_missing_inputs_give_empty_options():
    options = resolve_patch_options()
    assert options.ignore_containers == ()
    assert options.bare_pdig_on_containers == ()
    assert options.log_configuration is None

    options = resolve_patch_options(None, [], [])
    assert options.ignore_containers == ()
    assert options.log_configuration is None


def test_names_are_trimmed_and_duplicates_kept():
    options = resolve_patch_options(
        bare_pdig_on_containers=[" app", "worker ", "app"],
        ignore_containers=["  sidecar  ", 42, None],
    )
    assert options.bare_pdig_on_containers == ("app", "worker", "app")
    assert options.ignore_containers == ("sidecar",)


def test_first_log_configuration_wins():
    options = resolve_patch_options(
        log_configuration=[
            {"group": "g", "stream_prefix": "p", "region": "r"},
            {"group": "other", "stream_prefix": "other", "region": "other"},
        ]
    )
    assert options.log_configuration == LogConfigurationOptions("g", "p", "r")


def test_single_log_configuration_mapping():
    options = resolve_patch_options(
        log_configuration={"group": "g", "stream_prefix": "p"}
    )
    assert options.log_configuration.group == "g"
    assert options.log_configuration.stream_prefix == "p"
    assert options.log_configuration.region is None


def test_options_are_read_only():
    options = resolve_patch_options(bare_pdig_on_containers=["app"])
    with raises(AttributeError):
        options.bare_pdig_on_containers = ("other",)
    assert options.bare_pdig_on_containers == ("app",)
