#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

from __future__ import annotations

from hashlib import sha256

from compose_x_common.compose_x_common import keyisset, set_else_none

from sysdig_provider.common.logging import LOG


def checksum_id(value: str) -> str:
    """
    Content derived identifier, hex encoded SHA-256 of the given string.

    :param str value:
    :return: the hex digest
    """
    return sha256(value.encode("utf-8")).hexdigest()


__all__ = ["LOG", "checksum_id", "keyisset", "set_else_none"]
