#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resource data bag and diagnostics exchanged with the host orchestration runtime.

Every Create/Read/Update/Delete/Import entrypoint receives a :class:`ResourceData`,
mutates it in place and returns :class:`Diagnostics`.
"""

from __future__ import annotations

from copy import deepcopy

from sysdig_provider.common.logging import LOG

ERROR = "error"
WARNING = "warning"


class ResourceData:
    """
    Mutable key/value bag for one resource instance, plus its ID.

    :ivar str id: resource ID, empty string when the resource does not exist
    """

    def __init__(self, values: dict = None, resource_id: str = ""):
        self._values = deepcopy(values) if values else {}
        self.id = resource_id

    def __repr__(self):
        return f"ResourceData(id={self.id!r}, values={self._values!r})"

    def get(self, key: str, default=None):
        return self._values.get(key, default)

    def set(self, key: str, value) -> None:
        self._values[key] = value

    def set_id(self, resource_id: str) -> None:
        """An empty ID tells the host the resource is gone."""
        self.id = resource_id

    def to_dict(self) -> dict:
        return deepcopy(self._values)


class Diagnostic:
    def __init__(self, severity: str, summary: str, detail: str = ""):
        self.severity = severity
        self.summary = summary
        self.detail = detail

    def __repr__(self):
        return f"Diagnostic({self.severity}: {self.summary})"

    def __eq__(self, other):
        return isinstance(other, Diagnostic) and (
            self.severity,
            self.summary,
            self.detail,
        ) == (other.severity, other.summary, other.detail)


class Diagnostics(list):
    """
    List of :class:`Diagnostic` returned to the host. Empty means success.
    """

    @classmethod
    def from_error(cls, error: Exception) -> Diagnostics:
        LOG.debug(f"Converting {error.__class__.__name__} to diagnostic")
        return cls([Diagnostic(ERROR, str(error))])

    @classmethod
    def errorf(cls, message: str, *args) -> Diagnostics:
        return cls([Diagnostic(ERROR, message % args if args else message)])

    @property
    def has_error(self) -> bool:
        return any(diag.severity == ERROR for diag in self)
