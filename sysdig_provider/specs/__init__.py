#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

import jsonschema
from referencing.jsonschema import EMPTY_REGISTRY as _EMPTY_REGISTRY

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import ConfigurationError
from sysdig_provider.specs._core import _schemas, _schemas_by_name

REGISTRY = (_schemas() @ _EMPTY_REGISTRY).crawl()
SCHEMAS = _schemas_by_name()


def validate_definition(definition: dict, spec_name: str, label: str = None) -> None:
    """
    JSON Schema validation of a resource / data source / provider definition

    :param dict definition: the values to validate
    :param str spec_name: name of the spec file, without the .spec.json suffix
    :param str label: name used in the error message
    :raises ConfigurationError: when the definition does not match the spec
    """
    label = label or spec_name
    LOG.debug(f"{label} - Validating against input schema {spec_name}")
    try:
        jsonschema.validate(definition, SCHEMAS[spec_name], registry=REGISTRY)
    except jsonschema.exceptions.ValidationError as error:
        LOG.error(f"{label} - Definition is not conform to schema.")
        path = ".".join(str(part) for part in error.absolute_path)
        raise ConfigurationError(
            f"{label}: {path + ': ' if path else ''}{error.message}"
        ) from error


__all__ = ["REGISTRY", "SCHEMAS", "validate_definition"]
