#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Load all the JSON Schema specification's
"""

import json
from os import listdir

try:
    from importlib.resources import files
except ImportError:
    from importlib_resources import (  # type: ignore[import-not-found, no-redef]
        files,
    )

from referencing import Resource

SPEC_SUFFIX = ".spec.json"


def _spec_files():
    specs_folder = files("sysdig_provider").joinpath("specs")
    for spec_file in sorted(listdir(specs_folder)):
        if spec_file.endswith(SPEC_SUFFIX):
            yield spec_file, specs_folder.joinpath(spec_file)


def _load(spec_path) -> dict:
    with open(spec_path) as spec_fd:
        return json.loads(spec_fd.read())


def _schemas():
    for _, spec_path in _spec_files():
        yield Resource.from_contents(_load(spec_path))


def _schemas_by_name() -> dict:
    return {
        spec_file[: -len(SPEC_SUFFIX)]: _load(spec_path)
        for spec_file, spec_path in _spec_files()
    }
