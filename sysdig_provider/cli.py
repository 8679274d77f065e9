#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for sysdig_provider.
"""

import argparse
import sys
from os import environ

from sysdig_provider import __version__
from sysdig_provider.common.logging import LOG, set_log_level
from sysdig_provider.common.resource_data import ResourceData
from sysdig_provider.common.settings import ProviderSettings
from sysdig_provider.exceptions import SysdigBaseException
from sysdig_provider.fargate.workload_agent import read_fargate_workload_agent

FARGATE_PATCH_CMD = "fargate-patch"


def fargate_patch_parser(cmd_parsers, parents: list) -> None:
    parser = cmd_parsers.add_parser(
        name=FARGATE_PATCH_CMD,
        help="Instruments Fargate container definitions with the Sysdig workload agent",
        parents=parents,
    )
    parser.add_argument(
        "-f",
        "--container-definitions",
        dest="container_definitions_file",
        required=True,
        help="Path to the JSON file with the container definitions",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_file",
        required=False,
        help="Path to write the patched container definitions to. Defaults to stdout",
    )
    parser.add_argument(
        "--image",
        dest="workload_agent_image",
        required=True,
        help="The Sysdig workload agent image",
    )
    parser.add_argument("--access-key", dest="sysdig_access_key", required=False)
    parser.add_argument("--orchestrator-host", dest="orchestrator_host")
    parser.add_argument("--orchestrator-port", dest="orchestrator_port")
    parser.add_argument("--collector-host", dest="collector_host")
    parser.add_argument("--collector-port", dest="collector_port")
    parser.add_argument(
        "--sysdig-logging",
        dest="sysdig_logging",
        help="The instrumentation logging level",
    )
    parser.add_argument(
        "--image-auth-secret",
        dest="image_auth_secret",
        help="Registry authentication secret for the workload agent image",
    )
    parser.add_argument(
        "--ignore-container",
        dest="ignore_containers",
        action="append",
        default=[],
        help="Container to not instrument. Repeat for several containers",
    )
    parser.add_argument(
        "--bare-pdig-on-container",
        dest="bare_pdig_on_containers",
        action="append",
        default=[],
        help="Container to instrument with bare pdig. Repeat for several containers",
    )
    parser.add_argument("--log-group", dest="log_group")
    parser.add_argument("--log-stream-prefix", dest="log_stream_prefix")
    parser.add_argument("--log-region", dest="log_region")


def main_parser():
    """
    Console script for sysdig_provider.
    """
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    base_command_parser = argparse.ArgumentParser(add_help=False)
    base_command_parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    cmd_parsers = parser.add_subparsers(dest="command", help="Command to execute.")
    fargate_patch_parser(cmd_parsers, [base_command_parser])
    return parser


def log_configuration_from_args(args) -> list:
    log_settings = [args.log_group, args.log_stream_prefix, args.log_region]
    if not any(log_settings):
        return []
    return [
        {
            "group": args.log_group,
            "stream_prefix": args.log_stream_prefix,
            "region": args.log_region,
        }
    ]


def fargate_patch(args) -> int:
    with open(args.container_definitions_file) as definitions_fd:
        container_definitions = definitions_fd.read()
    values = {
        "container_definitions": container_definitions,
        "workload_agent_image": args.workload_agent_image,
        "ignore_containers": args.ignore_containers,
        "bare_pdig_on_containers": args.bare_pdig_on_containers,
        "log_configuration": log_configuration_from_args(args),
    }
    for optional in [
        "sysdig_access_key",
        "orchestrator_host",
        "orchestrator_port",
        "collector_host",
        "collector_port",
        "sysdig_logging",
        "image_auth_secret",
    ]:
        if getattr(args, optional):
            values[optional] = getattr(args, optional)
    data = ResourceData(values)
    diagnostics = read_fargate_workload_agent(data)
    if diagnostics.has_error:
        for diagnostic in diagnostics:
            LOG.error(diagnostic.summary)
        return 1
    output = data.get("output_container_definitions")
    if args.output_file:
        with open(args.output_file, "w") as output_fd:
            output_fd.write(output)
        LOG.info(
            f"Patched container definitions {data.id} written to {args.output_file}"
        )
    else:
        print(output)
    return 0


def main(argv: list = None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0
    log_level = args.loglevel or environ.get(ProviderSettings.log_level_env)
    if log_level:
        try:
            set_log_level(log_level)
        except ValueError as error:
            print(error)
    LOG.debug(args)
    try:
        if args.command == FARGATE_PATCH_CMD:
            return fargate_patch(args)
    except (SysdigBaseException, OSError) as error:
        LOG.error(error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
