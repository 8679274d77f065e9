#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Constants shared by the Fargate instrumentation pipeline
"""

STACK_RESOURCE_NAME = "kilt"
TASK_DEFINITION_TYPE = "AWS::ECS::TaskDefinition"
FARGATE = "FARGATE"
IGNORE_CONTAINERS_TAG = "kilt-ignore-containers"
IGNORE_CONTAINERS_SEPARATOR = ":"

SIDECAR_NAME = "SysdigInstrumentation"
SIDECAR_ENTRY_POINT = ["/opt/draios/bin/logwriter"]
SIDECAR_VOLUME = "/opt/draios"
INSTRUMENT_ENTRY_POINT = ["/opt/draios/bin/instrument"]

WRAPPER_ENV_NAME = "__INSTRUMENTATION_WRAPPER"
WRAPPER_ENV_VALUE = "/opt/draios/bin/pdig,-C,-t,-1"

AWSLOGS_DRIVER = "awslogs"

AGENT_ENVIRONMENT = [
    ("SYSDIG_ORCHESTRATOR", "orchestrator_host"),
    ("SYSDIG_ORCHESTRATOR_PORT", "orchestrator_port"),
    ("SYSDIG_COLLECTOR", "collector_host"),
    ("SYSDIG_COLLECTOR_PORT", "collector_port"),
    ("SYSDIG_ACCESS_KEY", "sysdig_access_key"),
    ("SYSDIG_LOGGING", "sysdig_logging"),
]

KILT_DEFINITION = """build {
    entry_point: ["/opt/draios/bin/instrument"]
    command: ${?original.entry_point} ${?original.command}
    environment_variables: {
        "SYSDIG_ORCHESTRATOR": ${config.orchestrator_host}
        "SYSDIG_ORCHESTRATOR_PORT": ${config.orchestrator_port}
        "SYSDIG_COLLECTOR": ${config.collector_host}
        "SYSDIG_COLLECTOR_PORT": ${config.collector_port}
        "SYSDIG_ACCESS_KEY": ${config.sysdig_access_key}
        "SYSDIG_LOGGING": ${config.sysdig_logging}
    }
    mount: [
        {
            name: "SysdigInstrumentation"
            image: ${config.agent_image}
            volumes: ["/opt/draios"]
            entry_point: ["/opt/draios/bin/logwriter"]
        }
    ]
}"""

# Keys holding free-form maps, their own keys are left untouched on capitalization.
FREE_FORM_KEYS = ["Options", "DockerLabels"]
