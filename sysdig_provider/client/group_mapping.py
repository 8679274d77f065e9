#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Group mappings API, shared by Monitor and Secure.
"""

from __future__ import annotations

from compose_x_common.compose_x_common import set_else_none

from sysdig_provider.common.logging import LOG
from sysdig_provider.exceptions import GroupMappingNotFound

GROUP_MAPPINGS_PATH = "/api/groupmappings"


class TeamMap:
    def __init__(self, all_teams: bool = False, team_ids: list = None):
        self.all_teams = all_teams
        self.team_ids = list(team_ids) if team_ids else []

    def to_dict(self) -> dict:
        return {"allTeams": self.all_teams, "teamIds": self.team_ids}

    @classmethod
    def from_dict(cls, definition: dict) -> TeamMap:
        return cls(
            all_teams=bool(set_else_none("allTeams", definition, alt_value=False)),
            team_ids=set_else_none("teamIds", definition, alt_value=[]),
        )


class GroupMapping:
    """
    Maps an identity provider group to a role over a set of teams.
    """

    def __init__(
        self,
        group_name: str,
        role: str = None,
        custom_team_role_id: int = None,
        system_role: str = None,
        team_map: TeamMap = None,
        weight: int = None,
        mapping_id: int = None,
    ):
        self.id = mapping_id
        self.group_name = group_name
        self.role = role
        self.custom_team_role_id = custom_team_role_id
        self.system_role = system_role
        self.team_map = team_map if team_map else TeamMap()
        self.weight = weight

    def __repr__(self):
        return f"GroupMapping({self.id}, {self.group_name})"

    def to_dict(self) -> dict:
        definition = {
            "groupName": self.group_name,
            "role": self.role,
            "customTeamRoleId": self.custom_team_role_id,
            "systemRole": self.system_role,
            "teamMap": self.team_map.to_dict(),
            "weight": self.weight,
        }
        if self.id is not None:
            definition["id"] = self.id
        return {key: value for key, value in definition.items() if value is not None}

    @classmethod
    def from_dict(cls, definition: dict) -> GroupMapping:
        return cls(
            group_name=set_else_none("groupName", definition),
            role=set_else_none("role", definition),
            custom_team_role_id=set_else_none("customTeamRoleId", definition),
            system_role=set_else_none("systemRole", definition),
            team_map=TeamMap.from_dict(set_else_none("teamMap", definition, alt_value={})),
            weight=set_else_none("weight", definition),
            mapping_id=set_else_none("id", definition),
        )


class GroupMapper:
    """
    Group mappings CRUD, mixed into :class:`~sysdig_provider.client.common.SysdigClient`
    """

    def group_mappings_url(self, mapping_id: int = None) -> str:
        if mapping_id is None:
            return f"{self.url}{GROUP_MAPPINGS_PATH}"
        return f"{self.url}{GROUP_MAPPINGS_PATH}/{mapping_id}"

    def create_group_mapping(self, group_mapping: GroupMapping) -> GroupMapping:
        response = self.do_request(
            "POST", self.group_mappings_url(), group_mapping.to_dict()
        )
        if response.status_code != 200:
            raise self.error_from_response(response)
        return GroupMapping.from_dict(self.decode(response))

    def update_group_mapping(
        self, group_mapping: GroupMapping, mapping_id: int
    ) -> GroupMapping:
        response = self.do_request(
            "PUT", self.group_mappings_url(mapping_id), group_mapping.to_dict()
        )
        if response.status_code != 200:
            raise self.error_from_response(response)
        return GroupMapping.from_dict(self.decode(response))

    def delete_group_mapping(self, mapping_id: int) -> None:
        response = self.do_request("DELETE", self.group_mappings_url(mapping_id))
        if response.status_code == 404:
            LOG.debug(f"Group mapping {mapping_id} already deleted")
        elif response.status_code not in [200, 204]:
            raise self.error_from_response(response)

    def get_group_mapping(self, mapping_id: int) -> GroupMapping:
        response = self.do_request("GET", self.group_mappings_url(mapping_id))
        if response.status_code == 404:
            raise GroupMappingNotFound()
        if response.status_code != 200:
            raise self.error_from_response(response)
        return GroupMapping.from_dict(self.decode(response))
