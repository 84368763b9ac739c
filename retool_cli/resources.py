"""Importable Terraform resources discovered from a Retool organization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from .models import Folder, Group, SourceControlConfig, SourceControlSettings, Space, SSOConfig


@dataclass(frozen=True)
class FolderResource:
    resource_type: ClassVar[str] = "retool_folder"

    id: str
    terraform_id: str
    folder: Folder


@dataclass(frozen=True)
class GroupResource:
    resource_type: ClassVar[str] = "retool_group"

    id: str
    terraform_id: str
    group: Group


@dataclass(frozen=True)
class PermissionsResource:
    """Permissions granted to one group; entries are read when rendering."""

    resource_type: ClassVar[str] = "retool_permissions"

    id: str
    terraform_id: str
    group_id: str


@dataclass(frozen=True)
class SpaceResource:
    resource_type: ClassVar[str] = "retool_space"

    id: str
    terraform_id: str
    space: Space


@dataclass(frozen=True)
class SourceControlResource:
    resource_type: ClassVar[str] = "retool_source_control"

    id: str
    terraform_id: str
    config: SourceControlConfig


@dataclass(frozen=True)
class SourceControlSettingsResource:
    resource_type: ClassVar[str] = "retool_source_control_settings"

    id: str
    terraform_id: str
    settings: SourceControlSettings


@dataclass(frozen=True)
class SSOResource:
    resource_type: ClassVar[str] = "retool_sso"

    id: str
    terraform_id: str
    config: SSOConfig


ImportableResource = Union[
    FolderResource,
    GroupResource,
    PermissionsResource,
    SpaceResource,
    SourceControlResource,
    SourceControlSettingsResource,
    SSOResource,
]


def resource_address(resource: ImportableResource) -> str:
    return f"{resource.resource_type}.{resource.terraform_id}"
