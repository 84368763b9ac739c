"""Importers that turn Retool API listings into importable resources."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .console import log
from .constants import (
    BUILT_IN_GROUP_NAMES,
    SOURCE_CONTROL_ID,
    SOURCE_CONTROL_SETTINGS_ID,
    SSO_ID,
)
from .errors import DanglingReferenceError
from .identifiers import ImportSession
from .resources import (
    FolderResource,
    GroupResource,
    ImportableResource,
    PermissionsResource,
    SourceControlResource,
    SourceControlSettingsResource,
    SpaceResource,
    SSOResource,
)
from .retool_api import RetoolAPI


def import_folders(api: RetoolAPI, session: ImportSession) -> List[FolderResource]:
    folders = sorted(api.list_folders(), key=lambda folder: folder.id)
    return [
        FolderResource(
            id=folder.id,
            terraform_id=session.folder_id(folder.folder_type, folder.name),
            folder=folder,
        )
        for folder in folders
        if not folder.is_system_folder
    ]


def import_groups(api: RetoolAPI, session: ImportSession) -> List[GroupResource]:
    groups = sorted(api.list_groups(), key=lambda group: group.id)
    return [
        GroupResource(
            id=str(group.id),
            terraform_id=session.group_id(str(group.id), group.name),
            group=group,
        )
        for group in groups
        if group.name not in BUILT_IN_GROUP_NAMES
    ]


def import_permissions(
    group_ids: Sequence[str], session: ImportSession
) -> List[PermissionsResource]:
    resources: List[PermissionsResource] = []
    for group_id in group_ids:
        group_terraform_id = session.group_terraform_ids.get(group_id)
        if group_terraform_id is None:
            raise DanglingReferenceError(
                f"permissions refer to group {group_id}, which was not imported"
            )
        resources.append(
            PermissionsResource(
                id=f"group|{group_id}",
                terraform_id=f"{group_terraform_id}_permissions",
                group_id=group_id,
            )
        )
    return resources


def import_spaces(api: RetoolAPI, session: ImportSession) -> List[SpaceResource]:
    spaces = sorted(api.list_spaces(), key=lambda space: space.id)
    return [
        SpaceResource(id=space.id, terraform_id=session.space_id(space.domain), space=space)
        for space in spaces
    ]


def import_source_control(api: RetoolAPI) -> List[SourceControlResource]:
    config = api.get_source_control_config()
    if config is None:
        return []
    return [
        SourceControlResource(
            id=SOURCE_CONTROL_ID, terraform_id=SOURCE_CONTROL_ID, config=config
        )
    ]


def import_source_control_settings(api: RetoolAPI) -> List[SourceControlSettingsResource]:
    settings = api.get_source_control_settings()
    if settings is None:
        return []
    return [
        SourceControlSettingsResource(
            id=SOURCE_CONTROL_SETTINGS_ID,
            terraform_id=SOURCE_CONTROL_SETTINGS_ID,
            settings=settings,
        )
    ]


def import_sso(api: RetoolAPI) -> List[SSOResource]:
    config = api.get_sso_config()
    if config is None:
        return []
    return [SSOResource(id=SSO_ID, terraform_id=SSO_ID, config=config)]


def import_retool_config(
    api: RetoolAPI, session: Optional[ImportSession] = None
) -> List[ImportableResource]:
    """Discover every importable resource, in the order they are written out."""
    session = session or ImportSession()
    imports: List[ImportableResource] = []

    folders = import_folders(api, session)
    log(f"found {len(folders)} folder(s)")
    imports.extend(folders)

    groups = import_groups(api, session)
    log(f"found {len(groups)} group(s)")
    imports.extend(groups)
    imports.extend(import_permissions([group.id for group in groups], session))

    spaces = import_spaces(api, session)
    log(f"found {len(spaces)} space(s)")
    imports.extend(spaces)

    imports.extend(import_source_control(api))
    imports.extend(import_source_control_settings(api))
    imports.extend(import_sso(api))
    return imports
