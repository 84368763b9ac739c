"""Symbolic references between generated Terraform resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import DanglingReferenceError
from .models import Folder
from .resources import FolderResource, GroupResource, ImportableResource
from .retool_api import RetoolAPI


def root_folder_ids(folders: Iterable[Folder]) -> Dict[str, str]:
    """
    Map each folder type to the id of its implicit root folder.

    The root is the parentless folder of that type. System folders win over
    regular ones and the lowest id wins among equals, so the choice does not
    depend on listing order.
    """
    roots: Dict[str, str] = {}
    candidates = sorted(
        (folder for folder in folders if folder.parent_folder_id is None),
        key=lambda folder: (not folder.is_system_folder, folder.id),
    )
    for folder in candidates:
        roots.setdefault(folder.folder_type, folder.id)
    return roots


def fetch_root_folder_ids(api: RetoolAPI) -> Dict[str, str]:
    return root_folder_ids(api.list_folders())


@dataclass
class ReferenceMaps:
    folder_terraform_ids: Dict[Tuple[str, str], str] = field(default_factory=dict)
    group_terraform_ids: Dict[str, str] = field(default_factory=dict)
    root_folder_ids: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_resources(
        cls,
        resources: Iterable[ImportableResource],
        root_folder_ids: Optional[Dict[str, str]] = None,
    ) -> "ReferenceMaps":
        maps = cls(root_folder_ids=dict(root_folder_ids or {}))
        for resource in resources:
            if isinstance(resource, FolderResource):
                key = (resource.folder.folder_type, resource.id)
                maps.folder_terraform_ids[key] = resource.terraform_id
            elif isinstance(resource, GroupResource):
                maps.group_terraform_ids[resource.id] = resource.terraform_id
        return maps

    def folder_parent_reference(self, folder: Folder) -> Optional[str]:
        """Reference to a folder's parent, or ``None`` when it sits at the root."""
        parent_id = folder.parent_folder_id
        if parent_id is None or parent_id == self.root_folder_ids.get(folder.folder_type):
            return None
        parent_terraform_id = self.folder_terraform_ids.get((folder.folder_type, parent_id))
        if parent_terraform_id is None:
            raise DanglingReferenceError(
                f"folder '{folder.name}' ({folder.id}) has parent {parent_id}, "
                f"which is neither an imported {folder.folder_type} folder nor the root"
            )
        return f"retool_folder.{parent_terraform_id}.id"

    def folder_reference(self, folder_id: str) -> Optional[str]:
        matches: List[str] = [
            terraform_id
            for (_, native_id), terraform_id in sorted(self.folder_terraform_ids.items())
            if native_id == folder_id
        ]
        if not matches:
            return None
        return f"retool_folder.{matches[0]}.id"

    def group_reference(self, group_id: str) -> str:
        terraform_id = self.group_terraform_ids.get(group_id)
        if terraform_id is None:
            raise DanglingReferenceError(
                f"permissions refer to group {group_id}, which was not imported"
            )
        return f"retool_group.{terraform_id}.id"
