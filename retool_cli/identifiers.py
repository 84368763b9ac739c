"""Terraform identifier generation."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, Set

# ASCII whitespace, Unicode space separators, line/paragraph separators and
# the BOM; several of these survive NFKD.
_SPACES = "\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
_DISALLOWED = re.compile(f"[^A-Za-z0-9_{_SPACES}-]")
_WHITESPACE = re.compile(f"[{_SPACES}]+")
_VALID_START = re.compile(r"^[a-z_]")

GROUP_PREFIX = "group_"
SPACE_PREFIX = "space_"


def folder_prefix(folder_type: str) -> str:
    prefix = f"{sanitize_name(folder_type, '')}_folder_"
    return prefix if _VALID_START.match(prefix) else "folder_"


def is_invalid_terraform_id(terraform_id: str) -> bool:
    # Terraform names must start with a letter or underscore; one-character
    # names are rejected as well.
    return len(terraform_id) <= 1 or not _VALID_START.match(terraform_id)


def sanitize_name(name: str, prefix: str) -> str:
    """Turn a display name into a candidate Terraform identifier."""
    candidate = unicodedata.normalize("NFKD", name)
    candidate = _DISALLOWED.sub("", candidate)
    candidate = _WHITESPACE.sub("_", candidate)
    candidate = candidate.lower().replace("-", "_")
    if is_invalid_terraform_id(candidate):
        candidate = f"{prefix}{candidate}"
    return candidate


def sanitize_domain(domain: str) -> str:
    return sanitize_name(domain.replace(".", "_"), SPACE_PREFIX)


@dataclass
class IdentifierAllocator:
    """Hands out identifiers that are unique within one resource kind."""

    seen: Set[str] = field(default_factory=set)

    def allocate(self, candidate: str) -> str:
        terraform_id = candidate
        if terraform_id in self.seen:
            seq = 1
            while f"{candidate}_{seq}" in self.seen:
                seq += 1
            terraform_id = f"{candidate}_{seq}"
        self.seen.add(terraform_id)
        return terraform_id


@dataclass
class ImportSession:
    """Per-run identifier state, one allocator per resource kind."""

    folders: IdentifierAllocator = field(default_factory=IdentifierAllocator)
    groups: IdentifierAllocator = field(default_factory=IdentifierAllocator)
    spaces: IdentifierAllocator = field(default_factory=IdentifierAllocator)
    group_terraform_ids: Dict[str, str] = field(default_factory=dict)

    def folder_id(self, folder_type: str, name: str) -> str:
        return self.folders.allocate(sanitize_name(name, folder_prefix(folder_type)))

    def group_id(self, group_id: str, name: str) -> str:
        terraform_id = self.groups.allocate(sanitize_name(name, GROUP_PREFIX))
        self.group_terraform_ids[group_id] = terraform_id
        return terraform_id

    def space_id(self, domain: str) -> str:
        return self.spaces.allocate(sanitize_domain(domain))
