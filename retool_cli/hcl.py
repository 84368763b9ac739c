"""Minimal HCL writer for generated Terraform configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from .constants import SECRET_PLACEHOLDER
from .errors import CLIError

INDENT = "  "


@dataclass(frozen=True)
class Expression:
    """A raw HCL expression such as ``retool_group.admins.id``."""

    text: str


class Secret:
    """Marks an attribute whose value the API never returns."""


SECRET = Secret()


class Object:
    """An HCL object whose keys are attribute names, rendered in insertion order."""

    def __init__(self, **attributes: Any) -> None:
        self.attributes: Dict[str, Any] = attributes


def quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("${", "$${")
        .replace("%{", "%%{")
    )
    return f'"{escaped}"'


def _pad(depth: int) -> str:
    return INDENT * depth


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float, Expression))


def _render_value(value: Any, depth: int) -> List[str]:
    if isinstance(value, Secret):
        return [SECRET_PLACEHOLDER]
    if isinstance(value, Expression):
        return [value.text]
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, (int, float)):
        return [str(value)]
    if isinstance(value, str):
        return [quote(value)]
    if isinstance(value, Object):
        body = render_attributes(value.attributes, depth + 1)
        if not body:
            return ["{}"]
        return ["{", *body, f"{_pad(depth)}}}"]
    if isinstance(value, Mapping):
        if not value:
            return ["{}"]
        lines = ["{"]
        for key, entry in value.items():
            rendered = _render_value(entry, depth + 1)
            lines.append(f"{_pad(depth + 1)}{quote(str(key))} = {rendered[0]}")
            lines.extend(rendered[1:])
        lines.append(f"{_pad(depth)}}}")
        return lines
    if isinstance(value, (list, tuple)):
        if not value:
            return ["[]"]
        if all(_is_scalar(item) for item in value):
            return ["[" + ", ".join(_render_value(item, depth)[0] for item in value) + "]"]
        lines = ["["]
        for item in value:
            rendered = _render_value(item, depth + 1)
            lines.append(f"{_pad(depth + 1)}{rendered[0]}")
            lines.extend(rendered[1:])
            lines[-1] = f"{lines[-1]},"
        lines.append(f"{_pad(depth)}]")
        return lines
    raise CLIError(f"cannot render value of type {type(value).__name__} as HCL")


def render_attributes(attributes: Mapping[str, Any], depth: int) -> List[str]:
    """Render ``name = value`` lines; ``None`` values are left out."""
    lines: List[str] = []
    for name, value in attributes.items():
        if value is None:
            continue
        rendered = _render_value(value, depth)
        lines.append(f"{_pad(depth)}{name} = {rendered[0]}")
        lines.extend(rendered[1:])
    return lines


def render_resource(resource_type: str, name: str, body: Object) -> List[str]:
    return [
        f'resource "{resource_type}" "{name}" {{',
        *render_attributes(body.attributes, 1),
        "}",
        "",
    ]


def render_import(address: str, native_id: str) -> List[str]:
    return [
        "import {",
        f"{INDENT}to = {address}",
        f"{INDENT}id = {quote(native_id)}",
        "}",
        "",
    ]
