"""Render importable resources as Terraform configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .console import log_warning
from .constants import PERMISSION_OBJECT_TYPES
from .errors import CLIError, RemoteFetchError, ResponseShapeError
from .hcl import SECRET, Expression, Object, render_import, render_resource
from .models import (
    GROUP_ACCESS_LEVEL_FIELDS,
    GROUP_FLAG_FIELDS,
    AWSCodeCommitConfig,
    AzureReposConfig,
    BitbucketConfig,
    GitHubAppAuth,
    GitHubConfig,
    GitLabConfig,
    GoogleSSO,
    OIDCSSO,
    PermissionEntry,
    ProviderConfig,
    SAMLSSO,
)
from .references import ReferenceMaps
from .resources import (
    FolderResource,
    GroupResource,
    ImportableResource,
    PermissionsResource,
    SourceControlResource,
    SourceControlSettingsResource,
    SpaceResource,
    SSOResource,
    resource_address,
)
from .retool_api import RetoolAPI


@dataclass
class EmitContext:
    refs: ReferenceMaps
    api: Optional[RetoolAPI] = None


def _block(resource: ImportableResource, body: Object) -> List[str]:
    return render_resource(resource.resource_type, resource.terraform_id, body)


def _expression(reference: Optional[str]) -> Optional[Expression]:
    return Expression(reference) if reference is not None else None


def parse_arrow_mapping(value: str) -> Dict[str, str]:
    """
    Parse ``"key1->value1,key2->value2"`` into a single-valued map.

    Entries without ``->`` or with an empty key are skipped; a repeated key
    keeps its last value.
    """
    mapping: Dict[str, str] = {}
    for entry in value.split(","):
        key, arrow, target = entry.partition("->")
        key = key.strip()
        if not arrow or not key:
            continue
        mapping[key] = target.strip()
    return mapping


def parse_arrow_multi_mapping(value: str) -> Dict[str, List[str]]:
    """Like :func:`parse_arrow_mapping`, but collects every value of a repeated key."""
    mapping: Dict[str, List[str]] = {}
    for entry in value.split(","):
        key, arrow, target = entry.partition("->")
        key = key.strip()
        if not arrow or not key:
            continue
        mapping.setdefault(key, []).append(target.strip())
    return mapping


def emit_folder(resource: FolderResource, ctx: EmitContext) -> List[str]:
    folder = resource.folder
    return _block(
        resource,
        Object(
            name=folder.name,
            folder_type=folder.folder_type,
            parent_folder_id=_expression(ctx.refs.folder_parent_reference(folder)),
        ),
    )


def emit_group(resource: GroupResource, ctx: EmitContext) -> List[str]:
    group = resource.group
    attributes = {"name": group.name}
    for name in GROUP_ACCESS_LEVEL_FIELDS + GROUP_FLAG_FIELDS:
        attributes[name] = getattr(group, name)
    attributes["landing_page_app_id"] = group.landing_page_app_id
    return _block(resource, Object(**attributes))


def _fetch_permissions(api: RetoolAPI, group_id: str) -> List[PermissionEntry]:
    entries: List[PermissionEntry] = []
    for object_type in PERMISSION_OBJECT_TYPES:
        entries.extend(api.list_group_permissions(int(group_id), object_type))
    return entries


def _permission_object(entry: PermissionEntry, refs: ReferenceMaps) -> Object:
    if entry.object_type == "folder":
        reference = refs.folder_reference(entry.object_id)
        if reference is not None:
            return Object(type=entry.object_type, id=Expression(reference))
    return Object(type=entry.object_type, id=entry.object_id)


def emit_permissions(resource: PermissionsResource, ctx: EmitContext) -> List[str]:
    if ctx.api is None:
        raise CLIError("rendering permissions requires a Retool API connection")
    try:
        entries = _fetch_permissions(ctx.api, resource.group_id)
    except (RemoteFetchError, ResponseShapeError) as exc:
        log_warning(f"{exc}; writing group {resource.group_id} with no permissions")
        entries = []
    return _block(
        resource,
        Object(
            subject=Object(
                type="group",
                id=Expression(ctx.refs.group_reference(resource.group_id)),
            ),
            permissions=[
                Object(
                    object=_permission_object(entry, ctx.refs),
                    access_level=entry.access_level,
                )
                for entry in entries
            ],
        ),
    )


def emit_space(resource: SpaceResource, ctx: EmitContext) -> List[str]:
    return _block(resource, Object(name=resource.space.name, domain=resource.space.domain))


def _github_block(settings: GitHubConfig) -> Object:
    if isinstance(settings.auth, GitHubAppAuth):
        return Object(
            url=settings.url,
            enterprise_api_url=settings.enterprise_api_url,
            app_authentication=Object(
                app_id=settings.auth.app_id,
                installation_id=settings.auth.installation_id,
                private_key=SECRET,
            ),
        )
    return Object(
        url=settings.url,
        enterprise_api_url=settings.enterprise_api_url,
        personal_access_token_authentication=Object(personal_access_token=SECRET),
    )


def _provider_block(settings: ProviderConfig) -> Dict[str, Object]:
    if isinstance(settings, GitHubConfig):
        return {"github": _github_block(settings)}
    if isinstance(settings, GitLabConfig):
        return {
            "gitlab": Object(
                project_id=settings.project_id,
                url=settings.url,
                project_access_token=SECRET,
            )
        }
    if isinstance(settings, AWSCodeCommitConfig):
        return {
            "aws_codecommit": Object(
                url=settings.url,
                region=settings.region,
                access_key_id=settings.access_key_id,
                secret_access_key=SECRET,
                https_username=settings.https_username,
                https_password=SECRET,
            )
        }
    if isinstance(settings, BitbucketConfig):
        return {
            "bitbucket": Object(
                username=settings.username,
                url=settings.url,
                enterprise_api_url=settings.enterprise_api_url,
                app_password=SECRET,
            )
        }
    if isinstance(settings, AzureReposConfig):
        return {
            "azure_repos": Object(
                url=settings.url,
                project=settings.project,
                user=settings.user,
                personal_access_token=SECRET,
                use_basic_auth=settings.use_basic_auth,
            )
        }
    raise CLIError(f"unsupported source control provider settings: {type(settings).__name__}")


def emit_source_control(resource: SourceControlResource, ctx: EmitContext) -> List[str]:
    config = resource.config
    return _block(
        resource,
        Object(
            org=config.org,
            repo=config.repo,
            default_branch=config.default_branch,
            repo_version=config.repo_version,
            **_provider_block(config.settings),
        ),
    )


def emit_source_control_settings(
    resource: SourceControlSettingsResource, ctx: EmitContext
) -> List[str]:
    settings = resource.settings
    return _block(
        resource,
        Object(
            auto_branch_naming_enabled=settings.auto_branch_naming_enabled,
            custom_pull_request_template_enabled=settings.custom_pull_request_template_enabled,
            custom_pull_request_template=settings.custom_pull_request_template,
            version_control_locked=settings.version_control_locked,
        ),
    )


def _google_block(google: GoogleSSO) -> Object:
    return Object(client_id=google.client_id, client_secret=SECRET)


def _oidc_block(oidc: OIDCSSO) -> Object:
    roles_mapping = parse_arrow_mapping(oidc.roles_mapping) if oidc.roles_mapping else {}
    return Object(
        client_id=oidc.client_id,
        client_secret=SECRET,
        scopes=oidc.scopes,
        jwt_email_key=oidc.jwt_email_key,
        jwt_first_name_key=oidc.jwt_first_name_key,
        jwt_last_name_key=oidc.jwt_last_name_key,
        jwt_roles_key=oidc.jwt_roles_key,
        roles_mapping=roles_mapping or None,
        auth_url=oidc.auth_url,
        token_url=oidc.token_url,
        userinfo_url=oidc.userinfo_url,
        audience=oidc.audience,
        jit_enabled=oidc.jit_enabled,
        restricted_domain=oidc.restricted_domain,
    )


def _saml_block(saml: SAMLSSO) -> Object:
    ldap_role_mapping = (
        parse_arrow_multi_mapping(saml.ldap_role_mapping) if saml.ldap_role_mapping else {}
    )
    uses_ldap = saml.ldap_server_url is not None or saml.ldap_bind_dn is not None
    return Object(
        idp_metadata_xml=saml.idp_metadata_xml,
        first_name_attribute=saml.first_name_attribute,
        last_name_attribute=saml.last_name_attribute,
        groups_attribute=saml.groups_attribute,
        sync_group_claims=saml.sync_group_claims,
        jit_enabled=saml.jit_enabled,
        restricted_domain=saml.restricted_domain,
        ldap_sync_group_claims=saml.ldap_sync_group_claims,
        ldap_role_mapping=ldap_role_mapping or None,
        ldap_server_url=saml.ldap_server_url,
        ldap_base_domain=saml.ldap_base_domain,
        ldap_bind_dn=saml.ldap_bind_dn,
        ldap_bind_password=SECRET if uses_ldap else None,
        ldap_server_name=saml.ldap_server_name,
        ldap_server_key=saml.ldap_server_key,
        ldap_server_certificate=saml.ldap_server_certificate,
    )


def emit_sso(resource: SSOResource, ctx: EmitContext) -> List[str]:
    config = resource.config
    return _block(
        resource,
        Object(
            google=_google_block(config.google) if config.google else None,
            oidc=_oidc_block(config.oidc) if config.oidc else None,
            saml=_saml_block(config.saml) if config.saml else None,
            disable_email_password_login=config.disable_email_password_login,
        ),
    )


Emitter = Callable[[ImportableResource, EmitContext], List[str]]

EMITTERS: Dict[type, Emitter] = {
    FolderResource: emit_folder,
    GroupResource: emit_group,
    PermissionsResource: emit_permissions,
    SpaceResource: emit_space,
    SourceControlResource: emit_source_control,
    SourceControlSettingsResource: emit_source_control_settings,
    SSOResource: emit_sso,
}


def emit_resource(resource: ImportableResource, ctx: EmitContext) -> List[str]:
    emitter = EMITTERS.get(type(resource))
    if emitter is None:
        raise CLIError(f"no configuration emitter for {type(resource).__name__}")
    return emitter(resource, ctx)


def render_configuration(resources: Sequence[ImportableResource], ctx: EmitContext) -> str:
    lines: List[str] = []
    for resource in resources:
        lines.extend(emit_resource(resource, ctx))
    return "\n".join(lines)


def render_imports(resources: Sequence[ImportableResource]) -> str:
    lines: List[str] = []
    for resource in resources:
        lines.extend(render_import(resource_address(resource), resource.id))
    return "\n".join(lines)
