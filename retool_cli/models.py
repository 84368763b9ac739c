"""Typed records for Retool API v2 payloads used by the Terraform generator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .errors import ResponseShapeError
from .utils import as_dict, pick, safe_bool, safe_int, safe_str


def _require_str(
    record: Dict[str, Any], what: str, *keys: str, allow_empty: bool = False
) -> str:
    value = pick(record, *keys)
    if isinstance(value, bool) or value is None or isinstance(value, (dict, list)):
        raise ResponseShapeError(f"{what} is missing required field '{keys[0]}'")
    text = str(value)
    if not allow_empty and not text.strip():
        raise ResponseShapeError(f"{what} has an empty '{keys[0]}'")
    return text


def _optional_str(record: Dict[str, Any], *keys: str) -> Optional[str]:
    value = pick(record, *keys)
    if isinstance(value, (dict, list)):
        return None
    text = safe_str(value)
    if text is None or not text.strip():
        return None
    return text


@dataclass(frozen=True)
class Folder:
    id: str
    name: str
    folder_type: str
    is_system_folder: bool = False
    parent_folder_id: Optional[str] = None


@dataclass(frozen=True)
class Group:
    id: int
    name: str
    universal_app_access: Optional[str] = None
    universal_resource_access: Optional[str] = None
    universal_workflow_access: Optional[str] = None
    universal_query_library_access: Optional[str] = None
    user_list_access: Optional[bool] = None
    audit_log_access: Optional[bool] = None
    unpublished_release_access: Optional[bool] = None
    usage_analytics_access: Optional[bool] = None
    account_details_access: Optional[bool] = None
    landing_page_app_id: Optional[str] = None


GROUP_ACCESS_LEVEL_FIELDS = (
    "universal_app_access",
    "universal_resource_access",
    "universal_workflow_access",
    "universal_query_library_access",
)
GROUP_FLAG_FIELDS = (
    "user_list_access",
    "audit_log_access",
    "unpublished_release_access",
    "usage_analytics_access",
    "account_details_access",
)


@dataclass(frozen=True)
class Space:
    id: str
    name: str
    domain: str


@dataclass(frozen=True)
class PermissionEntry:
    object_type: str
    object_id: str
    access_level: str


def parse_folder(entry: Any) -> Folder:
    record = as_dict(entry)
    if not record:
        raise ResponseShapeError("folder listing contained a non-object entry")
    return Folder(
        id=_require_str(record, "folder", "id"),
        name=_require_str(record, "folder", "name", allow_empty=True),
        folder_type=_require_str(record, "folder", "folder_type", "folderType"),
        is_system_folder=bool(
            safe_bool(pick(record, "is_system_folder", "isSystemFolder")) or False
        ),
        parent_folder_id=_optional_str(record, "parent_folder_id", "parentFolderId"),
    )


def parse_group(entry: Any) -> Group:
    record = as_dict(entry)
    if not record:
        raise ResponseShapeError("group listing contained a non-object entry")
    group_id = safe_int(pick(record, "id"))
    if group_id is None:
        raise ResponseShapeError("group is missing a numeric 'id'")
    values: Dict[str, Any] = {}
    for name in GROUP_ACCESS_LEVEL_FIELDS:
        values[name] = _optional_str(record, name)
    for name in GROUP_FLAG_FIELDS:
        values[name] = safe_bool(pick(record, name))
    return Group(
        id=group_id,
        name=_require_str(record, "group", "name", allow_empty=True),
        landing_page_app_id=_optional_str(record, "landing_page_app_id"),
        **values,
    )


def parse_space(entry: Any) -> Space:
    record = as_dict(entry)
    if not record:
        raise ResponseShapeError("space listing contained a non-object entry")
    return Space(
        id=_require_str(record, "space", "id"),
        name=_require_str(record, "space", "name", allow_empty=True),
        domain=_require_str(record, "space", "domain", allow_empty=True),
    )


def parse_permission_entry(entry: Any) -> PermissionEntry:
    record = as_dict(entry)
    if not record:
        raise ResponseShapeError("permission listing contained a non-object entry")
    return PermissionEntry(
        object_type=_require_str(record, "permission", "type", "object_type"),
        object_id=_require_str(record, "permission", "id", "object_id"),
        access_level=_require_str(record, "permission", "access_level", "accessLevel"),
    )


# Source control


@dataclass(frozen=True)
class GitHubAppAuth:
    app_id: str
    installation_id: str


@dataclass(frozen=True)
class GitHubPersonalAccessTokenAuth:
    pass


@dataclass(frozen=True)
class GitHubConfig:
    auth: Union[GitHubAppAuth, GitHubPersonalAccessTokenAuth]
    url: Optional[str] = None
    enterprise_api_url: Optional[str] = None


@dataclass(frozen=True)
class GitLabConfig:
    project_id: str
    url: str


@dataclass(frozen=True)
class AWSCodeCommitConfig:
    url: str
    region: str
    access_key_id: str
    https_username: str


@dataclass(frozen=True)
class BitbucketConfig:
    username: str
    url: Optional[str] = None
    enterprise_api_url: Optional[str] = None


@dataclass(frozen=True)
class AzureReposConfig:
    url: str
    project: str
    user: str
    use_basic_auth: Optional[bool] = None


ProviderConfig = Union[
    GitHubConfig, GitLabConfig, AWSCodeCommitConfig, BitbucketConfig, AzureReposConfig
]


@dataclass(frozen=True)
class SourceControlConfig:
    provider: str
    org: str
    repo: str
    default_branch: str
    settings: ProviderConfig
    repo_version: Optional[str] = None


@dataclass(frozen=True)
class SourceControlSettings:
    auto_branch_naming_enabled: bool
    custom_pull_request_template_enabled: bool
    version_control_locked: bool
    custom_pull_request_template: Optional[str] = None


def _parse_github(config: Dict[str, Any]) -> GitHubConfig:
    auth_type = (_optional_str(config, "type", "auth_type") or "").strip().lower()
    if not auth_type:
        auth_type = "app" if "app_id" in config else "personal"
    auth: Union[GitHubAppAuth, GitHubPersonalAccessTokenAuth]
    if auth_type == "app":
        auth = GitHubAppAuth(
            app_id=_require_str(config, "GitHub app config", "app_id"),
            installation_id=_require_str(config, "GitHub app config", "installation_id"),
        )
    elif auth_type in {"personal", "personal_access_token"}:
        auth = GitHubPersonalAccessTokenAuth()
    else:
        raise ResponseShapeError(f"unknown GitHub authentication type '{auth_type}'")
    return GitHubConfig(
        auth=auth,
        url=_optional_str(config, "url"),
        enterprise_api_url=_optional_str(config, "enterprise_api_url"),
    )


def _parse_gitlab(config: Dict[str, Any]) -> GitLabConfig:
    return GitLabConfig(
        project_id=_require_str(config, "GitLab config", "project_id"),
        url=_require_str(config, "GitLab config", "url"),
    )


def _parse_aws_codecommit(config: Dict[str, Any]) -> AWSCodeCommitConfig:
    what = "AWS CodeCommit config"
    return AWSCodeCommitConfig(
        url=_require_str(config, what, "url"),
        region=_require_str(config, what, "region"),
        access_key_id=_require_str(config, what, "access_key_id"),
        https_username=_require_str(config, what, "https_username"),
    )


def _parse_bitbucket(config: Dict[str, Any]) -> BitbucketConfig:
    return BitbucketConfig(
        username=_require_str(config, "Bitbucket config", "username"),
        url=_optional_str(config, "url"),
        enterprise_api_url=_optional_str(config, "enterprise_api_url"),
    )


def _parse_azure_repos(config: Dict[str, Any]) -> AzureReposConfig:
    what = "Azure Repos config"
    return AzureReposConfig(
        url=_require_str(config, what, "url"),
        project=_require_str(config, what, "project"),
        user=_require_str(config, what, "user"),
        use_basic_auth=safe_bool(pick(config, "use_basic_auth")),
    )


SOURCE_CONTROL_PROVIDERS = {
    "github": ("GitHub", _parse_github),
    "gitlab": ("GitLab", _parse_gitlab),
    "aws codecommit": ("AWS CodeCommit", _parse_aws_codecommit),
    "awscodecommit": ("AWS CodeCommit", _parse_aws_codecommit),
    "bitbucket": ("Bitbucket", _parse_bitbucket),
    "azure repos": ("Azure Repos", _parse_azure_repos),
    "azurerepos": ("Azure Repos", _parse_azure_repos),
}


def parse_source_control_config(payload: Any) -> SourceControlConfig:
    record = as_dict(payload)
    if not record:
        raise ResponseShapeError("source control config is not an object")
    provider_raw = _require_str(record, "source control config", "provider")
    provider = SOURCE_CONTROL_PROVIDERS.get(provider_raw.strip().lower())
    if provider is None:
        raise ResponseShapeError(f"unknown source control provider '{provider_raw}'")
    provider_name, parser = provider
    config = as_dict(pick(record, "config"))
    if not config:
        raise ResponseShapeError(f"{provider_name} source control config has no 'config' object")
    return SourceControlConfig(
        provider=provider_name,
        org=_require_str(record, "source control config", "org"),
        repo=_require_str(record, "source control config", "repo"),
        default_branch=_require_str(record, "source control config", "default_branch"),
        repo_version=_optional_str(record, "repo_version"),
        settings=parser(config),
    )


def parse_source_control_settings(payload: Any) -> SourceControlSettings:
    record = as_dict(payload)
    if not record:
        raise ResponseShapeError("source control settings is not an object")

    def flag(name: str) -> bool:
        value = safe_bool(pick(record, name))
        if value is None:
            raise ResponseShapeError(f"source control settings is missing boolean '{name}'")
        return value

    return SourceControlSettings(
        auto_branch_naming_enabled=flag("auto_branch_naming_enabled"),
        custom_pull_request_template_enabled=flag("custom_pull_request_template_enabled"),
        version_control_locked=flag("version_control_locked"),
        custom_pull_request_template=_optional_str(record, "custom_pull_request_template"),
    )


# SSO

SSO_CONFIG_TYPES = ("google", "oidc", "google & oidc", "saml", "google & saml")


@dataclass(frozen=True)
class GoogleSSO:
    client_id: str


@dataclass(frozen=True)
class OIDCSSO:
    client_id: str
    scopes: str
    jwt_email_key: str
    jwt_first_name_key: str
    jwt_last_name_key: str
    auth_url: str
    token_url: str
    jwt_roles_key: Optional[str] = None
    roles_mapping: Optional[str] = None
    userinfo_url: Optional[str] = None
    audience: Optional[str] = None
    jit_enabled: Optional[bool] = None
    restricted_domain: Optional[str] = None


@dataclass(frozen=True)
class SAMLSSO:
    idp_metadata_xml: str
    first_name_attribute: str
    last_name_attribute: str
    groups_attribute: Optional[str] = None
    sync_group_claims: Optional[bool] = None
    jit_enabled: Optional[bool] = None
    restricted_domain: Optional[str] = None
    ldap_sync_group_claims: Optional[bool] = None
    ldap_role_mapping: Optional[str] = None
    ldap_server_url: Optional[str] = None
    ldap_base_domain: Optional[str] = None
    ldap_bind_dn: Optional[str] = None
    ldap_server_name: Optional[str] = None
    ldap_server_key: Optional[str] = None
    ldap_server_certificate: Optional[str] = None


@dataclass(frozen=True)
class SSOConfig:
    config_type: str
    disable_email_password_login: bool = False
    google: Optional[GoogleSSO] = None
    oidc: Optional[OIDCSSO] = None
    saml: Optional[SAMLSSO] = None


def _parse_google(record: Dict[str, Any]) -> GoogleSSO:
    return GoogleSSO(client_id=_require_str(record, "Google SSO config", "google_client_id"))


def _parse_oidc(record: Dict[str, Any]) -> OIDCSSO:
    what = "OIDC SSO config"
    return OIDCSSO(
        client_id=_require_str(record, what, "oidc_client_id"),
        scopes=_require_str(record, what, "oidc_scopes"),
        jwt_email_key=_require_str(record, what, "oidc_jwt_email_key"),
        jwt_first_name_key=_require_str(record, what, "oidc_jwt_first_name_key"),
        jwt_last_name_key=_require_str(record, what, "oidc_jwt_last_name_key"),
        auth_url=_require_str(record, what, "oidc_auth_url"),
        token_url=_require_str(record, what, "oidc_token_url"),
        jwt_roles_key=_optional_str(record, "oidc_jwt_roles_key"),
        roles_mapping=_optional_str(record, "oidc_roles_mapping"),
        userinfo_url=_optional_str(record, "oidc_userinfo_url"),
        audience=_optional_str(record, "oidc_audience"),
        jit_enabled=safe_bool(pick(record, "jit_enabled")),
        restricted_domain=_optional_str(record, "restricted_domain"),
    )


def _parse_saml(record: Dict[str, Any]) -> SAMLSSO:
    what = "SAML SSO config"
    return SAMLSSO(
        idp_metadata_xml=_require_str(record, what, "idp_metadata_xml"),
        first_name_attribute=_require_str(record, what, "saml_first_name_attribute"),
        last_name_attribute=_require_str(record, what, "saml_last_name_attribute"),
        groups_attribute=_optional_str(record, "saml_groups_attribute"),
        sync_group_claims=safe_bool(pick(record, "saml_sync_group_claims")),
        jit_enabled=safe_bool(pick(record, "jit_enabled")),
        restricted_domain=_optional_str(record, "restricted_domain"),
        ldap_sync_group_claims=safe_bool(pick(record, "ldap_sync_group_claims")),
        ldap_role_mapping=_optional_str(record, "ldap_role_mapping"),
        ldap_server_url=_optional_str(record, "ldap_server_url"),
        ldap_base_domain=_optional_str(record, "ldap_base_domain"),
        ldap_bind_dn=_optional_str(record, "ldap_bind_dn"),
        ldap_server_name=_optional_str(record, "ldap_server_name"),
        ldap_server_key=_optional_str(record, "ldap_server_key"),
        ldap_server_certificate=_optional_str(record, "ldap_server_certificate"),
    )


def parse_sso_config(payload: Any) -> SSOConfig:
    record = as_dict(payload)
    if not record:
        raise ResponseShapeError("SSO config is not an object")
    config_type = _require_str(record, "SSO config", "config_type").strip().lower()
    if config_type not in SSO_CONFIG_TYPES:
        raise ResponseShapeError(f"unknown SSO config type '{config_type}'")
    return SSOConfig(
        config_type=config_type,
        disable_email_password_login=bool(
            safe_bool(pick(record, "disable_email_password_login")) or False
        ),
        google=_parse_google(record) if "google" in config_type else None,
        oidc=_parse_oidc(record) if "oidc" in config_type else None,
        saml=_parse_saml(record) if "saml" in config_type else None,
    )
