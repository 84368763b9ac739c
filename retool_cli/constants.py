"""Shared constants for retool_cli."""

from __future__ import annotations

from typing import Tuple

PACKAGE_NAME = "retool_cli"
PROG_NAME = "retool"

HOST_ENV_VAR = "RETOOL_HOST"
AUTH_TOKEN_ENV_VAR = "RETOOL_ACCESS_TOKEN"
SCHEME_ENV_VAR = "RETOOL_SCHEME"
TIMEOUT_ENV_VAR = "RETOOL_CLI_TIMEOUT"
CONFIG_ENV_VAR = "RETOOL_CLI_CONFIG"
DEFAULT_CONFIG_DIR_NAME = "retool_cli"
DEFAULT_SCHEME = "https"
API_PATH_PREFIX = "api/v2"

KEYRING_SERVICE = "retool_cli"
KEYRING_USERNAME = "access_token"

EXIT_CODE_USAGE = 2
EXIT_CODE_INTERRUPT = 130

HTTP_TIMEOUT_SECONDS = 30.0
MAX_LIST_PAGES = 100

# Groups every organization has; they cannot be managed through Terraform.
BUILT_IN_GROUP_NAMES: Tuple[str, ...] = ("admin", "viewer", "editor", "All Users")

PERMISSION_OBJECT_TYPES: Tuple[str, ...] = (
    "app",
    "folder",
    "resource",
    "resource_configuration",
)

SOURCE_CONTROL_ID = "source_control"
SOURCE_CONTROL_SETTINGS_ID = "source_control_settings"
SSO_ID = "sso"

SECRET_PLACEHOLDER = '"" # FILL IN: secret values are not returned by the Retool API'
