# -*- coding: utf-8 -*-
"""
NativeHub Settings Module
Read runtime configuration from the process environment.

Every loader returns a sane default when the variable is unset or invalid,
and logs what it fell back to.
"""

import os

from nativehub.core import log

ENV_CLIENT_ID = "GITHUB_CLIENT_ID"
ENV_ENGINE = "NATIVEHUB_ENGINE"
ENV_CANCEL_POLICY = "NATIVEHUB_CANCEL_POLICY"
ENV_GH_PATH = "NATIVEHUB_GH_PATH"
ENV_API_BASE = "NATIVEHUB_API_BASE"
ENV_LOG_LEVEL = "NATIVEHUB_LOG_LEVEL"

ENGINE_REST = "rest"
ENGINE_CLI = "cli"

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_GH_PATH = "gh"
DEFAULT_LOG_LEVEL = "INFO"

# Inbound action channel capacity (UI bursts)
ACTION_QUEUE_CAPACITY = 100


def load_setting(key, default=""):
    """
    Load a generic string setting

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Setting value string, stripped
    """
    value = os.environ.get(key)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def load_client_id():
    """
    Load the GitHub OAuth App client ID.

    Returns:
        str | None: Client ID, or None when the variable is not set
    """
    client_id = load_setting(ENV_CLIENT_ID, "")
    return client_id or None


def load_engine_profile():
    """
    Load which engine lists repositories ("rest" or "cli").

    Returns:
        str: ENGINE_REST or ENGINE_CLI
    """
    profile = load_setting(ENV_ENGINE, ENGINE_REST).lower()
    if profile not in (ENGINE_REST, ENGINE_CLI):
        log.warning(f"Unknown engine profile {profile!r}, using {ENGINE_REST}")
        return ENGINE_REST
    return profile


def load_cancel_policy():
    """
    Load the configured Cancel behaviour name.

    Returns:
        str: "login", "most_recent" or "ignore"
    """
    return load_setting(ENV_CANCEL_POLICY, "login").lower()


def load_gh_path():
    """Path or name of the gh executable."""
    return load_setting(ENV_GH_PATH, DEFAULT_GH_PATH)


def load_api_base():
    """
    Load the REST API base URL (no trailing slash).

    Returns:
        str: API base URL
    """
    base = load_setting(ENV_API_BASE, DEFAULT_API_BASE)
    if not base.startswith("https://") and not base.startswith("http://"):
        log.warning(f"Ignoring invalid API base {base!r}")
        return DEFAULT_API_BASE
    return base.rstrip("/")


def load_log_level():
    return load_setting(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()
