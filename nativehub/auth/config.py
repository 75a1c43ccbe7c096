# -*- coding: utf-8 -*-
"""
NativeHub OAuth Configuration
GitHub OAuth Device Flow endpoints and credential naming.
"""

from nativehub.core import settings

# GitHub OAuth endpoints
DEVICE_CODE_URL = "https://github.com/login/device/code"
TOKEN_URL = "https://github.com/login/oauth/access_token"
VERIFICATION_URI_DEFAULT = "https://github.com/login/device"
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

# OAuth scopes requested
# - repo: private repositories, issues, pull requests
# - user: profile
# - read:org: organization repositories
DEFAULT_SCOPES = ["repo", "user", "read:org"]

# slow_down adds this many seconds to the poll interval (RFC 8628)
SLOW_DOWN_INCREMENT_S = 5
# Extra wait on top of the server interval before each poll
POLL_BUFFER_S = 1

# Credential store location of the persisted token
CREDENTIAL_NAMESPACE = "native_hub"
CREDENTIAL_ACCOUNT = "github_oauth"


def get_client_id():
    """
    Get the GitHub OAuth client ID.

    Returns:
        str | None: Client ID if GITHUB_CLIENT_ID is set, None otherwise
    """
    return settings.load_client_id()
