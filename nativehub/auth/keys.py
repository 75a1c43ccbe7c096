# -*- coding: utf-8 -*-
"""
NativeHub Credential Key Naming
Naming convention for entries in the OS credential manager.
"""


def credential_target_name(namespace="native_hub", account="github_oauth"):
    """
    Generate the credential storage target name.

    Args:
        namespace: Service namespace
        account: Account within the namespace

    Returns:
        str: Target name for credential storage

    Examples:
        >>> credential_target_name()
        'NativeHub:native_hub:github_oauth'
        >>> credential_target_name("native_hub", "octocat")
        'NativeHub:native_hub:octocat'
    """
    return ":".join(["NativeHub", namespace, account])
