# -*- coding: utf-8 -*-
"""
Input Validation
Checks user-controlled values before they are placed into REST paths or
gh command lines.

Validates:
- Repository identifiers (owner/name)
- Repository content paths
- Issue / pull request states and merge methods
"""

from __future__ import annotations

import re
from typing import Tuple

from nativehub.github.errors import ArgumentError

REPO_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")
OWNER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

MAX_REPO_NAME_LENGTH = 100
MAX_OWNER_NAME_LENGTH = 39  # GitHub username max

ISSUE_STATES = ("open", "closed", "all")
SETTABLE_ISSUE_STATES = ("open", "closed")
MERGE_METHODS = ("merge", "squash", "rebase")


def validate_repo_name(name: str) -> Tuple[bool, str]:
    """
    Validate repository name.

    Args:
        name: Repository name to validate

    Returns:
        (is_valid, error_message) tuple
    """
    if not name:
        return False, "Repository name cannot be empty"

    if len(name) > MAX_REPO_NAME_LENGTH:
        return False, f"Repository name too long (max {MAX_REPO_NAME_LENGTH} chars)"

    if not REPO_NAME_PATTERN.match(name):
        return (
            False,
            "Repository name contains invalid characters (use only letters, numbers, dots, hyphens, underscores)",
        )

    if name in (".", ".."):
        return False, "Repository name is reserved"

    return True, ""


def validate_owner_name(owner: str) -> Tuple[bool, str]:
    """
    Validate repository owner/username.

    Args:
        owner: Owner/username to validate

    Returns:
        (is_valid, error_message) tuple
    """
    if not owner:
        return False, "Owner name cannot be empty"

    if len(owner) > MAX_OWNER_NAME_LENGTH:
        return False, f"Owner name too long (max {MAX_OWNER_NAME_LENGTH} chars)"

    if not OWNER_NAME_PATTERN.match(owner):
        return False, "Owner name contains invalid characters"

    if owner.startswith("-") or owner.endswith("-"):
        return False, "Owner name cannot start or end with a hyphen"

    return True, ""


def parse_repo_id(repo: str) -> Tuple[str, str]:
    """
    Split an "owner/name" identifier.

    Args:
        repo: Repository identifier

    Returns:
        (owner, name) tuple

    Raises:
        ArgumentError: If the identifier is not a valid owner/name pair
    """
    repo = (repo or "").strip()
    if repo.count("/") != 1:
        raise ArgumentError(
            f"Invalid repository {repo!r}: expected owner/name",
            details="repository identifier must contain exactly one '/'",
        )

    owner, name = repo.split("/", 1)

    ok, msg = validate_owner_name(owner)
    if not ok:
        raise ArgumentError(f"Invalid repository {repo!r}: {msg}")

    ok, msg = validate_repo_name(name)
    if not ok:
        raise ArgumentError(f"Invalid repository {repo!r}: {msg}")

    return owner, name


def normalize_content_path(path: str) -> str:
    """
    Normalize a path inside a repository ("" addresses the root).

    Raises:
        ArgumentError: On traversal segments or control characters
    """
    path = (path or "").strip().strip("/")
    if not path:
        return ""

    parts = [p for p in path.split("/") if p]
    for part in parts:
        if part in (".", ".."):
            raise ArgumentError(f"Invalid path {path!r}: traversal not allowed")
        if any(ord(ch) < 32 for ch in part):
            raise ArgumentError(f"Invalid path {path!r}: control characters")
    return "/".join(parts)


def check_choice(value: str, choices, what: str) -> str:
    """
    Lower-case ``value`` and check it against ``choices``.

    Raises:
        ArgumentError: If the value is not allowed
    """
    normalized = (value or "").strip().lower()
    if normalized not in choices:
        raise ArgumentError(
            f"Invalid {what} {value!r}: expected one of {', '.join(choices)}"
        )
    return normalized
