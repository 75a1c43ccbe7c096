# -*- coding: utf-8 -*-
"""
NativeHub gh CLI wrapper
Runs the GitHub CLI as an independent process per call (no shell).

Contract used:
- ``gh auth token``            -> token on stdout, exit code 0
- ``gh repo list --json F --limit N`` -> JSON array of repositories
- ``gh search repos Q --json F --limit N`` -> JSON array of repositories
- ``gh api ENDPOINT``           -> JSON body of a REST call
- ``gh browse --repo R``        -> opens a browser, output ignored
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from nativehub.core import log
from nativehub.github.errors import ExternalToolError, ParseError

TOKEN_PROBE_TIMEOUT_S = 10


@dataclass
class CmdResult:
    """Simple command result wrapper."""

    ok: bool
    stdout: str
    stderr: str
    exit_code: int


class GhCli:
    """
    Minimal async gh client.

    Every method starts a fresh process; there is no shared mutable state
    between calls.
    """

    def __init__(self, executable: str = "gh"):
        self._executable = executable or "gh"

    @property
    def executable(self) -> str:
        return self._executable

    async def run(
        self, args: Sequence[str], timeout_s: Optional[float] = None
    ) -> CmdResult:
        """
        Run ``gh`` with ``args`` and capture output.

        Args:
            args: Arguments after the executable
            timeout_s: Optional wall-clock limit for the process

        Returns:
            CmdResult (ok is False on non-zero exit)

        Raises:
            ExternalToolError: If gh cannot be started or times out
        """
        cmd = [self._executable, *args]
        log.debug(f"Running {' '.join(cmd[:3])}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ExternalToolError(
                f"Failed to run '{self._executable}'. Is GitHub CLI installed?",
                stderr=str(e),
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout_s)
        except asyncio.TimeoutError as e:
            await self._reap(proc)
            raise ExternalToolError(
                f"'{self._executable} {args[0] if args else ''}' timed out",
            ) from e
        except asyncio.CancelledError:
            await self._reap(proc)
            raise

        result = CmdResult(
            ok=proc.returncode == 0,
            stdout=stdout.decode("utf-8", errors="replace").strip(),
            stderr=stderr.decode("utf-8", errors="replace").strip(),
            exit_code=proc.returncode,
        )
        log.debug(f"{self._executable} {args[0] if args else ''} exited with {result.exit_code}")
        return result

    @staticmethod
    async def _reap(proc) -> None:
        """Kill a still-running child and wait for it to exit."""
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await proc.wait()

    async def _run_checked(self, args: Sequence[str], what: str, **kwargs) -> str:
        result = await self.run(args, **kwargs)
        if not result.ok:
            raise ExternalToolError(
                f"{what} failed: {result.stderr}",
                stderr=result.stderr,
                exit_code=result.exit_code,
            )
        return result.stdout

    async def _run_json(self, args: Sequence[str], what: str) -> Any:
        stdout = await self._run_checked(args, what)
        try:
            return json.loads(stdout) if stdout else None
        except json.JSONDecodeError as e:
            raise ParseError.from_exception(f"{what} output", e, stdout) from e

    async def auth_token(self) -> str:
        """
        Read the token of the pre-authenticated gh session.

        Raises:
            ExternalToolError: If gh is missing, not logged in, or prints nothing
        """
        result = await self.run(["auth", "token"], timeout_s=TOKEN_PROBE_TIMEOUT_S)
        token = result.stdout.strip()
        if result.ok and token:
            log.info("Got token from gh CLI")
            return token
        raise ExternalToolError(
            f"gh auth token failed: {result.stderr}. Run 'gh auth login' first.",
            stderr=result.stderr,
            exit_code=result.exit_code,
        )

    async def repo_list(self, fields: Sequence[str], limit: int) -> List[Dict[str, Any]]:
        data = await self._run_json(
            ["repo", "list", "--json", ",".join(fields), "--limit", str(limit)],
            "gh repo list",
        )
        if not isinstance(data, list):
            raise ParseError("Failed to parse gh repo list output.", details="expected array")
        return data

    async def search_repos(
        self, query: str, fields: Sequence[str], limit: int
    ) -> List[Dict[str, Any]]:
        data = await self._run_json(
            ["search", "repos", query, "--json", ",".join(fields), "--limit", str(limit)],
            "gh search repos",
        )
        if not isinstance(data, list):
            raise ParseError("Failed to parse gh search output.", details="expected array")
        return data

    async def api(
        self,
        endpoint: str,
        method: str = "GET",
        fields: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Call a REST endpoint through ``gh api``.

        String fields are sent with ``-f``; ints and bools with ``-F`` so
        gh keeps their JSON type. For GET they become query parameters.
        """
        args = ["api", "--method", method.upper(), endpoint.lstrip("/")]
        for key, value in (fields or {}).items():
            if isinstance(value, (bool, int)):
                flag_value = str(value).lower() if isinstance(value, bool) else str(value)
                args.extend(["-F", f"{key}={flag_value}"])
            else:
                args.extend(["-f", f"{key}={value}"])
        return await self._run_json(args, f"gh api {method.upper()} {endpoint}")

    async def browse(self, repo: str) -> None:
        """Open ``repo`` in the default browser."""
        await self._run_checked(["browse", "--repo", repo], "gh browse")
