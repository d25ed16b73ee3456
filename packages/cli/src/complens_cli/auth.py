"""Fallback GitHub credentials from the GitHub CLI session.

load_config() already reads GITHUB_TOKEN. When that is unset, a developer
who has run `gh auth login` still gets authenticated reads. With neither,
repositories are read anonymously at a much lower rate limit.
"""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

GH_TIMEOUT = 5


def gh_cli_token(timeout: float = GH_TIMEOUT) -> str | None:
    """Return the token of the active gh session, or None. Never raises."""
    try:
        proc = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=timeout)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh CLI unavailable: %s", e)
        return None
    token = proc.stdout.strip() if proc.returncode == 0 else ""
    return token or None


def fill_github_token(config: dict) -> None:
    if config.get("github_token"):
        return
    config["github_token"] = gh_cli_token()
    if config["github_token"]:
        logger.debug("Using the GitHub token of the gh CLI session.")
    else:
        logger.debug("No GitHub token found; repository reads will be anonymous.")
