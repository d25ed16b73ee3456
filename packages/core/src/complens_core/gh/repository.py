"""Locate a component definition in a GitHub repository and fetch its sources.

The search is a fixed, ordered probe over candidate paths followed by a
short-circuiting walk over candidate sibling directories. Both orders come
from the ReviewProfile and are deliberately sequential: the first hit wins,
and nothing after it is requested.
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass, field

import requests
from github import Auth, Github, GithubException

from complens_core.errors import InvalidUrl
from complens_core.models import RepositoryFile
from complens_core.rubric import DEFAULT_PROFILE, ReviewProfile

logger = logging.getLogger(__name__)

# Matches https://github.com/owner/repo(.git), git+https://..., and git@github.com:owner/repo.git
_REPO_URL_RE = re.compile(r"github\.com[/:]([^/]+)/([^/]+?)(?:\.git)?/?$")


@dataclass
class LocateResult:
    found: bool
    # Definition file first, then the sibling sources.
    files: list[RepositoryFile] = field(default_factory=list)
    definition_path: str | None = None
    directory: str | None = None


def parse_repository_url(url: str) -> tuple[str, str]:
    """Return (owner, repo) parsed from a GitHub repository URL."""
    match = _REPO_URL_RE.search(url.strip())
    if not match:
        raise InvalidUrl(url)
    return match.group(1), match.group(2)


def get_repo(owner: str, name: str, token: str | None = None, timeout: int = 15):
    """Return a lazy repository handle; no request is made until the first read."""
    gh = Github(auth=Auth.Token(token), timeout=timeout) if token else Github(timeout=timeout)
    return gh.get_repo(f"{owner}/{name}", lazy=True)


def _read_text(repo, entry) -> str:
    """Return the text of a file entry.

    The contents API inlines files up to 1 MB as base64. Larger files come
    back with encoding "none" and are read through the git blob instead.
    """
    if entry.encoding == "base64":
        raw = entry.decoded_content
    else:
        raw = base64.b64decode(repo.get_git_blob(entry.sha).content)
    return raw.decode("utf-8", errors="replace")


def find_definition(repo, profile: ReviewProfile = DEFAULT_PROFILE) -> RepositoryFile | None:
    """Probe the candidate paths in order and return the first that is a file."""
    for path in profile.candidate_paths:
        try:
            entry = repo.get_contents(path)
            if isinstance(entry, list) or entry.type != "file":
                continue
            content = _read_text(repo, entry)
        except (GithubException, requests.exceptions.RequestException) as e:
            # 404, auth, rate-limit and network failures all mean "not found here".
            logger.debug("Probe %s: %s", path, e)
            continue
        logger.debug("Found %s at %s", profile.definition_file, path)
        return RepositoryFile(path=path, content=content)
    return None


def list_source_entries(repo, dir_path: str, profile: ReviewProfile = DEFAULT_PROFILE) -> list:
    """Return the source-file entries of one directory, excluding the definition file."""
    try:
        entries = repo.get_contents(dir_path)
    except (GithubException, requests.exceptions.RequestException) as e:
        logger.debug("Directory %r not readable: %s", dir_path, e)
        return []
    if not isinstance(entries, list):
        return []
    return [e for e in entries if e.type == "file" and profile.is_source_file(e.name)]


def collect_sibling_files(
    repo,
    definition_path: str,
    profile: ReviewProfile = DEFAULT_PROFILE,
) -> tuple[str | None, list[RepositoryFile]]:
    """Fetch source files from the first candidate directory that has any.

    Returns the winning directory and its files. Later candidates are never
    listed once one yields at least one source file.
    """
    for dir_path in profile.sibling_directories(definition_path):
        entries = list_source_entries(repo, dir_path, profile)
        if not entries:
            continue

        files: list[RepositoryFile] = []
        for entry in entries:
            full_path = f"{dir_path}/{entry.name}" if dir_path else entry.name
            try:
                files.append(RepositoryFile(path=full_path, content=_read_text(repo, entry)))
            except (GithubException, requests.exceptions.RequestException) as e:
                logger.warning("Could not fetch %s: %s", full_path, e)
        return dir_path, files

    return None, []


def locate_component(repo, profile: ReviewProfile = DEFAULT_PROFILE) -> LocateResult:
    """Find the definition file in ``repo`` and gather the files around it."""
    definition = find_definition(repo, profile)
    if definition is None:
        return LocateResult(found=False)

    directory, siblings = collect_sibling_files(repo, definition.path, profile)
    return LocateResult(
        found=True,
        files=[definition, *siblings],
        definition_path=definition.path,
        directory=directory,
    )


def locate(
    repository_url: str,
    token: str | None = None,
    profile: ReviewProfile = DEFAULT_PROFILE,
    timeout: int = 15,
) -> LocateResult:
    """Parse ``repository_url`` and run locate_component against it.

    An absent token is allowed; GitHub then applies the anonymous rate limit.
    """
    owner, name = parse_repository_url(repository_url)
    return locate_component(get_repo(owner, name, token=token, timeout=timeout), profile)
