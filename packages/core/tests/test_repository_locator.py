"""Tests for locating a component definition and its sibling sources on GitHub."""

import base64
import types
from unittest.mock import MagicMock

import pytest
import requests
from github import GithubException

from complens_core.errors import InvalidUrl
from complens_core.gh.repository import (
    collect_sibling_files,
    find_definition,
    locate,
    locate_component,
    parse_repository_url,
)
from complens_core.rubric import DEFAULT_PROFILE


def _file(name, content="export {};"):
    return types.SimpleNamespace(type="file", name=name, encoding="base64", decoded_content=content.encode())


def _large_file(name, sha="abc123"):
    # Over 1 MB the contents API returns no inline content.
    return types.SimpleNamespace(type="file", name=name, encoding="none", sha=sha)


def _dir(name):
    return types.SimpleNamespace(type="dir", name=name, encoding=None, decoded_content=b"")


def _fake_repo(tree: dict):
    """A repo whose get_contents serves ``tree`` and 404s everything else.

    An exception value in ``tree`` is raised for that path.
    """

    def get_contents(path):
        if path in tree:
            if isinstance(tree[path], Exception):
                raise tree[path]
            return tree[path]
        raise GithubException(404, {"message": "Not Found"}, None)

    repo = MagicMock()
    repo.get_contents.side_effect = get_contents
    return repo


def _requested(repo):
    return [c.args[0] for c in repo.get_contents.call_args_list]


# ---------------------------------------------------------------------------
# URL parsing
# ---------------------------------------------------------------------------


class TestParseRepositoryUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/acme/rate-limiter",
            "https://github.com/acme/rate-limiter.git",
            "https://github.com/acme/rate-limiter/",
            "git+https://github.com/acme/rate-limiter.git",
            "git@github.com:acme/rate-limiter.git",
        ],
    )
    def test_accepts_common_forms(self, url):
        assert parse_repository_url(url) == ("acme", "rate-limiter")

    def test_rejects_non_github_url(self):
        with pytest.raises(InvalidUrl) as exc_info:
            parse_repository_url("https://gitlab.com/acme/rate-limiter")
        assert exc_info.value.message == "Invalid GitHub repository URL"

    def test_rejects_url_without_repo(self):
        with pytest.raises(InvalidUrl):
            parse_repository_url("https://github.com/acme")


# ---------------------------------------------------------------------------
# Definition probe
# ---------------------------------------------------------------------------


class TestFindDefinition:
    def test_first_candidate_in_priority_order_wins(self):
        repo = _fake_repo(
            {
                "src/component/convex.config.ts": _file("convex.config.ts", "deep"),
                "convex.config.ts": _file("convex.config.ts", "root"),
            }
        )
        found = find_definition(repo)
        assert found.path == "src/component/convex.config.ts"
        assert found.content == "deep"

    def test_probes_stop_at_first_hit(self):
        repo = _fake_repo({"convex/convex.config.ts": _file("convex.config.ts")})
        find_definition(repo)
        assert _requested(repo) == [
            "convex/src/component/convex.config.ts",
            "convex/component/convex.config.ts",
            "convex/convex.config.ts",
        ]

    def test_returns_none_when_no_candidate_exists(self):
        repo = _fake_repo({})
        assert find_definition(repo) is None
        assert _requested(repo) == list(DEFAULT_PROFILE.candidate_paths)

    def test_directory_listing_at_candidate_path_is_skipped(self):
        repo = _fake_repo(
            {
                "convex.config.ts": [_file("a.ts")],
                "packages/component/convex.config.ts": _file("convex.config.ts"),
            }
        )
        assert find_definition(repo).path == "packages/component/convex.config.ts"

    def test_non_file_entry_is_skipped(self):
        repo = _fake_repo({"src/convex.config.ts": _dir("convex.config.ts"), "lib/convex.config.ts": _file("x")})
        assert find_definition(repo).path == "lib/convex.config.ts"

    def test_auth_errors_count_as_not_found(self):
        repo = MagicMock()
        repo.get_contents.side_effect = GithubException(403, {"message": "rate limited"}, None)
        assert find_definition(repo) is None

    def test_network_failure_on_one_candidate_is_not_fatal(self):
        repo = _fake_repo(
            {
                "convex/src/component/convex.config.ts": requests.exceptions.ReadTimeout("read timed out"),
                "convex/component/convex.config.ts": _file("convex.config.ts"),
            }
        )
        assert find_definition(repo).path == "convex/component/convex.config.ts"

    def test_large_definition_read_from_blob(self):
        repo = _fake_repo({"convex/convex.config.ts": _large_file("convex.config.ts", sha="def1")})
        repo.get_git_blob.return_value = types.SimpleNamespace(content=base64.b64encode(b"defineComponent").decode())
        found = find_definition(repo)
        assert found.content == "defineComponent"
        repo.get_git_blob.assert_called_once_with("def1")


# ---------------------------------------------------------------------------
# Sibling collection
# ---------------------------------------------------------------------------


class TestCollectSiblingFiles:
    def test_short_circuits_on_first_directory_with_sources(self):
        repo = _fake_repo(
            {
                "convex/src/component": [_file("lib.ts")],
                "convex/component": [_file("other.ts")],
            }
        )
        directory, files = collect_sibling_files(repo, "convex/convex.config.ts")
        assert directory == "convex/src/component"
        assert [f.path for f in files] == ["convex/src/component/lib.ts"]
        assert _requested(repo) == ["convex/src/component"]

    def test_skips_directories_without_sources(self):
        repo = _fake_repo(
            {
                "convex/component": [_file("README.md"), _dir("nested")],
                "convex": [_file("convex.config.ts"), _file("public.ts")],
            }
        )
        directory, files = collect_sibling_files(repo, "convex/convex.config.ts")
        assert directory == "convex"
        assert [f.path for f in files] == ["convex/public.ts"]
        assert _requested(repo) == ["convex/src/component", "convex/component", "convex"]

    def test_definition_file_alone_does_not_stop_the_walk(self):
        repo = _fake_repo(
            {
                "src/component": [_file("convex.config.ts")],
                "src": [_file("client.ts")],
            }
        )
        directory, files = collect_sibling_files(repo, "src/convex.config.ts")
        assert directory == "src"
        assert [f.path for f in files] == ["src/client.ts"]

    def test_packages_layout_searches_own_directory(self):
        repo = _fake_repo({"packages/component": [_file("index.ts"), _file("convex.config.ts")]})
        directory, files = collect_sibling_files(repo, "packages/component/convex.config.ts")
        assert directory == "packages/component"
        assert [f.path for f in files] == ["packages/component/index.ts"]

    def test_root_layout_tries_component_then_root(self):
        repo = _fake_repo({"": [_file("convex.config.ts"), _file("index.ts"), _file("styles.css")]})
        directory, files = collect_sibling_files(repo, "convex.config.ts")
        assert directory == ""
        assert [f.path for f in files] == ["index.ts"]
        assert _requested(repo) == ["component", ""]

    def test_large_sibling_read_from_blob(self):
        repo = _fake_repo({"convex/src/component": [_large_file("big.ts"), _file("small.ts", "small")]})
        repo.get_git_blob.return_value = types.SimpleNamespace(content=base64.b64encode(b"big").decode())
        _, files = collect_sibling_files(repo, "convex/convex.config.ts")
        assert [(f.path, f.content) for f in files] == [
            ("convex/src/component/big.ts", "big"),
            ("convex/src/component/small.ts", "small"),
        ]

    def test_unreadable_large_sibling_is_skipped(self):
        repo = _fake_repo({"convex/src/component": [_large_file("big.ts"), _file("small.ts")]})
        repo.get_git_blob.side_effect = requests.exceptions.ConnectionError("reset")
        _, files = collect_sibling_files(repo, "convex/convex.config.ts")
        assert [f.path for f in files] == ["convex/src/component/small.ts"]

    def test_network_failure_on_directory_moves_on(self):
        repo = _fake_repo(
            {
                "convex/src/component": requests.exceptions.ConnectTimeout("timed out"),
                "convex/component": [_file("lib.ts")],
            }
        )
        directory, _ = collect_sibling_files(repo, "convex/convex.config.ts")
        assert directory == "convex/component"

    def test_nothing_found_returns_empty(self):
        repo = _fake_repo({})
        assert collect_sibling_files(repo, "lib/convex.config.ts") == (None, [])


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------


class TestLocate:
    def test_definition_file_comes_first(self):
        repo = _fake_repo(
            {
                "src/component/convex.config.ts": _file("convex.config.ts", "defineComponent('x')"),
                "src/component": [_file("convex.config.ts"), _file("lib.ts", "query({})")],
            }
        )
        result = locate_component(repo)
        assert result.found is True
        assert [f.path for f in result.files] == ["src/component/convex.config.ts", "src/component/lib.ts"]
        assert result.definition_path == "src/component/convex.config.ts"
        assert result.directory == "src/component"

    def test_not_found_does_not_list_directories(self):
        repo = _fake_repo({})
        result = locate_component(repo)
        assert result.found is False
        assert result.files == []
        assert len(_requested(repo)) == len(DEFAULT_PROFILE.candidate_paths)

    def test_locate_parses_url_and_passes_token(self, mocker):
        repo = _fake_repo({"convex.config.ts": _file("convex.config.ts"), "component": [_file("a.ts")]})
        mock_get_repo = mocker.patch("complens_core.gh.repository.get_repo", return_value=repo)

        result = locate("https://github.com/acme/widget.git", token="tok", timeout=5)

        mock_get_repo.assert_called_once_with("acme", "widget", token="tok", timeout=5)
        assert result.found is True
        assert [f.path for f in result.files] == ["convex.config.ts", "component/a.ts"]

    def test_locate_rejects_bad_url_before_any_request(self, mocker):
        mock_get_repo = mocker.patch("complens_core.gh.repository.get_repo")
        with pytest.raises(InvalidUrl):
            locate("not a url")
        mock_get_repo.assert_not_called()
