"""Tests for SyncOrchestrator run sequencing."""

from __future__ import annotations

import os
from unittest.mock import MagicMock, Mock, patch

from config import Config, GitLabConfig, SelectionConfig
from gitlab_source import GitLabSource
from models import Group, Project
from repo_sync import RepoSyncError, RepositorySync, SyncOutcome
from sync_orchestrator import EXIT_EXECUTION_ERROR, EXIT_SUCCESS, SyncOrchestrator


def _make_config(tmp_path, url: str = "", token: str = "", **selection) -> Config:
    return Config(
        gitlab=GitLabConfig(url=url, token=token),
        path=str(tmp_path),
        selection=SelectionConfig(**selection),
    )


def _project(path_ns: str) -> Project:
    return Project(
        id=1,
        path=path_ns.rsplit("/", 1)[-1],
        path_with_namespace=path_ns,
        clone_url=f"git@gitlab.example.com:{path_ns}.git",
    )


@patch("gitlab_source.gitlab.Gitlab")
def test_single_repo_without_client(mock_gitlab: MagicMock, tmp_path, capsys) -> None:
    """One configured repo, blank url/token: one sync, no group listing."""
    url = "git@gitlab.example.com:teamA/app.git"
    cfg = _make_config(tmp_path, repos=(url,))
    syncer = Mock(spec=RepositorySync)
    syncer.sync.return_value = SyncOutcome.CLONED

    orchestrator = SyncOrchestrator(cfg, syncer=syncer)
    assert isinstance(orchestrator.gl, GitLabSource)

    assert orchestrator.run() == EXIT_SUCCESS
    syncer.sync.assert_called_once_with(
        url, os.path.join(str(tmp_path), "teamA", "app"), url
    )
    mock_gitlab.assert_not_called()
    assert "all executed" in capsys.readouterr().out


def test_banner_printed_after_pull_too(tmp_path, capsys) -> None:
    cfg = _make_config(tmp_path, repos=("https://gitlab.example.com/teamA/app.git",))
    source = Mock(spec=GitLabSource)
    source.connect.return_value = False
    syncer = Mock(spec=RepositorySync)
    syncer.sync.return_value = SyncOutcome.PULLED

    assert SyncOrchestrator(cfg, source, syncer).run() == EXIT_SUCCESS
    assert "all executed" in capsys.readouterr().out
    source.list_groups.assert_not_called()


def test_invalid_repo_url_aborts_run(tmp_path, capsys) -> None:
    cfg = _make_config(
        tmp_path, repos=("teamA/app", "git@gitlab.example.com:teamA/other.git")
    )
    source = Mock(spec=GitLabSource)
    syncer = Mock(spec=RepositorySync)

    assert SyncOrchestrator(cfg, source, syncer).run() == EXIT_EXECUTION_ERROR
    syncer.sync.assert_not_called()
    source.connect.assert_not_called()
    assert "all executed" not in capsys.readouterr().out


def test_first_repo_sync_error_stops_remaining_repos_and_groups(tmp_path) -> None:
    cfg = _make_config(
        tmp_path,
        repos=(
            "git@gitlab.example.com:teamA/app.git",
            "git@gitlab.example.com:teamA/other.git",
        ),
    )
    source = Mock(spec=GitLabSource)
    syncer = Mock(spec=RepositorySync)
    syncer.sync.side_effect = RepoSyncError("checkout failed")

    assert SyncOrchestrator(cfg, source, syncer).run() == EXIT_EXECUTION_ERROR
    assert syncer.sync.call_count == 1
    source.connect.assert_not_called()


def test_clone_failure_does_not_stop_repo_list(tmp_path) -> None:
    cfg = _make_config(
        tmp_path,
        repos=(
            "git@gitlab.example.com:teamA/app.git",
            "git@gitlab.example.com:teamA/other.git",
        ),
    )
    source = Mock(spec=GitLabSource)
    source.connect.return_value = False
    syncer = Mock(spec=RepositorySync)
    syncer.sync.side_effect = [SyncOutcome.CLONE_FAILED, SyncOutcome.CLONED]

    orchestrator = SyncOrchestrator(cfg, source, syncer)

    assert orchestrator.run() == EXIT_SUCCESS
    assert syncer.sync.call_count == 2
    assert orchestrator.stats["clone_failed"] == 1
    assert orchestrator.stats["cloned"] == 1


def test_group_projects_synced_and_failures_skipped(tmp_path) -> None:
    cfg = _make_config(tmp_path, url="https://gitlab.example.com", token="t")
    source = Mock(spec=GitLabSource)
    source.connect.return_value = True
    source.list_groups.return_value = [Group(1, "teamA"), Group(2, "teamA/web")]
    source.list_projects.side_effect = [
        [_project("teamA/broken"), _project("teamA/app")],
        [_project("teamA/web/ui")],
    ]
    syncer = Mock(spec=RepositorySync)
    syncer.sync.side_effect = [
        RepoSyncError("branch check failed"),
        SyncOutcome.PULLED,
        SyncOutcome.CLONED,
    ]

    orchestrator = SyncOrchestrator(cfg, source, syncer)

    assert orchestrator.run() == EXIT_SUCCESS
    synced = [c.args[1] for c in syncer.sync.call_args_list]
    assert synced == [
        os.path.join(str(tmp_path), "teamA/broken"),
        os.path.join(str(tmp_path), "teamA/app"),
        os.path.join(str(tmp_path), "teamA/web/ui"),
    ]
    assert syncer.sync.call_args_list[1].args[0] == "git@gitlab.example.com:teamA/app.git"
    assert syncer.sync.call_args_list[1].args[2] == "app"
    assert orchestrator.stats["failed"] == 1
    assert orchestrator.stats["pulled"] == 1
    assert orchestrator.stats["cloned"] == 1


def test_group_without_projects_is_reported_and_skipped(tmp_path, capsys) -> None:
    cfg = _make_config(tmp_path, url="https://gitlab.example.com", token="t")
    source = Mock(spec=GitLabSource)
    source.connect.return_value = True
    source.list_groups.return_value = [Group.placeholder("ghost")]
    source.list_projects.return_value = []
    syncer = Mock(spec=RepositorySync)

    assert SyncOrchestrator(cfg, source, syncer).run() == EXIT_SUCCESS
    syncer.sync.assert_not_called()
    captured = capsys.readouterr()
    assert "ghost does not exist, skipped" in captured.err
    assert "all executed" in captured.out


def test_unexpected_error_is_reported(tmp_path) -> None:
    cfg = _make_config(tmp_path, url="https://gitlab.example.com", token="t")
    source = Mock(spec=GitLabSource)
    source.connect.return_value = True
    source.list_groups.side_effect = RuntimeError("gitlab API not initialized")

    assert SyncOrchestrator(cfg, source, Mock(spec=RepositorySync)).run() == (
        EXIT_EXECUTION_ERROR
    )


def test_repo_url_with_traversal_aborts_before_sync(tmp_path) -> None:
    root = tmp_path / "root"
    cfg = _make_config(root, repos=("git@gitlab.example.com:../../outside/app.git",))
    source = Mock(spec=GitLabSource)
    syncer = Mock(spec=RepositorySync)

    assert SyncOrchestrator(cfg, source, syncer).run() == EXIT_EXECUTION_ERROR
    syncer.sync.assert_not_called()


def test_project_path_with_traversal_is_skipped(tmp_path, capsys) -> None:
    """A project whose namespace path escapes the root is never synced."""
    cfg = _make_config(tmp_path, url="https://gitlab.example.com", token="t")
    source = Mock(spec=GitLabSource)
    source.connect.return_value = True
    source.list_groups.return_value = [Group(1, "teamA")]
    source.list_projects.return_value = [
        _project("teamA/../../outside/app"),
        _project("teamA/app"),
    ]
    syncer = Mock(spec=RepositorySync)
    syncer.sync.return_value = SyncOutcome.CLONED

    orchestrator = SyncOrchestrator(cfg, source, syncer)

    assert orchestrator.run() == EXIT_SUCCESS
    syncer.sync.assert_called_once_with(
        "git@gitlab.example.com:teamA/app.git",
        os.path.join(str(tmp_path), "teamA/app"),
        "app",
    )
    assert orchestrator.stats["failed"] == 1
    assert "teamA/../../outside/app" in capsys.readouterr().err
