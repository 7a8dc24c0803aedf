"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from releasegen.config import (
    GiteaRepoConfig,
    find_config_file,
    load_config,
    parse_config,
)
from releasegen.errors import ConfigError

CONFIG_YAML = """
teams:
  - name: Team A
    github:
      - org: canonical
        teams: [team-a, team-b]
        ignores: [legacy-repo]
    launchpad:
      project-groups: [group-a]
      ignores: [old-project]
    gitea:
      - org: openstack
        url: https://opendev.org
        includes:
          charm-repo:
            monorepo-folders: [charms]
          plain-repo: {}
  - name: Team B
"""


def test_load_config(tmp_path):
    path = tmp_path / "releasegen.yaml"
    path.write_text(CONFIG_YAML)

    config = load_config(path)

    assert [t.name for t in config.teams] == ["Team A", "Team B"]
    team = config.teams[0]
    assert team.github[0].org == "canonical"
    assert team.github[0].teams == ["team-a", "team-b"]
    assert team.github[0].ignores == ["legacy-repo"]
    assert team.launchpad.project_groups == ["group-a"]
    assert team.launchpad.ignores == ["old-project"]
    gitea = team.gitea[0]
    assert gitea.url == "https://opendev.org"
    assert gitea.includes["charm-repo"] == GiteaRepoConfig(monorepo_folders=["charms"])
    assert gitea.includes["plain-repo"].monorepo_folders == []


def test_team_without_sources_gets_empty_defaults():
    config = parse_config({"teams": [{"name": "Solo"}]})
    team = config.teams[0]
    assert team.github == []
    assert team.gitea == []
    assert team.launchpad.project_groups == []


def test_empty_document():
    assert parse_config(None).teams == []


def test_missing_team_name():
    with pytest.raises(ConfigError, match="name"):
        parse_config({"teams": [{"github": []}]})


def test_missing_gitea_url():
    with pytest.raises(ConfigError, match="url"):
        parse_config({"teams": [{"name": "x", "gitea": [{"org": "o"}]}]})


def test_ignores_must_be_strings():
    with pytest.raises(ConfigError):
        parse_config({"teams": [{"name": "x", "github": [{"org": "o", "ignores": "nope"}]}]})


def test_invalid_yaml(tmp_path):
    path = tmp_path / "releasegen.yaml"
    path.write_text("teams: [unclosed")
    with pytest.raises(ConfigError):
        load_config(path)


def test_find_config_file(tmp_path):
    missing = tmp_path / "missing.yaml"
    present = tmp_path / "releasegen.yaml"
    present.write_text("teams: []")
    assert find_config_file((missing, present)) == present


def test_find_config_file_none_found(tmp_path):
    with pytest.raises(ConfigError, match="no config file found"):
        find_config_file((tmp_path / "a.yaml", tmp_path / "b.yaml"))
