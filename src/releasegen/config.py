"""Configuration entities and YAML loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "releasegen.yaml"
DEFAULT_CONFIG_PATHS = (
    Path(".") / CONFIG_FILENAME,
    Path.home() / ".config" / CONFIG_FILENAME,
    Path("/etc/releasegen") / CONFIG_FILENAME,
)


@dataclass
class GithubOrgConfig:
    org: str
    teams: list[str] = field(default_factory=list)
    ignores: list[str] = field(default_factory=list)


@dataclass
class LaunchpadConfig:
    project_groups: list[str] = field(default_factory=list)
    ignores: list[str] = field(default_factory=list)


@dataclass
class GiteaRepoConfig:
    monorepo_folders: list[str] = field(default_factory=list)


@dataclass
class GiteaOrgConfig:
    org: str
    url: str
    includes: dict[str, GiteaRepoConfig] = field(default_factory=dict)
    ignores: list[str] = field(default_factory=list)


@dataclass
class TeamConfig:
    name: str
    github: list[GithubOrgConfig] = field(default_factory=list)
    launchpad: LaunchpadConfig = field(default_factory=LaunchpadConfig)
    gitea: list[GiteaOrgConfig] = field(default_factory=list)


@dataclass
class Config:
    teams: list[TeamConfig] = field(default_factory=list)


def _str_list(value: Any, where: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where} must be a list of strings")
    return list(value)


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{where} must be a mapping")
    return value


def _require(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}: '{key}' is required")
    return value


def _parse_github(raw: Any, where: str) -> GithubOrgConfig:
    data = _mapping(raw, where)
    return GithubOrgConfig(
        org=_require(data, "org", where),
        teams=_str_list(data.get("teams"), f"{where}.teams"),
        ignores=_str_list(data.get("ignores"), f"{where}.ignores"),
    )


def _parse_launchpad(raw: Any, where: str) -> LaunchpadConfig:
    data = _mapping(raw, where)
    return LaunchpadConfig(
        project_groups=_str_list(data.get("project-groups"), f"{where}.project-groups"),
        ignores=_str_list(data.get("ignores"), f"{where}.ignores"),
    )


def _parse_gitea(raw: Any, where: str) -> GiteaOrgConfig:
    data = _mapping(raw, where)
    includes: dict[str, GiteaRepoConfig] = {}
    for repo_name, repo_raw in _mapping(data.get("includes"), f"{where}.includes").items():
        repo_where = f"{where}.includes.{repo_name}"
        repo_data = _mapping(repo_raw, repo_where)
        includes[str(repo_name)] = GiteaRepoConfig(
            monorepo_folders=_str_list(
                repo_data.get("monorepo-folders"), f"{repo_where}.monorepo-folders"
            )
        )
    return GiteaOrgConfig(
        org=_require(data, "org", where),
        url=_require(data, "url", where),
        includes=includes,
        ignores=_str_list(data.get("ignores"), f"{where}.ignores"),
    )


def parse_config(data: Any) -> Config:
    """Build a Config from an already-parsed YAML document."""
    root = _mapping(data, "config")
    raw_teams = root.get("teams") or []
    if not isinstance(raw_teams, list):
        raise ConfigError("config.teams must be a list")

    teams: list[TeamConfig] = []
    for i, raw_team in enumerate(raw_teams):
        where = f"teams[{i}]"
        team = _mapping(raw_team, where)
        github = team.get("github") or []
        gitea = team.get("gitea") or []
        if not isinstance(github, list):
            raise ConfigError(f"{where}.github must be a list")
        if not isinstance(gitea, list):
            raise ConfigError(f"{where}.gitea must be a list")
        teams.append(
            TeamConfig(
                name=_require(team, "name", where),
                github=[
                    _parse_github(g, f"{where}.github[{j}]") for j, g in enumerate(github)
                ],
                launchpad=_parse_launchpad(team.get("launchpad"), f"{where}.launchpad"),
                gitea=[_parse_gitea(g, f"{where}.gitea[{j}]") for j, g in enumerate(gitea)],
            )
        )
    return Config(teams=teams)


def find_config_file(paths: tuple[Path, ...] = DEFAULT_CONFIG_PATHS) -> Path:
    for path in paths:
        if path.is_file():
            return path
    raise ConfigError(
        "no config file found, looked in: " + ", ".join(str(p) for p in paths)
    )


def load_config(path: Path | None = None) -> Config:
    """Load configuration from a YAML file."""
    config_path = path or find_config_file()
    try:
        data = yaml.safe_load(config_path.read_text())
    except OSError as exc:
        raise ConfigError(f"unable to read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing config file {config_path}: {exc}") from exc
    return parse_config(data)
