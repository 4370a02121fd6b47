"""Typed configuration loading and access.

Settings come from, in increasing precedence:

1. ``~/.reltrack.toml``
2. ``.reltrack.toml`` in the working directory or the nearest parent
3. an explicit ``--config`` file
4. ``RELTRACK_*`` environment variables
5. ``--org`` / ``--project`` command-line options (applied by ``resolve_*``)

TOML layout::

    [defaults]
    url = "https://sentry.io/"
    org = "my-org"
    project = "my-project"

    [auth]
    token = "..."

    [http]
    timeout = 30
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_number, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_URL",
    "DEFAULT_HTTP_TIMEOUT",
    "Config",
    "ConfigError",
    "find_config_files",
    "load_config",
    "load_settings",
]

CONFIG_FILENAME = ".reltrack.toml"
DEFAULT_URL = "https://sentry.io/"
DEFAULT_HTTP_TIMEOUT = 30.0

ENV_URL = "RELTRACK_URL"
ENV_ORG = "RELTRACK_ORG"
ENV_PROJECT = "RELTRACK_PROJECT"
ENV_AUTH_TOKEN = "RELTRACK_AUTH_TOKEN"
ENV_CONFIG = "RELTRACK_CONFIG"

# Flat settings keys, shared by the TOML reader and the env overlay.
_ENV_KEYS = {
    "url": ENV_URL,
    "org": ENV_ORG,
    "project": ENV_PROJECT,
    "token": ENV_AUTH_TOKEN,
}


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or a required value is missing."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Effective configuration for one command invocation."""

    url: str = DEFAULT_URL
    org: str | None = None
    project: str | None = None
    auth_token: str | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_settings(cls, settings: Mapping[str, object]) -> Config:
        """Build a Config from flat settings (see ``load_settings``)."""
        timeout = get_number(settings, "timeout")
        return cls(
            url=get_str(settings, "url") or DEFAULT_URL,
            org=get_str(settings, "org"),
            project=get_str(settings, "project"),
            auth_token=get_str(settings, "token"),
            http_timeout=timeout if timeout and timeout > 0 else DEFAULT_HTTP_TIMEOUT,
        )

    def resolve_org(self, override: str | None = None) -> Result[str, ConfigError]:
        org = (override or "").strip() or self.org
        if not org:
            return Err(
                ConfigError(
                    "An organization slug is required",
                    hint=f"Pass --org, set {ENV_ORG}, or add org to [defaults] in {CONFIG_FILENAME}",
                )
            )
        return Ok(org)

    def resolve_org_and_project(
        self,
        org: str | None = None,
        project: str | None = None,
    ) -> Result[tuple[str, str], ConfigError]:
        org_result = self.resolve_org(org)
        if isinstance(org_result, Err):
            return org_result

        resolved_project = (project or "").strip() or self.project
        if not resolved_project:
            return Err(
                ConfigError(
                    "A project slug is required",
                    hint=(
                        f"Pass --project, set {ENV_PROJECT}, "
                        f"or add project to [defaults] in {CONFIG_FILENAME}"
                    ),
                )
            )
        return Ok((org_result.value, resolved_project))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[StrDict, ConfigError]:
    """Read one config file into flat settings.

    Only keys that are present are returned, so files can be layered with
    ``dict.update``.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    data = result.value
    defaults: StrDict = get_table(data, "defaults") or {}
    auth: StrDict = get_table(data, "auth") or {}
    http: StrDict = get_table(data, "http") or {}

    settings: StrDict = {}
    for key in ("url", "org", "project"):
        value = get_str(defaults, key)
        if value is not None:
            settings[key] = value
    token = get_str(auth, "token")
    if token is not None:
        settings["token"] = token
    timeout = get_number(http, "timeout")
    if timeout is not None:
        settings["timeout"] = timeout
    return Ok(settings)


def find_config_files(
    *,
    cwd: Path,
    home: Path | None = None,
    explicit: Path | None = None,
) -> list[Path]:
    """Return config files to layer, lowest precedence first."""
    found: list[Path] = []
    if home is not None:
        user_file = home / CONFIG_FILENAME
        if user_file.is_file():
            found.append(user_file)

    for parent in (cwd, *cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.is_file():
            if candidate not in found:
                found.append(candidate)
            break

    if explicit is not None:
        found.append(explicit)
    return found


def load_settings(
    *,
    cwd: Path | None = None,
    home: Path | None = None,
    explicit: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[Config, ConfigError]:
    """Load the effective Config from files and environment.

    An explicit config path that does not exist is an error; discovered
    files are optional.
    """
    env = os.environ if env is None else env
    if explicit is None and env.get(ENV_CONFIG):
        explicit = Path(env[ENV_CONFIG]).expanduser()

    settings: StrDict = {}
    files = find_config_files(
        cwd=(cwd or Path.cwd()).resolve(),
        home=home if home is not None else Path.home(),
        explicit=explicit,
    )
    for path in files:
        result = load_config(path)
        if isinstance(result, Err):
            return result
        settings.update(result.value)

    for key, env_name in _ENV_KEYS.items():
        value = env.get(env_name, "").strip()
        if value:
            settings[key] = value

    return Ok(Config.from_settings(settings))
