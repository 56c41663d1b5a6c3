"""Configuration loading and validation.

Usage:
    config = load("coveralls-config.yaml")       # raises ConfigError on bad config
    config = load()                              # environment variables only
    name = config.strip_project_path("/repo/src/foo.py")   # "src/foo.py"
    generate_template("coveralls-config.yaml")   # writes example file to disk
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    coveralls: str | None = None
    ci_tool: str | None = None
    report_uri: str | None = None
    root: str = "."

    def strip_project_path(self, path: str) -> str:
        """Return *path* relative to the project root.

        Paths outside the root are returned unchanged.
        """
        root = Path(self.root).resolve()
        try:
            return Path(path).resolve().relative_to(root).as_posix()
        except ValueError:
            return path


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | None = None, check: bool = True) -> Config:
    """Load and validate configuration from an optional YAML file.

    Environment variables COVERALLS_REPO_TOKEN, COVERALLS_SERVICE_NAME and
    COVERALLS_ENDPOINT override file values. Without *config_path* only the
    environment is consulted.

    A missing token is not an error here; the export refuses to run without
    one. Pass check=False to apply further overrides before calling
    validate() yourself.

    Raises:
        ConfigError: if the file is missing or malformed, or a value is invalid.
    """
    raw: dict = {}
    if config_path is not None:
        raw = _read_yaml(config_path)

    section = raw.get("coveralls") or {}
    project = raw.get("project") or {}
    if not isinstance(section, dict) or not isinstance(project, dict):
        raise ConfigError("'coveralls' and 'project' must be YAML mappings.")

    token    = os.environ.get("COVERALLS_REPO_TOKEN")   or section.get("token")
    ci_tool  = os.environ.get("COVERALLS_SERVICE_NAME") or section.get("ci_tool")
    endpoint = os.environ.get("COVERALLS_ENDPOINT")     or section.get("endpoint")

    config = Config(
        coveralls=_clean(token),
        ci_tool=_clean(ci_tool),
        report_uri=_clean(endpoint),
        root=str(project.get("root") or "."),
    )
    if check:
        validate(config)
    return config


def _read_yaml(config_path: str) -> dict:
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m coveralls_report init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")
    return raw


def _clean(value) -> str | None:
    """Strip whitespace and turn empty values into None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def validate(config: Config) -> None:
    """Raise ConfigError if any configured value is unusable."""
    errors: list[str] = []

    if config.report_uri and not config.report_uri.startswith(("http://", "https://")):
        errors.append(
            f"  - 'coveralls.endpoint' must be an http(s) URL, got '{config.report_uri}'"
        )
    if not Path(config.root).is_dir():
        errors.append(f"  - 'project.root' is not a directory: '{config.root}'")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
coveralls:
  token: "xxxxxxxxxxxxxxxxxxxx"     # Repo token from <https://coveralls.io>/<your repo>/settings
  # ci_tool: "circle-ci"            # Send as a CI service job instead of a repo token
  # endpoint: "https://coveralls.example.com/api/v1/jobs"   # Self-hosted Coveralls

project:
  root: "."                         # Source paths are reported relative to this directory
"""


def generate_template(output_path: str = "coveralls-config.yaml") -> None:
    """Write a template coveralls-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
