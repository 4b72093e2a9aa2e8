"""Environment files for the CLI's ``--env-file`` flag.

``--env-file staging`` reads ``<project root>/.env/staging.env``. A value
that looks like a path (contains a separator or ends in ``.env``) is read
as given instead. The format is the usual ``KEY=VALUE`` per line; ``#``
comments, blank lines and a leading ``export`` are ignored, and one layer of
matching quotes around a value is removed.
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_QUOTES = ('"', "'")


def env_file_path(env_name: str, project_root: Path | None = None) -> Path:
    if "/" in env_name or env_name.endswith(".env"):
        return Path(env_name)
    return (project_root or _PROJECT_ROOT) / ".env" / f"{env_name}.env"


def load_env_file(env_name: str = "local", project_root: Path | None = None) -> dict[str, str]:
    """Variables from the named env file; empty when the file does not exist."""
    path = env_file_path(env_name, project_root)
    if not path.is_file():
        return {}
    return parse_env_lines(path.read_text().splitlines())


def parse_env_lines(lines: Iterable[str]) -> dict[str, str]:
    return dict(_assignments(lines))


def _assignments(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
            value = value[1:-1]
        yield key, value
