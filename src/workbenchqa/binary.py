"""Locate the application binary that a run launches."""

from __future__ import annotations

import os
from pathlib import Path

from workbenchqa.config import WorkbenchQAConfig, WorkbenchQAConfigError

BINARY_ENV_VAR = "WORKBENCHQA_BINARY"


def global_config_path() -> Path:
    return Path.home() / ".workbenchqa" / "config.yaml"


def resolve_binary(configured: str | None = None) -> str:
    """Return the path of the application to launch.

    Highest priority first:

    1. the ``WORKBENCHQA_BINARY`` environment variable
    2. a ``WORKBENCHQA_BINARY=...`` line in ``./.env``
    3. *configured*, the ``binary:`` value of the project config.yaml
    4. ``binary:`` in ``~/.workbenchqa/config.yaml``

    An explicit ``--binary`` option is applied by the caller and beats all
    of these.

    Raises:
        WorkbenchQAConfigError: if no source names a binary, or the global
            config file exists but cannot be loaded.
    """
    binary = (
        os.environ.get(BINARY_ENV_VAR)
        or _binary_from_dotenv(Path(".env"))
        or configured
        or _binary_from_global_config()
    )
    if binary:
        return binary
    raise WorkbenchQAConfigError(
        "No application binary configured.\n\n"
        "To fix:\n"
        f"  export {BINARY_ENV_VAR}=/path/to/app\n"
        "  or: set 'binary:' in .workbenchqa/config.yaml\n"
        "  or: workbenchqa run --binary /path/to/app"
    )


def _binary_from_dotenv(path: Path) -> str | None:
    if not path.is_file():
        return None
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key.strip() == BINARY_ENV_VAR:
            return value.strip().strip("'\"") or None
    return None


def _binary_from_global_config() -> str | None:
    path = global_config_path()
    if not path.is_file():
        return None
    return WorkbenchQAConfig.from_file(path).binary or None
