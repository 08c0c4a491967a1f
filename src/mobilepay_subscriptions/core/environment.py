"""
Helpers for resolving the settings the subscriptions client is configured from.

Settings come from three layers: the process environment, an optional
``.env`` file and explicit overrides. The result is a plain mapping that
:class:`mobilepay_subscriptions.core.config.ClientConfiguration` consumes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional

__all__ = ["ClientEnvironment", "build_environment", "load_env_file"]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def read_env_file(path: Path) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines, ignoring blanks, comments and ``export``."""
    values: Dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return values

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            values[key] = _unquote(value.strip())
    return values


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Copy the settings of ``path`` into ``environ`` without clobbering keys.

    ``environ`` defaults to :data:`os.environ`. A copy of the merged mapping
    is returned.
    """
    target: MutableMapping[str, str] = environ if environ is not None else os.environ
    for key, value in read_env_file(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


@dataclass(frozen=True)
class ClientEnvironment:
    """Resolved settings, ready to be turned into a configuration."""

    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)

    def require(self, key: str) -> str:
        value = self.variables.get(key, "").strip()
        if not value:
            raise KeyError(key)
        return value


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> ClientEnvironment:
    """
    Layer ``base``, ``env_file`` and ``overrides`` into a :class:`ClientEnvironment`.

    ``base`` defaults to :data:`os.environ` and takes precedence over the file.
    Pass ``env_file=None`` to skip the file. ``overrides`` always win.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)

    if env_file is not None:
        for key, value in read_env_file(Path(env_file)).items():
            merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return ClientEnvironment(variables=merged)
