"""Environment lookup with Docker secret-file support.

Precedence for every setting: ``<NAME>_FILE`` contents, then ``<NAME>``,
then the caller's default.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

FILE_SUFFIX = "_FILE"
FALSE_WORDS = ("", "0", "false", "no", "off")


class ConfigError(Exception):
    """Configuration could not be resolved."""


class SecretFileError(ConfigError):
    def __init__(self, name: str, path: str, reason: str) -> None:
        super().__init__(f"{name}{FILE_SUFFIX}={path}: {reason}")
        self.name = name
        self.path = path


class InvalidSettingError(ConfigError):
    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"{name}={value!r} is not a valid {expected}")
        self.name = name
        self.value = value


def _env(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    if environ is None:
        return os.environ
    return environ


def read_secret_file(path: str, name: str = "") -> str:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        logging.error("Could not read secret file for %s: %s", name or path, err)
        raise SecretFileError(name, path, err.strerror or str(err)) from err
    except UnicodeDecodeError as err:
        logging.error("Secret file for %s is not valid UTF-8: %s", name or path, err)
        raise SecretFileError(name, path, "not valid UTF-8") from err
    return text.rstrip("\r\n")


def getenv_docker(name: str, default: Any = None, environ: Mapping[str, str] | None = None) -> Any:
    env = _env(environ)
    file_ref = env.get(name + FILE_SUFFIX)
    if file_ref:
        logging.debug("%s resolved from secret file %s", name, file_ref)
        return read_secret_file(file_ref, name)
    if name in env:
        return env[name]
    return default


def env_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() not in FALSE_WORDS
