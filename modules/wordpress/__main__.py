"""Module entry point: render | env | check | healthcheck."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from config import WP_CONFIG_NAME
from modules.utils import init_logging, status_fail, status_pass
from .env import ConfigError
from .healthcheck import METHODS, resolve_app_dir, run_healthcheck
from .render import write_config
from .settings import masked, missing_required, resolve_settings

USAGE = "usage: render [--output PATH] | env | check | healthcheck [--method=wp|mariadb]"


def _option(argv: list[str], name: str) -> str | None:
    for i, a in enumerate(argv):
        if a.startswith(f"{name}="):
            return a.split("=", 1)[1]
        if a == name and i + 1 < len(argv):
            return argv[i + 1]
    return None


def cmd_render(argv: list[str]) -> int:
    output = _option(argv, "--output")
    target = Path(output) if output else resolve_app_dir() / WP_CONFIG_NAME
    try:
        resolved = resolve_settings()
        path = write_config(resolved, target)
    except ConfigError as err:
        status_fail(f"render: {err}")
        return 1
    except OSError as err:
        status_fail(f"render: could not write {target}: {err}")
        return 1
    status_pass(f"rendered {path}")
    return 0


def cmd_env(argv: list[str]) -> int:
    try:
        resolved = resolve_settings()
    except ConfigError as err:
        status_fail(f"env: {err}")
        return 1
    print(json.dumps(masked(resolved), ensure_ascii=False, separators=(",", ":")))
    return 0


def cmd_check(argv: list[str]) -> int:
    try:
        resolved = resolve_settings()
    except ConfigError as err:
        status_fail(f"check: {err}")
        return 1
    missing = missing_required(resolved)
    if missing:
        status_fail(f"missing required settings: {', '.join(missing)}")
        return 1
    status_pass("required settings present")
    return 0


def cmd_healthcheck(argv: list[str]) -> int:
    method = _option(argv, "--method") or "wp"
    if method not in METHODS:
        status_fail(f"unknown method {method}")
        return 1
    return run_healthcheck(method=method)


COMMANDS = {
    "render": cmd_render,
    "env": cmd_env,
    "check": cmd_check,
    "healthcheck": cmd_healthcheck,
}


def main(argv: list[str] | None = None) -> int:
    init_logging(None)
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        status_fail(USAGE)
        return 1
    handler = COMMANDS.get(argv[0])
    if handler is None:
        status_fail("unknown subcommand")
        return 1
    return handler(argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
