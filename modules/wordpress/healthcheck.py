"""Container liveness probe for the WordPress installation.

Exit codes:
- 0: healthy
- 1: database check failed (down or misconfigured; not distinguished)
- 2: bootstrap file (wp-load.php) missing under APP_DIR
"""

from __future__ import annotations

import logging
from pathlib import Path

from config import APP_DIR, HEALTHCHECK_TIMEOUT, WP_LOAD_NAME
from modules.utils import log
from .cli import wp_run
from .db import ping
from .env import ConfigError, getenv_docker
from .settings import resolve_settings

EXIT_HEALTHY = 0
EXIT_DB_FAILED = 1
EXIT_NO_BOOTSTRAP = 2
METHODS = ("wp", "mariadb")


def resolve_app_dir(app_dir: str | Path | None = None) -> Path:
    if app_dir:
        return Path(app_dir)
    return Path(getenv_docker("APP_DIR", "") or APP_DIR)


def _check_with_wp(app_dir: Path, timeout: int) -> bool:
    ok, _, _, code = wp_run(app_dir, ["db", "check"], timeout=timeout)
    if not ok:
        log(f"FAIL: wp db check exit={code}")
    return ok


def _check_with_mariadb(timeout: int) -> bool:
    try:
        resolved = resolve_settings()
    except ConfigError as err:
        logging.error("Could not resolve database settings: %s", err)
        return False
    return ping(resolved, timeout=timeout)


def run_healthcheck(
    app_dir: str | Path | None = None,
    method: str = "wp",
    timeout: int = HEALTHCHECK_TIMEOUT,
) -> int:
    if method not in METHODS:
        raise ValueError(f"method must be one of {', '.join(METHODS)}")
    root = resolve_app_dir(app_dir)
    bootstrap = root / WP_LOAD_NAME
    if not bootstrap.is_file():
        logging.error("Bootstrap file missing: %s", bootstrap)
        return EXIT_NO_BOOTSTRAP
    if method == "mariadb":
        ok = _check_with_mariadb(timeout)
    else:
        ok = _check_with_wp(root, timeout)
    if not ok:
        return EXIT_DB_FAILED
    log(f"PASS: healthcheck {root} via {method}")
    return EXIT_HEALTHY
