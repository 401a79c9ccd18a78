# cli.py
# Invariants:
# - All WP-CLI access goes through these wrappers; callers never build flags.
# - --path is always ours; a caller-supplied --path or leading "wp" is dropped.
# - Logs: one PASS/FAIL per call; console stays minimal; file logs keep details.
# - Displayed command in logs never shows the absolute binary; prefer "wp …".

from __future__ import annotations

import logging
import os
import os.path
import subprocess
import time
from pathlib import Path
from typing import Tuple, Union

from config import APP_DIR, HEALTHCHECK_TIMEOUT, WP_CLI_PATH
from modules.utils import _normalize_wp_parts, drop_noise_lines, log

os.environ.setdefault("WP_CLI_DISABLE_AUTO_CHECK_UPDATE", "1")
# Hush PHP startup/display errors for CLI
os.environ.setdefault("WP_CLI_PHP_ARGS", "-d display_errors=0 -d display_startup_errors=0")


def _wp_base_argv(app_dir: Path) -> list[str]:
    parts = [WP_CLI_PATH, f"--path={app_dir}"]
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        parts.append("--allow-root")
    return parts


def _sanitize_parts(parts: list[str]) -> list[str]:
    # drop any leading 'wp' or explicit binary tokens
    while parts and (parts[0] == "wp" or os.path.basename(parts[0]) == "wp"):
        parts = parts[1:]
    cleaned: list[str] = []
    skip_next = False
    for i, p in enumerate(parts):
        if skip_next:
            skip_next = False
            continue
        if p.startswith("--path="):
            continue
        if p == "--path":
            if i + 1 < len(parts) and not parts[i + 1].startswith("-"):
                skip_next = True
            continue
        cleaned.append(p)
    return cleaned


def _ensure_quiet_flags(parts: list[str]) -> list[str]:
    if "--no-color" not in parts:
        parts.append("--no-color")
    if "--quiet" not in parts:
        parts.append("--quiet")
    return parts


def _fmt_cmd_for_log(args: list[str]) -> str:
    if not args:
        return ""
    # replace absolute binary path with 'wp' for readability
    return " ".join(["wp"] + args[1:])


def wp_run(
    app_dir: Union[str, Path, None], command, timeout: int = HEALTHCHECK_TIMEOUT
) -> Tuple[bool, str, str, int]:
    site_path = Path(app_dir or APP_DIR)
    parts = _normalize_wp_parts(command)
    if not parts:
        return False, "", "Invalid command", 1
    parts = _ensure_quiet_flags(_sanitize_parts(parts))
    args = _wp_base_argv(site_path) + parts

    t0 = time.monotonic()
    try:
        proc = subprocess.run(
            args,
            text=True,
            capture_output=True,
            timeout=timeout,
            env=os.environ.copy(),
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.TimeoutExpired:
        dt = time.monotonic() - t0
        logging.error("%s timeout after %.1fs", _fmt_cmd_for_log(args), dt)
        return False, "", f"timeout after {dt:.1f}s", 124
    except OSError as err:
        logging.error("%s could not start: %s", _fmt_cmd_for_log(args), err)
        return False, "", str(err), 127

    dt = time.monotonic() - t0
    ok = proc.returncode == 0
    if ok:
        log(f"PASS: {_fmt_cmd_for_log(args)} ({dt:.1f}s)")
    else:
        clean_err = "\n".join(drop_noise_lines(proc.stderr or ""))
        logging.error(
            "%s exit=%s\nSTDERR: %s",
            _fmt_cmd_for_log(args),
            proc.returncode,
            clean_err.strip(),
        )
    return ok, (proc.stdout or ""), (proc.stderr or ""), proc.returncode


def wp_cmd(app_dir: Union[str, Path, None], command, timeout: int = HEALTHCHECK_TIMEOUT) -> bool:
    ok, _, _, _ = wp_run(app_dir, command, timeout=timeout)
    return ok
