#!/usr/bin/env python3
"""CLI to bootstrap WordPress inside a container.

Inputs: container environment (WORDPRESS_*, WP_*, *_FILE secrets, APP_DIR).
Side effects: --setup validates settings and writes wp-config.php into
APP_DIR. --healthcheck probes the database and exits 0/1/2.
"""
import os
import sys
import subprocess
from modules.utils import RID_ENV, init_logging, log, status_fail, status_pass

# ─── CONFIG ──────────────────────────────────────────────────────────────
MOD_WP = "modules.wordpress"
FLAG_SETUP = "--setup"
FLAG_HEALTHCHECK = "--healthcheck"
FLAG_OUTPUT = "--output"
FLAG_METHOD = "--method"
# ─── CLI ──────────────────────────────────────────────────────────────
def run_script(script_name: str, args: list[str]) -> int:
    cmd = [sys.executable, "-m", script_name] + args
    log(f"RUN: {' '.join(cmd)}")
    proc = subprocess.run(cmd, text=True)
    return proc.returncode


def run_step(script_name: str, args: list[str]) -> bool:
    rc = run_script(script_name, args)
    if rc != 0:
        status_fail(f"{script_name} {' '.join(args)} exit={rc}; see log")
        return False
    return True


# ─── Orchestration Steps ───────────────────────────────────────────────
def step_check() -> bool:
    return run_step(MOD_WP, ["check"])


def step_render(output: str | None = None) -> bool:
    args = ["render"]
    if output:
        args.append(f"{FLAG_OUTPUT}={output}")
    return run_step(MOD_WP, args)


def setup(output: str | None = None) -> bool:
    if not step_check():
        return False
    status_pass("settings check")
    if not step_render(output):
        return False
    status_pass("wp-config render")
    return True


def healthcheck(method: str | None = None) -> int:
    args = ["healthcheck"]
    if method:
        args.append(f"{FLAG_METHOD}={method}")
    return run_script(MOD_WP, args)


def _flag_value(argv: list[str], flag: str) -> str | None:
    for a in argv:
        if a.startswith(f"{flag}="):
            return a.split("=", 1)[1]
    return None


def main(argv: list[str]) -> int:
    rid = init_logging(None)
    if not argv:
        status_fail("usage: --setup [--output=PATH] | --healthcheck [--method=wp|mariadb]")
        return 1
    # Ensure subprocs inherit run-id
    os.environ[RID_ENV] = rid
    action = argv[0]
    if action == FLAG_SETUP:
        return 0 if setup(_flag_value(argv[1:], FLAG_OUTPUT)) else 1
    if action == FLAG_HEALTHCHECK:
        return healthcheck(_flag_value(argv[1:], FLAG_METHOD))
    status_fail("must specify --setup or --healthcheck")
    return 1

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
