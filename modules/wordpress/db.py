"""MariaDB reachability probe used by the health check."""

from __future__ import annotations

import logging
import os
import subprocess

from config import HEALTHCHECK_TIMEOUT, MARIADB_CLIENT
from modules.utils import log
from .settings import ResolvedConfig


def split_db_host(host: str) -> tuple[str, int | None, str | None]:
    """Split WordPress DB_HOST syntax: host, host:port or host:/socket."""
    text = (host or "").strip()
    if not text:
        return "localhost", None, None
    # [::1]:3306 style
    if text.startswith("["):
        end = text.find("]")
        if end != -1:
            addr = text[1:end]
            rest = text[end + 1:]
            if rest.startswith(":") and rest[1:].isdigit():
                return addr, int(rest[1:]), None
            return addr, None, None
    if text.count(":") != 1:
        return text, None, None
    name, tail = text.split(":", 1)
    name = name or "localhost"
    if not tail:
        return name, None, None
    if tail.startswith("/"):
        return name, None, tail
    if tail.isdigit():
        return name, int(tail), None
    return text, None, None


def _mysql_argv(resolved: ResolvedConfig, timeout: int) -> list[str]:
    host, port, socket = split_db_host(str(resolved.get("DB_HOST") or ""))
    argv = [MARIADB_CLIENT, f"--connect-timeout={timeout}", "-h", host]
    if port is not None:
        argv += ["-P", str(port)]
    if socket is not None:
        argv += ["-S", socket]
    user = resolved.get("DB_USER")
    if user:
        argv += ["-u", str(user)]
    db_name = resolved.get("DB_NAME")
    if db_name:
        argv += ["-D", str(db_name)]
    argv += ["-N", "-e", "SELECT 1"]
    return argv


def _mysql_try(argv: list[str], password: str, timeout: int) -> tuple[int, str, str]:
    env = os.environ.copy()
    # Password never goes on argv; process listings would expose it.
    env["MYSQL_PWD"] = password
    try:
        proc = subprocess.run(
            argv, text=True, capture_output=True, check=True, env=env, timeout=timeout + 5
        )
        return proc.returncode, (proc.stdout or ""), (proc.stderr or "")
    except subprocess.CalledProcessError as exc:
        return exc.returncode, (exc.stdout or ""), (exc.stderr or "")
    except subprocess.TimeoutExpired:
        return 124, "", f"timeout after {timeout}s"
    except OSError as err:
        return 127, "", str(err)


def ping(resolved: ResolvedConfig, timeout: int = HEALTHCHECK_TIMEOUT) -> bool:
    argv = _mysql_argv(resolved, timeout)
    rc, out, err = _mysql_try(argv, str(resolved.get("DB_PASSWORD") or ""), timeout)
    msg = f"SQL: SELECT 1 on {resolved.get('DB_HOST')}\nEXIT: {rc}\nSTDOUT: {out.strip()}\nSTDERR: {err.strip()}"
    if rc == 0:
        log(f"PASS: {msg}")
        return True
    logging.error(msg)
    return False
