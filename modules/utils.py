"""Utility helpers kept dependency-free.

- init_logging: configure console + file logging with run-id.
- status_pass/status_fail: concise console status lines (with run-id).
- log: debug-level logger for normal status lines (file-oriented).
- _normalize_wp_parts: parse WP-CLI command into argv parts.
- drop_noise_lines: strip PHP warnings and stack frames from tool output.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
import re
import shlex
from typing import Sequence


_RUN_ID = ""
RID_ENV = "WPDOCK_RID"
LOG_DIR_ENV = "WPDOCK_LOG_DIR"


def _gen_run_id() -> str:
    try:
        import uuid

        return uuid.uuid4().hex[:8]
    except Exception:
        return "00000000"


def _log_dir() -> str:
    override = os.environ.get(LOG_DIR_ENV)
    if override:
        return override
    # Project root = parent of 'modules'
    root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
    return os.path.join(root_dir, "log")


def init_logging(run_id: str | None = None) -> str:
    """Initialize logging with console + rotating file handlers.

    - Console: minimal, CRITICAL only; status lines are printed directly.
    - File: DEBUG+, rich format, written to <log dir>/wpdock-<rid>.log
    Returns the run-id used.
    """
    global _RUN_ID
    if _RUN_ID:
        return _RUN_ID

    rid = run_id or os.environ.get(RID_ENV) or _gen_run_id()
    _RUN_ID = rid

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    try:
        log_dir = _log_dir()
        os.makedirs(log_dir, exist_ok=True)
        logfile = os.path.join(log_dir, f"wpdock-{rid}.log")
    except OSError:
        logfile = os.path.abspath(f"wpdock-{rid}.log")

    # Quiet any pre-existing console handlers
    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            h.setLevel(logging.CRITICAL)

    has_file = False
    for h in root.handlers:
        if isinstance(h, RotatingFileHandler) and getattr(h, "baseFilename", "").endswith(
            os.path.basename(logfile)
        ):
            has_file = True
            break
    if not has_file:
        try:
            fh = RotatingFileHandler(logfile, maxBytes=5 * 1024 * 1024, backupCount=3)
        except OSError:
            # Read-only image layers: keep going without a file log.
            fh = None
        if fh is not None:
            fh.setLevel(logging.DEBUG)
            ffmt = logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
            fh.setFormatter(ffmt)
            root.addHandler(fh)

    if not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    ):
        ch = logging.StreamHandler()
        ch.setLevel(logging.CRITICAL)
        cfmt = logging.Formatter("%(levelname)s: %(message)s")
        ch.setFormatter(cfmt)
        root.addHandler(ch)

    logging.debug("Logging initialized. run_id=%s file=%s", rid, logfile)
    os.environ[RID_ENV] = rid
    return rid


def _rid() -> str:
    return _RUN_ID or os.environ.get(RID_ENV, "--------")


def status_pass(msg: str) -> None:
    print(f"PASS: {msg} [{_rid()}]")


def status_fail(msg: str) -> None:
    print(f"FAIL: {msg} [{_rid()}]", flush=True)


def log(msg: str) -> None:
    # File-oriented normal progress; stays out of console noise.
    logging.debug(msg)


def _normalize_wp_parts(command: str | Sequence[str]) -> list[str]:
    """Normalize command into argv parts.
    Accepts str (parsed with shlex) or sequence of strings.
    Returns a list; empty list indicates an error already reported.
    """
    if command is None:
        logging.error("wp called with None command")
        return []
    if isinstance(command, str):
        text = command.strip()
        if not text:
            logging.error("wp called with empty command")
            return []
        try:
            return shlex.split(text)
        except ValueError as err:
            logging.error("Could not parse command: %s", err)
            return []
    if isinstance(command, (list, tuple)):
        parts = [str(p) for p in command]
        if not parts:
            logging.error("wp called with empty argv list")
            return []
        return parts
    logging.error("Unsupported command type: %s", type(command).__name__)
    return []


# ── Noise filters ───────────────────────────────────────────────────────────────
ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
NOISE_PREFIXES = (
    "PHP Warning:", "PHP Notice:", "PHP Deprecated:",
    "Warning:", "Notice:", "Deprecated:",
)
NOISE_PATTERNS = (
    re.compile(r"^#\d+:"),               # stack frames
    re.compile(r"^'trace'\s*=>"),        # array trace header
)


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


def drop_noise_lines(text: str) -> list[str]:
    out: list[str] = []
    for ln in strip_ansi(text or "").splitlines():
        ln = ln.strip()
        if not ln:
            continue
        if any(ln.startswith(p) for p in NOISE_PREFIXES):
            continue
        if any(p.search(ln) for p in NOISE_PATTERNS):
            continue
        out.append(ln)
    return out
