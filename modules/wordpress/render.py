"""Render wp-config.php from a ResolvedConfig."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

from config import FILE_PERMS
from modules.utils import log
from .settings import (
    GROUP_DB,
    GROUP_DEBUG,
    GROUP_REDIS,
    GROUP_REDIS_CLIENT,
    GROUP_SALTS,
    GROUP_SECURITY,
    GROUP_SITE,
    ResolvedConfig,
)

HEADER = """<?php
/**
 * The base configuration for WordPress
 *
 * Generated by wpdock from the container environment. Edits are lost on
 * the next render; change the container environment instead.
 */
"""

PROXY_BLOCK = """// Reverse proxy SSL detection
if (isset($_SERVER['HTTP_X_FORWARDED_PROTO']) && $_SERVER['HTTP_X_FORWARDED_PROTO'] === 'https') {
    $_SERVER['HTTPS'] = 'on';
}
// Load balancer variant
if (isset($_SERVER['HTTP_X_FORWARDED_SSL']) && $_SERVER['HTTP_X_FORWARDED_SSL'] === 'on') {
    $_SERVER['HTTPS'] = 'on';
}
"""

FOOTER = """/* That's all, stop editing! Happy publishing. */

/** Absolute path to the WordPress directory. */
if (!defined('ABSPATH')) {
    define('ABSPATH', __DIR__ . '/');
}

/** Sets up WordPress vars and included files. */
require_once ABSPATH . 'wp-settings.php';
"""

BEFORE_EXTRA = (GROUP_DB, GROUP_REDIS, GROUP_SALTS, GROUP_SITE, GROUP_DEBUG, GROUP_SECURITY)
AFTER_EXTRA = (GROUP_REDIS_CLIENT,)


def php_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def _define(name: str, value: Any) -> str:
    return (
        f"if (!defined('{name}')) {{\n"
        f"    define('{name}', {php_literal(value)});\n"
        "}\n"
    )


def _section(title: str, items: list[tuple[str, Any]]) -> str:
    lines = [f"// ** {title} ** //\n"]
    for name, value in items:
        lines.append(_define(name, value))
    return "".join(lines)


def render_config(resolved: ResolvedConfig) -> str:
    groups = resolved.grouped()
    parts = [HEADER]
    for title in BEFORE_EXTRA:
        if title in groups:
            parts.append(_section(title, groups[title]))
        if title == GROUP_DB:
            parts.append(f"$table_prefix = {php_literal(resolved.table_prefix)};\n")
    parts.append(PROXY_BLOCK)
    if resolved.config_extra:
        logging.warning(
            "WORDPRESS_CONFIG_EXTRA is set; operator code is embedded verbatim in wp-config.php"
        )
        parts.append("// ** WORDPRESS_CONFIG_EXTRA ** //\n")
        parts.append(resolved.config_extra.rstrip() + "\n")
    for title in AFTER_EXTRA:
        if title in groups:
            parts.append(_section(title, groups[title]))
    parts.append(FOOTER)
    return "\n".join(parts)


DEFINE_RE = re.compile(r"define\('([A-Z0-9_]+)',\s*'((?:[^'\\]|\\.)*)'\);")
UNESCAPE_RE = re.compile(r"\\(['\\])")


def php_unquote(text: str) -> str:
    return UNESCAPE_RE.sub(r"\1", text)


def read_defined_strings(path: Path | str) -> dict[str, str]:
    """Return string constants defined in an existing wp-config.php."""
    target = Path(path)
    if not target.is_file():
        return {}
    try:
        text = target.read_text(encoding="utf-8", errors="replace")
    except OSError as err:
        logging.error("Could not read existing %s: %s", target, err)
        return {}
    found: dict[str, str] = {}
    for name, value in DEFINE_RE.findall(text):
        found.setdefault(name, php_unquote(value))
    return found


def keep_existing_salts(resolved: ResolvedConfig, path: Path | str) -> int:
    """Replace freshly generated keys with the ones already on disk.

    Keys rotate only when WORDPRESS_<KEY> is set or the file is removed.
    """
    if not resolved.generated_names:
        return 0
    existing = read_defined_strings(path)
    kept = 0
    for name in sorted(resolved.generated_names):
        value = existing.get(name)
        if not value:
            continue
        resolved.constants[name] = value
        resolved.generated_names.discard(name)
        kept += 1
    if kept:
        log(f"Kept {kept} existing keys/salts from {path}")
    return kept


def write_config(resolved: ResolvedConfig, path: Path | str) -> Path:
    """Write wp-config.php atomically with restrictive permissions."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    keep_existing_salts(resolved, target)
    content = render_config(resolved)
    tmp = target.with_name(f".{target.name}.tmp")
    if tmp.exists():
        tmp.unlink()
    # Created with FILE_PERMS before any content is written.
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_PERMS)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            os.fchmod(fh.fileno(), FILE_PERMS)
            fh.write(content)
        os.replace(tmp, target)
    finally:
        if tmp.exists():
            tmp.unlink()
    log(f"PASS: Wrote {target} ({len(resolved.constants)} constants)")
    return target
