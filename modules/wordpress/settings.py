"""WordPress constant table and resolution from the environment.

Each row maps one environment variable (or its ``_FILE`` secret reference)
onto one WordPress constant. ``resolve_settings`` walks the table in order
and produces a ResolvedConfig that the renderer turns into wp-config.php.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass, field
from typing import Any, Mapping

from config import DEFAULT_TABLE_PREFIX, MASK, SALT_LENGTH
from modules.utils import log
from .env import InvalidSettingError, env_flag, getenv_docker

GROUP_DB = "Database settings"
GROUP_REDIS = "Redis connection"
GROUP_SALTS = "Authentication unique keys and salts"
GROUP_SITE = "Site URLs and language"
GROUP_DEBUG = "Debugging and logging"
GROUP_SECURITY = "General security and optimization"
GROUP_REDIS_CLIENT = "Redis object cache client"

TABLE_PREFIX_ENV = "WORDPRESS_TABLE_PREFIX"
CONFIG_EXTRA_ENV = "WORDPRESS_CONFIG_EXTRA"
REQUIRED = ("DB_NAME", "DB_USER", "DB_PASSWORD", "DB_HOST")

SALT_CHARS = string.ascii_letters + string.digits + string.punctuation + " "


@dataclass(frozen=True)
class Setting:
    constant: str
    env: str
    default: Any = None
    kind: str = "str"
    secret: bool = False
    group: str = GROUP_SECURITY
    generate: bool = False


def _salt(name: str) -> Setting:
    return Setting(name, f"WORDPRESS_{name}", kind="str", secret=True,
                   group=GROUP_SALTS, generate=True)


SETTINGS: tuple[Setting, ...] = (
    Setting("DB_NAME", "WORDPRESS_DB_NAME", group=GROUP_DB),
    Setting("DB_USER", "WORDPRESS_DB_USER", group=GROUP_DB),
    Setting("DB_PASSWORD", "WORDPRESS_DB_PASSWORD", secret=True, group=GROUP_DB),
    Setting("DB_HOST", "WORDPRESS_DB_HOST", group=GROUP_DB),
    Setting("DB_CHARSET", "WORDPRESS_DB_CHARSET", "utf8mb4", group=GROUP_DB),
    Setting("DB_COLLATE", "WORDPRESS_DB_COLLATE", "utf8mb4_unicode_ci", group=GROUP_DB),
    Setting("WP_REDIS_HOST", "WP_REDIS_HOST", "redis", group=GROUP_REDIS),
    Setting("WP_REDIS_PORT", "WP_REDIS_PORT", 6379, kind="int", group=GROUP_REDIS),
    Setting("WP_REDIS_PASSWORD", "WP_REDIS_PASSWORD", secret=True, group=GROUP_REDIS),
    _salt("AUTH_KEY"),
    _salt("SECURE_AUTH_KEY"),
    _salt("LOGGED_IN_KEY"),
    _salt("NONCE_KEY"),
    _salt("AUTH_SALT"),
    _salt("SECURE_AUTH_SALT"),
    _salt("LOGGED_IN_SALT"),
    _salt("NONCE_SALT"),
    Setting("WP_HOME", "WP_HOME", "https://localhost", group=GROUP_SITE),
    Setting("WP_SITEURL", "WP_SITEURL", "https://localhost", group=GROUP_SITE),
    # 'de_DE', 'en_US', 'fr_FR', 'es_ES', etc.
    Setting("WPLANG", "WP_LANG", "en_US", group=GROUP_SITE),
    Setting("WP_ENVIRONMENT_TYPE", "WP_ENVIRONMENT_TYPE", "production", group=GROUP_DEBUG),
    Setting("WP_DEBUG", "WP_DEBUG", False, kind="bool", group=GROUP_DEBUG),
    Setting("WP_DEBUG_DISPLAY", "WP_DEBUG_DISPLAY", False, kind="bool", group=GROUP_DEBUG),
    Setting("WP_DEBUG_LOG", "WP_DEBUG_LOG", False, kind="bool", group=GROUP_DEBUG),
    Setting("WP_CACHE", "WP_CACHE", False, kind="bool"),
    Setting("WP_CACHE_KEY_SALT", "WP_CACHE_KEY_SALT"),
    Setting("DISABLE_WP_CRON", "DISABLE_WP_CRON", False, kind="bool"),
    Setting("REST_API_DISABLED", "REST_API_DISABLED", False, kind="bool"),
    Setting("HEARTBEAT_DISABLED", "HEARTBEAT_DISABLED", False, kind="bool"),
    Setting("AUTOMATIC_UPDATER_DISABLED", "AUTOMATIC_UPDATER_DISABLED", False, kind="bool"),
    Setting("FORCE_SSL_LOGIN", "FORCE_SSL_LOGIN", False, kind="bool"),
    Setting("DISALLOW_FILE_EDIT", "DISALLOW_FILE_EDIT", False, kind="bool"),
    Setting("WP_ALLOW_REPAIR", "WP_ALLOW_REPAIR", False, kind="bool"),
    Setting("WP_POST_REVISIONS", "WP_POST_REVISIONS", kind="raw"),
    Setting("AUTOSAVE_INTERVAL", "AUTOSAVE_INTERVAL", kind="int"),
    Setting("WP_MEMORY_LIMIT", "WP_MEMORY_LIMIT", "256M"),
    Setting("WP_MAX_MEMORY_LIMIT", "WP_MAX_MEMORY_LIMIT", "512M"),
    Setting("DISALLOW_FILE_MODS", "DISALLOW_FILE_MODS", False, kind="bool"),
    # phpredis is a C extension that offers better performance than predis.
    Setting("WP_REDIS_CLIENT", "WP_REDIS_CLIENT", "phpredis", group=GROUP_REDIS_CLIENT),
    Setting("WP_REDIS_DATABASE", "WP_REDIS_DATABASE", 0, kind="int", group=GROUP_REDIS_CLIENT),
    Setting("WP_REDIS_TIMEOUT", "WP_REDIS_TIMEOUT", 1, kind="int", group=GROUP_REDIS_CLIENT),
    Setting("WP_REDIS_READ_TIMEOUT", "WP_REDIS_READ_TIMEOUT", kind="int", group=GROUP_REDIS_CLIENT),
    Setting("WP_REDIS_MAXTTL", "WP_REDIS_MAXTTL", 86400, kind="int", group=GROUP_REDIS_CLIENT),
    Setting("WP_REDIS_SCHEME", "WP_REDIS_SCHEME", "tcp", group=GROUP_REDIS_CLIENT),
)

BY_CONSTANT = {s.constant: s for s in SETTINGS}


@dataclass
class ResolvedConfig:
    constants: dict[str, Any] = field(default_factory=dict)
    table_prefix: str = DEFAULT_TABLE_PREFIX
    config_extra: str = ""
    secret_names: set[str] = field(default_factory=set)
    generated_names: set[str] = field(default_factory=set)

    def define(self, name: str, value: Any, secret: bool = False) -> bool:
        if name in self.constants:
            log(f"SKIP: {name} already defined")
            return False
        self.constants[name] = value
        if secret:
            self.secret_names.add(name)
        return True

    def get(self, name: str, default: Any = None) -> Any:
        return self.constants.get(name, default)

    def grouped(self) -> dict[str, list[tuple[str, Any]]]:
        groups: dict[str, list[tuple[str, Any]]] = {}
        for name, value in self.constants.items():
            setting = BY_CONSTANT.get(name)
            group = setting.group if setting else GROUP_SECURITY
            groups.setdefault(group, []).append((name, value))
        return groups


def generate_salt(length: int = SALT_LENGTH) -> str:
    return "".join(secrets.choice(SALT_CHARS) for _ in range(length))


def _to_int(setting: Setting, raw: str) -> int | None:
    text = raw.strip()
    if not text:
        return setting.default
    try:
        return int(text, 10)
    except ValueError:
        raise InvalidSettingError(setting.env, raw, "integer") from None


def coerce(setting: Setting, raw: Any) -> Any:
    if raw is setting.default:
        return raw
    if setting.kind == "bool":
        return env_flag(raw)
    if setting.kind == "int":
        return _to_int(setting, str(raw))
    if setting.kind == "raw":
        text = str(raw).strip()
        if text.lstrip("-").isdigit():
            return int(text)
        return env_flag(text)
    return raw


def resolve_settings(environ: Mapping[str, str] | None = None) -> ResolvedConfig:
    """Resolve every known setting from the environment.

    Unset settings without a default stay undefined so WordPress falls
    back to its own defaults. Secret-file errors propagate as ConfigError.
    """
    resolved = ResolvedConfig()
    for setting in SETTINGS:
        raw = getenv_docker(setting.env, setting.default, environ)
        generated = False
        if raw is None and setting.generate:
            raw = generate_salt()
            generated = True
            log(f"Generated random value for {setting.constant}")
        if raw is None:
            continue
        value = coerce(setting, raw)
        if value is None:
            continue
        if resolved.define(setting.constant, value, secret=setting.secret) and generated:
            resolved.generated_names.add(setting.constant)
    resolved.table_prefix = getenv_docker(TABLE_PREFIX_ENV, DEFAULT_TABLE_PREFIX, environ) or DEFAULT_TABLE_PREFIX
    resolved.config_extra = getenv_docker(CONFIG_EXTRA_ENV, "", environ) or ""
    logging.debug("Resolved %d constants, table_prefix=%s", len(resolved.constants), resolved.table_prefix)
    return resolved


def missing_required(resolved: ResolvedConfig) -> list[str]:
    missing = []
    for name in REQUIRED:
        if resolved.get(name) in (None, ""):
            missing.append(BY_CONSTANT[name].env)
    return missing


def masked(resolved: ResolvedConfig) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, value in resolved.constants.items():
        if name in resolved.secret_names:
            out[name] = MASK
            continue
        out[name] = value
    out["$table_prefix"] = resolved.table_prefix
    out[CONFIG_EXTRA_ENV] = bool(resolved.config_extra)
    return out
