"""Shared configuration constants for wpdock.

Centralizes container paths and tool locations used by modules.
Values can be overridden from the container environment.
"""

import os

APP_DIR = os.environ.get("APP_DIR") or "/var/www/html"
WP_CONFIG_NAME = os.environ.get("WP_CONFIG_NAME") or "wp-config.php"
WP_LOAD_NAME = "wp-load.php"
WP_CLI_PATH = os.environ.get("WP_CLI_PATH") or "/usr/local/bin/wp"
MARIADB_CLIENT = os.environ.get("MARIADB_CLIENT") or "mariadb"
FILE_PERMS = int(os.environ.get("CONFIG_FILE_PERMS") or "640", 8)
HEALTHCHECK_TIMEOUT = int(os.environ.get("HEALTHCHECK_TIMEOUT") or "10")
DEFAULT_TABLE_PREFIX = "wp_"
SALT_LENGTH = 64
MASK = "***"
