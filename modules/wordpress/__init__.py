"""WordPress container bootstrap package.

Submodules:
- env: secret-file aware environment lookup
- settings: constant table and resolution
- render: wp-config.php generation
- cli: WP-CLI wrappers
- db: MariaDB reachability probe
- healthcheck: liveness probe with exit codes
"""

# Intentionally minimal; logic lives in submodules and __main__.
