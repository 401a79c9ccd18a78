from __future__ import annotations

import re
import stat

import pytest

from modules.wordpress import render
from modules.wordpress.render import php_literal, php_unquote, read_defined_strings, render_config, write_config
from modules.wordpress.settings import SETTINGS, resolve_settings

ENV = {
    "WORDPRESS_DB_NAME": "wordpress",
    "WORDPRESS_DB_USER": "wp",
    "WORDPRESS_DB_PASSWORD": "it's \\ secret",
    "WORDPRESS_DB_HOST": "db:3306",
    "WP_DEBUG": "1",
}


def test_php_literal_encodings():
    assert php_literal(True) == "true"
    assert php_literal(False) == "false"
    assert php_literal(None) == "null"
    assert php_literal(6379) == "6379"
    assert php_literal("en_US") == "'en_US'"
    assert php_literal("it's") == "'it\\'s'"
    assert php_literal("a\\b") == "'a\\\\b'"


def test_every_constant_defined_exactly_once():
    text = render_config(resolve_settings(ENV))
    for setting in SETTINGS:
        if setting.default is None and not setting.generate and setting.env not in ENV:
            continue
        hits = re.findall(rf"define\('{setting.constant}',", text)
        assert len(hits) == 1, setting.constant


def test_constants_are_guarded_and_escaped():
    text = render_config(resolve_settings(ENV))
    assert "if (!defined('DB_PASSWORD')) {\n    define('DB_PASSWORD', 'it\\'s \\\\ secret');\n}" in text
    assert "define('WP_DEBUG', true);" in text
    assert "define('WP_REDIS_PORT', 6379);" in text
    assert "$table_prefix = 'wp_';" in text


def test_layout_order():
    extra = "define('WP_REDIS_CLIENT', 'predis');"
    text = render_config(resolve_settings(dict(ENV, WORDPRESS_CONFIG_EXTRA=extra)))
    assert text.startswith("<?php")
    positions = [
        text.index("define('DB_NAME'"),
        text.index("$table_prefix"),
        text.index("define('WP_REDIS_HOST'"),
        text.index("define('AUTH_KEY'"),
        text.index("define('WP_HOME'"),
        text.index("define('WP_DEBUG'"),
        text.index("define('DISALLOW_FILE_MODS'"),
        text.index("HTTP_X_FORWARDED_PROTO"),
        text.index(extra),
        text.index("define('WP_REDIS_CLIENT', 'phpredis')"),
        text.index("require_once ABSPATH . 'wp-settings.php';"),
    ]
    assert positions == sorted(positions)


def test_extra_omitted_when_empty():
    text = render_config(resolve_settings(ENV))
    assert "WORDPRESS_CONFIG_EXTRA" not in text


def test_reverse_proxy_detection_present():
    text = render_config(resolve_settings(ENV))
    assert "$_SERVER['HTTP_X_FORWARDED_PROTO'] === 'https'" in text
    assert "$_SERVER['HTTP_X_FORWARDED_SSL'] === 'on'" in text


def test_write_config_is_atomic_and_private(tmp_path):
    target = tmp_path / "html" / "wp-config.php"
    path = write_config(resolve_settings(ENV), target)
    assert path == target
    assert target.read_text(encoding="utf-8").startswith("<?php")
    assert stat.S_IMODE(target.stat().st_mode) == 0o640
    assert not (target.parent / ".wp-config.php.tmp").exists()


def test_temp_file_is_private_before_content_lands(monkeypatch, tmp_path):
    target = tmp_path / "wp-config.php"
    seen = {}
    real_replace = render.os.replace

    def spy(src, dst):
        seen["mode"] = stat.S_IMODE(render.os.stat(src).st_mode)
        return real_replace(src, dst)

    monkeypatch.setattr(render.os, "replace", spy)
    write_config(resolve_settings(ENV), target)
    assert seen["mode"] == 0o640


def test_failed_rename_removes_temp_file(monkeypatch, tmp_path):
    target = tmp_path / "wp-config.php"

    def boom(src, dst):
        raise OSError(13, "Permission denied")

    monkeypatch.setattr(render.os, "replace", boom)
    with pytest.raises(OSError):
        write_config(resolve_settings(ENV), target)
    assert not (tmp_path / ".wp-config.php.tmp").exists()
    assert not target.exists()


def test_stale_temp_file_is_replaced(tmp_path):
    (tmp_path / ".wp-config.php.tmp").write_text("stale", encoding="utf-8")
    write_config(resolve_settings(ENV), tmp_path / "wp-config.php")
    assert not (tmp_path / ".wp-config.php.tmp").exists()


def test_generated_keys_survive_rerender(tmp_path):
    target = tmp_path / "wp-config.php"
    write_config(resolve_settings(ENV), target)
    first = read_defined_strings(target)
    write_config(resolve_settings(ENV), target)
    second = read_defined_strings(target)
    for name in ("AUTH_KEY", "SECURE_AUTH_KEY", "LOGGED_IN_SALT", "NONCE_SALT"):
        assert len(first[name]) == 64
        assert second[name] == first[name]


def test_keys_from_environment_override_existing_file(tmp_path):
    target = tmp_path / "wp-config.php"
    write_config(resolve_settings(ENV), target)
    old = read_defined_strings(target)
    write_config(resolve_settings(dict(ENV, WORDPRESS_AUTH_KEY="rotated")), target)
    new = read_defined_strings(target)
    assert new["AUTH_KEY"] == "rotated"
    assert new["NONCE_KEY"] == old["NONCE_KEY"]


def test_read_defined_strings_unescapes_php_literals(tmp_path):
    target = tmp_path / "wp-config.php"
    write_config(resolve_settings(ENV), target)
    assert read_defined_strings(target)["DB_PASSWORD"] == "it's \\ secret"
    assert php_unquote("a\\'b\\\\c\\n") == "a'b\\c\\n"
    assert read_defined_strings(tmp_path / "absent.php") == {}


def test_config_extra_logs_warning(caplog):
    with caplog.at_level("WARNING"):
        render_config(resolve_settings(dict(ENV, WORDPRESS_CONFIG_EXTRA="define('X', 1);")))
    assert any("WORDPRESS_CONFIG_EXTRA" in r.getMessage() and r.levelname == "WARNING" for r in caplog.records)


def test_no_warning_without_config_extra(caplog):
    with caplog.at_level("WARNING"):
        render_config(resolve_settings(ENV))
    assert not [r for r in caplog.records if "WORDPRESS_CONFIG_EXTRA" in r.getMessage()]
