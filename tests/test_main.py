from __future__ import annotations

import json

import pytest

from modules.wordpress import __main__ as entry

DB_ENV = {
    "WORDPRESS_DB_NAME": "wordpress",
    "WORDPRESS_DB_USER": "wp",
    "WORDPRESS_DB_PASSWORD": "hunter2",
    "WORDPRESS_DB_HOST": "db",
}


@pytest.fixture
def db_env(monkeypatch):
    for key, value in DB_ENV.items():
        monkeypatch.setenv(key, value)
        monkeypatch.delenv(key + "_FILE", raising=False)


def test_no_arguments(capsys):
    assert entry.main([]) == 1
    assert "FAIL: usage" in capsys.readouterr().out


def test_unknown_subcommand(capsys):
    assert entry.main(["bogus"]) == 1
    assert "unknown subcommand" in capsys.readouterr().out


def test_render_writes_output(db_env, tmp_path, capsys):
    target = tmp_path / "wp-config.php"
    assert entry.main(["render", f"--output={target}"]) == 0
    assert "define('DB_HOST', 'db');" in target.read_text(encoding="utf-8")
    assert "PASS: rendered" in capsys.readouterr().out


def test_render_defaults_to_app_dir(db_env, monkeypatch, tmp_path):
    monkeypatch.setenv("APP_DIR", str(tmp_path))
    assert entry.main(["render"]) == 0
    assert (tmp_path / "wp-config.php").exists()


def test_render_config_error(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("WORDPRESS_DB_PASSWORD_FILE", str(tmp_path / "missing"))
    assert entry.main(["render", "--output", str(tmp_path / "wp-config.php")]) == 1
    assert "FAIL: render" in capsys.readouterr().out
    assert not (tmp_path / "wp-config.php").exists()


def test_env_prints_masked_json(db_env, capsys):
    assert entry.main(["env"]) == 0
    data = json.loads(capsys.readouterr().out.strip())
    assert data["DB_USER"] == "wp"
    assert data["DB_PASSWORD"] == "***"


def test_check(db_env, monkeypatch, capsys):
    assert entry.main(["check"]) == 0
    monkeypatch.delenv("WORDPRESS_DB_PASSWORD")
    assert entry.main(["check"]) == 1
    assert "WORDPRESS_DB_PASSWORD" in capsys.readouterr().out


def test_healthcheck_passes_exit_code(monkeypatch):
    seen = {}

    def fake(method):
        seen["method"] = method
        return 2

    monkeypatch.setattr(entry, "run_healthcheck", fake)
    assert entry.main(["healthcheck", "--method=mariadb"]) == 2
    assert seen["method"] == "mariadb"


def test_healthcheck_rejects_unknown_method():
    assert entry.main(["healthcheck", "--method=redis"]) == 1


def test_render_non_utf8_secret_fails_cleanly(monkeypatch, tmp_path, capsys):
    secret = tmp_path / "db_password"
    secret.write_bytes(b"\xff\xfe\x00bad")
    monkeypatch.setenv("WORDPRESS_DB_PASSWORD_FILE", str(secret))
    assert entry.main(["render", f"--output={tmp_path / 'wp-config.php'}"]) == 1
    assert "FAIL: render" in capsys.readouterr().out
    assert not (tmp_path / "wp-config.php").exists()
