import os

import pytest
from typer.testing import CliRunner

from ddply import main
from ddply.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    # setup_logging reconfigures global handlers; keep the test run's logging intact
    monkeypatch.setattr(main, "setup_logging", lambda debug=False: None)
    monkeypatch.delenv("DEPLOY_CONFIG_FILE", raising=False)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "ddply version:" in result.output


def test_missing_arguments_exit_1(app_tree):
    assert runner.invoke(app, []).exit_code == 1
    assert runner.invoke(app, [str(app_tree)]).exit_code == 1


def test_invalid_source_exit_2(tmp_path):
    result = runner.invoke(app, [str(tmp_path / "missing"), str(tmp_path / "dst")])
    assert result.exit_code == 2
    assert not os.path.lexists(tmp_path / "dst")


def test_link_only_mode(app_tree, tmp_path):
    dst = tmp_path / "dst"

    result = runner.invoke(app, [str(app_tree), str(dst)])

    assert result.exit_code == 0
    assert dst.is_symlink()
    assert os.readlink(dst) == os.path.abspath(app_tree)


def test_copy_and_link_mode(app_tree, tmp_path):
    config = tmp_path / "deploy.yml"
    config.write_text("shared:\n  - uploads\n")
    dst = tmp_path / "dst"

    result = runner.invoke(app, ["--config", str(config), str(app_tree), str(dst)])

    assert result.exit_code == 0
    assert (dst / "app.php").read_bytes() == (app_tree / "app.php").read_bytes()
    assert (dst / "uploads").is_symlink()
    assert os.readlink(dst / "uploads") == os.path.abspath(app_tree / "uploads")


def test_config_from_environment(app_tree, tmp_path, monkeypatch):
    config = tmp_path / "deploy.yml"
    config.write_text("shared: [uploads]\n")
    monkeypatch.setenv("DEPLOY_CONFIG_FILE", str(config))
    dst = tmp_path / "dst"

    result = runner.invoke(app, [str(app_tree), str(dst)])

    assert result.exit_code == 0
    assert (dst / "uploads").is_symlink()


def test_config_from_environment_missing_exit_4(app_tree, tmp_path, monkeypatch):
    monkeypatch.setenv("DEPLOY_CONFIG_FILE", str(tmp_path / "missing.yml"))

    result = runner.invoke(app, [str(app_tree), str(tmp_path / "dst")])

    assert result.exit_code == 4


def test_explicit_config_not_found_exit_4(app_tree, tmp_path):
    dst = tmp_path / "dst"

    result = runner.invoke(app, ["-c", str(tmp_path / "missing.yml"), str(app_tree), str(dst)])

    assert result.exit_code == 4
    assert not os.path.lexists(dst)


def test_malformed_config_exit_6(app_tree, tmp_path):
    config = tmp_path / "deploy.yml"
    config.write_text("shared: [uploads\n")
    dst = tmp_path / "dst"

    result = runner.invoke(app, ["-c", str(config), str(app_tree), str(dst)])

    assert result.exit_code == 6
    assert not os.path.lexists(dst)


def test_io_failure_exit_3(app_tree, tmp_path, monkeypatch):
    (app_tree / ".ddply").write_text("shared: []\n")

    def boom(src, dst):
        raise PermissionError("denied")

    monkeypatch.setattr("ddply.logic.copy_file", boom)

    result = runner.invoke(app, [str(app_tree), str(tmp_path / "dst")])

    assert result.exit_code == 3


def test_debug_flag_is_passed_to_logging(app_tree, tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(main, "setup_logging", lambda debug=False: calls.append(debug))

    result = runner.invoke(app, ["-d", str(app_tree), str(tmp_path / "dst")])

    assert result.exit_code == 0
    assert calls == [True]


def test_config_with_invalid_encoding_exit_6(app_tree, tmp_path):
    config = tmp_path / "deploy.yml"
    config.write_bytes(b"shared:\n  - \xff\xfe\n")
    dst = tmp_path / "dst"

    result = runner.invoke(app, ["-c", str(config), str(app_tree), str(dst)])

    assert result.exit_code == 6
    assert not os.path.lexists(dst)
