import importlib

import pytest

from instrument_updates import config


@pytest.fixture
def reload_config(monkeypatch):
    for name in ("INSTRUMENT_UPDATES_HOME", "DATA_DIR", "MANIFEST_DIR"):
        monkeypatch.delenv(name, raising=False)

    yield lambda: importlib.reload(config)

    monkeypatch.undo()
    importlib.reload(config)


def test_paths_default_to_working_directory(reload_config, tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    cfg = reload_config()
    home = tmp_path.resolve()

    assert cfg.BASE_DIR == home
    assert cfg.ENV_FILE == home / ".env"
    assert cfg.DATA_DIR == home / "data" / "instrument_updates"
    assert cfg.MANIFEST_DIR == home / "outputs" / "manifests"
    assert "site-packages" not in str(cfg.MANIFEST_DIR)


def test_paths_follow_environment(reload_config, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("INSTRUMENT_UPDATES_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("MANIFEST_DIR", str(tmp_path / "manifests"))

    cfg = reload_config()

    assert cfg.BASE_DIR == tmp_path / "home"
    assert cfg.DATA_DIR == tmp_path / "home" / "data" / "instrument_updates"
    assert cfg.MANIFEST_DIR == tmp_path / "manifests"
    assert cfg.LOCK_FILE.parent == cfg.DATA_DIR


def test_require_lists_missing_names(monkeypatch) -> None:
    monkeypatch.delenv("HOST_S3_BUCKET_NAME", raising=False)
    monkeypatch.setenv("GA_TRACKING_ID", "UA-1")

    with pytest.raises(RuntimeError, match="HOST_S3_BUCKET_NAME"):
        config.require("GA_TRACKING_ID", "HOST_S3_BUCKET_NAME")
