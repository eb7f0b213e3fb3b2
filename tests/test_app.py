import pytest

import distri_mirror.config.config_loader as config_loader
from distri_mirror import app
from distri_mirror.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in list(config_loader.ENV_VARS) + [config_loader.ENV_JSON_PATH_VAR, config_loader.ENV_OVERRIDES_VAR]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config_loader, "load_dotenv", lambda *a, **k: False)
    monkeypatch.setattr(config_loader, "CONFIG_DIR", tmp_path)
    monkeypatch.setenv("MIRROR_DB_PATH", str(tmp_path / "mirror.db"))


def test_parse_args():
    args = app.parse_args(["--debug", "--skip-bootstrap", "--config", "x.json"])
    assert args.debug and args.skip_bootstrap
    assert args.config == "x.json"


def test_main_exits_on_missing_program_id():
    with pytest.raises(SystemExit, match="program_id"):
        app.main([])


def test_invalid_program_id_is_config_error(monkeypatch):
    monkeypatch.setenv("PROGRAM_ID", "not-a-key")
    cfg = config_loader.get_config()
    with pytest.raises(ConfigError, match="program_id"):
        app.MirrorApp(cfg)
