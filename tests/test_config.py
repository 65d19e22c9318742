from pathlib import Path

import pytest
from pydantic import ValidationError

from warbler.config.schema import AppConfig, load_config


def test_app_config_defaults() -> None:
    """Defaults match the documented service settings."""
    cfg = AppConfig()
    assert cfg.engine_binary == Path("/app/build/bin/whisper-cli")
    assert cfg.models_dir == Path("models")
    assert cfg.default_model == "ggml-base.bin"
    assert cfg.language == "pt"
    assert cfg.engine_timeout_s is None
    assert cfg.host == "0.0.0.0"
    assert cfg.port == 6000
    assert cfg.cors_origins == []


def test_app_config_expands_user_paths() -> None:
    """Paths starting with ~ are expanded."""
    cfg = AppConfig(models_dir="~/models")
    assert str(cfg.models_dir).startswith("/")
    assert cfg.models_dir.name == "models"


@pytest.mark.parametrize("name", ["", "..", "sub/model.bin", "../ggml-base.bin"])
def test_app_config_rejects_non_filename_default_model(name: str) -> None:
    """default_model must be a plain filename."""
    with pytest.raises(ValidationError, match="default_model"):
        AppConfig(default_model=name)


@pytest.mark.parametrize("timeout", [0, -5])
def test_app_config_rejects_non_positive_timeout(timeout: float) -> None:
    """Timeouts must be positive."""
    with pytest.raises(ValidationError):
        AppConfig(engine_timeout_s=timeout)


def test_app_config_rejects_unknown_keys() -> None:
    """Unknown keys are rejected."""
    with pytest.raises(ValidationError):
        AppConfig(model_dir="typo")


def test_load_config_missing_file_gives_defaults(tmp_path: Path) -> None:
    """A missing config file yields defaults."""
    cfg = load_config(tmp_path / "absent.toml", environ={})
    assert cfg == AppConfig()


def test_load_config_reads_toml(tmp_path: Path) -> None:
    """Settings are read from TOML."""
    path = tmp_path / "config.toml"
    path.write_text(
        'engine_binary = "/opt/whisper-cli"\n'
        'models_dir = "/srv/models"\n'
        'language = "en"\n'
        "engine_timeout_s = 120\n"
        'cors_origins = ["http://localhost:8080"]\n'
    )

    cfg = load_config(path, environ={})

    assert cfg.engine_binary == Path("/opt/whisper-cli")
    assert cfg.models_dir == Path("/srv/models")
    assert cfg.language == "en"
    assert cfg.engine_timeout_s == 120
    assert cfg.cors_origins == ["http://localhost:8080"]


def test_load_config_env_overrides(tmp_path: Path) -> None:
    """Environment variables override file settings."""
    path = tmp_path / "config.toml"
    path.write_text('language = "en"\nport = 7000\n')
    environ = {
        "WARBLER_CONFIG": str(path),
        "WARBLER_PORT": "8080",
        "WARBLER_CORS_ORIGINS": "http://a.example, http://b.example",
        "WARBLER_CREATE_MODELS_DIR": "false",
    }

    cfg = load_config(environ=environ)

    assert cfg.language == "en"
    assert cfg.port == 8080
    assert cfg.cors_origins == ["http://a.example", "http://b.example"]
    assert cfg.create_models_dir is False
