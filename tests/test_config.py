"""Tests for loading client settings from YAML files."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from pageseeder_api.config import ClientCredentials, ClientSettings


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text.strip() + "\n")
    return path


def test_from_file_missing_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Given no config file, when `ClientSettings.from_file()` runs, then a `FileNotFoundError`
    is raised."""

    monkeypatch.delenv("PAGESEEDER_CONFIG_PATH", raising=False)
    with pytest.raises(FileNotFoundError):
        ClientSettings.from_file(tmp_path / "conf" / "pageseeder.yml")


def test_from_file_missing_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Given a config file missing required keys, when loading, then the error names them."""

    monkeypatch.delenv("PAGESEEDER_CONFIG_PATH", raising=False)
    config = _write(tmp_path / "conf" / "pageseeder.yml", "PS_URL: https://ps.example.org")

    with pytest.raises(ValueError, match="PS_CLIENT_ID, PS_CLIENT_SECRET"):
        ClientSettings.from_file(config)


def test_from_file_success_with_lowercase_keys(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("PAGESEEDER_CONFIG_PATH", raising=False)
    config = _write(
        tmp_path / "conf" / "pageseeder.yml",
        """
ps_url: https://ps.example.org
ps_client_id: my-client
ps_client_secret: my-secret
ps_timeout: 12.5
ps_max_attempts: 5
""",
    )

    settings = ClientSettings.from_file(config)

    assert settings.root_url == "https://ps.example.org"
    assert settings.credentials.client_id == "my-client"
    assert settings.timeout_seconds == 12.5
    assert settings.max_attempts == 5
    assert "my-secret" not in repr(settings)


def test_env_path_takes_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_config = _write(
        tmp_path / "env.yml",
        "PS_URL: https://env.example.org\nPS_CLIENT_ID: a\nPS_CLIENT_SECRET: b",
    )
    monkeypatch.setenv("PAGESEEDER_CONFIG_PATH", str(env_config))

    settings = ClientSettings.from_file(tmp_path / "ignored.yml")

    assert settings.root_url == "https://env.example.org"


def test_default_location_is_relative_to_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("PAGESEEDER_CONFIG_PATH", raising=False)
    _write(
        tmp_path / "conf" / "pageseeder.yml",
        "PS_URL: https://cwd.example.org\nPS_CLIENT_ID: a\nPS_CLIENT_SECRET: b",
    )
    monkeypatch.chdir(tmp_path)

    assert ClientSettings.from_file().root_url == "https://cwd.example.org"


def test_settings_constraints() -> None:
    credentials = ClientCredentials(client_id="a", client_secret="b")
    with pytest.raises(ValidationError):
        ClientSettings(base_url="https://ps.example.org", credentials=credentials, max_attempts=0)
    with pytest.raises(ValidationError):
        ClientSettings(
            base_url="https://ps.example.org",
            credentials=credentials,
            backoff_base_seconds=10,
            backoff_max_seconds=1,
        )
    with pytest.raises(ValidationError):
        ClientCredentials(client_id="", client_secret="b")


def test_missing_relative_path_is_reported_from_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Given a relative path that does not exist, then the error names where it was looked up."""

    monkeypatch.delenv("PAGESEEDER_CONFIG_PATH", raising=False)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(FileNotFoundError, match="pageseeder.yml") as excinfo:
        ClientSettings.from_file("conf/pageseeder.yml")

    assert str(tmp_path / "conf" / "pageseeder.yml") in str(excinfo.value)
