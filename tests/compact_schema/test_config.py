from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from compact_schema.config import CompactSchemaSettings, load_settings, resolve_config_path
from compact_schema.errors import ConfigurationError
from compact_schema.models import LabelPolicy

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _work_in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    settings = CompactSchemaSettings()
    assert settings.label_policy is LabelPolicy.LABELED
    assert settings.excluded_properties == ("debugDescription", "description", "hashValue")
    assert settings.log_level == "WARNING"
    assert not settings.log_json


def test_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMPACT_SCHEMA_LABEL_POLICY", "positional")
    monkeypatch.setenv("COMPACT_SCHEMA_EXCLUDED_PROPERTIES", "secret, token,")
    monkeypatch.setenv("COMPACT_SCHEMA_LOG_LEVEL", "debug")
    settings = CompactSchemaSettings()
    assert settings.label_policy is LabelPolicy.POSITIONAL
    assert settings.excluded_properties == ("secret", "token")
    assert settings.log_level == "DEBUG"


def test_standalone_config_file(tmp_path: Path) -> None:
    (tmp_path / "compact_schema.toml").write_text(
        'label-policy = "positional"\nexcluded-properties = ["secret"]\n', encoding="utf-8"
    )
    assert resolve_config_path() == tmp_path / "compact_schema.toml"
    settings = load_settings()
    assert settings.label_policy is LabelPolicy.POSITIONAL
    assert settings.excluded_properties == ("secret",)


def test_pyproject_table(tmp_path: Path) -> None:
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(
        '[project]\nname = "demo"\n\n[tool.compact-schema]\nlog_json = true\n',
        encoding="utf-8",
    )
    assert resolve_config_path(nested) == pyproject
    assert load_settings(pyproject).log_json


def test_pyproject_without_table_is_skipped(tmp_path: Path) -> None:
    (tmp_path / "compact_schema.toml").write_text('log_level = "info"\n', encoding="utf-8")
    child = tmp_path / "child"
    child.mkdir()
    (child / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")
    assert resolve_config_path(child) == tmp_path / "compact_schema.toml"


def test_config_environment_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "elsewhere.toml"
    config.write_text('log_level = "error"\n', encoding="utf-8")
    monkeypatch.setenv("COMPACT_SCHEMA_CONFIG", str(config))
    assert resolve_config_path() == config
    assert load_settings().log_level == "ERROR"


def test_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "compact_schema.toml"
    config.write_text('label_policy = "positional"\nlog_level = "info"\n', encoding="utf-8")
    monkeypatch.setenv("COMPACT_SCHEMA_LOG_LEVEL", "critical")
    monkeypatch.setenv("COMPACT_SCHEMA_LOG_JSON", "true")
    settings = load_settings(config, label_policy=LabelPolicy.LABELED, log_level=None)
    assert settings.label_policy is LabelPolicy.LABELED
    assert settings.log_level == "INFO"
    assert settings.log_json


@pytest.mark.parametrize(
    ("overrides", "location"),
    [({"label_policy": "mixed"}, "label_policy"), ({"log_level": "LOUD"}, "log_level")],
)
def test_invalid_values_raise_configuration_error(
    overrides: dict[str, object], location: str
) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(**overrides)
    errors = excinfo.value.context["errors"]
    assert isinstance(errors, list)
    assert errors[0]["loc"] == location
    assert excinfo.value.to_problem_details()["code"] == "configuration-error"


def test_malformed_toml(tmp_path: Path) -> None:
    config = tmp_path / "compact_schema.toml"
    config.write_text("label_policy = \n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Malformed TOML"):
        load_settings(config)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read config file"):
        load_settings(tmp_path / "absent.toml")


def test_settings_are_frozen() -> None:
    settings = CompactSchemaSettings()
    with pytest.raises(ValidationError):
        settings.label_policy = LabelPolicy.POSITIONAL  # type: ignore[misc]
