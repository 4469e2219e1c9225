"""Configuration loading tests."""

from __future__ import annotations

import pytest

from debtcompass.config import BaseConfig, TestingConfig
from debtcompass.infra.database import bootstrap_database
from debtcompass.infra.repositories import SQLModelDebtRepository
from debtcompass.models import Debt


def test_defaults(app_config, tmp_path):
    assert app_config.DATA_DIR == tmp_path.resolve()
    assert app_config.DEFAULT_STRATEGY == "snowball"
    assert app_config.REMINDER_DAYS_BEFORE == 3
    assert app_config.REMINDER_HOUR == 9


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("DEBTCOMPASS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("DEBTCOMPASS_DEV_MODE", "false")
    monkeypatch.setenv("DEBTCOMPASS_DEFAULT_STRATEGY", "Avalanche")
    monkeypatch.setenv("DEBTCOMPASS_REMINDER_DAYS_BEFORE", "1")
    monkeypatch.delenv("DEBTCOMPASS_DATABASE_URL", raising=False)

    config = BaseConfig()

    assert config.DATA_DIR.is_dir()
    assert config.DEV_MODE is False
    assert config.DEFAULT_STRATEGY == "avalanche"
    assert config.REMINDER_DAYS_BEFORE == 1
    assert config.DATABASE_URL.endswith("debtcompass.db")


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("DEBTCOMPASS_REMINDER_HOUR", "24"),
        ("DEBTCOMPASS_REMINDER_HOUR", "nine"),
        ("DEBTCOMPASS_REMINDER_DAYS_BEFORE", "-1"),
    ],
)
def test_invalid_reminder_settings(tmp_path, monkeypatch, name, value):
    monkeypatch.setenv("DEBTCOMPASS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        BaseConfig()


def test_in_memory_bootstrap(tmp_path, monkeypatch):
    monkeypatch.setenv("DEBTCOMPASS_DATA_DIR", str(tmp_path))

    engine, session_factory = bootstrap_database(TestingConfig())
    repo = SQLModelDebtRepository(session_factory)
    created = repo.create(Debt(name="Card", balance=100.0))

    assert repo.get_by_id(created.id).name == "Card"
    engine.dispose()


def test_package_exports():
    import debtcompass

    assert debtcompass.__all__ == ["BaseConfig", "create_app_context"]
    assert not hasattr(debtcompass, "DevConfig")
