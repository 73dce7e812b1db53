import pytest
from pydantic import ValidationError

from expertbook.core.config import Settings


def test_defaults():
    cfg = Settings(_env_file=None)
    assert cfg.package_hours == [1, 4, 10, 20]
    assert cfg.cancellation_notice_hours == 24
    assert cfg.meeting_link_base_url == "https://meet.example.com"


def test_package_hours_from_environment(monkeypatch):
    monkeypatch.setenv("EXPERTBOOK_PACKAGE_HOURS", "20, 2,2 ,8")
    cfg = Settings(_env_file=None)
    assert cfg.package_hours == [2, 8, 20]


def test_package_hours_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, package_hours=[0, 4])


def test_is_sqlite():
    assert Settings(_env_file=None, database_url="sqlite:///x.db").is_sqlite is True
    assert Settings(_env_file=None, database_url="postgresql://db/x").is_sqlite is False
