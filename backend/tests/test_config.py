"""
HR Desk Backend - Configuration Tests
"""

import pytest
from pydantic import ValidationError

from hrdesk.config import Settings
from hrdesk.main import create_app


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_invalid_log_level():
    with pytest.raises(ValidationError):
        Settings(log_level="verbose")


@pytest.mark.parametrize("month", [1, 4, 9])
def test_supported_fiscal_start_months(month):
    assert Settings(recruitment_fiscal_year_start_month=month).recruitment_fiscal_year_start_month == month


def test_unsupported_fiscal_start_month():
    with pytest.raises(ValidationError):
        Settings(recruitment_fiscal_year_start_month=5)


def test_database_kind():
    assert Settings(database_url="sqlite+aiosqlite:///./attendance.db").is_sqlite
    assert not Settings(database_url="postgresql+asyncpg://u:p@db/attendance").is_sqlite


def test_cors_origins_list():
    settings = Settings(cors_origins="http://a.test, http://b.test,,")

    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


def test_unknown_app_kind():
    with pytest.raises(ValueError):
        create_app("payroll")


def test_app_kinds():
    assert create_app("attendance").state.kind == "attendance"
    assert create_app("recruitment").state.kind == "recruitment"
