# tests/core/test_config.py
import pytest
from pydantic import ValidationError as SettingsError

from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.language import Language


def test_defaults(settings):
    assert settings.default_language is Language.ENGLISH
    assert settings.non_field_errors_key == "non_field_errors"
    assert settings.coerce_decimal_to_string is True
    assert settings.reject_unknown_fields is False
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RECORDGUARD_DEFAULT_LANGUAGE", "es")
    monkeypatch.setenv("RECORDGUARD_REJECT_UNKNOWN_FIELDS", "true")
    monkeypatch.setenv("RECORDGUARD_LOG_LEVEL", "debug")
    settings = AppSettings(_env_file=None)
    assert settings.default_language is Language.SPANISH
    assert settings.reject_unknown_fields is True
    assert settings.log_level == "DEBUG"


def test_locale_style_language(monkeypatch):
    monkeypatch.setenv("RECORDGUARD_DEFAULT_LANGUAGE", "es_ES.UTF-8")
    assert AppSettings(_env_file=None).default_language is Language.SPANISH


@pytest.mark.parametrize("language", ["fr", "spanish"])
def test_unknown_language_rejected(monkeypatch, language):
    monkeypatch.setenv("RECORDGUARD_DEFAULT_LANGUAGE", language)
    with pytest.raises(SettingsError):
        AppSettings(_env_file=None)


def test_invalid_values_rejected(monkeypatch):
    monkeypatch.setenv("RECORDGUARD_LOG_LEVEL", "chatty")
    with pytest.raises(SettingsError):
        AppSettings(_env_file=None)


def test_serializer_context(settings):
    context = settings.serializer_context(max_bid_amount="100")
    assert context == {
        "language": Language.ENGLISH,
        "non_field_errors_key": "non_field_errors",
        "coerce_decimal_to_string": True,
        "reject_unknown_fields": False,
        "max_bid_amount": "100",
    }


def test_user_env_file_follows_xdg(tmp_path):
    assert get_user_env_file() == tmp_path / "config" / "recordguard" / ".env"


def test_write_user_env_vars_merges(tmp_path):
    env_path = tmp_path / "user.env"
    env_path.write_text("# comment\nRECORDGUARD_LOG_LEVEL=INFO\n", encoding="utf-8")

    write_user_env_vars({"RECORDGUARD_DEFAULT_LANGUAGE": "es"}, env_path=env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert "RECORDGUARD_LOG_LEVEL=INFO" in lines
    assert "RECORDGUARD_DEFAULT_LANGUAGE=es" in lines


def test_user_env_file_is_read():
    env_path = write_user_env_vars({"RECORDGUARD_NON_FIELD_ERRORS_KEY": "__all__"})
    assert env_path == get_user_env_file()
    assert AppSettings(_env_file=env_path).non_field_errors_key == "__all__"
