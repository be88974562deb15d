# src/tests/test_settings.py
import pytest

from otpvault.common.settings import load_settings


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("OTPVAULT_SKEW_WINDOW", "2")
    monkeypatch.setenv("OTPVAULT_EXPORT_FORMAT", "JSON")
    monkeypatch.delenv("OTPVAULT_FUTURE_COUNT", raising=False)

    settings = load_settings()
    assert settings.skew_window == 2
    assert settings.future_count == 5
    assert settings.export_format == "json"


@pytest.mark.parametrize(
    "name, value",
    [("OTPVAULT_SKEW_WINDOW", "two"), ("OTPVAULT_FUTURE_COUNT", "0"), ("OTPVAULT_EXPORT_FORMAT", "xml")],
)
def test_settings_reject_bad_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        load_settings()
