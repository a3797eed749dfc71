import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env,expected",
    [
        (None, "config.development"),
        ("development", "config.development"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, expected):
    if env is None:
        monkeypatch.delenv("APP_ENV", raising=False)
    else:
        monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == expected
