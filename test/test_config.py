import pytest

from adinsightmap.config import DEFAULT_TIERS, Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("AD_FETCH_TIERS", "APIFY_API_TOKEN", "MOCK_DELAY_MIN_MS", "MOCK_DELAY_MAX_MS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.ad_fetch_tiers == list(DEFAULT_TIERS)
        assert settings.apify_api_token is None
        assert settings.mock_delay_range == (0.5, 1.0)
        assert settings.log_level == "INFO"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AD_FETCH_TIERS", "meta, mock")
        monkeypatch.setenv("APIFY_API_TOKEN", "tok")
        monkeypatch.setenv("MOCK_DELAY_MIN_MS", "0")
        monkeypatch.setenv("MOCK_DELAY_MAX_MS", "250")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.ad_fetch_tiers == ["meta", "mock"]
        assert settings.apify_api_token == "tok"
        assert settings.mock_delay_range == (0.0, 0.25)
        assert settings.log_level == "DEBUG"

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("APIFY_POLL_INTERVAL", "soon")
        with pytest.raises(ValueError):
            Settings.from_env()
