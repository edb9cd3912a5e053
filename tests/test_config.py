"""
Tests for environment-driven configuration
"""

from config import AppConfig


class TestAppConfig:
    """Tests for AppConfig.from_env"""

    def test_defaults(self, monkeypatch):
        for name in (
            "OASDOC_OUTPUT_DIR", "OASDOC_TIMEOUT", "OASDOC_MAX_DEPTH",
            "OASDOC_EXAMPLE_SEED", "OASDOC_API_USER", "OASDOC_API_PASSWORD",
        ):
            monkeypatch.delenv(name, raising=False)

        config = AppConfig.from_env()

        assert config.output_dir == "./docs"
        assert config.timeout == 30
        assert config.credentials is None
        assert config.render.max_depth == 10
        assert config.examples.seed == 42

    def test_api_credentials(self, monkeypatch):
        monkeypatch.setenv("OASDOC_API_USER", "docs")
        monkeypatch.setenv("OASDOC_API_PASSWORD", "s3cret")

        assert AppConfig.from_env().credentials == ("docs", "s3cret")

    def test_password_without_user_is_ignored(self, monkeypatch):
        monkeypatch.delenv("OASDOC_API_USER", raising=False)
        monkeypatch.setenv("OASDOC_API_PASSWORD", "s3cret")

        assert AppConfig.from_env().credentials is None
