"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from typecraft.core.config import ConfigurationError, Environment, Settings


class TestProductionConfig:

    def test_default_secret_blocks_production(self):
        cfg = Settings(environment=Environment.PRODUCTION, cors_allowed_origins="https://typecraft.example")
        with pytest.raises(ConfigurationError, match="SECRET_KEY"):
            cfg.validate_production_config()

    def test_localhost_cors_blocks_production(self):
        cfg = Settings(environment=Environment.PRODUCTION, secret_key="x" * 64)
        with pytest.raises(ConfigurationError, match="localhost"):
            cfg.validate_production_config()

    def test_secure_production_config_passes(self):
        cfg = Settings(
            environment=Environment.PRODUCTION,
            secret_key="x" * 64,
            cors_allowed_origins="https://typecraft.example",
        )
        cfg.validate_production_config()

    def test_development_tolerates_defaults(self):
        Settings(environment=Environment.DEVELOPMENT).validate_production_config()


class TestFields:

    def test_wildcard_cors_is_refused(self):
        with pytest.raises(ValueError):
            Settings(cors_allowed_origins="https://a.example, *").get_cors_origins()

    def test_log_level_is_uppercased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_non_positive_extraction_timeout(self):
        with pytest.raises(ValidationError):
            Settings(pdf_extraction_timeout=0)

    def test_summaries_need_model_and_key(self):
        assert Settings(summary_model="openai/gpt-4o-mini", summary_api_key="").summaries_enabled is False
        assert Settings(summary_model="openai/gpt-4o-mini", summary_api_key="k").summaries_enabled is True

    def test_upload_cap_in_bytes(self):
        assert Settings(max_upload_mb=2).max_upload_bytes == 2 * 1024 * 1024
