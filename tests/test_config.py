# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from ord_service.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.tenant_header == "Tenant"
        assert settings.default_page_size == 100
        assert settings.max_page_size == 1000
        assert settings.response_aggregation_enabled is True
        assert settings.metrics_prefix == "ord_service"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("ORD_TENANT_HEADER", "X-Tenant")
        monkeypatch.setenv("ORD_RESPONSE_AGGREGATION_ENABLED", "false")
        settings = Settings()
        assert settings.tenant_header == "X-Tenant"
        assert settings.response_aggregation_enabled is False

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(max_page_size=0)

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="https://a.example, ,https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_is_production(self):
        assert Settings(environment="prod").is_production
        assert not Settings(environment="dev").is_production


class TestSettingsCache:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("ORD_DEFAULT_PAGE_SIZE", "25")
        clear_settings_cache()
        second = get_settings()
        assert second is not first
        assert second.default_page_size == 25
