"""
Tests for settings loading and startup validation.
"""
import pytest

from config import Settings
from database import to_async_url

pytestmark = pytest.mark.unit


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self):
        s = make_settings()
        assert s.cache_backend == "memory"
        assert s.cache_ttl_seconds == 60
        assert s.request_timeout == 5.0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "redis")
        monkeypatch.setenv("CACHE_TTL_SECONDS", "120")
        s = make_settings()
        assert s.cache_backend == "redis"
        assert s.cache_ttl_seconds == 120

    def test_timeout_disabled(self):
        assert make_settings(request_timeout_seconds=0).request_timeout is None

    def test_cors_origins_list(self):
        s = make_settings(cors_origins="http://a.test, http://b.test")
        assert s.cors_origins_list == ["http://a.test", "http://b.test"]


class TestProductionValidation:
    def test_development_allows_sqlite(self):
        make_settings().validate_production_settings()

    def test_unknown_cache_backend(self):
        with pytest.raises(ValueError):
            make_settings(cache_backend="memcached").validate_production_settings()

    def test_non_positive_ttl(self):
        with pytest.raises(ValueError):
            make_settings(cache_ttl_seconds=0).validate_production_settings()

    def test_production_rejects_sqlite(self):
        s = make_settings(environment="production", cache_backend="redis",
                          cors_origins="https://shop.test")
        with pytest.raises(ValueError, match="PostgreSQL"):
            s.validate_production_settings()

    def test_production_rejects_wildcard_cors(self):
        s = make_settings(environment="production", cors_origins="*",
                          database_url="postgresql://db/orders", cache_backend="redis")
        with pytest.raises(ValueError, match="CORS"):
            s.validate_production_settings()

    def test_production_requires_redis(self):
        s = make_settings(environment="production", cors_origins="https://shop.test",
                          database_url="postgresql://db/orders", cache_backend="memory")
        with pytest.raises(ValueError):
            s.validate_production_settings()

    def test_valid_production(self):
        make_settings(environment="production", cors_origins="https://shop.test",
                      database_url="postgresql://db/orders",
                      cache_backend="redis").validate_production_settings()


@pytest.mark.parametrize("url,expected", [
    ("sqlite:///./data/x.db", "sqlite+aiosqlite:///./data/x.db"),
    ("postgresql://u:p@db/orders", "postgresql+asyncpg://u:p@db/orders"),
    ("postgres://u:p@db/orders", "postgresql+asyncpg://u:p@db/orders"),
    ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
])
def test_to_async_url(url, expected):
    assert to_async_url(url) == expected
