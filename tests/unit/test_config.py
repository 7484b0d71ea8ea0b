"""Tests for layered config loading."""

from shopcatalog.core.config import Config


class TestConfigLoad:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for name in ("SHOPCATALOG_ENV", "SANITY_PROJECT_ID", "SWELL_STORE_ID", "SHOPCATALOG_CORE_CONFIG_PATH"):
            monkeypatch.delenv(name, raising=False)
        config = Config.load()
        assert config.environment == "production"
        assert config.content_ttl == 300
        assert config.static_ttl == 900
        assert config.batch_timeout == 8.0
        assert config.catalog.commerce_concurrency == 5

    def test_development_ttls(self):
        config = Config(environment="development")
        assert config.is_development
        assert config.content_ttl == 30
        assert config.static_ttl == 60
        assert config.batch_timeout == 3.0

    def test_toml_sections_merge(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SANITY_PROJECT_ID", raising=False)
        monkeypatch.delenv("SANITY_DATASET", raising=False)
        path = tmp_path / "settings.toml"
        path.write_text(
            '[sanity]\nproject_id = "abc123"\n\n[catalog]\ncommerce_concurrency = 3\n',
            encoding="utf-8",
        )
        config = Config.load(path)
        assert config.sanity.project_id == "abc123"
        assert config.sanity.dataset == "production"
        assert config.catalog.commerce_concurrency == 3
        assert config.loaded_from == [path]

    def test_env_overrides_toml(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.toml"
        path.write_text('[sanity]\nproject_id = "from-toml"\n', encoding="utf-8")
        monkeypatch.setenv("SANITY_PROJECT_ID", "from-env")
        monkeypatch.setenv("SANITY_USE_CDN", "false")
        monkeypatch.setenv("SWELL_STORE_ID", "store")
        monkeypatch.setenv("SHOPCATALOG_ENV", "development")
        monkeypatch.setenv("SHOPCATALOG_COMMERCE_CONCURRENCY", "0")
        monkeypatch.setenv("CACHE_WEBHOOK_SECRET", "s3cret")
        config = Config.load(path)
        assert config.sanity.project_id == "from-env"
        assert config.sanity.use_cdn is False
        assert config.swell.store_id == "store"
        assert config.swell.base_url == "https://store.swell.store/api"
        assert config.is_development
        # "0" is falsy and leaves the default in place.
        assert config.catalog.commerce_concurrency == 5
        assert config.webhook.secret == "s3cret"


class TestEnvHelpers:
    def test_blank_is_unset(self, monkeypatch):
        from shopcatalog.core.config import get_bool_env, get_env, get_int_env

        monkeypatch.setenv("SHOPCATALOG_TEST_VALUE", "   ")
        assert get_env("SHOPCATALOG_TEST_VALUE", "fallback") == "fallback"
        assert get_bool_env("SHOPCATALOG_TEST_VALUE", True) is True
        assert get_int_env("SHOPCATALOG_TEST_VALUE", 4) == 4

    def test_parsing(self, monkeypatch):
        from shopcatalog.core.config import get_bool_env, get_int_env

        monkeypatch.setenv("SHOPCATALOG_TEST_FLAG", " Off ")
        monkeypatch.setenv("SHOPCATALOG_TEST_INT", "x")
        assert get_bool_env("SHOPCATALOG_TEST_FLAG") is False
        assert get_int_env("SHOPCATALOG_TEST_INT", 7) == 7
