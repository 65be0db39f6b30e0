"""Tests for configuration loading and factory functions."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from factdesk.config import (
    ClaudeDiscoveryProviderConfig,
    FactdeskConfig,
    NewsAPIProviderConfig,
    RSSProviderConfig,
    StoreConfig,
    apply_overrides,
    create_from_config,
    get_default_config_path,
    load_config,
)
from factdesk.config.factory import create_completion_services, create_provider, create_store
from factdesk.data import Category, SubCategory
from factdesk.providers import ClaudeDiscoveryProvider, NewsAPIProvider, RSSProvider
from factdesk.store import InMemoryStore, JsonFileStore


class TestConfigModels:
    def test_defaults(self) -> None:
        config = FactdeskConfig()
        assert config.ingestion.max_sources_per_run == 25
        assert config.ingestion.max_articles_per_run == 5
        assert config.ingestion.duplicate_threshold == 0.6
        assert config.generation.rate_limit == 50
        assert config.fact_check.cache_ttl_minutes == 30
        assert config.providers == []

    def test_provider_union_is_discriminated(self) -> None:
        config = FactdeskConfig.model_validate(
            {
                "providers": [
                    {"type": "rss", "feeds": [{"name": "DR", "url": "https://dr.dk/rss", "category": "domestic"}]},
                    {"type": "newsapi", "country": "se"},
                    {"type": "claude_discovery"},
                ]
            }
        )
        rss, newsapi, discovery = config.providers
        assert isinstance(rss, RSSProviderConfig)
        assert rss.feeds[0].category == Category.DOMESTIC
        assert isinstance(newsapi, NewsAPIProviderConfig)
        assert newsapi.country == "se"
        assert isinstance(discovery, ClaudeDiscoveryProviderConfig)

    def test_unknown_provider_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FactdeskConfig.model_validate({"providers": [{"type": "twitter"}]})

    def test_invalid_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FactdeskConfig.model_validate(
                {"providers": [{"type": "rss", "feeds": [{"name": "x", "url": "y", "category": "sport"}]}]}
            )

    def test_configs_are_frozen(self) -> None:
        config = FactdeskConfig()
        with pytest.raises(ValidationError):
            config.ingestion.max_articles_per_run = 10  # type: ignore[misc]


class TestLoader:
    def test_default_config_loads(self) -> None:
        config = load_config(get_default_config_path())

        assert [p.type for p in config.providers] == ["claude_discovery", "rss", "newsapi"]
        rss = config.providers[1]
        assert isinstance(rss, RSSProviderConfig)
        assert len(rss.feeds) == 10
        borsen = next(f for f in rss.feeds if f.name == "Børsen")
        assert borsen.sub_category == SubCategory.FINANCE
        assert "Tesla" in config.ingestion.interests

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == FactdeskConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_default_config_persists_to_a_file(self) -> None:
        assert load_config(get_default_config_path()).store.path == "data/factdesk.json"

    def test_overrides_replace_file_values(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("logging:\n  level: DEBUG\n  enabled: false\n")

        config = load_config(
            path,
            {"logging.enabled": True, "logging.log_dir": "runs", "store.path": None},
        )

        assert config.logging.enabled
        assert config.logging.log_dir == "runs"
        assert config.logging.level == "DEBUG"
        assert config.store.path is None

    def test_overrides_create_missing_sections(self) -> None:
        raw = {"ingestion": {"max_articles_per_run": 3}}

        merged = apply_overrides(raw, {"store.path": "x.json", "ingestion.min_shared_words": 3})

        assert merged == {
            "ingestion": {"max_articles_per_run": 3, "min_shared_words": 3},
            "store": {"path": "x.json"},
        }
        assert raw == {"ingestion": {"max_articles_per_run": 3}}

    def test_override_into_a_scalar_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="not a section"):
            apply_overrides({"store": "memory"}, {"store.path": "x.json"})

    def test_invalid_override_fails_validation(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("")
        with pytest.raises(ValidationError):
            load_config(path, {"ingestion.max_articles_per_run": "many"})


class TestFactory:
    def test_without_api_key_there_is_no_orchestrator(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CLAUDE_API_KEY", raising=False)

        components = create_from_config(
            load_config(get_default_config_path(), {"store.path": ""})
        )

        assert components.orchestrator is None
        assert components.fact_checker is not None
        assert type(components.store) is InMemoryStore
        assert create_completion_services(FactdeskConfig().completion) == (None, None)

    async def test_fact_check_without_api_key_reports_unavailable(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CLAUDE_API_KEY", raising=False)
        components = create_from_config(FactdeskConfig())

        result, _ = await components.fact_checker.check("Storm rammer Jylland")

        assert result.score == -1

    def test_full_stack_with_keys(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CLAUDE_API_KEY", "test-key")
        monkeypatch.setenv("NEWSAPI_KEY", "news-key")
        store = InMemoryStore()

        components = create_from_config(
            load_config(
                get_default_config_path(),
                {"logging.enabled": True, "logging.log_dir": str(tmp_path)},
            ),
            store=store,
        )

        assert components.store is store
        assert components.orchestrator is not None
        assert components.run_logger is not None
        providers = components.orchestrator._providers
        assert [type(p) for p in providers] == [ClaudeDiscoveryProvider, RSSProvider, NewsAPIProvider]
        assert components.orchestrator._provider_timeouts == {
            "claude_discovery": 120.0,
            "rss": 8.0,
            "newsapi": 6.0,
        }

    def test_newsapi_without_key_is_skipped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NEWSAPI_KEY", raising=False)
        provider = create_provider(
            NewsAPIProviderConfig(), search_service=None, categorizer=None, interests=[]
        )
        assert provider is None

    def test_discovery_uses_root_interests_unless_overridden(self) -> None:
        search = object()
        default = create_provider(
            ClaudeDiscoveryProviderConfig(),
            search_service=search,  # type: ignore[arg-type]
            categorizer=None,
            interests=["Tesla"],
        )
        override = create_provider(
            ClaudeDiscoveryProviderConfig(interests=[]),
            search_service=search,  # type: ignore[arg-type]
            categorizer=None,
            interests=["Tesla"],
        )
        assert isinstance(default, ClaudeDiscoveryProvider)
        assert isinstance(override, ClaudeDiscoveryProvider)
        assert len(default.searches) == len(override.searches) + 1

    def test_discovery_without_search_service_is_skipped(self) -> None:
        provider = create_provider(
            ClaudeDiscoveryProviderConfig(), search_service=None, categorizer=None, interests=[]
        )
        assert provider is None
