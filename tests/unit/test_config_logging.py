"""Unit tests for configuration loading and structured logging."""

import logging
from pathlib import Path

import pytest

from newsgate.config import get_config, reset_config
from newsgate.config.settings import _parse_buckets, _parse_list
from newsgate.utils.logger import (
    ColoredFormatter,
    StructuredLogger,
    get_logger,
    log_performance,
    setup_logger,
)

ENV_KEYS = [
    "NEWSGATE_API_KEY", "NEWSGATE_BASE_URL", "NEWSGATE_ANALYSIS_BASE_URL", "NEWSGATE_TIMEOUT",
    "CACHE_TTL_SECONDS", "CACHE_DIR", "ROUTING_DEFAULT_PROVIDER", "ROUTING_FALLBACK_CHAIN",
    "ROUTING_MAX_WORKERS", "SENTIMENT_FEED_PATH", "SENTIMENT_BUCKETS", "SENTIMENT_INFLUENCERS",
    "LOG_LEVEL", "LOG_FILE",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear NewsGate variables and the config singleton."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield monkeypatch
    reset_config()


class TestConfig:
    """Test environment based configuration."""

    def test_defaults(self, clean_env):
        config = get_config()

        assert config.api.base_url == "https://api.wioex.com"
        assert config.api.timeout_seconds == 30.0
        assert config.cache.ttl_seconds == 300
        assert config.cache.cache_dir is None
        assert config.routing.default_provider == "native"
        assert config.routing.fallback_chain == ("native", "analysis")
        assert config.routing.max_workers == 4
        assert config.sentiment.buckets == {'positive': 'trumpy', 'neutral': 'neutral', 'negative': 'grumpy'}
        assert config.sentiment.influencer_keywords == ("trump",)
        assert config.system.log_level == "INFO"

    def test_environment_overrides(self, clean_env, tmp_path):
        clean_env.setenv("NEWSGATE_API_KEY", "abc")
        clean_env.setenv("CACHE_TTL_SECONDS", "60")
        clean_env.setenv("CACHE_DIR", str(tmp_path))
        clean_env.setenv("ROUTING_FALLBACK_CHAIN", "analysis, sentiment")
        clean_env.setenv("ROUTING_MAX_WORKERS", "8")
        clean_env.setenv("SENTIMENT_BUCKETS", "positive:up,neutral:flat,negative:down")
        clean_env.setenv("SENTIMENT_INFLUENCERS", "trump,musk")

        config = get_config()

        assert config.api.api_key == "abc"
        assert config.cache.ttl_seconds == 60
        assert config.cache.cache_dir == Path(tmp_path)
        assert config.routing.fallback_chain == ("analysis", "sentiment")
        assert config.routing.max_workers == 8
        assert config.sentiment.buckets == {'positive': 'up', 'neutral': 'flat', 'negative': 'down'}
        assert config.sentiment.influencer_keywords == ("trump", "musk")

    def test_singleton(self, clean_env):
        assert get_config() is get_config()

    def test_override(self, clean_env):
        config = get_config()
        config.override("routing.max_workers", 2)

        assert config.get("routing.max_workers") == 2
        assert config.get("cache.ttl_seconds") == 300
        assert config.get("missing.key", "fallback") == "fallback"

    def test_parse_list(self):
        assert _parse_list(" a, b ,,c ") == ("a", "b", "c")

    def test_parse_buckets_rejects_malformed(self):
        with pytest.raises(ValueError):
            _parse_buckets("positive:up,neutral")
        with pytest.raises(ValueError):
            _parse_buckets("positive:up,neutral:flat")


class TestStructuredLogger:
    """Test logger wrapper and formatter."""

    def test_context_passed_as_extra(self):
        records = []
        base = logging.getLogger("newsgate.test.context")
        handler = logging.Handler()
        handler.emit = records.append
        base.addHandler(handler)
        base.setLevel(logging.DEBUG)

        logger = StructuredLogger(base, {'symbol': 'AAPL'})
        logger.bind(provider='native').info("fetched")
        logger.warning("plain", extra={'context': {'attempt': 2}})

        assert records[0].context == {'symbol': 'AAPL', 'provider': 'native'}
        assert records[1].context == {'symbol': 'AAPL', 'attempt': 2}
        assert logger.context == {'symbol': 'AAPL'}
        base.removeHandler(handler)

    def test_add_and_clear_context(self):
        logger = StructuredLogger(logging.getLogger("newsgate.test.ctx"))
        logger.add_context(run="1")
        assert logger.context == {'run': "1"}
        logger.clear_context()
        assert logger.context == {}

    def test_formatter_appends_context(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s%(context_str)s", use_colors=False)
        record = logging.LogRecord("n", logging.INFO, __file__, 1, "hello", None, None)
        record.context = {'symbol': 'AAPL'}

        assert formatter.format(record) == "INFO hello symbol=AAPL"

    def test_setup_logger_does_not_stack_handlers(self):
        setup_logger("newsgate.test.handlers")
        setup_logger("newsgate.test.handlers")

        assert len(logging.getLogger("newsgate.test.handlers").handlers) == 1

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "newsgate.log"
        logger = setup_logger("newsgate.test.file", level="INFO", log_file=log_file)

        logger.info("written", extra={'context': {'k': 'v'}})
        for handler in logging.getLogger("newsgate.test.file").handlers:
            handler.flush()

        assert "written k=v" in log_file.read_text()

    def test_log_performance(self):
        calls = []
        logger = get_logger("newsgate.test.perf")

        @log_performance(logger)
        def work(x):
            calls.append(x)
            return x * 2

        assert work(3) == 6
        assert calls == [3]

    def test_log_performance_reraises(self):
        @log_performance()
        def broken():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            broken()
