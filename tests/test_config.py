"""
Tests for environment-driven configuration.
"""

import pytest

from payee_core import config as config_module
from payee_core.config import get_config, reload_config


@pytest.fixture
def env_config(monkeypatch, tmp_path):
    """Point every directory setting at tmp_path; restore the real config afterwards."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("RESULTS_DIR", str(tmp_path / "results"))
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "db" / "payees.db"))
    yield monkeypatch
    monkeypatch.undo()
    reload_config()


class TestConfig:

    def test_defaults(self):
        cfg = get_config()
        assert cfg.classification.ai_consensus_runs == 2
        assert cfg.classification.max_workers == 1
        assert cfg.payee_classification_llm in ("openai", "anthropic")

    def test_reload_reads_environment(self, env_config, tmp_path):
        env_config.setenv("AI_CONSENSUS_RUNS", "3")
        env_config.setenv("CLASSIFICATION_OFFLINE_MODE", "true")
        env_config.setenv("KEYWORD_CACHE_TTL_SECONDS", "60")

        cfg = reload_config()

        assert get_config() is cfg
        assert config_module.config is cfg
        assert cfg.classification.ai_consensus_runs == 3
        assert cfg.classification.offline_mode is True
        assert cfg.classification.keyword_cache_ttl_seconds == 60
        assert (tmp_path / "db").is_dir()
        assert (tmp_path / "results").is_dir()
