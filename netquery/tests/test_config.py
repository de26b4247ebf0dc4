"""Tests for configuration loading: defaults, config file, env overrides."""

import json
import os
import logging

import pytest
from unittest.mock import patch


ENV_VARS = [
    "ENVECTOR_ENDPOINT", "ENVECTOR_API_KEY", "EMBEDDING_MODEL", "NETQUERY_TOPK",
    "NETQUERY_TIMEOUT", "NETQUERY_AUDIT_PATH", "NETQUERY_PORT", "NETQUERY_PUBLIC_URL",
    "NETQUERY_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_ranking_defaults(self):
        from netquery.common.config import RankingConfig
        cfg = RankingConfig()
        assert cfg.warm_intro_threshold == 0.7
        assert cfg.medium_intro_threshold == 0.5
        assert cfg.summary_top_n == 5
        assert cfg.summary_company_limit == 5
        assert cfg.summary_position_limit == 3
        assert cfg.recommendation_sample_size == 3
        assert "vp" in cfg.decision_maker_keywords

    def test_retriever_defaults(self):
        from netquery.common.config import RetrieverConfig
        cfg = RetrieverConfig()
        assert cfg.topk == 10
        assert cfg.retry_attempts == 0

    def test_missing_file_gives_defaults(self, tmp_path):
        from netquery.common.config import load_config

        with patch("netquery.common.config.CONFIG_PATH", tmp_path / "missing.json"):
            cfg = load_config()

        assert cfg.envector.endpoint == "localhost:50050"
        assert cfg.server.port == 8080
        assert cfg.audit.enabled is True


class TestLoadConfig:
    def test_load_sections(self, tmp_path):
        from netquery.common.config import load_config
        config_data = {
            "envector": {"endpoint": "cluster.example:50050", "api_key": "key-123"},
            "retriever": {"topk": 20, "timeout_seconds": 5, "retry_attempts": 2},
            "ranking": {"warm_intro_threshold": 0.8, "decision_maker_keywords": ["Founder", "Partner"]},
            "audit": {"enabled": False},
            "server": {"port": 9000},
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with patch("netquery.common.config.CONFIG_PATH", config_file):
            cfg = load_config()

        assert cfg.envector.endpoint == "cluster.example:50050"
        assert cfg.envector.api_key == "key-123"
        assert cfg.retriever.topk == 20
        assert cfg.retriever.retry_attempts == 2
        assert cfg.ranking.warm_intro_threshold == 0.8
        assert cfg.ranking.decision_maker_keywords == ["founder", "partner"]
        assert cfg.ranking.summary_top_n == 5
        assert cfg.audit.enabled is False
        assert cfg.server.port == 9000

    def test_env_overrides_file(self, tmp_path):
        from netquery.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"retriever": {"topk": 20}, "server": {"port": 9000}}))

        env = {
            "NETQUERY_TOPK": "15",
            "NETQUERY_PORT": "7070",
            "ENVECTOR_ENDPOINT": "env-host:50050",
            "NETQUERY_AUDIT_PATH": str(tmp_path / "audit.jsonl"),
        }
        with patch("netquery.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.retriever.topk == 15
        assert cfg.server.port == 7070
        assert cfg.envector.endpoint == "env-host:50050"
        assert cfg.audit.path == str(tmp_path / "audit.jsonl")

    def test_bad_json_falls_back_to_defaults(self, tmp_path, caplog):
        from netquery.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with patch("netquery.common.config.CONFIG_PATH", config_file), \
             caplog.at_level(logging.WARNING, logger="netquery.common.config"):
            cfg = load_config()

        assert cfg.retriever.topk == 10
        assert "Failed to load config file" in caplog.text
