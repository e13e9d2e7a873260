"""Unit tests for server configuration loading."""

from pathlib import Path

import pytest
import pytest_check as check
from pydantic import ValidationError

from src.api.config import ServerConfig, get_server_config
from src.knowledge.base import DEFAULT_KNOWLEDGE_BASE_PATH


class TestServerConfig:
    """Tests for environment-driven server settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "RATE_LIMIT_MAX_TOKENS",
            "RATE_LIMIT_REFILL_RATE",
            "KNOWLEDGE_BASE_PATH",
            "CORS_ALLOW_ORIGINS",
            "CHAT_AUTO_DETECT_LANGUAGE",
        ):
            monkeypatch.delenv(name, raising=False)

        config = get_server_config()

        check.equal(config.rate_limit_max_tokens, 30)
        check.equal(config.rate_limit_refill_rate, 0.5)
        check.equal(config.knowledge_base_path, DEFAULT_KNOWLEDGE_BASE_PATH)
        check.equal(config.cors_allow_origins, ["*"])
        check.is_false(config.auto_detect_language)

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RATE_LIMIT_MAX_TOKENS", "5")
        monkeypatch.setenv("KNOWLEDGE_BASE_PATH", "/srv/profile.json")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.dev, https://b.dev,")
        monkeypatch.setenv("CHAT_GUARDRAIL_SHORT_CIRCUIT", "true")

        config = get_server_config()

        check.equal(config.rate_limit_max_tokens, 5)
        check.equal(config.knowledge_base_path, Path("/srv/profile.json"))
        check.equal(config.cors_allow_origins, ["https://a.dev", "https://b.dev"])
        check.is_true(config.guardrail_short_circuit)

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("RATE_LIMIT_MAX_TOKENS", "0"),
            ("RATE_LIMIT_REFILL_RATE", "-1"),
            ("KNOWLEDGE_BASE_MIN_ENTRIES", "many"),
            ("CHAT_AUTO_DETECT_LANGUAGE", "perhaps"),
        ],
    )
    def test_invalid_environment_rejected(
        self, monkeypatch: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            get_server_config()

    def test_explicit_values_skip_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RATE_LIMIT_MAX_TOKENS", "0")

        config = ServerConfig(rate_limit_max_tokens=3)

        check.equal(config.rate_limit_max_tokens, 3)
