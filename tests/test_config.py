"""Tests for MachineConfig validation and environment loading."""

from __future__ import annotations

import pytest

from ftlmachine import MachineConfig, NegotiationStrategy, SyntaxErrorHandling
from ftlmachine.config import DEFAULT_ENV_PREFIX, DEFAULT_FALLBACK


class TestMachineConfig:
    def test_defaults(self) -> None:
        config = MachineConfig("locales")
        assert config.fallback == DEFAULT_FALLBACK == "en"
        assert config.strategy is NegotiationStrategy.FILTERING
        assert config.use_isolating is True
        assert config.syntax_errors is SyntaxErrorHandling.FAIL_FAST
        assert config.with_title is False
        assert config.cookie_name is None

    def test_enum_fields_accept_strings(self) -> None:
        config = MachineConfig(
            "locales",
            strategy="lookup",  # type: ignore[arg-type]
            syntax_errors="collect",  # type: ignore[arg-type]
        )
        assert config.strategy is NegotiationStrategy.LOOKUP
        assert config.syntax_errors is SyntaxErrorHandling.COLLECT

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"root": ""}, "root must not be empty"),
            ({"root": "x", "fallback": ""}, "fallback must not be empty"),
            ({"root": "x", "cookie_name": "  "}, "cookie_name must not be blank"),
            ({"root": "x", "strategy": "best"}, "best"),
        ],
    )
    def test_invalid_values(self, kwargs: dict, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            MachineConfig(**kwargs)

    def test_frozen(self) -> None:
        config = MachineConfig("locales")
        with pytest.raises(AttributeError):
            config.fallback = "pt"  # type: ignore[misc]


class TestFromEnv:
    def test_minimal(self) -> None:
        config = MachineConfig.from_env(environ={"FTLMACHINE_ROOT": "/srv/locales"})
        assert config == MachineConfig("/srv/locales")

    def test_every_variable(self) -> None:
        environ = {
            "FTLMACHINE_ROOT": "/srv/locales",
            "FTLMACHINE_FALLBACK": "pt-BR",
            "FTLMACHINE_STRATEGY": "MATCHING",
            "FTLMACHINE_SYNTAX_ERRORS": "collect",
            "FTLMACHINE_USE_ISOLATING": "no",
            "FTLMACHINE_WITH_TITLE": "on",
            "FTLMACHINE_COOKIE_NAME": "lang",
        }
        config = MachineConfig.from_env(environ=environ)
        assert config == MachineConfig(
            "/srv/locales",
            fallback="pt-BR",
            strategy=NegotiationStrategy.MATCHING,
            use_isolating=False,
            syntax_errors=SyntaxErrorHandling.COLLECT,
            with_title=True,
            cookie_name="lang",
        )

    def test_custom_prefix(self) -> None:
        config = MachineConfig.from_env("APP_I18N_", {"APP_I18N_ROOT": "l10n"})
        assert config.root == "l10n"

    def test_empty_values_use_defaults(self) -> None:
        config = MachineConfig.from_env(
            environ={"FTLMACHINE_ROOT": "l10n", "FTLMACHINE_FALLBACK": ""}
        )
        assert config.fallback == DEFAULT_FALLBACK

    def test_missing_root(self) -> None:
        with pytest.raises(ValueError, match=f"{DEFAULT_ENV_PREFIX}ROOT is not set"):
            MachineConfig.from_env(environ={})

    def test_bad_boolean(self) -> None:
        environ = {"FTLMACHINE_ROOT": "l10n", "FTLMACHINE_WITH_TITLE": "maybe"}
        with pytest.raises(ValueError, match="FTLMACHINE_WITH_TITLE must be a boolean"):
            MachineConfig.from_env(environ=environ)

    def test_bad_strategy(self) -> None:
        environ = {"FTLMACHINE_ROOT": "l10n", "FTLMACHINE_STRATEGY": "fuzzy"}
        with pytest.raises(ValueError, match="fuzzy"):
            MachineConfig.from_env(environ=environ)

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FTLMACHINE_ROOT", "from-env")
        monkeypatch.setenv("FTLMACHINE_STRATEGY", "lookup")
        config = MachineConfig.from_env()
        assert config.root == "from-env"
        assert config.strategy is NegotiationStrategy.LOOKUP
