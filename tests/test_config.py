"""Tests for environment-driven configuration."""

import pytest

from warden.models.config import BotSettings, load_settings

ENV_KEYS = [
    "DISCORD_TOKEN",
    "OPENAI_API_KEY",
    "LLM_API_KEY",
    "GEMINI_API_KEY",
    "OPENAI_MODEL",
    "LLM_MODEL",
    "MAX_TURNS",
    "MAX_CONTEXT_MESSAGES",
    "AUTO_ACTION_EVERY_N_MESSAGES",
    "AUTO_ACTION_WINDOW_SIZE",
    "AUTO_ACTION_MAX_ACTIONS",
    "AUTO_ACTION_MAX_TIMEOUT_MINUTES",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults():
    settings = BotSettings.model_validate({"DISCORD_TOKEN": "token"})

    assert settings.llm_api_key is None
    assert settings.llm_model == "gpt-4o-mini"
    assert settings.context_messages == 40
    assert settings.auto_action_every_n_messages == 15
    assert settings.window_size == 15
    assert settings.auto_action_max_actions == 3
    assert settings.auto_action_max_timeout_minutes == 10
    assert settings.auto_actions_enabled


def test_api_key_aliases():
    settings = BotSettings.model_validate({"DISCORD_TOKEN": "t", "GEMINI_API_KEY": "g"})
    assert settings.llm_api_key == "g"


def test_blank_values_fall_back_to_defaults():
    settings = BotSettings.model_validate(
        {"DISCORD_TOKEN": "t", "OPENAI_MODEL": "  ", "AUTO_ACTION_WINDOW_SIZE": ""}
    )
    assert settings.llm_model == "gpt-4o-mini"
    assert settings.window_size == 15


def test_window_size_override_and_disabled_threshold():
    settings = BotSettings.model_validate(
        {
            "DISCORD_TOKEN": "t",
            "AUTO_ACTION_EVERY_N_MESSAGES": "0",
            "AUTO_ACTION_WINDOW_SIZE": "25",
            "MAX_CONTEXT_MESSAGES": "7",
        }
    )
    assert not settings.auto_actions_enabled
    assert settings.window_size == 25
    assert settings.context_messages == 7


def test_load_settings_reports_missing_token(clean_env, tmp_path):
    with pytest.raises(RuntimeError, match="DISCORD_TOKEN"):
        load_settings(str(tmp_path / "missing.env"))


def test_load_settings_rejects_out_of_range(clean_env, tmp_path):
    clean_env.setenv("DISCORD_TOKEN", "t")
    clean_env.setenv("AUTO_ACTION_MAX_TIMEOUT_MINUTES", "500")

    with pytest.raises(RuntimeError, match="Invalid configuration"):
        load_settings(str(tmp_path / "missing.env"))


def test_load_settings_reads_env_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("DISCORD_TOKEN=from-file\nAUTO_ACTION_MAX_ACTIONS=2\n")

    settings = load_settings(str(env_file))

    assert settings.discord_token == "from-file"
    assert settings.auto_action_max_actions == 2
