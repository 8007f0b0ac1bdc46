"""Tests for the profile store."""

import json
import os
import stat

import pytest

from sweech.clis import get_cli
from sweech.config import ConfigManager, OAuthToken, Profile, read_json, write_json
from sweech.errors import ProfileExistsError, ProfileNotFoundError
from sweech.providers import get_provider


def test_config_manager_creates_layout(config, sweech_home):
    """ConfigManager creates the root, profiles and bin dirs under SWEECH_HOME."""
    assert config.config_dir == sweech_home
    assert config.profiles_dir.is_dir()
    assert config.bin_dir.is_dir()
    assert config.get_profiles() == []


def test_add_and_get_profile(config, sample_profile):
    config.add_profile(sample_profile)

    loaded = config.get_profile("cmini")
    assert loaded.provider == "minimax"
    assert loaded.api_key == "sk-minimax-1234567890"
    assert loaded.cli_type == "claude"


def test_duplicate_command_name_rejected(config, sample_profile):
    config.add_profile(sample_profile)

    with pytest.raises(ProfileExistsError, match="already exists"):
        config.add_profile(sample_profile)
    assert len(config.get_profiles()) == 1


def test_get_missing_profile_raises(config):
    with pytest.raises(ProfileNotFoundError, match="'nope' not found"):
        config.get_profile("nope")
    assert config.find_profile("nope") is None


def test_config_file_is_private_and_camel_case(config, sample_profile):
    """config.json carries API keys: 0600, camelCase keys."""
    config.add_profile(sample_profile)

    mode = stat.S_IMODE(os.stat(config.config_file).st_mode)
    assert mode == 0o600
    data = json.loads(config.config_file.read_text())
    assert data[0]["commandName"] == "cmini"
    assert data[0]["apiKey"] == "sk-minimax-1234567890"
    assert "createdAt" in data[0]


def test_legacy_profile_defaults_to_claude():
    profile = Profile.from_dict({"name": "old", "commandName": "old", "provider": "qwen"})
    assert profile.cli_type == "claude"


def test_profile_round_trip_keeps_oauth():
    token = OAuthToken(access_token="at", provider="anthropic", refresh_token="rt", expires_at=123)
    profile = Profile(name="p", command_name="p", provider="anthropic", oauth=token)

    restored = Profile.from_dict(profile.to_dict())
    assert restored.oauth == token
    assert restored.auth_label == "OAuth (anthropic)"


def test_auth_labels(sample_profile):
    assert sample_profile.auth_label == "API Key: sk-minimax***"
    native = Profile(name="c2", command_name="c2", provider="anthropic")
    assert native.auth_label == "OAuth (via CLI)"


def test_remove_profile_cleans_up(config, installed_profile):
    assert config.wrapper_path("cmini").exists()
    assert config.profile_dir("cmini").exists()

    config.remove_profile("cmini")

    assert config.get_profiles() == []
    assert not config.wrapper_path("cmini").exists()
    assert not config.profile_dir("cmini").exists()


def test_update_missing_profile_raises(config, sample_profile):
    with pytest.raises(ProfileNotFoundError):
        config.update_profile("cmini", sample_profile)


def test_profile_settings_for_claude_provider(config):
    config.create_profile_config("cmini", get_provider("minimax"), "sk-key", "claude")

    settings = json.loads((config.profile_dir("cmini") / "settings.json").read_text())
    env = settings["env"]
    assert env["ANTHROPIC_AUTH_TOKEN"] == "sk-key"
    assert env["ANTHROPIC_BASE_URL"] == "https://api.minimax.io/anthropic"
    assert env["ANTHROPIC_MODEL"] == "MiniMax-M2"
    assert env["API_TIMEOUT_MS"] == "3000000"

    onboarding = json.loads((config.profile_dir("cmini") / ".claude.json").read_text())
    assert onboarding["hasCompletedOnboarding"] is True


def test_profile_settings_for_codex_provider(config):
    config.create_profile_config("dsx", get_provider("deepseek-openai"), "sk-ds", "codex")

    env = json.loads((config.profile_dir("dsx") / "settings.json").read_text())["env"]
    assert env["OPENAI_API_KEY"] == "sk-ds"
    assert env["OPENAI_BASE_URL"] == "https://api.deepseek.com/v1"
    assert env["OPENAI_SMALL_FAST_MODEL"] == "deepseek-reasoner"
    assert "API_TIMEOUT_MS" not in env


def test_profile_settings_with_oauth_token(config):
    token = OAuthToken(access_token="abc", provider="anthropic", refresh_token="rt", expires_at=42)
    config.create_profile_config("cq", get_provider("qwen"), None, "claude", oauth_token=token)

    settings = json.loads((config.profile_dir("cq") / "settings.json").read_text())
    assert settings["env"]["ANTHROPIC_AUTH_TOKEN"] == "bearer_abc"
    assert settings["oauth"] == {"provider": "anthropic", "refreshToken": "rt", "expiresAt": 42}


def test_native_auth_writes_no_credentials(config):
    config.create_profile_config("claude-work", get_provider("anthropic"), None, "claude",
                                 use_native_auth=True)

    profile_dir = config.profile_dir("claude-work")
    assert json.loads((profile_dir / "settings.json").read_text()) == {"env": {}}
    assert not (profile_dir / ".claude.json").exists()


def test_wrapper_script(config):
    wrapper = config.create_wrapper_script("cmini", get_cli("claude"))

    text = wrapper.read_text()
    profile_dir = config.profile_dir("cmini")
    assert text.startswith("#!/bin/bash")
    assert f'export CLAUDE_CONFIG_DIR="{profile_dir}"' in text
    assert "--dangerously-skip-permissions" in text
    assert "-m sweech.usage" in text
    assert text.rstrip().endswith('exec claude "${ARGS[@]}"')
    assert os.access(wrapper, os.X_OK)


def test_codex_wrapper_uses_codex_home(config):
    text = config.create_wrapper_script("cx", get_cli("codex")).read_text()
    assert "export CODEX_HOME=" in text
    assert 'exec codex "${ARGS[@]}"' in text


def test_read_json_tolerates_corrupt_file(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert read_json(bad, []) == []
    assert read_json(tmp_path / "missing.json", {}) == {}


def test_write_json_is_atomic(tmp_path):
    target = tmp_path / "sub" / "data.json"
    write_json(target, {"a": 1}, mode=0o600)

    assert json.loads(target.read_text()) == {"a": 1}
    assert list(target.parent.glob("*.tmp")) == []
    assert stat.S_IMODE(os.stat(target).st_mode) == 0o600


def test_explicit_config_dir(tmp_path):
    config = ConfigManager(tmp_path / "elsewhere")
    assert config.config_file == tmp_path / "elsewhere" / "config.json"
