"""Tests for doctor, path, test, edit, clone, rename and refresh."""

import json
from unittest.mock import patch

import pytest

from sweech.config import OAuthToken, Profile
from sweech.errors import ConfigFileMissingError, ProfileExistsError, ProfileNotFoundError, SweechError
from sweech.utility_commands import (
    PATH_EXPORT,
    add_to_shell_rc,
    detect_shell,
    get_shell_rc_file,
    is_in_path,
    run_clone,
    run_doctor,
    run_edit,
    run_refresh,
    run_rename,
    run_test,
)


@pytest.fixture(autouse=True)
def quiet():
    with patch("builtins.print"):
        yield


@pytest.fixture
def no_path_clash():
    with patch("sweech.system_commands.shutil.which", return_value=None):
        yield


def _settings(config, name):
    return json.loads((config.profile_dir(name) / "settings.json").read_text())


def test_is_in_path(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", f"/usr/bin:{tmp_path}")
    assert is_in_path(tmp_path)
    assert not is_in_path(tmp_path / "other")


def test_detect_shell(monkeypatch, sweech_home):
    monkeypatch.setenv("SHELL", "/bin/zsh")
    assert detect_shell() == "zsh"
    assert get_shell_rc_file().name == ".zshrc"

    monkeypatch.setenv("SHELL", "/usr/bin/fish")
    assert get_shell_rc_file().parts[-3:] == (".config", "fish", "config.fish")


def test_add_to_shell_rc_only_once(tmp_path):
    rc = tmp_path / ".bashrc"
    rc.write_text("# existing\n")

    assert add_to_shell_rc(rc) is True
    assert add_to_shell_rc(rc) is False
    assert rc.read_text().count(PATH_EXPORT) == 1


def test_doctor(config, installed_profile, monkeypatch):
    monkeypatch.setenv("PATH", str(config.bin_dir))
    with patch("sweech.utility_commands.detect_installed_clis", return_value=[]):
        assert run_doctor(config) is True

        config.wrapper_path("cmini").unlink()
        assert run_doctor(config) is False


def test_doctor_flags_missing_path(config, monkeypatch):
    monkeypatch.setenv("PATH", "/usr/bin")
    with patch("sweech.utility_commands.detect_installed_clis", return_value=[]):
        assert run_doctor(config) is False


def test_run_test(config, installed_profile):
    with patch("sweech.utility_commands.get_cli_version", return_value="2.0.1"):
        run_test(config, "cmini")


def test_run_test_failures(config, installed_profile):
    with patch("sweech.utility_commands.get_cli_version", return_value=None):
        with pytest.raises(SweechError, match="not installed or not in PATH"):
            run_test(config, "cmini")

    config.wrapper_path("cmini").unlink()
    with pytest.raises(ConfigFileMissingError, match="Wrapper script not found"):
        run_test(config, "cmini")

    (config.profile_dir("cmini") / "settings.json").unlink()
    with pytest.raises(ConfigFileMissingError, match="Config file not found"):
        run_test(config, "cmini")

    with pytest.raises(ProfileNotFoundError):
        run_test(config, "missing")


def test_edit_model(config, installed_profile):
    updated = run_edit(config, "cmini", "model", "MiniMax-M2.1")

    assert updated.model == "MiniMax-M2.1"
    assert config.get_profile("cmini").model == "MiniMax-M2.1"
    assert _settings(config, "cmini")["env"]["ANTHROPIC_MODEL"] == "MiniMax-M2.1"


def test_edit_base_url_normalised(config, installed_profile):
    run_edit(config, "cmini", "baseUrl", "https://proxy.example.com/anthropic/")
    assert _settings(config, "cmini")["env"]["ANTHROPIC_BASE_URL"] == "https://proxy.example.com/anthropic"

    with pytest.raises(SweechError, match="http"):
        run_edit(config, "cmini", "baseUrl", "ftp://nope.example.com")


def test_edit_api_key_drops_oauth(config):
    token = OAuthToken(access_token="at", provider="anthropic", refresh_token="rt")
    config.add_profile(Profile(name="cq", command_name="cq", provider="qwen", oauth=token))

    updated = run_edit(config, "cq", "apiKey", "sk-new")
    assert updated.oauth is None
    assert _settings(config, "cq")["env"]["ANTHROPIC_AUTH_TOKEN"] == "sk-new"


def test_edit_unknown_field(config, installed_profile):
    with pytest.raises(SweechError, match="Cannot edit"):
        run_edit(config, "cmini", "provider", "qwen")


def test_clone(config, installed_profile, no_path_clash):
    clone = run_clone(config, "cmini", "cmini-work", api_key="sk-other")

    assert clone.command_name == "cmini-work"
    assert clone.provider == "minimax"
    assert config.get_profile("cmini").api_key == "sk-minimax-1234567890"
    assert _settings(config, "cmini-work")["env"]["ANTHROPIC_AUTH_TOKEN"] == "sk-other"
    assert config.wrapper_path("cmini-work").exists()


def test_clone_keeps_key_by_default(config, installed_profile, no_path_clash):
    clone = run_clone(config, "cmini", "cmini2")
    assert clone.api_key == installed_profile.api_key


def test_clone_onto_existing_name(config, installed_profile, no_path_clash):
    with pytest.raises(ProfileExistsError):
        run_clone(config, "cmini", "cmini")


def test_rename(config, installed_profile, aliases, no_path_clash):
    aliases.add_alias("work", "cmini")
    (config.profile_dir("cmini") / "history.jsonl").write_text("{}")

    run_rename(config, "cmini", "mini", aliases)

    assert config.find_profile("cmini") is None
    assert config.get_profile("mini").name == "mini"
    assert not config.profile_dir("cmini").exists()
    assert (config.profile_dir("mini") / "history.jsonl").exists()
    assert not config.wrapper_path("cmini").exists()
    assert str(config.profile_dir("mini")) in config.wrapper_path("mini").read_text()
    assert aliases.resolve_alias("work") == "mini"


def test_rename_invalid_target(config, installed_profile, no_path_clash):
    with pytest.raises(SweechError, match="lowercase"):
        run_rename(config, "cmini", "bad name")
    assert config.find_profile("cmini") is not None


def test_rename_onto_leftover_directory(config, installed_profile, no_path_clash):
    """A stale profiles/<new>/ must not swallow the old profile dir."""
    config.profile_dir("cnew").mkdir()

    with pytest.raises(SweechError, match="already exists"):
        run_rename(config, "cmini", "cnew")

    assert config.find_profile("cmini") is not None
    assert (config.profile_dir("cmini") / "settings.json").exists()
    assert not (config.profile_dir("cnew") / "cmini").exists()


def test_refresh(config):
    token = OAuthToken(access_token="old", provider="anthropic", refresh_token="rt", expires_at=1)
    config.add_profile(Profile(name="cq", command_name="cq", provider="qwen", oauth=token))
    new = OAuthToken(access_token="fresh-token", provider="anthropic", refresh_token="rt")

    with patch("sweech.utility_commands.refresh_oauth_token", return_value=new) as refresh:
        run_refresh(config, "cq")

    refresh.assert_called_once_with(token)
    assert config.get_profile("cq").oauth.access_token == "fresh-token"
    assert _settings(config, "cq")["env"]["ANTHROPIC_AUTH_TOKEN"] == "bearer_fresh-token"


def test_refresh_needs_oauth(config, installed_profile):
    with pytest.raises(SweechError, match="uses an API key"):
        run_refresh(config, "cmini")
