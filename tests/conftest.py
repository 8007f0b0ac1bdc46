"""Test fixtures for sweech tests."""

import pytest

from sweech.aliases import AliasManager
from sweech.config import ConfigManager, Profile
from sweech.providers import get_provider
from sweech.usage import UsageTracker


@pytest.fixture
def sweech_home(tmp_path, monkeypatch):
    """Isolated ~/.sweech and $HOME."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("SWEECH_HOME", str(home / ".sweech"))
    return home / ".sweech"


@pytest.fixture
def config(sweech_home):
    return ConfigManager()


@pytest.fixture
def aliases(config):
    return AliasManager(config.alias_file)


@pytest.fixture
def tracker(config):
    return UsageTracker(config.usage_file)


@pytest.fixture
def sample_profile():
    """An API-key profile on MiniMax."""
    provider = get_provider("minimax")
    return Profile(
        name="cmini",
        command_name="cmini",
        cli_type="claude",
        provider="minimax",
        api_key="sk-minimax-1234567890",
        base_url=provider.base_url,
        model=provider.default_model,
        small_fast_model=provider.small_fast_model or None,
    )


@pytest.fixture
def installed_profile(config, sample_profile):
    """sample_profile saved with its settings and wrapper on disk."""
    from sweech.profile_creation import rewrite_profile_files

    config.add_profile(sample_profile)
    rewrite_profile_files(config, sample_profile)
    return sample_profile
