"""Tests for shell completion scripts."""

from sweech.completion import COMMANDS, generate_bash_completion, generate_zsh_completion


def test_bash_completion_lists_everything(config, installed_profile, aliases):
    aliases.add_alias("work", "cmini")
    script = generate_bash_completion(config, aliases)

    assert "complete -F _sweech_completion sweech" in script
    for command in COMMANDS:
        assert command in script
    assert 'local profiles="cmini"' in script
    assert 'local aliases="work"' in script
    assert 'compgen -W "bash zsh"' in script


def test_zsh_completion(config, installed_profile, aliases):
    script = generate_zsh_completion(config, aliases)

    assert script.startswith("#compdef sweech")
    assert "'backup-chats:Backup chat history for a profile'" in script
    assert "profiles=(cmini)" in script
    assert "aliases_list=()" in script


def test_completion_without_profiles(config, aliases):
    assert 'local profiles=""' in generate_bash_completion(config, aliases)
