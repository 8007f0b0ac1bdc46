"""Tests for the add-provider prompts."""

from unittest.mock import patch

import pytest

from sweech.cli_detection import CLIDetectionResult
from sweech.clis import SUPPORTED_CLIS
from sweech.errors import SweechError
from sweech.interactive import ask, choose, confirm, interactive_add_provider, validate_new_command_name


def _detected(*installed):
    return [CLIDetectionResult(cli=cli, installed=name in installed, version="1.0" if name in installed else None)
            for name, cli in SUPPORTED_CLIS.items()]


@pytest.fixture
def no_path_clash():
    with patch("sweech.system_commands.shutil.which", return_value=None):
        yield


def _inputs(*values):
    it = iter(values)
    return patch("builtins.input", lambda _: next(it))


def test_validate_new_command_name(sample_profile, no_path_clash):
    existing = [sample_profile]
    assert validate_new_command_name("cqwen", existing) is True
    assert validate_new_command_name("", existing) == "Command name is required"
    assert "lowercase letters" in validate_new_command_name("bad name!", existing)
    assert "reserved" in validate_new_command_name("claude", existing)
    assert "already exists (MiniMax)" in validate_new_command_name("cmini", existing)
    assert "critical system command" in validate_new_command_name("git", existing)


def test_prompt_primitives(capsys):
    with _inputs("", "value"):
        assert ask("Name", validate=lambda v: True if v else "required") == "value"
    assert "✗ required" in capsys.readouterr().out

    with _inputs(""):
        assert confirm("Sure?", default=True) is True
    with _inputs("n"):
        assert confirm("Sure?", default=True) is False

    choices = [{"name": "A", "value": "a", "disabled": "nope"}, {"name": "B", "value": "b"}]
    with _inputs("9", "1", "2"):
        assert choose("Pick", choices) == "b"


def test_no_cli_installed():
    with patch("sweech.interactive.detect_installed_clis", return_value=_detected()), \
            patch("builtins.print"):
        with pytest.raises(SweechError, match="No supported CLIs"):
            interactive_add_provider([])


def test_add_external_provider(no_path_clash):
    """Single CLI installed: kind, provider, name, then API key."""
    minimax_choice = [c["value"] for c in _claude_external()].index("minimax") + 1
    with patch("sweech.interactive.detect_installed_clis", return_value=_detected("claude")), \
            patch("sweech.interactive.getpass.getpass", return_value="sk-mini"), \
            patch("builtins.print"), \
            _inputs("2", str(minimax_choice), "CMini"):
        answers = interactive_add_provider([])

    assert answers.cli_type == "claude"
    assert answers.provider == "minimax"
    assert answers.command_name == "cmini"
    assert answers.api_key == "sk-mini"
    assert answers.auth_method == "api_key"


def test_presets_skip_prompts(no_path_clash):
    presets = {"cli_type": "claude", "provider": "anthropic", "command_name": "claude-work",
               "auth_method": "oauth"}
    with patch("sweech.interactive.detect_installed_clis", return_value=_detected("claude")), \
            patch("builtins.input", side_effect=AssertionError("prompted")), \
            patch("builtins.print"):
        answers = interactive_add_provider([], presets)

    assert answers.auth_method == "oauth"
    assert answers.api_key is None


def test_invalid_preset_name(no_path_clash, sample_profile):
    with patch("sweech.interactive.detect_installed_clis", return_value=_detected("claude")), \
            patch("builtins.print"):
        with pytest.raises(SweechError, match="already exists"):
            interactive_add_provider([sample_profile], {"cli_type": "claude", "provider": "qwen",
                                                        "command_name": "cmini"})


def test_preset_provider_must_fit_cli(no_path_clash):
    """An Anthropic-format provider cannot back a Codex profile."""
    presets = {"cli_type": "codex", "provider": "minimax", "command_name": "cxmini", "api_key": "sk-x"}
    with patch("sweech.interactive.detect_installed_clis", return_value=_detected("claude", "codex")), \
            patch("builtins.input", side_effect=AssertionError("prompted")), \
            patch("builtins.print"):
        with pytest.raises(SweechError, match="not compatible with Codex"):
            interactive_add_provider([], presets)


def test_preset_custom_provider_fits_either_cli(no_path_clash):
    presets = {"cli_type": "codex", "provider": "custom", "command_name": "my-llm", "api_key": "sk-x"}
    prompts = {"baseUrl": "http://localhost:11434/v1", "apiFormat": "openai", "defaultModel": "llama3"}
    with patch("sweech.interactive.detect_installed_clis", return_value=_detected("codex")), \
            patch("sweech.interactive.prompt_custom_provider", return_value=prompts), \
            patch("sweech.interactive.create_custom_provider_config") as make_config, \
            patch("builtins.print"):
        answers = interactive_add_provider([], presets)

    assert answers.provider == "custom"
    make_config.assert_called_once_with(prompts, "my-llm")


def test_preset_cli_must_be_installed(no_path_clash):
    presets = {"cli_type": "codex", "provider": "openai", "command_name": "codex-work",
               "auth_method": "oauth"}
    with patch("sweech.interactive.detect_installed_clis", return_value=_detected("claude")), \
            patch("builtins.print"):
        with pytest.raises(SweechError, match="'codex' is not installed"):
            interactive_add_provider([], presets)


def _claude_external():
    from sweech.providers import get_provider_list
    return [p for p in get_provider_list("claude") if p["value"] != "anthropic"]
