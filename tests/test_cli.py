"""Tests for the sweech command line."""

from unittest.mock import patch

import pytest

from sweech import __version__
from sweech.cli import build_parser, main
from sweech.completion import COMMANDS


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("sweech.cli.setup_logging"):
        yield


def test_every_subcommand_is_completed():
    parser = build_parser()
    subparsers = next(a for a in parser._actions if a.dest == "cmd")
    assert set(subparsers.choices) == set(COMMANDS)


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_add_key_and_oauth_are_exclusive(capsys):
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["add", "--oauth", "--key", "sk-x"])
    assert exc.value.code == 2
    assert "not allowed with argument" in capsys.readouterr().err


def test_no_command_prints_help(capsys, config):
    main([])
    assert "usage: sweech" in capsys.readouterr().out


def test_list(capsys, installed_profile):
    main(["ls"])
    out = capsys.readouterr().out
    assert "cmini" in out
    assert "MiniMax" in out


def test_list_empty(capsys, config):
    main(["list"])
    assert "No providers configured yet" in capsys.readouterr().out


def test_show_resolves_alias(capsys, installed_profile, aliases, tracker):
    aliases.add_alias("work", "cmini")
    tracker.log_usage("cmini")

    main(["show", "work"])
    out = capsys.readouterr().out
    assert "cmini" in out
    assert "Total uses: 1" in out
    assert "Aliases: work" in out


def test_missing_profile_exits_1(capsys, config):
    with pytest.raises(SystemExit) as exc:
        main(["show", "nope"])
    assert exc.value.code == 1
    assert "✗ Profile 'nope' not found" in capsys.readouterr().out


def test_alias_commands(capsys, installed_profile, aliases):
    main(["alias", "work=cmini"])
    assert aliases.resolve_alias("work") == "cmini"

    main(["alias"])
    assert "work → cmini" in capsys.readouterr().out

    main(["alias", "remove", "work"])
    assert aliases.get_aliases() == {}


def test_alias_to_unknown_command(capsys, config):
    with pytest.raises(SystemExit):
        main(["alias", "work=ghost"])
    assert "Command 'ghost' not found" in capsys.readouterr().out


def test_alias_invalid_action(capsys, config):
    with pytest.raises(SystemExit) as exc:
        main(["alias", "frobnicate"])
    assert exc.value.code == 1


def test_completion_streams(capsys, installed_profile):
    main(["completion", "zsh"])
    captured = capsys.readouterr()
    assert captured.out.startswith("#compdef sweech")
    assert "Installation" in captured.err
    assert "Installation" not in captured.out


def test_stats(capsys, installed_profile, tracker):
    main(["stats"])
    assert "No usage data yet" in capsys.readouterr().out

    tracker.log_usage("cmini")
    main(["stats", "cmini"])
    assert "Total uses:  1" in capsys.readouterr().out


def test_stats_clear(installed_profile, tracker):
    tracker.log_usage("cmini")
    with patch("builtins.input", return_value="y"):
        main(["stats", "--clear"])
    assert tracker.get_stats() == []


def test_remove(capsys, installed_profile, config):
    with patch("builtins.input", return_value="y"):
        main(["rm", "cmini"])
    assert config.get_profiles() == []
    assert "Removed 'cmini'" in capsys.readouterr().out


def test_remove_cancelled(installed_profile, config):
    with patch("builtins.input", return_value=""):
        main(["remove", "cmini"])
    assert config.find_profile("cmini") is not None


def test_update_wrappers(capsys, installed_profile, config):
    config.wrapper_path("cmini").unlink()
    main(["update-wrappers"])
    assert config.wrapper_path("cmini").exists()


def test_discover_marks_configured(capsys, installed_profile):
    main(["discover"])
    out = capsys.readouterr().out
    assert "✓ MiniMax" in out
    assert "Your commands: cmini" in out


def test_keyboard_interrupt(capsys, config):
    with patch("sweech.cli.run_doctor", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as exc:
            main(["doctor"])
    assert exc.value.code == 1
    assert "Cancelled" in capsys.readouterr().out
