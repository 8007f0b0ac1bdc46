#!/usr/bin/env python3
"""
sweech — switch between Claude Code / Codex accounts and AI providers.

Every profile gets its own config dir and a wrapper command in ~/.sweech/bin.

Usage:
    sweech init                          First-run walkthrough
    sweech add [--cli c] [--provider p]  Add a provider (prompts for the rest)
    sweech list                          List configured providers
    sweech remove <name>                 Remove a provider
    sweech show <name>                   Details for a provider (or alias)
    sweech backup [-o file]              Encrypted backup of ~/.sweech
    sweech restore <file>                Restore a backup
    sweech stats [name] [--clear]        Usage statistics
    sweech alias [list|remove|a=cmd]     Manage aliases
    sweech discover                      Browse available providers
    sweech completion <bash|zsh>         Shell completion script
    sweech doctor | path                 Health check / PATH helper
    sweech test|edit|refresh <name>      Check, edit or refresh a profile
    sweech clone|rename <a> <b>          Copy or rename a profile
    sweech backup-chats <name> [-o file] Encrypted chat history backup
    sweech reset                         Uninstall sweech
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from sweech import __version__
from sweech.aliases import AliasManager
from sweech.backup import backup_sweech, restore_sweech
from sweech.chat_backup import confirm_chat_backup_before_removal, prompt_chat_backup
from sweech.clis import SUPPORTED_CLIS, get_cli
from sweech.completion import generate_bash_completion, generate_zsh_completion
from sweech.config import ConfigManager
from sweech.errors import SweechError
from sweech.interactive import ask_secret, confirm, confirm_remove_provider, interactive_add_provider
from sweech.logging_setup import setup_logging
from sweech.onboarding import run_init
from sweech.profile_creation import cli_for_profile, create_profile, resolve_provider_and_cli
from sweech.providers import PROVIDERS, get_provider
from sweech.reset import is_default_cli_directory, run_reset
from sweech.usage import UsageTracker, parse_timestamp
from sweech.utility_commands import (
    run_clone,
    run_doctor,
    run_edit,
    run_path,
    run_refresh,
    run_rename,
    run_test,
)

logger = logging.getLogger("sweech")


def _provider_label(name: str) -> str:
    provider = get_provider(name)
    return provider.display_name if provider else name


def _local(ts: str) -> datetime:
    return parse_timestamp(ts).astimezone()


# ── Profiles ──────────────────────────────────────────────────────────────────

def cmd_init(args):
    run_init(ConfigManager())


def cmd_add(args):
    config = ConfigManager()
    presets = {
        "cli_type": args.cli,
        "provider": args.provider,
        "command_name": args.name,
        "api_key": args.key,
        "auth_method": "oauth" if args.oauth else ("api_key" if args.key else None),
    }
    answers = interactive_add_provider(config.get_profiles(), presets)
    provider, cli = resolve_provider_and_cli(answers)
    create_profile(answers, provider, cli, config, manual_oauth=args.manual)

    print(f"\n  ⚠ Make sure {config.bin_dir} is in your PATH:")
    print(f'     export PATH="{config.bin_dir}:$PATH"')
    print("     (or run: sweech path)\n")
    print(f"  Now run: {answers.command_name}\n")
    print("  Tip: you can add several accounts for the same provider,")
    print("  e.g. claude-mini, minimax-work, minimax-personal.\n")


def cmd_list(args):
    config = ConfigManager()
    profiles = config.get_profiles()
    if not profiles:
        print("\n  No providers configured yet. Run: sweech add\n")
        return

    print(f"\n  {'Command':<20} {'CLI':<16} {'Provider':<26} {'Model':<28} {'Created'}")
    print("  " + "─" * 100)
    for p in profiles:
        cli = get_cli(p.cli_type)
        created = _local(p.created_at).strftime("%Y-%m-%d") if p.created_at else "—"
        print(f"  {p.command_name:<20} {(cli.display_name if cli else p.cli_type):<16} "
              f"{_provider_label(p.provider):<26} {(p.model or 'default'):<28} {created}")
    print("\n  Default Claude account is in ~/.claude/ (use the \"claude\" command)\n")


def cmd_remove(args):
    config = ConfigManager()
    profile = config.get_profile(args.name)
    profile_dir = config.profile_dir(profile.command_name)

    if is_default_cli_directory(profile_dir):
        print(f"✗ Cannot remove default CLI directory: {profile_dir}")
        print("  This is a system default and should not be managed by sweech.")
        print(f"  To backup: sweech backup-chats {profile.command_name}")
        sys.exit(1)

    if not confirm_chat_backup_before_removal(profile.command_name, profile_dir):
        print("  Cancelled")
        return
    if not confirm_remove_provider(profile.command_name):
        print("  Cancelled")
        return

    config.remove_profile(profile.command_name)
    stale = AliasManager(config.alias_file).aliases_for(profile.command_name)
    print(f"  ✓ Removed '{profile.command_name}'")
    if stale:
        print(f"  ⚠ Aliases still pointing at it: {', '.join(stale)} (sweech alias remove <alias>)")


def cmd_info(args):
    config = ConfigManager()
    print("\n  sweech configuration\n")
    print(f"  Version:          {__version__}")
    print(f"  Config directory: {config.config_dir}")
    print(f"  Wrapper scripts:  {config.bin_dir}")
    print(f"  Profiles:         {len(config.get_profiles())}")
    print(f"  Default Claude:   {Path.home() / '.claude'}")
    print(f"  Log file:         {config.config_dir / 'logs' / 'sweech.log'}\n")
    print("  Run `sweech list` to see all providers\n")


def cmd_update_wrappers(args):
    config = ConfigManager()
    print("\n  Updating wrapper scripts...\n")
    for p in config.get_profiles():
        config.create_wrapper_script(p.command_name, cli_for_profile(p))
        print(f"  ✓ {p.command_name}")
    print("\n  ✓ All wrapper scripts updated\n")


def cmd_show(args):
    config = ConfigManager()
    aliases = AliasManager(config.alias_file)
    profile = config.get_profile(aliases.resolve_alias(args.name))
    cli = get_cli(profile.cli_type)

    print(f"\n  {profile.command_name}\n")
    print(f"  Provider:     {_provider_label(profile.provider)}")
    print(f"  CLI:          {cli.display_name if cli else profile.cli_type}")
    print(f"  Model:        {profile.model or 'default'}")
    if profile.small_fast_model:
        print(f"  Fast model:   {profile.small_fast_model}")
    print(f"  API endpoint: {profile.base_url or 'default'}")
    print(f"  Auth:         {profile.auth_label}")
    print(f"  Config dir:   {config.profile_dir(profile.command_name)}")
    print(f"  Created:      {_local(profile.created_at).strftime('%Y-%m-%d')}")

    stats = UsageTracker(config.usage_file).get_stats(profile.command_name)
    if stats:
        print("\n  Usage:")
        print(f"    Total uses: {stats[0]['totalUses']}")
        print(f"    Last used:  {_local(stats[0]['lastUsed']).strftime('%Y-%m-%d %H:%M')}")

    pointing = aliases.aliases_for(profile.command_name)
    if pointing:
        print(f"\n  Aliases: {', '.join(pointing)}")
    print()


# ── Backup / usage ────────────────────────────────────────────────────────────

def cmd_backup(args):
    backup_sweech(ConfigManager(), args.output)


def cmd_restore(args):
    restore_sweech(ConfigManager(), args.file)


def cmd_stats(args):
    config = ConfigManager()
    tracker = UsageTracker(config.usage_file)

    if args.clear:
        target = f"'{args.name}'" if args.name else "all commands"
        if confirm(f"Clear usage statistics for {target}?"):
            tracker.clear_stats(args.name)
            print(f"  ✓ Cleared usage statistics for {target}")
        else:
            print("  Cancelled")
        return

    stats = tracker.get_stats(args.name)
    if not stats:
        print("\n  No usage data yet. Start using your providers!\n")
        return

    print("\n  Usage statistics:\n")
    now = datetime.now(timezone.utc)
    for s in stats:
        first, last = parse_timestamp(s["firstUsed"]), parse_timestamp(s["lastUsed"])
        days = (now - first).days
        avg = f"{s['totalUses'] / days:.1f}" if days > 0 else str(s["totalUses"])
        print(f"  ▸ {s['commandName']}")
        print(f"    Total uses:  {s['totalUses']}")
        print(f"    Last used:   {last.astimezone().strftime('%Y-%m-%d %H:%M')}")
        print(f"    First used:  {first.astimezone().strftime('%Y-%m-%d')}")
        print(f"    Avg per day: {avg}\n")


# ── Aliases / discovery ───────────────────────────────────────────────────────

def _alias_usage():
    print("\n  Usage:")
    print("    sweech alias                    # List all aliases")
    print("    sweech alias list               # List all aliases")
    print("    sweech alias work=claude-mini   # Add alias")
    print("    sweech alias remove work        # Remove alias\n")


def cmd_alias(args):
    config = ConfigManager()
    aliases = AliasManager(config.alias_file)
    action = args.action

    if not action or action == "list":
        current = aliases.get_aliases()
        if not current:
            print("\n  No aliases configured yet")
            print("  Add an alias with: sweech alias work=claude-mini\n")
            return
        print("\n  Command aliases:\n")
        for alias, command in current.items():
            print(f"    {alias} → {command}")
        print()
        return

    if action == "remove":
        if not args.value:
            print("✗ Alias name required")
            print("  Usage: sweech alias remove <alias>")
            sys.exit(1)
        aliases.remove_alias(args.value)
        print(f"  ✓ Removed alias '{args.value}'")
        return

    if "=" in action:
        alias, _, command = action.partition("=")
        alias, command = alias.strip(), command.strip()
        if not alias or not command:
            print("✗ Invalid alias format")
            print("  Usage: sweech alias work=claude-mini")
            sys.exit(1)
        if not config.find_profile(command):
            raise SweechError(f"Command '{command}' not found")
        aliases.add_alias(alias, command)
        print(f"  ✓ Added alias: {alias} → {command}")
        print(f"    `sweech show {alias}` now resolves to {command}")
        return

    print("✗ Invalid action")
    _alias_usage()
    sys.exit(1)


def cmd_discover(args):
    profiles = ConfigManager().get_profiles()
    configured = {p.provider for p in profiles}

    print("\n  Available AI providers:\n")
    for provider in PROVIDERS.values():
        icon = "✓" if provider.name in configured else "○"
        print(f"  {icon} {provider.display_name}  [{', '.join(provider.compatibility)}]")
        print(f"    {provider.description}")
        if provider.pricing:
            print(f"    Pricing:       {provider.pricing}")
        if provider.default_model:
            print(f"    Default model: {provider.default_model}")
        if provider.name in configured:
            mine = [p.command_name for p in profiles if p.provider == provider.name]
            print(f"    Your commands: {', '.join(mine)}")
        print()
    print("  Add a provider with: sweech add\n")


def cmd_completion(args):
    config = ConfigManager()
    aliases = AliasManager(config.alias_file)
    if args.shell == "bash":
        print(generate_bash_completion(config, aliases))
    else:
        print(generate_zsh_completion(config, aliases))

    # instructions on stderr so the script can be redirected
    rc = "bashrc" if args.shell == "bash" else "zshrc"
    err = sys.stderr
    print("\n  Installation:\n", file=err)
    print("  1. Save the completion script:", file=err)
    print(f"     sweech completion {args.shell} > ~/.sweech-completion.{args.shell}\n", file=err)
    print(f"  2. Add to your ~/.{rc}:", file=err)
    print(f"     source ~/.sweech-completion.{args.shell}\n", file=err)
    print("  3. Reload your shell:", file=err)
    print(f"     source ~/.{rc}\n", file=err)


# ── Maintenance ───────────────────────────────────────────────────────────────

def cmd_doctor(args):
    if not run_doctor(ConfigManager()):
        sys.exit(1)


def cmd_path(args):
    run_path(ConfigManager())


def cmd_test(args):
    run_test(ConfigManager(), args.name)


def cmd_edit(args):
    run_edit(ConfigManager(), args.name, args.field, args.value)


def cmd_clone(args):
    config = ConfigManager()
    source = config.get_profile(args.source)
    api_key = args.key
    if not api_key and source.api_key and not confirm("Use same API key?", default=True):
        api_key = ask_secret("Enter API key for new profile",
                             validate=lambda v: True if v else "API key required")
    run_clone(config, args.source, args.target, api_key)


def cmd_rename(args):
    run_rename(ConfigManager(), args.old, args.new)


def cmd_refresh(args):
    run_refresh(ConfigManager(), args.name.lower().strip())


def cmd_backup_chats(args):
    config = ConfigManager()
    profile = config.get_profile(args.name)
    prompt_chat_backup(profile.command_name, config.profile_dir(profile.command_name), args.output)


def cmd_reset(args):
    run_reset(ConfigManager())


# ── Entry point ───────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sweech",
                                description="Switch between Claude Code / Codex accounts and AI providers")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    sub = p.add_subparsers(dest="cmd")

    sub.add_parser("init", help="Interactive first-time setup")

    s = sub.add_parser("add", help="Add a new provider")
    s.add_argument("--cli", choices=sorted(SUPPORTED_CLIS))
    s.add_argument("--provider", choices=sorted(PROVIDERS))
    s.add_argument("--name", help="Command name")
    auth = s.add_mutually_exclusive_group()
    auth.add_argument("--key", "-k", help="API key")
    auth.add_argument("--oauth", action="store_true", help="Authenticate with OAuth")
    s.add_argument("--manual", action="store_true", help="Paste the OAuth code instead of using the callback listener")

    sub.add_parser("list", aliases=["ls"], help="List configured providers")

    s = sub.add_parser("remove", aliases=["rm"], help="Remove a provider")
    s.add_argument("name")

    sub.add_parser("info", help="Show sweech configuration")
    sub.add_parser("update-wrappers", help="Regenerate all wrapper scripts")

    s = sub.add_parser("backup", help="Password-protected backup of all profiles")
    s.add_argument("--output", "-o", help="Output file (default: sweech-backup-YYYYMMDD.zip)")

    s = sub.add_parser("restore", help="Restore from a backup")
    s.add_argument("file")

    s = sub.add_parser("stats", help="Usage statistics")
    s.add_argument("name", nargs="?")
    s.add_argument("--clear", action="store_true", help="Clear statistics")

    s = sub.add_parser("show", help="Details for a provider")
    s.add_argument("name")

    s = sub.add_parser("alias", help="Manage aliases (list, work=claude-mini, remove work)")
    s.add_argument("action", nargs="?")
    s.add_argument("value", nargs="?")

    sub.add_parser("discover", help="Browse available providers")

    s = sub.add_parser("completion", help="Shell completion script")
    s.add_argument("shell", choices=["bash", "zsh"])

    sub.add_parser("doctor", help="Check installation and configuration")
    sub.add_parser("path", help="Show and configure PATH")

    s = sub.add_parser("test", help="Test a provider's configuration")
    s.add_argument("name")

    s = sub.add_parser("edit", help="Edit a profile")
    s.add_argument("name")
    s.add_argument("--field", choices=["apiKey", "model", "baseUrl"])
    s.add_argument("--value")

    s = sub.add_parser("clone", help="Clone a profile under a new name")
    s.add_argument("source")
    s.add_argument("target")
    s.add_argument("--key", "-k", help="API key for the new profile")

    s = sub.add_parser("rename", help="Rename a profile")
    s.add_argument("old")
    s.add_argument("new")

    s = sub.add_parser("refresh", help="Refresh a stored OAuth token")
    s.add_argument("name")

    s = sub.add_parser("backup-chats", help="Backup a profile's chat history")
    s.add_argument("name")
    s.add_argument("--output", "-o")

    sub.add_parser("reset", help="Uninstall sweech")
    return p


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)

    config_dir = ConfigManager().config_dir
    setup_logging(root=config_dir, verbose=args.verbose)

    if not args.cmd:
        p.print_help()
        return

    cmds = {
        "init": cmd_init, "add": cmd_add,
        "list": cmd_list, "ls": cmd_list,
        "remove": cmd_remove, "rm": cmd_remove,
        "info": cmd_info, "update-wrappers": cmd_update_wrappers,
        "backup": cmd_backup, "restore": cmd_restore,
        "stats": cmd_stats, "show": cmd_show,
        "alias": cmd_alias, "discover": cmd_discover,
        "completion": cmd_completion,
        "doctor": cmd_doctor, "path": cmd_path,
        "test": cmd_test, "edit": cmd_edit,
        "clone": cmd_clone, "rename": cmd_rename,
        "refresh": cmd_refresh,
        "backup-chats": cmd_backup_chats, "reset": cmd_reset,
    }

    fn = cmds.get(args.cmd)
    if not fn:
        p.print_help()
        return

    logger.debug("command %s", args.cmd)
    try:
        fn(args)
    except SweechError as e:
        logger.info("%s failed: %s", args.cmd, e)
        print(f"✗ {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n  Cancelled")
        sys.exit(1)


if __name__ == "__main__":
    main()
