"""
sweech reset — uninstall.

Removes the sweech config root (profiles, wrappers, usage, aliases). The
CLIs' own default directories are never touched.
"""

import logging
import shutil
from pathlib import Path

from sweech.config import ConfigManager
from sweech.providers import get_provider

logger = logging.getLogger(__name__)


def get_default_cli_directories() -> list[Path]:
    home = Path.home()
    return [home / ".claude", home / ".codex", home / ".config" / "claude"]


def is_default_cli_directory(dir_path: str | Path) -> bool:
    target = Path(dir_path).expanduser().resolve()
    return any(target == d.resolve() for d in get_default_cli_directories())


def is_default_profile(profile_name: str, config_dir: str | Path) -> bool:
    if is_default_cli_directory(config_dir):
        return True
    return profile_name.lower() in ("claude", "codex")


def run_reset(config: ConfigManager) -> bool:
    """Interactive uninstall. Returns True when the config root was removed."""
    from sweech.backup import backup_sweech
    from sweech.errors import SweechError
    from sweech.interactive import ask, confirm

    print("\n  ⚠ sweech reset (uninstall)\n")
    profiles = config.get_profiles()

    print("  Your setup:")
    if not profiles:
        print("    No profiles configured\n")
    for p in profiles:
        provider = get_provider(p.provider)
        label = provider.display_name if provider else p.provider
        if is_default_cli_directory(config.profile_dir(p.command_name)):
            print(f"    • {p.command_name} ({label}) [DEFAULT - will be preserved]")
        else:
            print(f"    • {p.command_name} ({label})")
    print()

    print("  This will NOT affect:")
    defaults = [d for d in get_default_cli_directories() if d.exists()]
    for d in defaults:
        print(f"    ✓ {d} (default CLI setup)")
    if not defaults:
        print("    ✓ All default CLI configurations (~/.claude/, ~/.codex/, etc.)")
    print("    ✓ Installed CLIs (claude, codex, etc.)\n")

    print("  This will remove:")
    print(f"    ✗ {config.config_dir}/ (sweech configuration)")
    print(f"    ✗ {config.bin_dir}/ (wrapper scripts)")
    print("    ✗ All sweech-managed profiles")
    print("    ✗ Usage statistics")
    print("    ✗ Aliases\n")

    if profiles and confirm("Would you like to create a backup first?", default=True):
        try:
            backup_sweech(config)
        except (SweechError, OSError) as e:
            print(f"  ✗ Backup failed: {e}")
            if not confirm("Backup failed. Continue with reset anyway?"):
                print("\n  Reset cancelled\n")
                return False

    answer = ask('Type "reset" to confirm complete uninstall')
    if answer.lower() != "reset":
        print("\n  Reset cancelled\n")
        return False

    if is_default_cli_directory(config.config_dir):
        print(f"  ✗ Refusing to remove default CLI directory {config.config_dir}")
        return False

    print("\n  Removing sweech...\n")
    if config.config_dir.exists():
        shutil.rmtree(config.config_dir)
        logger.info("removed %s", config.config_dir)
        print(f"    ✓ Removed {config.config_dir}")

    print("\n  ⚠ You may want to remove sweech from your PATH")
    print("    Remove this line from your shell RC file (~/.zshrc or ~/.bashrc):")
    print('    export PATH="$HOME/.sweech/bin:$PATH"\n')
    print("  ✓ sweech has been uninstalled\n")
    print("  Your default CLI configurations remain untouched.")
    return True
