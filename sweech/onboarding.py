"""
sweech init — first-run walkthrough.

Step 1 PATH, step 2 CLI detection, step 3 first provider, step 4 health check.
"""

import logging

from sweech.cli_detection import detect_installed_clis
from sweech.config import ConfigManager
from sweech.errors import SweechError
from sweech.interactive import confirm, interactive_add_provider
from sweech.profile_creation import create_profile, resolve_provider_and_cli
from sweech.utility_commands import (
    PATH_EXPORT,
    add_to_shell_rc,
    get_shell_rc_file,
    is_in_path,
    run_doctor,
)

logger = logging.getLogger(__name__)


def _path_step(config: ConfigManager):
    if is_in_path(config.bin_dir):
        print("  ✓ sweech is in your PATH\n")
        return

    print("  Step 1: Add sweech to your PATH\n")
    rc_file = get_shell_rc_file()
    print("  ⚠ The sweech bin directory is not in your PATH yet.\n")
    print("  To use your providers, add this to your shell configuration:\n")
    print(f"    {PATH_EXPORT}\n")
    print(f"  Add to: {rc_file}\n")

    if not confirm("Would you like me to add it automatically?", default=True):
        print("\n  ⚠ Remember to add it to your PATH manually!\n")
        return
    try:
        added = add_to_shell_rc(rc_file)
    except OSError as e:
        print(f"\n  ✗ Failed to update {rc_file}: {e}")
        print("    Please add it manually.\n")
        return
    if added:
        print(f"\n  ✓ Added to {rc_file}")
        print(f"  ⚠ Restart your terminal or run: source {rc_file}\n")
    else:
        print(f"\n  ✓ Already in {rc_file}\n")


def _detect_step() -> bool:
    print("  Step 2: Detect installed CLIs\n")
    results = detect_installed_clis()
    for r in results:
        if r.installed:
            version = f" ({r.version})" if r.version else ""
            print(f"    ✓ {r.cli.display_name} detected{version}")
        else:
            print(f"    ○ {r.cli.display_name} not found")
            if r.cli.install_url:
                print(f"      Install: {r.cli.install_url}")
    print()

    if any(r.installed for r in results):
        return True
    print("  ⚠ No supported CLIs found!")
    print("    You'll need to install Claude Code or Codex to use sweech.\n")
    return confirm("Continue anyway? (You can configure providers later)")


def run_init(config: ConfigManager) -> bool:
    """Returns False when setup stopped before a provider was added."""
    print("\n  Welcome to sweech!\n")
    print("  Let's get you set up with your first AI provider.\n")

    existing = config.get_profiles()
    if existing:
        print("  ⚠ You already have providers configured:\n")
        for p in existing:
            print(f"    • {p.command_name}")
        print()
        if not confirm("Would you like to add another provider?", default=True):
            print("\n  ✓ You're all set! Run `sweech list` to see your providers.\n")
            return True

    _path_step(config)

    if not _detect_step():
        print("  Install a CLI first, then run `sweech init` again.\n")
        return False

    print("  Step 3: Add your first provider\n")
    try:
        answers = interactive_add_provider(existing)
        provider, cli = resolve_provider_and_cli(answers)
        create_profile(answers, provider, cli, config)
    except SweechError as e:
        logger.warning("init: setup failed: %s", e)
        print(f"\n  ✗ Setup failed: {e}")
        return False
    print()

    print("  Step 4: Verify installation\n")
    if confirm("Run health check to verify everything works?", default=True):
        run_doctor(config)

    print("\n  ✓ Setup complete!\n")
    print("  Next steps:\n")
    if not is_in_path(config.bin_dir):
        print("    Restart your terminal or run:")
        print(f"      source {get_shell_rc_file()}\n")
    profiles = config.get_profiles()
    if profiles:
        print("    Try your new command:")
        print(f"      {profiles[0].command_name}\n")
    print("    Add more providers:   sweech add")
    print("    View all providers:   sweech list\n")
    return True
