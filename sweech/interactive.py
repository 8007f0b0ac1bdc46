"""
Interactive prompts.

Plain input()/getpass prompts. Choice lists are numbered; entries carrying a
"disabled" reason are shown but cannot be picked.
"""

import getpass
import re
from dataclasses import dataclass, field

from sweech.cli_detection import detect_installed_clis, format_cli_choices
from sweech.config import Profile
from sweech.custom_provider import create_custom_provider_config, prompt_custom_provider
from sweech.errors import SweechError
from sweech.providers import ProviderConfig, get_provider, get_provider_list, is_provider_compatible
from sweech.system_commands import validate_command_name

_COMMAND_RE = re.compile(r"^[a-z0-9-]+$")

# Command-name suggestions shown in the prompt
_SUGGESTIONS = {
    "minimax": '"cmini", "claude-mini", "mini", "minimax-work"',
    "qwen": '"qwen", "claude-qwen", "cqwen", "qwen-personal"',
    "kimi": '"kimi", "claude-kimi", "ckimi", "kimi-work"',
    "deepseek": '"deep", "claude-deep", "cdeep", "deepseek"',
    "glm": '"glm", "claude-glm", "cglm", "glm4"',
    "anthropic": '"claude-2", "claude-work", "claude-personal"',
}

# The official provider of each CLI; an extra account there may use the CLI's own login
OFFICIAL_PROVIDERS = {"claude": "anthropic", "codex": "openai"}


# ── Primitives ────────────────────────────────────────────────────────────────

def ask(message: str, default: str = "", validate=None) -> str:
    suffix = f" [{default}]" if default else ""
    while True:
        value = input(f"  {message}{suffix}: ").strip() or default
        if validate:
            result = validate(value)
            if result is not True:
                print(f"  ✗ {result}")
                continue
        return value


def ask_secret(message: str, validate=None) -> str:
    while True:
        value = getpass.getpass(f"  {message}: ").strip()
        if validate:
            result = validate(value)
            if result is not True:
                print(f"  ✗ {result}")
                continue
        return value


def confirm(message: str, default: bool = False) -> bool:
    hint = "[Y/n]" if default else "[y/N]"
    answer = input(f"  {message} {hint} ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def choose(message: str, choices: list[dict], default: str | None = None) -> str:
    print(f"\n  {message}")
    for i, c in enumerate(choices, 1):
        note = f"  ({c['disabled']})" if c.get("disabled") else ""
        print(f"    {i}) {c['name']}{note}")
    default_idx = next((i for i, c in enumerate(choices, 1) if c["value"] == default), None)
    while True:
        raw = input(f"  Choice{f' [{default_idx}]' if default_idx else ''}: ").strip()
        if not raw and default_idx:
            return choices[default_idx - 1]["value"]
        if raw.isdigit() and 1 <= int(raw) <= len(choices):
            picked = choices[int(raw) - 1]
            if picked.get("disabled"):
                print(f"  ✗ {picked['disabled']}")
                continue
            return picked["value"]
        print(f"  ✗ Enter a number between 1 and {len(choices)}")


def _required(label: str):
    def check(value: str):
        return True if value else f"{label} is required"
    return check


# ── Add provider ──────────────────────────────────────────────────────────────

@dataclass
class AddProviderAnswers:
    cli_type: str
    provider: str
    command_name: str
    api_key: str | None = None
    auth_method: str = "api_key"  # 'api_key' | 'oauth'
    custom_provider_config: ProviderConfig | None = None
    custom_provider_prompts: dict | None = field(default=None)


def validate_new_command_name(name: str, existing: list[Profile]):
    """True, or an error message for the prompt."""
    name = name.strip().lower()
    if not name:
        return "Command name is required"
    if not _COMMAND_RE.match(name):
        return 'Use only lowercase letters, numbers, and hyphens (e.g., "claude-mini", "cmini")'
    if name == "claude":
        return 'Cannot use "claude" - this is reserved for your default account'
    clash = next((p for p in existing if p.command_name == name), None)
    if clash:
        provider = get_provider(clash.provider)
        label = provider.display_name if provider else clash.provider
        return f'Command "{name}" already exists ({label}). Choose a different name.'
    check = validate_command_name(name)
    if not check.valid:
        return check.error or "Invalid command name"
    if check.warning:
        print(f"\n  {check.warning}")
    return True


def _print_current_setup(existing: list[Profile]):
    grouped: dict[str, list[str]] = {}
    for p in existing:
        grouped.setdefault(p.cli_type or "claude", []).append(p.command_name)
    print("  Your current setup:")
    for cli_type, names in grouped.items():
        plural = "s" if len(names) > 1 else ""
        print(f"    • {cli_type}: {len(names)} profile{plural} ({', '.join(names)})")
    print()


def interactive_add_provider(existing: list[Profile], presets: dict | None = None) -> AddProviderAnswers:
    """
    Walk the user through adding a provider.

    `presets` holds values already given on the command line
    (cli_type, provider, command_name, api_key, auth_method); their prompts
    are skipped.
    """
    presets = {k: v for k, v in (presets or {}).items() if v}
    print("\n  sweech — Add New Provider\n")

    if existing:
        _print_current_setup(existing)

    print("  Detecting installed CLIs...")
    detected = detect_installed_clis()
    installed = [d for d in detected if d.installed]
    if not installed:
        print("  ✗ No supported CLIs found. Please install at least one:")
        for d in detected:
            if d.cli.install_url:
                print(f"    • {d.cli.display_name}: {d.cli.install_url}")
        raise SweechError("No supported CLIs installed")

    cli_type = presets.get("cli_type")
    if cli_type and cli_type not in {d.cli.name for d in installed}:
        raise SweechError(f"CLI '{cli_type}' is not installed")
    if not cli_type:
        if len(installed) > 1:
            cli_type = choose("Which CLI are you configuring?", format_cli_choices(detected))
        else:
            cli_type = installed[0].cli.name
    cli_name = next((d.cli.display_name for d in detected if d.cli.name == cli_type), "this CLI")

    provider_name = presets.get("provider")
    if provider_name and not is_provider_compatible(provider_name, cli_type):
        raise SweechError(f"Provider '{provider_name}' is not compatible with {cli_name}")
    if not provider_name:
        kind = choose(f"What would you like to add for {cli_name}?", [
            {"name": f"Another {cli_name} account (official provider)", "value": "official"},
            {"name": "External AI provider (MiniMax, Qwen, Kimi, DeepSeek, etc.)", "value": "external"},
        ])
        if kind == "official":
            provider_name = OFFICIAL_PROVIDERS.get(cli_type, "anthropic")
        else:
            official = OFFICIAL_PROVIDERS.get(cli_type)
            options = [p for p in get_provider_list(cli_type) if p["value"] != official]
            provider_name = choose("Choose a provider:", options)

    command_name = presets.get("command_name")
    if command_name:
        result = validate_new_command_name(command_name, existing)
        if result is not True:
            raise SweechError(result)
    else:
        hint = _SUGGESTIONS.get(provider_name, '"my-command"')
        command_name = ask(
            f"What command name? (e.g., {hint})",
            validate=lambda v: validate_new_command_name(v, existing),
        )
    command_name = command_name.strip().lower()

    auth_method = presets.get("auth_method")
    if not auth_method:
        if provider_name in OFFICIAL_PROVIDERS.values():
            auth_method = choose("How do you want to authenticate?", [
                {"name": "OAuth (log in with your account)", "value": "oauth"},
                {"name": "API key", "value": "api_key"},
            ], default="oauth")
        else:
            auth_method = "api_key"

    api_key = presets.get("api_key")
    if auth_method == "api_key" and not api_key:
        provider = get_provider(provider_name)
        label = provider.display_name if provider else provider_name
        api_key = ask_secret(f"Enter API key for {label}", validate=_required("API key"))

    custom_config = custom_prompts = None
    if provider_name == "custom":
        print()
        custom_prompts = prompt_custom_provider()
        custom_config = create_custom_provider_config(custom_prompts, command_name)
        print("\n  ✓ Custom provider configured:")
        print(f"    Base URL:   {custom_config.base_url}")
        print(f"    API Format: {custom_config.api_format}")
        print(f"    Model:      {custom_config.default_model}\n")

    return AddProviderAnswers(
        cli_type=cli_type,
        provider=provider_name,
        command_name=command_name,
        api_key=api_key.strip() if api_key else None,
        auth_method=auth_method,
        custom_provider_config=custom_config,
        custom_provider_prompts=custom_prompts,
    )


def confirm_remove_provider(command_name: str) -> bool:
    return confirm(f"Are you sure you want to remove '{command_name}'?")
