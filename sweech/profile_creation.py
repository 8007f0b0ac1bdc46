"""Shared profile creation for `add` and `init`."""

import logging
from dataclasses import replace

from sweech.clis import CLIConfig, get_cli, get_default_cli
from sweech.config import ConfigManager, Profile
from sweech.custom_provider import create_custom_provider_config
from sweech.errors import SweechError
from sweech.interactive import OFFICIAL_PROVIDERS, AddProviderAnswers
from sweech.oauth import get_oauth_token
from sweech.providers import ProviderConfig, get_provider

logger = logging.getLogger(__name__)


def uses_native_auth(answers: AddProviderAnswers, cli: CLIConfig) -> bool:
    """OAuth against the CLI's own provider is left to the CLI's login flow."""
    return answers.auth_method == "oauth" and OFFICIAL_PROVIDERS.get(cli.name) == answers.provider


def create_profile(answers: AddProviderAnswers, provider: ProviderConfig, cli: CLIConfig,
                   config: ConfigManager, manual_oauth: bool = False) -> Profile:
    native = uses_native_auth(answers, cli)

    oauth_token = None
    if answers.auth_method == "oauth" and not native:
        oauth_token = get_oauth_token(cli.name, answers.provider, manual=manual_oauth)
        print("  ✓ OAuth authentication successful")

    profile = Profile(
        name=answers.command_name,
        command_name=answers.command_name,
        cli_type=cli.name,
        provider=answers.provider,
        api_key=answers.api_key or None,
        oauth=oauth_token,
        base_url=provider.base_url or None,
        model=provider.default_model or None,
        small_fast_model=provider.small_fast_model or None,
        custom_provider=answers.custom_provider_prompts,
    )

    config.add_profile(profile)
    config.create_profile_config(answers.command_name, provider, answers.api_key, cli.name,
                                 oauth_token=oauth_token, use_native_auth=native)
    config.create_wrapper_script(answers.command_name, cli)

    print("\n  ✓ Provider added successfully!\n")
    print(f"  Command:    {answers.command_name}")
    print(f"  Provider:   {provider.display_name}")
    if native:
        print("  Auth:       OAuth (via CLI)\n")
        print("  ⚠ Authentication setup required:")
        print(f"     Run: {answers.command_name}")
        print(f"     This starts {cli.display_name}'s own login flow inside the profile")
    else:
        print(f"  Model:      {provider.default_model or 'default'}")
        if answers.auth_method == "oauth":
            print("  Auth:       OAuth Token")
    print(f"  Config dir: {config.profile_dir(answers.command_name)}")
    return profile


def provider_for_profile(profile: Profile) -> ProviderConfig:
    """The profile's provider template with its stored overrides applied."""
    if profile.custom_provider:
        provider = create_custom_provider_config(profile.custom_provider, profile.command_name)
    else:
        provider = get_provider(profile.provider)
        if not provider:
            raise SweechError(f"Unknown provider '{profile.provider}' for profile '{profile.command_name}'")
    return replace(
        provider,
        base_url=profile.base_url or provider.base_url,
        default_model=profile.model or provider.default_model,
        small_fast_model=profile.small_fast_model or provider.small_fast_model,
    )


def cli_for_profile(profile: Profile) -> CLIConfig:
    return get_cli(profile.cli_type) or get_default_cli()


def rewrite_profile_files(config: ConfigManager, profile: Profile):
    """Regenerate settings.json and the wrapper from the stored profile."""
    native = not profile.api_key and not profile.oauth
    config.create_profile_config(profile.command_name, provider_for_profile(profile), profile.api_key,
                                 profile.cli_type, oauth_token=profile.oauth, use_native_auth=native)
    config.create_wrapper_script(profile.command_name, cli_for_profile(profile))


def resolve_provider_and_cli(answers: AddProviderAnswers) -> tuple[ProviderConfig, CLIConfig]:
    provider = answers.custom_provider_config or get_provider(answers.provider)
    if not provider:
        raise SweechError(f"Provider '{answers.provider}' not found")
    cli = get_cli(answers.cli_type)
    if not cli:
        raise SweechError(f"CLI '{answers.cli_type}' not found")
    return provider, cli
