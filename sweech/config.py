"""
sweech — profile store

Profiles live in a single JSON array at ~/.sweech/config.json (camelCase keys).
Each profile owns:
  - ~/.sweech/profiles/<commandName>/   config dir handed to the CLI
  - ~/.sweech/bin/<commandName>          wrapper script that exports the CLI's
                                         config-dir env var and execs the CLI

commandName is the unique key. Set SWEECH_HOME to relocate the whole tree.
"""

import json
import logging
import os
import secrets
import shutil
import sys
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from sweech.clis import CLIConfig
from sweech.errors import ProfileExistsError, ProfileNotFoundError
from sweech.providers import ProviderConfig

logger = logging.getLogger(__name__)


def default_config_dir() -> Path:
    env = os.environ.get("SWEECH_HOME")
    return Path(env).expanduser() if env else Path.home() / ".sweech"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ── JSON helpers ──────────────────────────────────────────────────────────────

def read_json(path: Path, default):
    """Load JSON from `path`; missing or unreadable files yield `default`."""
    if not path.exists():
        return default
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("ignoring unreadable %s: %s", path, e)
        return default


def write_json(path: Path, data, mode: int | None = None) -> None:
    """Write atomically via temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, str(path))
        if mode is not None:
            os.chmod(str(path), mode)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# ── Models ────────────────────────────────────────────────────────────────────

@dataclass
class OAuthToken:
    access_token: str
    provider: str  # 'anthropic' | 'openai'
    refresh_token: str | None = None
    expires_at: int | None = None  # epoch ms
    token_type: str = "Bearer"

    def to_dict(self) -> dict:
        d = {"accessToken": self.access_token, "tokenType": self.token_type, "provider": self.provider}
        if self.refresh_token:
            d["refreshToken"] = self.refresh_token
        if self.expires_at:
            d["expiresAt"] = self.expires_at
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "OAuthToken":
        return cls(
            access_token=d.get("accessToken", ""),
            provider=d.get("provider", "anthropic"),
            refresh_token=d.get("refreshToken"),
            expires_at=d.get("expiresAt"),
            token_type=d.get("tokenType", "Bearer"),
        )


_PROFILE_KEYS = {
    "name": "name",
    "command_name": "commandName",
    "cli_type": "cliType",
    "provider": "provider",
    "api_key": "apiKey",
    "base_url": "baseUrl",
    "model": "model",
    "small_fast_model": "smallFastModel",
    "created_at": "createdAt",
}


@dataclass
class Profile:
    name: str
    command_name: str
    provider: str
    cli_type: str = "claude"
    api_key: str | None = None
    oauth: OAuthToken | None = None
    base_url: str | None = None
    model: str | None = None
    small_fast_model: str | None = None
    custom_provider: dict | None = None
    created_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict:
        d = {}
        for attr, key in _PROFILE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                d[key] = value
        if self.oauth:
            d["oauth"] = self.oauth.to_dict()
        if self.custom_provider:
            d["customProvider"] = self.custom_provider
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Profile":
        kwargs = {attr: d.get(key) for attr, key in _PROFILE_KEYS.items() if d.get(key) is not None}
        # records written before codex support carry no cliType
        kwargs.setdefault("cli_type", "claude")
        kwargs.setdefault("name", d.get("commandName", ""))
        kwargs.setdefault("provider", "")
        if d.get("oauth"):
            kwargs["oauth"] = OAuthToken.from_dict(d["oauth"])
        if d.get("customProvider"):
            kwargs["custom_provider"] = d["customProvider"]
        return cls(**kwargs)

    @property
    def auth_label(self) -> str:
        if self.api_key:
            return f"API Key: {self.api_key[:10]}***"
        if self.oauth:
            return f"OAuth ({self.oauth.provider})"
        return "OAuth (via CLI)"


# ── Config manager ────────────────────────────────────────────────────────────

class ConfigManager:
    def __init__(self, config_dir: Path | str | None = None):
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()
        self.config_file = self.config_dir / "config.json"
        self.profiles_dir = self.config_dir / "profiles"
        self.bin_dir = self.config_dir / "bin"
        self.usage_file = self.config_dir / "usage.json"
        self.alias_file = self.config_dir / "aliases.json"
        self._ensure_directories()

    def _ensure_directories(self):
        for d in (self.config_dir, self.profiles_dir, self.bin_dir):
            d.mkdir(parents=True, exist_ok=True)

    def profile_dir(self, command_name: str) -> Path:
        return self.profiles_dir / command_name

    def wrapper_path(self, command_name: str) -> Path:
        return self.bin_dir / command_name

    # ── CRUD ──────────────────────────────────────────────────────────────────

    def get_profiles(self) -> list[Profile]:
        data = read_json(self.config_file, [])
        return [Profile.from_dict(p) for p in data]

    def find_profile(self, command_name: str) -> Profile | None:
        for p in self.get_profiles():
            if p.command_name == command_name:
                return p
        return None

    def get_profile(self, command_name: str) -> Profile:
        profile = self.find_profile(command_name)
        if not profile:
            raise ProfileNotFoundError(command_name)
        return profile

    def save_profiles(self, profiles: list[Profile]):
        # config.json holds API keys
        write_json(self.config_file, [p.to_dict() for p in profiles], mode=0o600)

    def add_profile(self, profile: Profile):
        profiles = self.get_profiles()
        if any(p.command_name == profile.command_name for p in profiles):
            raise ProfileExistsError(profile.command_name)
        profiles.append(profile)
        self.save_profiles(profiles)
        logger.info("added profile %s (%s/%s)", profile.command_name, profile.cli_type, profile.provider)

    def update_profile(self, command_name: str, profile: Profile):
        profiles = self.get_profiles()
        for i, p in enumerate(profiles):
            if p.command_name == command_name:
                profiles[i] = profile
                break
        else:
            raise ProfileNotFoundError(command_name)
        self.save_profiles(profiles)

    def remove_profile(self, command_name: str):
        profiles = [p for p in self.get_profiles() if p.command_name != command_name]
        self.save_profiles(profiles)

        wrapper = self.wrapper_path(command_name)
        if wrapper.exists():
            wrapper.unlink()

        profile_dir = self.profile_dir(command_name)
        if profile_dir.exists():
            shutil.rmtree(profile_dir, ignore_errors=True)
        logger.info("removed profile %s", command_name)

    # ── Profile config dir ────────────────────────────────────────────────────

    def create_profile_config(self, command_name: str, provider: ProviderConfig,
                              api_key: str | None, cli_type: str = "claude",
                              oauth_token: OAuthToken | None = None,
                              use_native_auth: bool = False):
        """
        Write settings.json (env block read by the CLI) for a profile.

        With native auth no credentials are written: the CLI runs its own
        login flow inside the profile dir on first launch.
        """
        profile_dir = self.profile_dir(command_name)
        profile_dir.mkdir(parents=True, exist_ok=True)

        settings = {"env": {}}
        if not use_native_auth:
            auth_token = api_key or (f"bearer_{oauth_token.access_token}" if oauth_token else "")
            prefix = "OPENAI" if cli_type == "codex" else "ANTHROPIC"
            env = settings["env"]
            env["OPENAI_API_KEY" if cli_type == "codex" else "ANTHROPIC_AUTH_TOKEN"] = auth_token
            if provider.base_url:
                env[f"{prefix}_BASE_URL"] = provider.base_url
            if provider.default_model:
                env[f"{prefix}_MODEL"] = provider.default_model
            if provider.small_fast_model:
                env[f"{prefix}_SMALL_FAST_MODEL"] = provider.small_fast_model
            if provider.name == "minimax":
                env["API_TIMEOUT_MS"] = "3000000"
            if oauth_token:
                settings["oauth"] = {
                    "provider": oauth_token.provider,
                    "refreshToken": oauth_token.refresh_token,
                    "expiresAt": oauth_token.expires_at,
                }

        write_json(profile_dir / "settings.json", settings, mode=0o600)

        # Skip Claude Code onboarding for external providers
        if not use_native_auth:
            write_json(profile_dir / ".claude.json", {
                "hasCompletedOnboarding": True,
                "loginMethod": "api_key",
                "apiKey": "sk-ant-external-provider",
                "userID": secrets.token_hex(32),
                "firstStartTime": now_iso(),
            })
        logger.debug("wrote settings for %s (native_auth=%s)", command_name, use_native_auth)

    # ── Wrapper script ────────────────────────────────────────────────────────

    def create_wrapper_script(self, command_name: str, cli: CLIConfig) -> Path:
        profile_dir = self.profile_dir(command_name)
        wrapper = self.wrapper_path(command_name)
        py = sys.executable or "python3"

        lines = [
            "#!/bin/bash",
            f"# sweech wrapper for {command_name} ({cli.display_name})",
            "",
            "# Log usage in the background",
            f'(SWEECH_HOME="{self.config_dir}" "{py}" -m sweech.usage "{command_name}" >/dev/null 2>&1 &)',
            "",
            "# --yolo -> --dangerously-skip-permissions (Claude Code only)",
            "ARGS=()",
            'for arg in "$@"; do',
            f'  if [ "$arg" = "--yolo" ] && [ "{cli.command}" = "claude" ]; then',
            '    ARGS+=("--dangerously-skip-permissions")',
            "  else",
            '    ARGS+=("$arg")',
            "  fi",
            "done",
            "",
            f'export {cli.config_dir_env_var}="{profile_dir}"',
            f'exec {cli.command} "${{ARGS[@]}}"',
        ]

        self.bin_dir.mkdir(parents=True, exist_ok=True)
        wrapper.write_text("\n".join(lines) + "\n")
        os.chmod(str(wrapper), 0o755)
        logger.debug("wrote wrapper %s", wrapper)
        return wrapper
