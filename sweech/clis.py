"""
Supported AI coding CLIs.

Each CLI reads its configuration from a directory named by an environment
variable; the wrapper scripts point that variable at a per-profile directory.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CLIConfig:
    name: str
    display_name: str
    command: str
    config_dir_env_var: str
    description: str
    install_url: str = ""


SUPPORTED_CLIS: dict[str, CLIConfig] = {
    "claude": CLIConfig(
        name="claude",
        display_name="Claude Code",
        command="claude",
        config_dir_env_var="CLAUDE_CONFIG_DIR",
        description="Anthropic Claude Code CLI",
        install_url="https://code.claude.com/",
    ),
    "codex": CLIConfig(
        name="codex",
        display_name="Codex (OpenAI)",
        command="codex",
        config_dir_env_var="CODEX_HOME",
        description="OpenAI Codex CLI - lightweight coding agent",
        install_url="https://github.com/openai/codex",
    ),
}


def get_cli(name: str) -> CLIConfig | None:
    return SUPPORTED_CLIS.get(name)


def get_default_cli() -> CLIConfig:
    return SUPPORTED_CLIS["claude"]


def get_cli_list() -> list[dict]:
    return [
        {"name": f"{cli.display_name} - {cli.description}", "value": cli.name}
        for cli in SUPPORTED_CLIS.values()
    ]
