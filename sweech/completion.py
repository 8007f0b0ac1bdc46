"""Shell completion scripts. Profile and alias names are baked in at generation time."""

from sweech.aliases import AliasManager
from sweech.config import ConfigManager

COMMANDS = {
    "init": "Interactive first-time setup",
    "add": "Add a new provider",
    "list": "List all configured providers",
    "ls": "List all configured providers (alias)",
    "remove": "Remove a configured provider",
    "rm": "Remove a configured provider (alias)",
    "info": "Show sweech configuration",
    "update-wrappers": "Regenerate wrapper scripts",
    "backup": "Create encrypted backup",
    "restore": "Restore from backup",
    "stats": "Show usage statistics",
    "show": "Show provider details",
    "alias": "Manage command aliases",
    "discover": "Discover available providers",
    "completion": "Generate shell completion",
    "doctor": "Check installation health",
    "path": "Configure PATH",
    "test": "Test a profile configuration",
    "edit": "Edit a profile",
    "clone": "Clone a profile",
    "rename": "Rename a profile",
    "refresh": "Refresh an OAuth token",
    "backup-chats": "Backup chat history for a profile",
    "reset": "Uninstall sweech",
}

PROFILE_COMMANDS = ["remove", "rm", "show", "stats", "test", "edit", "clone", "rename", "refresh", "backup-chats"]


def _names(config: ConfigManager, aliases: AliasManager) -> tuple[str, str]:
    profiles = " ".join(p.command_name for p in config.get_profiles())
    alias_names = " ".join(aliases.get_aliases())
    return profiles, alias_names


def generate_bash_completion(config: ConfigManager, aliases: AliasManager) -> str:
    profiles, alias_names = _names(config, aliases)
    commands = " ".join(COMMANDS)
    profile_cases = "|".join(PROFILE_COMMANDS)
    return f"""# Bash completion for sweech
_sweech_completion() {{
    local cur prev commands
    cur="${{COMP_WORDS[COMP_CWORD]}}"
    prev="${{COMP_WORDS[COMP_CWORD-1]}}"

    commands="{commands}"

    if [[ "${{COMP_WORDS[1]}}" == "alias" ]]; then
        if [[ ${{COMP_CWORD}} -eq 2 ]]; then
            COMPREPLY=( $(compgen -W "list remove" -- "${{cur}}") )
        elif [[ ${{COMP_CWORD}} -eq 3 && "${{COMP_WORDS[2]}}" == "remove" ]]; then
            local aliases="{alias_names}"
            COMPREPLY=( $(compgen -W "${{aliases}}" -- "${{cur}}") )
        fi
        return 0
    fi

    case "${{prev}}" in
        sweech)
            COMPREPLY=( $(compgen -W "${{commands}}" -- "${{cur}}") )
            return 0
            ;;
        {profile_cases})
            local profiles="{profiles}"
            COMPREPLY=( $(compgen -W "${{profiles}}" -- "${{cur}}") )
            return 0
            ;;
        completion)
            COMPREPLY=( $(compgen -W "bash zsh" -- "${{cur}}") )
            return 0
            ;;
    esac
}}

complete -F _sweech_completion sweech
"""


def generate_zsh_completion(config: ConfigManager, aliases: AliasManager) -> str:
    profiles, alias_names = _names(config, aliases)
    described = "\n".join(f"        '{name}:{desc}'" for name, desc in COMMANDS.items())
    profile_cases = "|".join(PROFILE_COMMANDS)
    return f"""#compdef sweech

_sweech() {{
    local -a commands profiles aliases_list

    commands=(
{described}
    )

    profiles=({profiles})
    aliases_list=({alias_names})

    if (( CURRENT == 2 )); then
        _describe 'sweech commands' commands
        return
    fi

    case $words[2] in
        {profile_cases})
            _arguments "*:profile:($profiles)"
            ;;
        alias)
            if [[ $words[3] == "remove" ]]; then
                _arguments "*:alias:($aliases_list)"
            else
                _arguments "1:action:(list remove)"
            fi
            ;;
        completion)
            _arguments "1:shell:(bash zsh)"
            ;;
    esac
}}

_sweech "$@"
"""
