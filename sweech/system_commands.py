"""
Command-name collision checks.

Critical commands are refused outright; anything else already on PATH only
produces a warning.
"""

import re
import shutil
from dataclasses import dataclass

BLOCKED_COMMANDS = [
    # navigation & file system
    "cd", "ls", "pwd", "mkdir", "rm", "cp", "mv", "touch",
    # viewing/editing
    "cat", "less", "more", "head", "tail", "nano", "vim", "vi",
    # system
    "sudo", "su", "chmod", "chown", "kill", "ps", "top",
    # git
    "git", "gh",
    # package managers
    "npm", "yarn", "pnpm", "pip", "brew",
    # shell builtins
    "echo", "export", "source", "alias",
    # runtimes
    "node", "python", "python3", "ruby", "java", "docker",
    # other AI CLIs
    "copilot",
]

_NAME_RE = re.compile(r"^[a-z0-9-]+$", re.IGNORECASE)


@dataclass
class CommandValidation:
    valid: bool
    error: str = ""
    warning: str = ""


def is_system_command(command_name: str) -> bool:
    if not _NAME_RE.match(command_name):
        return False
    return shutil.which(command_name) is not None


def is_blocked_command(command_name: str) -> bool:
    return command_name.lower() in BLOCKED_COMMANDS


def get_system_command_warning(command_name: str) -> str:
    return f'⚠  "{command_name}" exists as a system command. Consider a different name to avoid confusion.'


def validate_command_name(command_name: str) -> CommandValidation:
    if is_blocked_command(command_name):
        return CommandValidation(
            valid=False,
            error=f'Cannot use "{command_name}" - this is a critical system command that must not be shadowed',
        )
    if is_system_command(command_name):
        return CommandValidation(valid=True, warning=get_system_command_warning(command_name))
    return CommandValidation(valid=True)
