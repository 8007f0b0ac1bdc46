"""Detect which supported AI coding CLIs are installed."""

import logging
import shutil
import subprocess
from dataclasses import dataclass

from sweech.clis import SUPPORTED_CLIS, CLIConfig

logger = logging.getLogger(__name__)


@dataclass
class CLIDetectionResult:
    cli: CLIConfig
    installed: bool
    version: str | None = None


def is_cli_installed(command: str) -> bool:
    return shutil.which(command) is not None


def get_cli_version(command: str, timeout: float = 2) -> str | None:
    try:
        result = subprocess.run(
            [command, "--version"], capture_output=True, text=True, timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("%s --version failed: %s", command, e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or result.stderr.strip() or None


def detect_installed_clis() -> list[CLIDetectionResult]:
    results = []
    for cli in SUPPORTED_CLIS.values():
        installed = is_cli_installed(cli.command)
        version = get_cli_version(cli.command) if installed else None
        results.append(CLIDetectionResult(cli=cli, installed=installed, version=version))
    return results


def format_cli_choices(results: list[CLIDetectionResult]) -> list[dict]:
    choices = []
    for r in results:
        status = "✓" if r.installed else "✗"
        version = f" ({r.version})" if r.version else ""
        choice = {"name": f"{r.cli.display_name} {status}{version}", "value": r.cli.name}
        if not r.installed:
            choice["disabled"] = (
                f"Not installed - get it from {r.cli.install_url}" if r.cli.install_url else "Not installed"
            )
        choices.append(choice)
    return choices
