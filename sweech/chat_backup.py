"""
Chat history backup.

Archives a profile's whole config dir (where the CLI keeps transcripts) and
encrypts it with the same format as `sweech backup`.
"""

import io
import logging
import os
import zipfile
from datetime import datetime
from pathlib import Path

from sweech.backup import encrypt, validate_password, zip_directory
from sweech.errors import SweechError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
CHAT_DIR_NAMES = {"projects", "conversations", "history", "transcripts"}


def get_directory_size(dir_path: str | Path) -> int:
    path = Path(dir_path)
    if not path.exists():
        return 0
    if path.is_file():
        return path.stat().st_size
    return sum(get_directory_size(child) for child in path.iterdir())


def format_bytes(num: int) -> str:
    if num == 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value, i = float(num), 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{value:.2f} {units[i]}"


def has_chat_data(config_dir: str | Path) -> bool:
    root = Path(config_dir)
    if not root.is_dir():
        return False

    def search(d: Path) -> bool:
        try:
            entries = list(d.iterdir())
        except OSError:
            return False
        for entry in entries:
            if entry.is_dir():
                if entry.name in CHAT_DIR_NAMES or search(entry):
                    return True
            elif entry.is_file() and entry.name.endswith(".jsonl"):
                return True
        return False

    return search(root)


def get_chat_backup_info(config_dir: str | Path) -> dict:
    exists = Path(config_dir).exists()
    size = get_directory_size(config_dir) if exists else 0
    return {
        "exists": exists,
        "hasChats": exists and has_chat_data(config_dir),
        "size": size,
        "sizeFormatted": format_bytes(size),
    }


def backup_chat_history(profile_name: str, config_dir: str | Path, password: str,
                        output: str | Path | None = None) -> Path:
    source = Path(config_dir)
    if not source.exists():
        raise SweechError(f"Config directory not found: {config_dir}")
    validate_password(password, MIN_PASSWORD_LENGTH)

    if output is None:
        stamp = datetime.now().strftime("%Y%m%d")
        output = Path.cwd() / f"sweech-chats-{profile_name}-{stamp}.zip"
    out = Path(output)

    print("\n  Creating chat backup...\n")
    print(f"  Source: {source}")
    print(f"  Size:   {format_bytes(get_directory_size(source))}")
    print(f"  Output: {out}\n")

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        zip_directory(zf, source)
    print("  ✓ Archive created")

    print("  Encrypting backup...")
    out.write_bytes(encrypt(buf.getvalue(), password))
    os.chmod(str(out), 0o600)
    logger.info("chat backup for %s written to %s", profile_name, out)

    print(f"\n  ✓ Backup created: {out}")
    print(f"    Size: {format_bytes(out.stat().st_size)}")
    print("\n  ⚠ Keep this password safe! It cannot be recovered.\n")
    return out


def prompt_chat_backup(profile_name: str, config_dir: str | Path, output: str | None = None) -> Path:
    from sweech.interactive import ask_secret

    password = ask_secret(
        "Enter backup password",
        validate=lambda v: True if len(v) >= MIN_PASSWORD_LENGTH
        else f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
    )
    confirmation = ask_secret("Confirm password")
    if password != confirmation:
        raise SweechError("Passwords do not match")
    return backup_chat_history(profile_name, config_dir, password, output)


def confirm_chat_backup_before_removal(profile_name: str, config_dir: str | Path) -> bool:
    """Offer a chat backup before a profile is removed. False means cancel."""
    from sweech.interactive import choose, confirm

    info = get_chat_backup_info(config_dir)
    if not info["hasChats"]:
        return True

    print(f"\n  ⚠ This profile contains chat history ({info['sizeFormatted']})")
    print(f"    Location: {config_dir}")
    action = choose("What would you like to do?", [
        {"name": "Backup chats before removing", "value": "backup"},
        {"name": "Remove without backing up", "value": "remove"},
        {"name": "Cancel removal", "value": "cancel"},
    ])

    if action == "cancel":
        return False
    if action == "backup":
        try:
            prompt_chat_backup(profile_name, config_dir)
            print("\n  ✓ Backup complete. Proceeding with removal...\n")
        except (SweechError, OSError) as e:
            print(f"\n  ✗ Backup failed: {e}")
            return confirm("Backup failed. Continue with removal anyway?")
    return True
