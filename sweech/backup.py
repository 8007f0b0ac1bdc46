"""
sweech — encrypted backup / restore

Backup file layout:  salt (32) || iv (16) || AES-256-CBC(zip, PKCS7)
Key:                 PBKDF2-HMAC-SHA256(password, salt, 100 000 iterations, 32 bytes)

The zip holds profiles/, config.json, bin/ and (when present) aliases.json
and usage.json, all relative to the sweech config root. Restore decrypts
and validates the whole archive before a single file is written.
"""

import io
import logging
import os
import zipfile
from datetime import datetime
from pathlib import Path, PurePosixPath

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from sweech.clis import get_cli, get_default_cli
from sweech.config import ConfigManager, Profile
from sweech.errors import BackupDecryptError, SweechError

logger = logging.getLogger(__name__)

SALT_LENGTH = 32
IV_LENGTH = 16
KEY_LENGTH = 32
PBKDF2_ITERATIONS = 100_000
MIN_PASSWORD_LENGTH = 6


# ── Encryption ────────────────────────────────────────────────────────────────

def derive_key(password: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8"))


def encrypt(data: bytes, password: str) -> bytes:
    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    key = derive_key(password, salt)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return salt + iv + encryptor.update(padded) + encryptor.finalize()


def decrypt(blob: bytes, password: str) -> bytes:
    header = SALT_LENGTH + IV_LENGTH
    body = blob[header:]
    if len(body) == 0 or len(body) % (algorithms.AES.block_size // 8):
        raise BackupDecryptError()

    salt, iv = blob[:SALT_LENGTH], blob[SALT_LENGTH:header]
    key = derive_key(password, salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(body) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError:
        raise BackupDecryptError()


def validate_password(password: str, min_length: int = MIN_PASSWORD_LENGTH):
    if not password or len(password) < min_length:
        raise SweechError(f"Password must be at least {min_length} characters")


# ── Archive ───────────────────────────────────────────────────────────────────

def zip_directory(zf: zipfile.ZipFile, source: Path, arc_prefix: str = ""):
    for path in sorted(source.rglob("*")):
        if path.is_file():
            rel = path.relative_to(source).as_posix()
            zf.write(path, f"{arc_prefix}/{rel}" if arc_prefix else rel)


def build_archive(config: ConfigManager) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        zip_directory(zf, config.profiles_dir, "profiles")
        if config.config_file.exists():
            zf.write(config.config_file, "config.json")
        zip_directory(zf, config.bin_dir, "bin")
        for extra in (config.alias_file, config.usage_file):
            if extra.exists():
                zf.write(extra, extra.name)
    return buf.getvalue()


def _safe_members(zf: zipfile.ZipFile) -> list[zipfile.ZipInfo]:
    members = zf.infolist()
    for info in members:
        p = PurePosixPath(info.filename)
        if p.is_absolute() or ".." in p.parts:
            raise BackupDecryptError(f"Unsafe path in backup archive: {info.filename}")
    return members


def decrypt_archive(blob: bytes, password: str) -> zipfile.ZipFile:
    """
    Decrypt and open the archive. Wrong passwords fail at the padding check
    or, when the garbage happens to pad correctly, at the zip check.
    """
    data = decrypt(blob, password)
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
        bad = zf.testzip()
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError):
        raise BackupDecryptError()
    if bad is not None:
        raise BackupDecryptError(f"Corrupted backup file (bad entry: {bad})")
    _safe_members(zf)
    return zf


def default_backup_name(prefix: str = "sweech-backup") -> str:
    return f"{prefix}-{datetime.now().strftime('%Y%m%d')}.zip"


# ── Backup / restore ──────────────────────────────────────────────────────────

def create_backup(config: ConfigManager, password: str, output: str | Path | None = None) -> Path | None:
    """Write an encrypted backup. Returns its path, or None when there is nothing to back up."""
    profiles = config.get_profiles()
    if not profiles:
        print("\n  ⚠ No providers configured. Nothing to backup.\n")
        return None
    validate_password(password)

    out = Path(output) if output else Path(default_backup_name())
    archive = build_archive(config)
    encrypted = encrypt(archive, password)
    out.write_bytes(encrypted)
    os.chmod(str(out), 0o600)
    logger.info("backup written to %s (%d bytes, %d profiles)", out, len(encrypted), len(profiles))
    return out.resolve()


def restore_backup(config: ConfigManager, backup_file: str | Path, password: str) -> list[Profile]:
    path = Path(backup_file)
    if not path.exists():
        raise SweechError(f"Backup file not found: {backup_file}")

    with decrypt_archive(path.read_bytes(), password) as zf:
        zf.extractall(config.config_dir)

    for script in config.bin_dir.iterdir():
        if script.is_file():
            os.chmod(str(script), 0o755)
    if config.config_file.exists():
        os.chmod(str(config.config_file), 0o600)

    restored = config.get_profiles()
    # wrappers embed absolute profile paths from the machine that made the backup
    for p in restored:
        config.create_wrapper_script(p.command_name, get_cli(p.cli_type) or get_default_cli())
    logger.info("restored %d profiles from %s", len(restored), path)
    return restored


# ── Command handlers ──────────────────────────────────────────────────────────

def backup_sweech(config: ConfigManager, output: str | None = None) -> Path | None:
    from sweech.interactive import ask_secret

    if not config.get_profiles():
        print("\n  ⚠ No providers configured. Nothing to backup.\n")
        return None

    password = ask_secret(
        "Enter password to encrypt backup",
        validate=lambda v: True if len(v) >= MIN_PASSWORD_LENGTH
        else f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
    )
    ask_secret("Confirm password", validate=lambda v: True if v == password else "Passwords do not match")

    print("\n  Creating backup...\n")
    out = create_backup(config, password, output)
    if out:
        print("  ✓ Backup created successfully!\n")
        print(f"  File:     {out}")
        print(f"  Size:     {out.stat().st_size / 1024:.2f} KB")
        print(f"  Profiles: {len(config.get_profiles())}\n")
        print("  ⚠ Keep this backup and password safe!")
        print("    You'll need them to restore on a new machine.\n")
    return out


def restore_sweech(config: ConfigManager, backup_file: str) -> list[Profile] | None:
    from sweech.interactive import ask_secret, confirm

    if not Path(backup_file).exists():
        raise SweechError(f"Backup file not found: {backup_file}")

    existing = config.get_profiles()
    if existing:
        print("\n  ⚠ Warning: You have existing providers configured:")
        for p in existing:
            print(f"     - {p.command_name}")
        print()
        if not confirm("This will overwrite existing configurations. Continue?"):
            print("  Cancelled")
            return None

    password = ask_secret("Enter backup password", validate=lambda v: True if v else "Password is required")
    print("\n  Restoring backup...\n")
    restored = restore_backup(config, backup_file, password)

    print("  ✓ Backup restored successfully!\n")
    print(f"  Profiles restored: {len(restored)}")
    for p in restored:
        print(f"     - {p.command_name}")
    print(f"\n  ⚠ Make sure {config.bin_dir} is in your PATH:")
    print(f'     export PATH="{config.bin_dir}:$PATH"\n')
    return restored
