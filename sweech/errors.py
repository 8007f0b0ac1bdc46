"""User-facing failures. `cli.main()` prints these as `✗ <message>` and exits 1."""


class SweechError(Exception):
    pass


class ProfileNotFoundError(SweechError):
    def __init__(self, command_name: str):
        super().__init__(f"Profile '{command_name}' not found")
        self.command_name = command_name


class ProfileExistsError(SweechError):
    def __init__(self, command_name: str):
        super().__init__(f"Command name '{command_name}' already exists")
        self.command_name = command_name


class ConfigFileMissingError(SweechError):
    pass


class BackupDecryptError(SweechError):
    def __init__(self, message: str = "Incorrect password or corrupted backup file"):
        super().__init__(message)


class AliasError(SweechError):
    pass


class OAuthError(SweechError):
    pass
