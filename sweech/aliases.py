"""Short names for sweech commands, stored in ~/.sweech/aliases.json."""

from pathlib import Path

from sweech.config import default_config_dir, read_json, write_json
from sweech.errors import AliasError


class AliasManager:
    def __init__(self, alias_file: Path | str | None = None):
        self.alias_file = Path(alias_file) if alias_file else default_config_dir() / "aliases.json"

    def get_aliases(self) -> dict[str, str]:
        data = read_json(self.alias_file, {})
        return data if isinstance(data, dict) else {}

    def add_alias(self, alias: str, command: str):
        aliases = self.get_aliases()
        if alias in aliases:
            raise AliasError(f"Alias '{alias}' already exists (points to '{aliases[alias]}')")
        aliases[alias] = command
        write_json(self.alias_file, aliases)

    def remove_alias(self, alias: str):
        aliases = self.get_aliases()
        if alias not in aliases:
            raise AliasError(f"Alias '{alias}' does not exist")
        del aliases[alias]
        write_json(self.alias_file, aliases)

    def retarget(self, old_command: str, new_command: str) -> int:
        """Point every alias for `old_command` at `new_command`. Returns count."""
        aliases = self.get_aliases()
        moved = 0
        for alias, command in aliases.items():
            if command == old_command:
                aliases[alias] = new_command
                moved += 1
        if moved:
            write_json(self.alias_file, aliases)
        return moved

    def aliases_for(self, command: str) -> list[str]:
        return [a for a, c in self.get_aliases().items() if c == command]

    def resolve_alias(self, command_or_alias: str) -> str:
        return self.get_aliases().get(command_or_alias, command_or_alias)

    def is_alias(self, name: str) -> bool:
        return name in self.get_aliases()
