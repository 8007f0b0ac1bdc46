"""
Usage tracking for sweech profiles.

Wrapper scripts call `python -m sweech.usage <commandName>` in the background
on every launch; records land in ~/.sweech/usage.json (last 1000 kept).
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from sweech.config import default_config_dir, now_iso, read_json, write_json

logger = logging.getLogger(__name__)

MAX_RECORDS = 1000
RECENT_USES = 10


def parse_timestamp(ts: str) -> datetime:
    dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class UsageTracker:
    def __init__(self, usage_file: Path | str | None = None):
        self.usage_file = Path(usage_file) if usage_file else default_config_dir() / "usage.json"

    def _records(self) -> list[dict]:
        data = read_json(self.usage_file, [])
        return data if isinstance(data, list) else []

    def log_usage(self, command_name: str):
        records = self._records()
        records.append({"commandName": command_name, "timestamp": now_iso()})
        write_json(self.usage_file, records[-MAX_RECORDS:])

    def get_stats(self, command_name: str | None = None) -> list[dict]:
        grouped: dict[str, list[str]] = {}
        for r in self._records():
            name = r.get("commandName")
            ts = r.get("timestamp")
            if not name or not ts:
                continue
            try:
                parse_timestamp(ts)
            except ValueError:
                logger.debug("skipping usage record with bad timestamp: %r", ts)
                continue
            if command_name and name != command_name:
                continue
            grouped.setdefault(name, []).append(ts)

        stats = []
        for name, stamps in grouped.items():
            stamps.sort(key=parse_timestamp)
            stats.append({
                "commandName": name,
                "totalUses": len(stamps),
                "firstUsed": stamps[0],
                "lastUsed": stamps[-1],
                "recentUses": stamps[-RECENT_USES:],
            })
        return sorted(stats, key=lambda s: s["totalUses"], reverse=True)

    def clear_stats(self, command_name: str | None = None):
        if not command_name:
            write_json(self.usage_file, [])
            return
        records = [r for r in self._records() if r.get("commandName") != command_name]
        write_json(self.usage_file, records)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("usage: python -m sweech.usage <command-name>", file=sys.stderr)
        return 2
    UsageTracker().log_usage(argv[0])
    return 0


if __name__ == "__main__":
    sys.exit(main())
