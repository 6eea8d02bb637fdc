"""
Output Manager — Timestamped CSV export files and retention cleanup.

Each export run writes one file into the dumps directory, named:

    <ISO 8601 basic UTC timestamp>_<label>_users.csv
    e.g. 20261017T143015.482913Z_all_users.csv
         20261017T143015.482913Z_guild_users.csv
         20261017T143015.482913Z_role_rol_abc123_users.csv

The timestamp uses the ISO 8601 basic format (no colons) with microseconds,
so the name is valid on every filesystem and two runs in the same second
still get distinct files.

The retention policy deletes export files older than retention_days. Set
retention_days=0 to keep all exports indefinitely.

Pipeline context:
    The orchestrator writes the CSV in Step 6 (Write CSV). Cleanup runs at the
    start of each export (in run.py).
"""

import csv
import os
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from .errors import ExportWriteError

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S.%fZ"
EXPORT_FILE_PATTERN = re.compile(r"^(\d{8}T\d{6}\.\d{6}Z)_.+_users\.csv$")


class OutputManager:
    """Manages export files with timestamping and retention policies.

    Attributes:
        base_dir: Directory that receives export files (default: ./dumps).
        retention_days: Delete exports older than this many days (0 = keep forever).
    """

    def __init__(self, base_dir: str, retention_days: int = 0, now=None):
        self.base_dir = base_dir
        self.retention_days = retention_days
        self._now = now or (lambda: datetime.now(timezone.utc))

    def build_filename(self, label: str, timestamp: Optional[datetime] = None) -> str:
        """Build the export filename for a user-type label."""
        timestamp = timestamp or self._now()
        safe_label = "".join(c if c.isalnum() or c in "-_" else "_" for c in label)
        return f"{timestamp.strftime(TIMESTAMP_FORMAT)}_{safe_label}_users.csv"

    def write_csv(
        self,
        rows: List[Dict[str, object]],
        label: str,
        fieldnames: Optional[Sequence[str]] = None,
    ) -> str:
        """Write rows to a new timestamped CSV file.

        The header row is taken from the first row's keys. When there are no
        rows, fieldnames (if given) is written as the header.

        Returns:
            The full path of the written file.

        Raises:
            ExportWriteError: If the directory or file cannot be written.
        """
        header = list(rows[0].keys()) if rows else list(fieldnames or [])
        path = os.path.join(self.base_dir, self.build_filename(label))

        try:
            os.makedirs(self.base_dir, exist_ok=True)
            with open(path, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=header)
                writer.writeheader()
                writer.writerows(rows)
        except (OSError, csv.Error, ValueError) as e:
            raise ExportWriteError(f"Could not write {path}: {e}") from e

        return path

    def cleanup_old_exports(self, debug: bool = False) -> int:
        """Remove export files older than retention_days.

        Returns:
            The number of files deleted.
        """
        if self.retention_days <= 0:
            return 0

        if not os.path.exists(self.base_dir):
            return 0

        deleted_count = 0
        cutoff = self._now() - timedelta(days=self.retention_days)

        for filename in os.listdir(self.base_dir):
            file_path = os.path.join(self.base_dir, filename)

            if not os.path.isfile(file_path):
                continue

            match = EXPORT_FILE_PATTERN.match(filename)
            if not match:
                continue

            try:
                file_time = datetime.strptime(match.group(1), TIMESTAMP_FORMAT).replace(
                    tzinfo=timezone.utc
                )
                if file_time < cutoff:
                    os.remove(file_path)
                    deleted_count += 1
                    if debug:
                        print(f"  Deleted old export: {filename}")
            except (ValueError, OSError) as e:
                if debug:
                    print(f"  Warning: Could not process file {filename}: {e}")
                continue

        return deleted_count
