"""
Download sink - where finished export artifacts are saved.

Producers build the complete artifact in memory and hand the bytes over in
a single call, so a failed export never leaves a partial file behind.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def export_timestamp(now: Optional[datetime] = None) -> str:
    """Minute-precision timestamp used in file names (``YYYYMMDD-HHMM``)."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.strftime("%Y%m%d-%H%M")


def export_filename(product: str, kind: str, extension: str, now: Optional[datetime] = None) -> str:
    """
    Build an artifact file name.

    >>> export_filename("devcontrol", "dependencies", "csv", datetime(2024, 3, 5, 14, 7))
    'devcontrol-dependencies-20240305-1407.csv'
    """
    return f"{product}-{kind}-{export_timestamp(now)}.{extension}"


@dataclass
class DownloadSink:
    """
    Save artifacts into a downloads directory.

    Each save writes to a temporary file in the target directory and renames
    it into place.
    """
    directory: Path
    saved: List[Path] = field(default_factory=list)

    def save(self, filename: str, data: bytes) -> Path:
        """Write ``data`` to ``directory/filename`` and return the final path."""
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / filename

        fd, tmp_name = tempfile.mkstemp(prefix=".download-", dir=str(self.directory))
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        self.saved.append(target)
        logger.info(f"Saved {target.name} ({len(data)} bytes)")
        return target
