"""Result type shared by the CSV, PNG and PDF exporters."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Any


@dataclass
class ExportResult:
    """Result of a successful export: where the artifact went and what it held."""
    filename: str
    output_path: Optional[Path] = None
    size: int = 0
    stats: Dict[str, Any] = field(default_factory=dict)
