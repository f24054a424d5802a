"""
Export Settings - YAML configuration for the report export pipeline.

Example settings file:
```yaml
product: devcontrol
display_name: DevControl
downloads_dir: ~/Downloads

capture:
  background: "#ffffff"
  settle_delay: 0.05
  full_pixel_ratio: 2.0
  document_pixel_ratio: 1.5

png:
  min_width: 1920
  min_height: 1080
  watermark: true
```
"""

import logging
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CaptureSettings:
    """Surface rasterization settings."""
    background: str = "#ffffff"
    settle_delay: float = 0.05
    full_pixel_ratio: float = 2.0
    document_pixel_ratio: float = 1.5

    @classmethod
    def from_dict(cls, data: Dict) -> "CaptureSettings":
        return cls(
            background=data.get("background", "#ffffff"),
            settle_delay=float(data.get("settle_delay", 0.05)),
            full_pixel_ratio=float(data.get("full_pixel_ratio", 2.0)),
            document_pixel_ratio=float(data.get("document_pixel_ratio", 1.5)),
        )

    def to_dict(self) -> Dict:
        return {
            "background": self.background,
            "settle_delay": self.settle_delay,
            "full_pixel_ratio": self.full_pixel_ratio,
            "document_pixel_ratio": self.document_pixel_ratio,
        }


@dataclass
class PNGSettings:
    """Standalone graph snapshot settings."""
    min_width: int = 1920
    min_height: int = 1080
    watermark: bool = True

    @classmethod
    def from_dict(cls, data: Dict) -> "PNGSettings":
        return cls(
            min_width=int(data.get("min_width", 1920)),
            min_height=int(data.get("min_height", 1080)),
            watermark=bool(data.get("watermark", True)),
        )

    def to_dict(self) -> Dict:
        return {
            "min_width": self.min_width,
            "min_height": self.min_height,
            "watermark": self.watermark,
        }


@dataclass
class ExportSettings:
    """
    Complete export configuration.

    ``product`` is the lowercase prefix used in file names,
    ``display_name`` is the branding shown inside the artifacts.
    """
    product: str = "devcontrol"
    display_name: str = "DevControl"
    downloads_dir: Path = field(default_factory=lambda: Path.cwd())
    capture: CaptureSettings = field(default_factory=CaptureSettings)
    png: PNGSettings = field(default_factory=PNGSettings)

    @classmethod
    def from_dict(cls, data: Dict, base_dir: Optional[Path] = None) -> "ExportSettings":
        """Create settings from a dictionary."""
        settings = cls()

        settings.product = data.get("product", settings.product)
        settings.display_name = data.get("display_name", settings.display_name)

        if "downloads_dir" in data:
            downloads_dir = Path(data["downloads_dir"]).expanduser()
            if not downloads_dir.is_absolute() and base_dir is not None:
                downloads_dir = base_dir / downloads_dir
            settings.downloads_dir = downloads_dir

        settings.capture = CaptureSettings.from_dict(data.get("capture") or {})
        settings.png = PNGSettings.from_dict(data.get("png") or {})

        return settings

    def to_dict(self) -> Dict:
        return {
            "product": self.product,
            "display_name": self.display_name,
            "downloads_dir": str(self.downloads_dir),
            "capture": self.capture.to_dict(),
            "png": self.png.to_dict(),
        }


def load_export_settings(path: Path) -> ExportSettings:
    """
    Load export settings from a YAML file.

    Relative ``downloads_dir`` values are resolved against the file's directory.

    Raises:
        FileNotFoundError: If the settings file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Export settings not found: {path}")

    logger.info(f"Loading export settings: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    return ExportSettings.from_dict(data, base_dir=path.parent)


def create_example_settings() -> str:
    """Generate an example settings YAML."""
    return """# DevControl export settings

product: devcontrol
display_name: DevControl
downloads_dir: ./exports

capture:
  background: "#ffffff"   # forced behind the diagram while capturing
  settle_delay: 0.05      # seconds to wait before capture
  full_pixel_ratio: 2.0   # standalone PNG snapshots
  document_pixel_ratio: 1.5  # images embedded in the PDF report

png:
  min_width: 1920
  min_height: 1080
  watermark: true
"""
