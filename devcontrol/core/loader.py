"""
Dependency input loader - read dependencies and cycles from JSON or YAML.

Expected structure (keys may be camelCase as returned by the API):
```yaml
dependencies:
  - id: dep-1
    sourceServiceName: checkout
    targetServiceName: payments
    dependencyType: runtime
    isCritical: true
cycles:
  - path: checkout -> payments -> checkout
```
A bare list is treated as the dependencies list. When ``cycles`` is absent
the loader returns None so the caller can detect them itself.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from devcontrol.core.models import CircularDependency, ServiceDependency

logger = logging.getLogger(__name__)


@dataclass
class DependencyInput:
    """Dependencies and (optionally) cycles loaded from a file."""
    dependencies: List[ServiceDependency] = field(default_factory=list)
    cycles: Optional[List[CircularDependency]] = None


def load_dependency_input(path: Path) -> DependencyInput:
    """
    Load dependencies from a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the content has the wrong shape
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dependency file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if data is None:
        data = {}
    if isinstance(data, list):
        data = {"dependencies": data}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping or list in {path}, got {type(data).__name__}")

    dependencies = []
    for index, item in enumerate(data.get("dependencies") or []):
        if not isinstance(item, dict):
            raise ValueError(f"Dependency #{index} in {path} is not a mapping")
        dependencies.append(ServiceDependency.from_dict(item))

    cycles = None
    if "cycles" in data:
        cycles = [CircularDependency.from_value(c) for c in data.get("cycles") or []]

    logger.info(f"Loaded {len(dependencies)} dependencies from {path}")
    return DependencyInput(dependencies=dependencies, cycles=cycles)
