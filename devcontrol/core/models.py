"""
DevControl Export Data Model - format-agnostic snapshot of service dependencies.

Converts the dashboard's live relationship objects into:
- ExportRecord rows (one per dependency)
- ExportStats aggregates (computed once per export)

Both are immutable snapshots built fresh for each export call. Nothing here
touches UI state, files, or the network.
"""

import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any, Iterable, Sequence, Tuple

logger = logging.getLogger(__name__)

UNKNOWN_SERVICE = "Unknown"


@dataclass(frozen=True)
class ExportRecord:
    """One dependency row: ``subject`` depends on ``related_to``."""
    subject: str
    related_to: str
    relation_kind: str = "direct"
    state: str = "active"
    is_critical_path: bool = False
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "subject": self.subject,
            "related_to": self.related_to,
            "relation_kind": self.relation_kind,
            "state": self.state,
            "is_critical_path": self.is_critical_path,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class ExportStats:
    """Aggregate statistics captured at export start."""
    total_entities: int
    total_relations: int
    critical_path_count: int
    cycle_count: int
    generated_at: str

    def to_dict(self) -> Dict:
        return asdict(self)

    @property
    def generated_datetime(self) -> datetime:
        """``generated_at`` parsed back into a datetime."""
        return datetime.fromisoformat(self.generated_at.replace("Z", "+00:00"))

    @property
    def average_relations_per_entity(self) -> float:
        if self.total_entities == 0:
            return 0.0
        return self.total_relations / self.total_entities


@dataclass
class ServiceDependency:
    """A dependency edge as returned by the dependencies REST API."""
    id: str
    source_service_id: Optional[str] = None
    target_service_id: Optional[str] = None
    source_service_name: Optional[str] = None
    target_service_name: Optional[str] = None
    dependency_type: str = ""
    description: Optional[str] = None
    is_critical: bool = False

    # camelCase keys used by the REST API
    _API_KEYS = {
        "sourceServiceId": "source_service_id",
        "targetServiceId": "target_service_id",
        "sourceServiceName": "source_service_name",
        "targetServiceName": "target_service_name",
        "dependencyType": "dependency_type",
        "isCritical": "is_critical",
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceDependency":
        """Create from an API payload (camelCase) or snake_case dictionary."""
        normalized = {}
        for key, value in data.items():
            normalized[cls._API_KEYS.get(key, key)] = value

        return cls(
            id=str(normalized.get("id", "")),
            source_service_id=normalized.get("source_service_id"),
            target_service_id=normalized.get("target_service_id"),
            source_service_name=normalized.get("source_service_name"),
            target_service_name=normalized.get("target_service_name"),
            dependency_type=normalized.get("dependency_type") or "",
            description=normalized.get("description"),
            is_critical=bool(normalized.get("is_critical", False)),
        )

    @property
    def source_display(self) -> str:
        return self.source_service_name or self.source_service_id or UNKNOWN_SERVICE

    @property
    def target_display(self) -> str:
        return self.target_service_name or self.target_service_id or UNKNOWN_SERVICE


@dataclass
class CircularDependency:
    """A detected dependency cycle, e.g. ``"api -> auth -> api"``."""
    path: str
    services: List[str] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: Any) -> "CircularDependency":
        """Accept either a plain path string or a ``{"path": ...}`` mapping."""
        if isinstance(value, dict):
            return cls(path=str(value.get("path", "")), services=list(value.get("services", [])))
        return cls(path=str(value))


def to_export_record(dependency: ServiceDependency) -> ExportRecord:
    """Map one live dependency onto an export row."""
    tags = (dependency.dependency_type,) if dependency.dependency_type else ()
    return ExportRecord(
        subject=dependency.source_display,
        related_to=dependency.target_display,
        relation_kind="direct",
        state="active",
        is_critical_path=bool(dependency.is_critical),
        tags=tags,
    )


def compute_export_stats(
    records: Sequence[ExportRecord],
    cycle_count: int,
    now: Optional[datetime] = None,
) -> ExportStats:
    """
    Aggregate statistics for a list of export records.

    Args:
        records: Rows being exported
        cycle_count: Number of circular dependency chains, supplied by the caller
        now: Export start time (defaults to the current UTC time)

    Returns:
        ExportStats snapshot
    """
    if now is None:
        now = datetime.now(timezone.utc)

    entities = set()
    for record in records:
        entities.add(record.subject)
        entities.add(record.related_to)

    return ExportStats(
        total_entities=len(entities),
        total_relations=len(records),
        critical_path_count=sum(1 for r in records if r.is_critical_path),
        cycle_count=cycle_count,
        generated_at=now.isoformat(),
    )


def build_export_data(
    dependencies: Iterable[ServiceDependency],
    cycles: Optional[Iterable[CircularDependency]] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[ExportRecord], ExportStats]:
    """
    Build the export data model from live dashboard state.

    Args:
        dependencies: Service dependencies currently shown on the page
        cycles: Circular dependencies detected upstream
        now: Export start time

    Returns:
        Tuple of (records, stats)
    """
    records = [to_export_record(dep) for dep in dependencies]
    cycle_count = len(list(cycles)) if cycles is not None else 0
    stats = compute_export_stats(records, cycle_count, now=now)

    logger.debug(
        f"Prepared export data: {stats.total_relations} dependencies, "
        f"{stats.total_entities} services, {stats.cycle_count} cycles"
    )

    return records, stats
