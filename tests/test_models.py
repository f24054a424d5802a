"""Tests for the export data model."""

import pytest
from dataclasses import FrozenInstanceError

from devcontrol.core.models import (
    ExportRecord,
    ExportStats,
    ServiceDependency,
    CircularDependency,
    build_export_data,
    compute_export_stats,
    to_export_record,
)


class TestServiceDependency:
    """Tests for ServiceDependency."""

    def test_from_api_payload(self):
        """camelCase API keys are mapped onto fields."""
        dep = ServiceDependency.from_dict({
            "id": "dep-1",
            "sourceServiceId": "svc-1",
            "targetServiceId": "svc-2",
            "sourceServiceName": "checkout",
            "targetServiceName": "payments",
            "dependencyType": "runtime",
            "isCritical": True,
        })

        assert dep.id == "dep-1"
        assert dep.source_service_name == "checkout"
        assert dep.target_service_id == "svc-2"
        assert dep.dependency_type == "runtime"
        assert dep.is_critical is True

    def test_from_snake_case(self):
        dep = ServiceDependency.from_dict({
            "id": 7,
            "source_service_name": "a",
            "target_service_name": "b",
        })
        assert dep.id == "7"
        assert dep.is_critical is False
        assert dep.dependency_type == ""

    def test_display_fallbacks(self):
        """Names win over ids, ids win over Unknown."""
        named = ServiceDependency(id="1", source_service_id="s1", source_service_name="api")
        by_id = ServiceDependency(id="2", source_service_id="s1")
        anonymous = ServiceDependency(id="3")

        assert named.source_display == "api"
        assert by_id.source_display == "s1"
        assert anonymous.source_display == "Unknown"
        assert anonymous.target_display == "Unknown"


class TestCircularDependency:
    """Tests for CircularDependency."""

    def test_from_string(self):
        cycle = CircularDependency.from_value("a -> b -> a")
        assert cycle.path == "a -> b -> a"

    def test_from_mapping(self):
        cycle = CircularDependency.from_value({"path": "a -> b -> a", "services": ["a", "b"]})
        assert cycle.services == ["a", "b"]


class TestExportRecord:
    """Tests for ExportRecord conversion."""

    def test_to_export_record(self):
        dep = ServiceDependency(
            id="1", source_service_name="api", target_service_name="db",
            dependency_type="data", is_critical=True,
        )
        record = to_export_record(dep)

        assert record.subject == "api"
        assert record.related_to == "db"
        assert record.relation_kind == "direct"
        assert record.state == "active"
        assert record.is_critical_path is True
        assert record.tags == ("data",)

    def test_missing_type_gives_empty_tags(self):
        record = to_export_record(ServiceDependency(id="1", source_service_name="a", target_service_name="b"))
        assert record.tags == ()

    def test_records_are_immutable(self):
        record = ExportRecord(subject="a", related_to="b")
        with pytest.raises(FrozenInstanceError):
            record.subject = "c"

    def test_to_dict(self):
        record = ExportRecord(subject="a", related_to="b", tags=("x", "y"))
        assert record.to_dict()["tags"] == ["x", "y"]


class TestExportStats:
    """Tests for stats computation."""

    def test_counts(self, sample_dependencies, sample_cycles, fixed_now):
        records, stats = build_export_data(sample_dependencies, sample_cycles, now=fixed_now)

        assert len(records) == 4
        assert stats.total_relations == 4
        # checkout, payments, inventory, svc-42
        assert stats.total_entities == 4
        assert stats.critical_path_count == 1
        assert stats.cycle_count == 1
        assert stats.generated_at == "2024-03-05T14:07:30+00:00"

    def test_critical_count_matches_records(self):
        records = [
            ExportRecord(subject=f"s{i}", related_to="db", is_critical_path=(i % 3 == 0))
            for i in range(10)
        ]
        stats = compute_export_stats(records, cycle_count=0)
        assert stats.critical_path_count == sum(1 for r in records if r.is_critical_path)

    def test_cycle_count_is_taken_from_caller(self, sample_dependencies):
        """Cycles are never recomputed from the records."""
        _, stats = build_export_data(sample_dependencies, cycles=[])
        assert stats.cycle_count == 0

    def test_empty(self):
        records, stats = build_export_data([], None)
        assert records == []
        assert stats.total_entities == 0
        assert stats.average_relations_per_entity == 0.0

    def test_average(self):
        stats = ExportStats(
            total_entities=4, total_relations=6, critical_path_count=0,
            cycle_count=0, generated_at="2024-01-01T00:00:00Z",
        )
        assert stats.average_relations_per_entity == 1.5
        assert stats.generated_datetime.year == 2024

    def test_deterministic(self, sample_dependencies, fixed_now):
        first = build_export_data(sample_dependencies, [], now=fixed_now)
        second = build_export_data(sample_dependencies, [], now=fixed_now)
        assert first == second
