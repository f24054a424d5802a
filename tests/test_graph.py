"""Tests for the dependency graph module."""

import pytest

from devcontrol.core.graph import (
    DependencyGraph,
    DependencyEdge,
    build_dependency_graph,
)
from devcontrol.core.models import ServiceDependency


class TestDependencyGraph:
    """Tests for DependencyGraph."""

    def test_empty_graph(self):
        graph = DependencyGraph()
        assert len(graph) == 0
        assert graph.find_cycles() == []
        assert graph.layout() == {}

    def test_add_edge(self):
        graph = DependencyGraph()
        graph.add_edge(DependencyEdge(source="api", target="db", dependency_type="data"))

        assert len(graph) == 2
        assert graph.get_services() == ["api", "db"]
        assert graph.get_service_dependencies("api") == {"depends_on": ["db"], "depended_by": []}

    def test_unknown_service_dependencies(self):
        graph = DependencyGraph()
        assert graph.get_service_dependencies("nope") == {"depends_on": [], "depended_by": []}

    def test_critical_services(self, sample_dependencies):
        graph = build_dependency_graph(sample_dependencies)
        assert graph.get_critical_services() == {"checkout", "payments"}

    def test_uses_display_names(self, sample_dependencies):
        graph = build_dependency_graph(sample_dependencies)
        assert "svc-42" in graph.get_services()


class TestCycleDetection:
    """Tests for cycle detection."""

    def test_detects_cycle(self, sample_dependencies):
        graph = build_dependency_graph(sample_dependencies)
        cycles = graph.circular_dependencies()

        assert len(cycles) == 1
        assert set(cycles[0].services) == {"checkout", "payments"}
        assert cycles[0].path.count("->") == 2

    def test_acyclic(self):
        graph = build_dependency_graph([
            ServiceDependency(id="1", source_service_name="a", target_service_name="b"),
            ServiceDependency(id="2", source_service_name="b", target_service_name="c"),
        ])
        assert graph.circular_dependencies() == []
        assert graph.stats()["is_dag"] is True


class TestGraphStats:
    """Tests for statistics and serialization."""

    def test_stats(self, sample_dependencies):
        stats = build_dependency_graph(sample_dependencies).stats()

        assert stats["total_services"] == 4
        assert stats["total_dependencies"] == 4
        assert stats["critical_dependencies"] == 1
        assert stats["dependency_types"] == {"runtime": 2, "api": 1, "data": 1}
        assert stats["is_dag"] is False

    def test_to_dict(self, sample_dependencies):
        data = build_dependency_graph(sample_dependencies).to_dict()
        assert len(data["edges"]) == 4
        assert data["edges"][0]["critical"] is True

    def test_layout_is_deterministic(self, sample_dependencies):
        graph = build_dependency_graph(sample_dependencies)
        first = graph.layout()
        second = graph.layout()
        for service in graph.get_services():
            assert tuple(first[service]) == pytest.approx(tuple(second[service]))
