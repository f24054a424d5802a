"""
DevControl Dependency Graph - NetworkX-based graph of service dependencies.

Used by the callers of the export pipeline to:
- Detect circular dependency chains
- Find services on critical paths
- Feed the on-screen dependency diagram

The export pipeline itself never recomputes cycles; it only receives the count.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set, Any, Iterable

import networkx as nx

from devcontrol.core.models import ServiceDependency, CircularDependency

logger = logging.getLogger(__name__)


@dataclass
class DependencyEdge:
    """An edge in the dependency graph."""
    source: str  # Service display name
    target: str
    dependency_type: str = ""
    is_critical: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "target": self.target,
            "type": self.dependency_type,
            "critical": self.is_critical,
            "metadata": self.metadata,
        }


class DependencyGraph:
    """
    Directed graph of services and the services they depend on.

    Provides:
    - Edge management from ServiceDependency objects
    - Cycle detection
    - Upstream/downstream lookups
    - Statistics
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self._edges: List[DependencyEdge] = []

    def add_dependency(self, dependency: ServiceDependency):
        """Add a dependency edge (and both services) to the graph."""
        edge = DependencyEdge(
            source=dependency.source_display,
            target=dependency.target_display,
            dependency_type=dependency.dependency_type,
            is_critical=dependency.is_critical,
        )
        if dependency.description:
            edge.metadata["description"] = dependency.description
        self.add_edge(edge)

    def add_edge(self, edge: DependencyEdge):
        """Add an edge to the graph."""
        self._edges.append(edge)

        attrs = {
            "dependency_type": edge.dependency_type,
            "critical": edge.is_critical,
        }
        for k, v in edge.metadata.items():
            if v is not None:
                attrs[k] = v

        self._graph.add_edge(edge.source, edge.target, **attrs)

    def get_services(self) -> List[str]:
        """Get all services in insertion order."""
        return list(self._graph.nodes())

    def get_edges(self) -> List[DependencyEdge]:
        """Get all edges."""
        return list(self._edges)

    def get_critical_services(self) -> Set[str]:
        """Services touched by at least one critical dependency."""
        services = set()
        for edge in self._edges:
            if edge.is_critical:
                services.add(edge.source)
                services.add(edge.target)
        return services

    # Graph Analysis Methods

    def find_cycles(self) -> List[List[str]]:
        """
        Find all cycles in the graph.

        Returns:
            List of cycles, where each cycle is a list of service names
        """
        try:
            return list(nx.simple_cycles(self._graph))
        except nx.NetworkXError:
            return []

    def circular_dependencies(self) -> List[CircularDependency]:
        """Cycles as CircularDependency objects, e.g. ``a -> b -> a``."""
        result = []
        for cycle in self.find_cycles():
            path = " -> ".join(cycle + [cycle[0]])
            result.append(CircularDependency(path=path, services=list(cycle)))
        return result

    def get_service_dependencies(self, service: str) -> Dict[str, List[str]]:
        """
        Get dependencies for a specific service.

        Returns:
            Dict with 'depends_on' (services this one calls) and
            'depended_by' (services that call this one)
        """
        if service not in self._graph:
            return {"depends_on": [], "depended_by": []}

        return {
            "depends_on": list(self._graph.successors(service)),
            "depended_by": list(self._graph.predecessors(service)),
        }

    def layout(self, seed: int = 42) -> Dict[str, tuple]:
        """Deterministic 2D positions for drawing the graph."""
        if len(self._graph) == 0:
            return {}
        return nx.spring_layout(self._graph, seed=seed)

    @property
    def nx_graph(self) -> nx.DiGraph:
        return self._graph

    # Statistics

    def stats(self) -> Dict[str, Any]:
        """Get graph statistics."""
        type_counts: Dict[str, int] = {}
        for edge in self._edges:
            key = edge.dependency_type or "unspecified"
            type_counts[key] = type_counts.get(key, 0) + 1

        return {
            "total_services": self._graph.number_of_nodes(),
            "total_dependencies": len(self._edges),
            "critical_dependencies": sum(1 for e in self._edges if e.is_critical),
            "dependency_types": type_counts,
            "is_dag": nx.is_directed_acyclic_graph(self._graph),
            "weakly_connected_components": nx.number_weakly_connected_components(self._graph)
            if len(self._graph) else 0,
        }

    def to_dict(self) -> Dict:
        """Convert entire graph to dictionary."""
        return {
            "stats": self.stats(),
            "services": self.get_services(),
            "edges": [e.to_dict() for e in self._edges],
        }

    def __len__(self) -> int:
        return self._graph.number_of_nodes()


def build_dependency_graph(dependencies: Iterable[ServiceDependency]) -> DependencyGraph:
    """
    Build a DependencyGraph from service dependencies.

    Args:
        dependencies: Dependencies as loaded from the API

    Returns:
        Populated DependencyGraph
    """
    graph = DependencyGraph()
    for dep in dependencies:
        graph.add_dependency(dep)

    logger.info(f"Built dependency graph: {len(graph)} services, {len(graph.get_edges())} edges")
    return graph
