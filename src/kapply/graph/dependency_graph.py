"""Build directed dependency graph from declared resources."""

import networkx as nx
from typing import List, Dict, Set, Optional
from ..ingest.models import ResourceKind, ResourceSpec
from ..utils.errors import CyclicDependencyError, UnresolvedReferenceError
from ..utils.logging import get_logger

logger = get_logger("graph.dependency_graph")

# Kinds whose data is a key-value map that references must index into.
KEYED_KINDS = (ResourceKind.SECRET, ResourceKind.CONFIG)


class DependencyGraph:
    """Directed dependency graph: nodes=resources, edges=dependency -> dependent."""

    def __init__(self):
        self.graph = nx.DiGraph()
        self._resource_map: Dict[str, ResourceSpec] = {}

    @classmethod
    def from_resources(cls, resources: List[ResourceSpec]) -> "DependencyGraph":
        """Build a fresh, validated graph for one planning pass."""
        graph = cls()
        graph.build_from_resources(resources)
        return graph

    def build_from_resources(self, resources: List[ResourceSpec]) -> None:
        """
        Build the complete dependency graph from a list of resources.

        Raises:
            UnresolvedReferenceError: If a reference target or key does not exist
            CyclicDependencyError: If the references form a cycle
        """
        for resource in resources:
            self.graph.add_node(resource.name, resource=resource)
            self._resource_map[resource.name] = resource

        for resource in resources:
            for ref in resource.references:
                target = self._resolve(resource, ref.target, ref.key)
                if not self.graph.has_edge(target.name, resource.name):
                    self.graph.add_edge(target.name, resource.name)
                    logger.debug(f"Added dependency edge: {target.name} -> {resource.name}")

        self._check_acyclic()

        logger.info(
            f"Built dependency graph with {self.graph.number_of_nodes()} nodes "
            f"and {self.graph.number_of_edges()} edges"
        )

    def _resolve(self, source: ResourceSpec, target_name: str, key: Optional[str]) -> ResourceSpec:
        target = self._resource_map.get(target_name)
        if target is None:
            raise UnresolvedReferenceError(source.name, target_name, key)

        if target.kind in KEYED_KINDS:
            if key is None:
                raise UnresolvedReferenceError(
                    source.name, target_name, key, f"a key is required when referencing a {target.kind.value}"
                )
            if key not in target.data:
                raise UnresolvedReferenceError(
                    source.name, target_name, key, f"key not present in {target.kind.value} '{target_name}'"
                )
        return target

    def _check_acyclic(self) -> None:
        """Depth-first cycle search; raise with the cycle path on a back-edge."""
        try:
            edges = nx.find_cycle(self.graph, orientation="original")
        except nx.NetworkXNoCycle:
            return

        cycle = [edge[0] for edge in edges]
        cycle.append(edges[-1][1])
        raise CyclicDependencyError(cycle)

    def get_dependencies(self, name: str) -> List[str]:
        """Direct dependencies of a resource, in declaration order."""
        if name not in self.graph:
            return []
        return self._ordered(self.graph.predecessors(name))

    def get_dependents(self, name: str) -> List[str]:
        """Direct dependents of a resource, in declaration order."""
        if name not in self.graph:
            return []
        return self._ordered(self.graph.successors(name))

    def get_downstream_resources(self, name: str) -> Set[str]:
        """All resources that depend on the given resource, directly or transitively."""
        if name not in self.graph:
            return set()
        return set(nx.descendants(self.graph, name))

    def get_upstream_resources(self, name: str) -> Set[str]:
        """All resources the given resource depends on, directly or transitively."""
        if name not in self.graph:
            return set()
        return set(nx.ancestors(self.graph, name))

    def get_resource(self, name: str) -> Optional[ResourceSpec]:
        """Get declared resource by name."""
        return self._resource_map.get(name)

    def get_all_resources(self) -> List[ResourceSpec]:
        """All resources in declaration order."""
        return sorted(self._resource_map.values(), key=lambda r: r.index)

    def _ordered(self, names) -> List[str]:
        return sorted(names, key=lambda n: self._resource_map[n].index)
