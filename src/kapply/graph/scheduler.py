"""Stable topological ordering of the dependency graph."""

import networkx as nx
from typing import List
from ..contracts.plan import ApplyPlan, PlanDirection
from ..ingest.models import ResourceSpec
from ..utils.errors import CyclicDependencyError
from .dependency_graph import DependencyGraph
from ..utils.logging import get_logger

logger = get_logger("graph.scheduler")


def build_apply_plan(graph: DependencyGraph) -> ApplyPlan:
    """
    Order resources so every resource follows all of its dependencies.

    Kahn's algorithm: nodes with no unresolved in-degree are released one at a
    time, lowest declaration index first, so the order is deterministic for a
    given declaration set.
    """
    try:
        order = list(nx.lexicographical_topological_sort(
            graph.graph,
            key=lambda name: graph.get_resource(name).index
        ))
    except nx.NetworkXUnfeasible:
        # Only reachable for graphs not built through DependencyGraph.from_resources.
        cycle = [edge[0] for edge in nx.find_cycle(graph.graph)]
        raise CyclicDependencyError(cycle + cycle[:1])

    resources: List[ResourceSpec] = [graph.get_resource(name) for name in order]
    dependencies = {name: graph.get_dependencies(name) for name in order}

    plan = ApplyPlan(
        direction=PlanDirection.APPLY,
        resources=resources,
        blockers=dict(dependencies),
        dependencies=dependencies,
    )
    logger.info(f"Planned {len(plan)} resources: {', '.join(order)}")
    return plan


def build_destroy_plan(graph: DependencyGraph) -> ApplyPlan:
    """Teardown plan: the exact reverse of the apply order."""
    return build_apply_plan(graph).reversed()
