"""Tests for dependency graph."""

import pytest
from kapply.graph.dependency_graph import DependencyGraph
from kapply.ingest.declaration_parser import parse_declarations
from kapply.utils.errors import CyclicDependencyError, UnresolvedReferenceError


@pytest.fixture
def sample_resources():
    """Secret and config consumed by a workload, exposed by a service."""
    return parse_declarations([
        {"kind": "Secret", "name": "s", "data": {"user": "admin", "pass": "pw"}},
        {"kind": "Config", "name": "c", "data": {"host": "db"}},
        {
            "kind": "Workload",
            "name": "w",
            "data": {"image": "app:1", "env": {"USER": {"from": "s", "key": "user"}}},
            "references": ["s.pass", "c.host"],
        },
        {"kind": "Service", "name": "svc", "data": {"port": 80}, "references": ["w"]},
    ]).resources


def _config(name, *refs):
    return {"kind": "Config", "name": name, "data": {"k": "v"}, "references": list(refs)}


class TestDependencyGraph:
    """Test dependency graph construction."""

    def test_build_graph_from_resources(self, sample_resources):
        """Edges point from dependency to dependent, deduplicated."""
        graph = DependencyGraph.from_resources(sample_resources)

        assert graph.graph.number_of_nodes() == 4
        assert graph.graph.number_of_edges() == 3
        assert graph.graph.has_edge("s", "w")
        assert graph.graph.has_edge("c", "w")
        assert graph.graph.has_edge("w", "svc")

    def test_direct_dependencies_and_dependents(self, sample_resources):
        graph = DependencyGraph.from_resources(sample_resources)

        assert graph.get_dependencies("w") == ["s", "c"]
        assert graph.get_dependents("s") == ["w"]
        assert graph.get_dependencies("s") == []

    def test_get_downstream_resources(self, sample_resources):
        """Transitive dependents of the secret include the service."""
        graph = DependencyGraph.from_resources(sample_resources)

        assert graph.get_downstream_resources("s") == {"w", "svc"}
        assert graph.get_downstream_resources("missing") == set()

    def test_get_upstream_resources(self, sample_resources):
        graph = DependencyGraph.from_resources(sample_resources)

        assert graph.get_upstream_resources("svc") == {"w", "s", "c"}

    def test_get_resource(self, sample_resources):
        graph = DependencyGraph.from_resources(sample_resources)

        resource = graph.get_resource("c")
        assert resource is not None
        assert resource.data == {"host": "db"}


class TestReferenceResolution:
    """Test failing fast on bad references."""

    def test_missing_target(self):
        resources = parse_declarations([
            {"kind": "Workload", "name": "w", "data": {"image": "x", "env": {"P": {"from": "nope", "key": "k"}}}},
        ]).resources

        with pytest.raises(UnresolvedReferenceError, match="nope") as exc_info:
            DependencyGraph.from_resources(resources)
        assert exc_info.value.source == "w"

    def test_missing_key_in_secret(self):
        resources = parse_declarations([
            {"kind": "Secret", "name": "s", "data": {"user": "u"}},
            _config("c", "s.password"),
        ]).resources

        with pytest.raises(UnresolvedReferenceError, match="key not present"):
            DependencyGraph.from_resources(resources)

    def test_key_required_for_keyed_target(self):
        resources = parse_declarations([
            {"kind": "Secret", "name": "s", "data": {"user": "u"}},
            _config("c", "s"),
        ]).resources

        with pytest.raises(UnresolvedReferenceError, match="key is required"):
            DependencyGraph.from_resources(resources)


class TestCycleDetection:
    """Test cyclic reference sets are rejected with the cycle path."""

    def test_two_node_cycle(self):
        resources = parse_declarations([_config("a", "b.k"), _config("b", "a.k")]).resources

        with pytest.raises(CyclicDependencyError) as exc_info:
            DependencyGraph.from_resources(resources)

        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b"}

    def test_self_reference(self):
        resources = parse_declarations([_config("a", "a.k")]).resources

        with pytest.raises(CyclicDependencyError) as exc_info:
            DependencyGraph.from_resources(resources)
        assert exc_info.value.cycle == ["a", "a"]

    def test_transitive_cycle(self):
        resources = parse_declarations([
            _config("a", "c.k"),
            _config("b", "a.k"),
            _config("c", "b.k"),
        ]).resources

        with pytest.raises(CyclicDependencyError, match="->"):
            DependencyGraph.from_resources(resources)
