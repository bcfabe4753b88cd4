"""Tests for topological scheduling."""

import itertools
import random
import pytest
from kapply.contracts.plan import PlanDirection
from kapply.graph.dependency_graph import DependencyGraph
from kapply.graph.scheduler import build_apply_plan, build_destroy_plan
from kapply.ingest.declaration_parser import parse_declarations


def _config(name, *refs):
    return {"kind": "Config", "name": name, "data": {"k": "v"}, "references": [f"{r}.k" for r in refs]}


def _plan(records):
    return build_apply_plan(DependencyGraph.from_resources(parse_declarations(records).resources))


@pytest.fixture
def scenario_records():
    """Secret s (user, pass), config c (host), workload w consuming all three keys."""
    return [
        {"kind": "Secret", "name": "s", "data": {"user": "u", "pass": "p"}},
        {"kind": "Config", "name": "c", "data": {"host": "h"}},
        {
            "kind": "Workload",
            "name": "w",
            "data": {"image": "app:1"},
            "references": ["s.user", "s.pass", "c.host"],
        },
    ]


class TestApplyPlan:
    """Test apply ordering."""

    def test_scenario_order(self, scenario_records):
        """Dependencies first, declaration order breaks ties."""
        plan = _plan(scenario_records)

        assert plan.order == ["s", "c", "w"]
        assert plan.direction == PlanDirection.APPLY
        assert plan.dependencies["w"] == ["s", "c"]
        assert plan.blockers["w"] == ["s", "c"]

    def test_dependency_declared_after_dependent(self):
        """Declaration order never wins over a dependency edge."""
        plan = _plan([_config("app", "base"), _config("base")])

        assert plan.order == ["base", "app"]

    def test_independent_resources_keep_declaration_order(self):
        plan = _plan([_config("z"), _config("a"), _config("m")])

        assert plan.order == ["z", "a", "m"]

    def test_every_resource_follows_its_references(self):
        """Random acyclic reference sets always produce a valid order."""
        rng = random.Random(7)
        for _ in range(25):
            names = [f"r{i}" for i in range(12)]
            rng.shuffle(names)
            records = []
            for position, name in enumerate(names):
                # Only reference names earlier in a hidden topological order.
                refs = rng.sample(names[:position], k=min(position, rng.randint(0, 3)))
                records.append(_config(name, *refs))
            rng.shuffle(records)

            plan = _plan(records)
            position_of = {name: i for i, name in enumerate(plan.order)}
            for record in records:
                for ref in record["references"]:
                    assert position_of[ref.split(".")[0]] < position_of[record["name"]]

    def test_order_is_deterministic(self, scenario_records):
        orders = {tuple(_plan(scenario_records).order) for _ in range(5)}
        assert len(orders) == 1

    def test_to_summary(self, scenario_records):
        summary = _plan(scenario_records).to_summary()

        assert summary[0] == {"position": 1, "kind": "Secret", "name": "s", "depends_on": []}
        assert summary[2]["depends_on"] == ["s", "c"]


class TestDestroyPlan:
    """Test teardown ordering."""

    def test_exact_reverse_of_apply(self, scenario_records):
        graph = DependencyGraph.from_resources(parse_declarations(scenario_records).resources)

        apply_plan = build_apply_plan(graph)
        destroy_plan = build_destroy_plan(graph)

        assert destroy_plan.order == list(reversed(apply_plan.order))
        assert destroy_plan.direction == PlanDirection.DESTROY

    def test_destroy_blockers_are_dependents(self, scenario_records):
        graph = DependencyGraph.from_resources(parse_declarations(scenario_records).resources)

        destroy_plan = build_destroy_plan(graph)

        assert destroy_plan.blockers["s"] == ["w"]
        assert destroy_plan.blockers["w"] == []

    def test_no_dependency_deleted_before_dependent(self):
        records = [_config("a"), _config("b", "a"), _config("c", "b"), _config("d", "a")]
        graph = DependencyGraph.from_resources(parse_declarations(records).resources)

        order = build_destroy_plan(graph).order
        for dependent, dependency in itertools.product(order, order):
            if dependency in graph.get_dependencies(dependent):
                assert order.index(dependent) < order.index(dependency)
