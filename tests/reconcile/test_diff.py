"""Tests for semantic diff over managed fields."""

from kapply.contracts.outcome import ChangeAction
from kapply.ingest.declaration_parser import parse_resource
from kapply.ingest.models import REDACTED, ObservedState, ResourceKind
from kapply.reconcile.diff import diff_resource


def _observed(resource, data, references=None, metadata=None):
    return ObservedState(
        kind=resource.kind,
        name=resource.name,
        data=data,
        references=references if references is not None else [r.model_dump() for r in resource.references],
        metadata=metadata or {},
    )


class TestDiffResource:
    """Test drift detection."""

    def test_absent_means_create(self):
        config = parse_resource({"kind": "Config", "name": "c", "data": {"host": "db"}})

        drift = diff_resource(config, None)

        assert drift.action == ChangeAction.CREATE
        assert not drift.in_sync

    def test_identical_is_in_sync(self):
        config = parse_resource({"kind": "Config", "name": "c", "data": {"host": "db"}})

        drift = diff_resource(config, _observed(config, {"host": "db"}, metadata={"resource_version": 4}))

        assert drift.in_sync
        assert drift.changes == []

    def test_changed_value(self):
        config = parse_resource({"kind": "Config", "name": "c", "data": {"host": "db", "port": 5432}})

        drift = diff_resource(config, _observed(config, {"host": "old-db", "port": 5432}))

        assert drift.action == ChangeAction.UPDATE
        assert drift.changed_fields == ["host"]
        assert drift.changes[0].desired == "db"
        assert drift.changes[0].observed == "old-db"

    def test_extra_observed_key_is_drift(self):
        config = parse_resource({"kind": "Config", "name": "c", "data": {"host": "db"}})

        drift = diff_resource(config, _observed(config, {"host": "db", "debug": "true"}))

        assert drift.changed_fields == ["debug"]

    def test_orchestrator_fields_ignored(self):
        """Pod IPs, ready replicas and status never count as drift."""
        workload = parse_resource({"kind": "Workload", "name": "w", "data": {"image": "app:1", "replicas": 2}})
        observed = _observed(workload, {
            "image": "app:1",
            "replicas": 2,
            "env": {},
            "pod_ips": ["10.0.0.4", "10.0.0.5"],
            "ready_replicas": 1,
            "status": "Progressing",
        })

        assert diff_resource(workload, observed).in_sync

    def test_service_cluster_ip_ignored(self):
        service = parse_resource({"kind": "Service", "name": "svc", "data": {"port": 80}})
        observed = _observed(service, {"port": 80, "exposure": "internal", "cluster_ip": "10.96.0.10"})

        assert diff_resource(service, observed).in_sync

    def test_replica_count_drift(self):
        workload = parse_resource({"kind": "Workload", "name": "w", "data": {"image": "app:1", "replicas": 3}})
        observed = _observed(workload, {"image": "app:1", "replicas": 1, "env": {}})

        assert diff_resource(workload, observed).changed_fields == ["replicas"]

    def test_bool_and_int_not_equal(self):
        config = parse_resource({"kind": "Config", "name": "c", "data": {"flag": True}})

        assert not diff_resource(config, _observed(config, {"flag": 1})).in_sync

    def test_reference_change_is_drift(self):
        workload = parse_resource({
            "kind": "Workload",
            "name": "w",
            "data": {"image": "app:1", "env": {"P": {"from": "s", "key": "new"}}},
        })
        observed = _observed(
            workload,
            {"image": "app:1", "replicas": 1, "env": {"P": {"from": "s", "key": "new"}}},
            references=[{"target": "s", "key": "old"}],
        )

        assert diff_resource(workload, observed).changed_fields == ["references"]

    def test_secret_values_masked(self):
        secret = parse_resource({"kind": "Secret", "name": "s", "data": {"password": "new-pw"}})

        drift = diff_resource(secret, _observed(secret, {"password": "old-pw"}))

        assert drift.changed_fields == ["password"]
        assert drift.changes[0].desired == REDACTED
        assert drift.changes[0].observed == REDACTED
        assert "new-pw" not in drift.model_dump_json()
        assert "old-pw" not in drift.model_dump_json()

    def test_kind_in_result(self):
        secret = parse_resource({"kind": "Secret", "name": "s", "data": {}})
        assert diff_resource(secret, None).kind == ResourceKind.SECRET.value

    def test_declared_key_named_like_orchestrator_field_is_managed(self):
        """A Config key called 'status' is user data, not orchestrator state."""
        config = parse_resource({"kind": "Config", "name": "c", "data": {"status": "off"}})

        drift = diff_resource(config, _observed(config, {"status": "on"}))

        assert drift.action == ChangeAction.UPDATE
        assert drift.changed_fields == ["status"]

    def test_declared_secret_key_uid_is_managed(self):
        secret = parse_resource({"kind": "Secret", "name": "s", "data": {"uid": "2000"}})

        drift = diff_resource(secret, _observed(secret, {"uid": "1000"}))

        assert drift.changed_fields == ["uid"]
        assert drift.changes[0].desired == REDACTED

    def test_undeclared_orchestrator_field_still_ignored(self):
        config = parse_resource({"kind": "Config", "name": "c", "data": {"host": "db"}})

        assert diff_resource(config, _observed(config, {"host": "db", "uid": "abc-123"})).in_sync
