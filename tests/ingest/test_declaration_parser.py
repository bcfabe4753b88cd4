"""Tests for declaration parsing."""

import pytest
from kapply.ingest.declaration_parser import parse_declarations, parse_resource
from kapply.ingest.models import REDACTED, Reference, ResourceKind
from kapply.utils.errors import DuplicateNameError, MalformedSpecError


@pytest.fixture
def postgres_records():
    """Secret, config, workload and service for a database deployment."""
    return [
        {"kind": "Secret", "name": "db-credentials", "data": {"username": "admin", "password": "s3cret"}},
        {"kind": "Config", "name": "db-config", "data": {"host": "postgres", "database": "app"}},
        {
            "kind": "Workload",
            "name": "postgres",
            "data": {
                "image": "postgres:16",
                "replicas": 1,
                "env": {
                    "POSTGRES_DB": "app",
                    "POSTGRES_USER": {"from": "db-credentials", "key": "username"},
                    "POSTGRES_PASSWORD": {"from": "db-credentials", "key": "password"},
                },
            },
            "references": [{"target": "db-config", "key": "host"}],
        },
        {
            "kind": "Service",
            "name": "postgres-svc",
            "data": {"exposure": "internal", "port": 5432},
            "references": ["postgres"],
        },
    ]


class TestParseDeclarations:
    """Test parsing a full declaration set."""

    def test_parses_all_kinds_in_order(self, postgres_records):
        """Every record becomes a ResourceSpec with its declaration index."""
        declarations = parse_declarations(postgres_records)

        assert declarations.names() == ["db-credentials", "db-config", "postgres", "postgres-svc"]
        assert [r.index for r in declarations.resources] == [0, 1, 2, 3]
        assert declarations.get("postgres").kind == ResourceKind.WORKLOAD

    def test_env_bindings_become_references(self, postgres_records):
        """Explicit references come first, env references follow, duplicates collapse."""
        workload = parse_declarations(postgres_records).get("postgres")

        assert workload.references == [
            Reference(target="db-config", key="host"),
            Reference(target="db-credentials", key="username"),
            Reference(target="db-credentials", key="password"),
        ]

    def test_string_reference_shorthand(self, postgres_records):
        """'name' and 'name.key' strings are accepted as references."""
        service = parse_declarations(postgres_records).get("postgres-svc")

        assert service.references == [Reference(target="postgres", key=None)]

    def test_duplicate_name_same_kind(self):
        """Two resources of the same kind with one name are rejected."""
        records = [
            {"kind": "Config", "name": "app", "data": {}},
            {"kind": "Config", "name": "app", "data": {}},
        ]
        with pytest.raises(DuplicateNameError, match="app"):
            parse_declarations(records)

    def test_duplicate_name_across_kinds(self):
        """Names are unique across kinds because references carry no kind."""
        records = [
            {"kind": "Config", "name": "app", "data": {}},
            {"kind": "Secret", "name": "app", "data": {}},
        ]
        with pytest.raises(DuplicateNameError):
            parse_declarations(records)


class TestParseResource:
    """Test validation of individual records."""

    @pytest.mark.parametrize("record", [
        {"name": "no-kind", "data": {}},
        {"kind": "Config", "data": {}},
        {"kind": "Config", "name": "  ", "data": {}},
    ])
    def test_missing_required_field(self, record):
        """kind and name are required."""
        with pytest.raises(MalformedSpecError, match="missing required field"):
            parse_resource(record)

    def test_unknown_kind(self):
        with pytest.raises(MalformedSpecError, match="unknown kind"):
            parse_resource({"kind": "CronJob", "name": "x"})

    def test_kind_is_case_insensitive(self):
        assert parse_resource({"kind": "secret", "name": "s"}).kind == ResourceKind.SECRET

    def test_nested_config_value_rejected(self):
        with pytest.raises(MalformedSpecError, match="scalar"):
            parse_resource({"kind": "Config", "name": "c", "data": {"nested": {"a": 1}}})

    def test_workload_requires_image(self):
        with pytest.raises(MalformedSpecError, match="image"):
            parse_resource({"kind": "Workload", "name": "w", "data": {"replicas": 1}})

    def test_workload_replicas_default_and_validation(self):
        workload = parse_resource({"kind": "Workload", "name": "w", "data": {"image": "nginx"}})
        assert workload.data["replicas"] == 1

        with pytest.raises(MalformedSpecError, match="replicas"):
            parse_resource({"kind": "Workload", "name": "w", "data": {"image": "nginx", "replicas": -1}})

    def test_workload_env_reference_needs_key(self):
        with pytest.raises(MalformedSpecError, match="'from' and 'key'"):
            parse_resource({
                "kind": "Workload",
                "name": "w",
                "data": {"image": "nginx", "env": {"X": {"from": "s"}}},
            })

    def test_external_service_requires_port(self):
        with pytest.raises(MalformedSpecError, match="external_port"):
            parse_resource({"kind": "Service", "name": "ui", "data": {"exposure": "external"}})

    def test_external_service_port_range(self):
        with pytest.raises(MalformedSpecError, match="1..65535"):
            parse_resource({
                "kind": "Service",
                "name": "ui",
                "data": {"exposure": "external", "external_port": 70000},
            })

    def test_external_service(self):
        service = parse_resource({
            "kind": "Service",
            "name": "ui",
            "data": {"exposure": "External", "external_port": 30080, "port": 80},
        })
        assert service.data["exposure"] == "external"

    def test_secret_data_is_redacted(self):
        """Secret values never leave the model unmasked in renderings."""
        secret = parse_resource({"kind": "Secret", "name": "s", "data": {"password": "hunter2"}})

        assert secret.redacted_data() == {"password": REDACTED}
        assert "hunter2" not in str(secret)
