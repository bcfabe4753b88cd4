"""kapply - Dependency-ordered declarative-state reconciler."""

import threading
from typing import Optional
from .ingest.declaration_loader import load_declarations
from .ingest.declaration_parser import parse_declarations
from .ingest.models import DeclarationSet
from .graph.dependency_graph import DependencyGraph
from .graph.scheduler import build_apply_plan, build_destroy_plan
from .contracts.plan import ApplyPlan
from .contracts.outcome import ReconciliationReport
from .contracts.drift import DriftReport
from .cluster import ClusterAPI, create_cluster_api
from .config import KapplySettings, load_settings
from .reconcile.reconciler import Reconciler
from .utils.logging import setup_logging, get_logger
from .utils.errors import KapplyError

__version__ = "0.1.0"

__all__ = ["load_declaration_set", "plan", "apply", "destroy", "diff"]

setup_logging()
logger = get_logger("kapply")


def load_declaration_set(declaration_path: str) -> DeclarationSet:
    """Load and parse declarations from a file or directory."""
    records, sources = load_declarations(declaration_path)
    return parse_declarations(records, sources)


def plan(declaration_path: str, destroy: bool = False) -> ApplyPlan:
    """
    Compute the ordered plan for a declaration set without touching the cluster.

    Raises:
        DeclarationLoadError, MalformedSpecError, DuplicateNameError,
        UnresolvedReferenceError, CyclicDependencyError
    """
    declarations = load_declaration_set(declaration_path)
    graph = DependencyGraph.from_resources(declarations.resources)
    return build_destroy_plan(graph) if destroy else build_apply_plan(graph)


def apply(
    declaration_path: str,
    cluster: Optional[ClusterAPI] = None,
    settings: Optional[KapplySettings] = None,
    config_path: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None
) -> ReconciliationReport:
    """Reconcile the cluster toward the declared set."""
    return _run(declaration_path, False, cluster, settings, config_path, cancel_event)


def destroy(
    declaration_path: str,
    cluster: Optional[ClusterAPI] = None,
    settings: Optional[KapplySettings] = None,
    config_path: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None
) -> ReconciliationReport:
    """Tear down the declared set in reverse apply order."""
    return _run(declaration_path, True, cluster, settings, config_path, cancel_event)


def diff(
    declaration_path: str,
    cluster: Optional[ClusterAPI] = None,
    settings: Optional[KapplySettings] = None,
    config_path: Optional[str] = None
) -> DriftReport:
    """Report drift between declarations and live state; never mutates."""
    apply_plan = plan(declaration_path)
    settings = settings or load_settings(config_path)
    owned = cluster is None
    cluster = cluster or create_cluster_api(settings)
    try:
        return Reconciler(cluster, settings).detect_drift(apply_plan)
    finally:
        if owned:
            cluster.close()


def _run(
    declaration_path: str,
    teardown: bool,
    cluster: Optional[ClusterAPI],
    settings: Optional[KapplySettings],
    config_path: Optional[str],
    cancel_event: Optional[threading.Event]
) -> ReconciliationReport:
    # Planning fails before any cluster client exists, so invalid input never mutates.
    run_plan = plan(declaration_path, destroy=teardown)
    settings = settings or load_settings(config_path)

    owned = cluster is None
    cluster = cluster or create_cluster_api(settings)
    try:
        logger.info(f"Starting {run_plan.direction.value} for {declaration_path}")
        return Reconciler(cluster, settings).reconcile(run_plan, cancel_event=cancel_event)
    except KapplyError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during {run_plan.direction.value}: {e}", exc_info=True)
        raise KapplyError(f"{run_plan.direction.value.capitalize()} failed: {e}") from e
    finally:
        if owned:
            cluster.close()
