"""Cluster API clients: the external collaborator the reconciler writes through."""

from .base import ClusterAPI
from .memory import InMemoryCluster
from .state_file import StateFileCluster
from .http import HttpClusterAPI
from ..config.settings import BackendType, KapplySettings
from ..utils.errors import ConfigError


def create_cluster_api(settings: KapplySettings) -> ClusterAPI:
    """Build the cluster client selected by settings."""
    cluster = settings.cluster
    if cluster.backend == BackendType.STATE_FILE:
        return StateFileCluster(cluster.state_file)

    if not cluster.endpoint:
        raise ConfigError(
            "No cluster endpoint configured. Set KAPPLY_CLUSTER_ENDPOINT, "
            "cluster.endpoint in .kapply/config.yaml, a credentials file, "
            "or use --state-file for a local state backend."
        )
    return HttpClusterAPI(
        endpoint=cluster.endpoint,
        token=cluster.token,
        timeout=settings.api.timeout,
        verify_tls=cluster.verify_tls,
    )


__all__ = [
    "ClusterAPI",
    "InMemoryCluster",
    "StateFileCluster",
    "HttpClusterAPI",
    "create_cluster_api",
]
